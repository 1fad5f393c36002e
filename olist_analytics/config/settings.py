"""
Olist E-Commerce Analytics
Centralized Configuration Management

Settings are read from environment variables (and an optional .env file)
using Pydantic settings, grouped by concern.
"""

from functools import lru_cache
from typing import Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DataSettings(BaseSettings):
    """Raw CSV Input Configuration"""

    model_config = SettingsConfigDict(env_prefix="DATA_")

    raw_path: str = Field(default="./data/raw", description="Directory holding the Olist CSV files")
    delimiter: str = Field(default=",", description="CSV field delimiter")
    encoding: str = Field(default="utf8", description="CSV file encoding")
    datetime_format: str = Field(default="%Y-%m-%d %H:%M:%S", description="Timestamp format in the CSVs")


class AnalyticsSettings(BaseSettings):
    """Metric Parameters"""

    model_config = SettingsConfigDict(env_prefix="ANALYTICS_")

    top_n: int = Field(default=10, description="Row limit for top-N rankings")
    min_category_reviews: int = Field(default=50, description="Minimum reviews for a category to be ranked")
    high_spend_threshold: float = Field(default=500.0, description="Lower bound (inclusive) of the High spend tier")
    medium_spend_threshold: float = Field(default=200.0, description="Lower bound (inclusive) of the Medium spend tier")

    @field_validator("top_n", "min_category_reviews")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Limits must be positive"""
        if v < 1:
            raise ValueError("Value must be at least 1")
        return v


class DatabaseSettings(BaseSettings):
    """Warehouse Export Configuration"""

    model_config = SettingsConfigDict(env_prefix="DATABASE_")

    url: str = Field(default="sqlite:///./data/olist.db", description="SQLAlchemy database URL")
    echo: bool = Field(default=False, description="Echo SQL statements")
    chunk_size: int = Field(default=5000, description="Rows per insert batch")


class MonitoringSettings(BaseSettings):
    """Logging Configuration"""

    model_config = SettingsConfigDict(env_prefix="")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL", description="Logging level")
    log_format: str = Field(default="text", alias="LOG_FORMAT", description="Log format: json or text")


class Settings(BaseSettings):
    """
    Main Application Settings

    Aggregates all configuration sections and provides a single entry point
    for accessing application configuration.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="olist-analytics", alias="APP_NAME", description="Application name")
    app_env: str = Field(default="development", alias="APP_ENV", description="Environment")

    # Version
    version: str = Field(default="1.0.0", description="Application version")

    # Subsystem configurations
    data: DataSettings = Field(default_factory=DataSettings)
    analytics: AnalyticsSettings = Field(default_factory=AnalyticsSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)

    @field_validator("app_env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment value"""
        allowed = ["development", "staging", "production", "testing"]
        if v.lower() not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v.lower()

    @property
    def is_production(self) -> bool:
        """Check if running in production"""
        return self.app_env == "production"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses LRU cache to ensure settings are only loaded once.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
