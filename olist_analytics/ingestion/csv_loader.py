"""
Dataset Loader

Reads the Olist CSV exports into typed polars DataFrames.
Supports:
- Schema validation against the declared entity layout
- Strict type casting and timestamp parsing
- Optional entities that may be absent from the export
- Per-table load results for auditing
"""

from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Union
import hashlib

import polars as pl
import structlog
from pydantic import BaseModel

from olist_analytics.config import get_settings
from olist_analytics.data.dataset import OlistDataset
from olist_analytics.data.schema import Entity, TableSpec, TABLES, get_table_spec

logger = structlog.get_logger(__name__)


class FileFormat(str, Enum):
    """Supported file formats"""
    CSV = "csv"
    PARQUET = "parquet"


class LoadStatus(str, Enum):
    """Table load status"""
    PENDING = "pending"
    COMPLETED = "completed"
    SKIPPED = "skipped"
    FAILED = "failed"


class LoadResult(BaseModel):
    """Result of loading one entity"""
    entity: Entity
    file_path: str
    status: LoadStatus
    rows_loaded: int = 0
    error_message: Optional[str] = None
    load_duration_seconds: float = 0
    started_at: datetime
    completed_at: Optional[datetime] = None
    file_hash: Optional[str] = None


class DatasetLoadError(RuntimeError):
    """Raised when one or more required entities could not be loaded"""

    def __init__(self, results: List[LoadResult]):
        self.results = results
        failures = [r for r in results if r.status == LoadStatus.FAILED]
        details = "; ".join(f"{r.entity.value}: {r.error_message}" for r in failures)
        super().__init__(f"Failed to load {len(failures)} table(s): {details}")


class DatasetLoader:
    """
    Loader for the full Olist dataset.

    Every entity is read from its own file in a single directory, checked
    against the declared columns and cast to the declared types. A failure
    on any required entity aborts the load with DatasetLoadError.

    Example:
        loader = DatasetLoader()
        dataset = loader.load_dataset("data/raw")
    """

    def __init__(
        self,
        file_format: FileFormat = FileFormat.CSV,
        delimiter: Optional[str] = None,
        encoding: Optional[str] = None,
        datetime_format: Optional[str] = None,
        null_values: Optional[List[str]] = None,
    ):
        data_settings = get_settings().data
        self.file_format = FileFormat(file_format)
        self.delimiter = delimiter or data_settings.delimiter
        self.encoding = encoding or data_settings.encoding
        self.datetime_format = datetime_format or data_settings.datetime_format
        self.null_values = null_values if null_values is not None else [""]
        self.results: List[LoadResult] = []

    def _compute_file_hash(self, file_path: Path) -> str:
        """Compute MD5 hash of file for auditing"""
        hash_md5 = hashlib.md5()
        with open(file_path, "rb") as f:
            for chunk in iter(lambda: f.read(4096), b""):
                hash_md5.update(chunk)
        return hash_md5.hexdigest()

    def _file_path(self, directory: Path, spec: TableSpec) -> Path:
        """Resolve the file of an entity inside the data directory"""
        path = directory / spec.file_name
        if self.file_format == FileFormat.PARQUET:
            path = path.with_suffix(".parquet")
        return path

    def _read_csv(self, file_path: Path) -> pl.DataFrame:
        """Read every CSV column as text; typing happens in _cast_columns"""
        return pl.read_csv(
            file_path,
            separator=self.delimiter,
            encoding=self.encoding,
            infer_schema_length=0,
            null_values=self.null_values,
        )

    def _read_parquet(self, file_path: Path) -> pl.DataFrame:
        """Read Parquet file"""
        return pl.read_parquet(file_path)

    def _read_file(self, file_path: Path) -> pl.DataFrame:
        """Read file based on format"""
        readers = {
            FileFormat.CSV: self._read_csv,
            FileFormat.PARQUET: self._read_parquet,
        }
        return readers[self.file_format](file_path)

    def _validate_columns(self, df: pl.DataFrame, spec: TableSpec) -> List[str]:
        """Check that every declared column is present"""
        return [
            f"Missing column: {column}"
            for column in spec.columns
            if column not in df.columns
        ]

    def _cast_columns(self, df: pl.DataFrame, spec: TableSpec) -> pl.DataFrame:
        """Keep the declared columns and cast them to their declared types"""
        expressions = []
        for column, dtype in spec.schema.items():
            expr = pl.col(column)
            if isinstance(dtype, pl.Datetime) and df.schema[column] == pl.Utf8:
                expr = expr.str.strip_chars().str.strptime(dtype, self.datetime_format, strict=True)
            else:
                expr = expr.cast(dtype, strict=True)
            expressions.append(expr)

        df = df.select(expressions)

        # Remove completely null rows
        return df.filter(~pl.all_horizontal(pl.all().is_null()))

    def load_table(self, directory: Union[str, Path], entity: Entity) -> pl.DataFrame:
        """
        Load a single entity from the data directory.

        Args:
            directory: Directory holding the exported files
            entity: Entity to load

        Returns:
            Typed DataFrame, or an empty frame for a missing optional entity

        Raises:
            DatasetLoadError: If the file is missing, unreadable or does not
                match the declared schema
        """
        spec = get_table_spec(entity)
        file_path = self._file_path(Path(directory), spec)
        started_at = datetime.utcnow()

        result = LoadResult(
            entity=spec.entity,
            file_path=str(file_path),
            status=LoadStatus.PENDING,
            started_at=started_at,
        )
        self.results.append(result)

        if not file_path.exists() and not spec.required:
            result.status = LoadStatus.SKIPPED
            result.completed_at = datetime.utcnow()
            logger.warning(
                "Optional table not found, using empty table",
                entity=spec.entity.value,
                file=str(file_path),
            )
            return spec.empty_frame()

        try:
            if not file_path.exists():
                raise FileNotFoundError(f"File not found: {file_path}")

            result.file_hash = self._compute_file_hash(file_path)
            df = self._read_file(file_path)

            schema_errors = self._validate_columns(df, spec)
            if schema_errors:
                raise ValueError(f"Schema validation failed: {schema_errors}")

            df = self._cast_columns(df, spec)

        except (OSError, ValueError, pl.exceptions.PolarsError) as e:
            result.status = LoadStatus.FAILED
            result.error_message = str(e)
            result.completed_at = datetime.utcnow()
            result.load_duration_seconds = (result.completed_at - started_at).total_seconds()
            logger.error(
                "Table load failed",
                entity=spec.entity.value,
                file=str(file_path),
                error=str(e),
            )
            raise DatasetLoadError([result]) from e

        result.status = LoadStatus.COMPLETED
        result.rows_loaded = df.height
        result.completed_at = datetime.utcnow()
        result.load_duration_seconds = (result.completed_at - started_at).total_seconds()

        logger.info(
            "Table loaded",
            entity=spec.entity.value,
            rows=df.height,
            duration_seconds=round(result.load_duration_seconds, 3),
        )
        return df

    def load_dataset(self, directory: Optional[Union[str, Path]] = None) -> OlistDataset:
        """
        Load every entity of the dataset.

        All tables are attempted so the error lists every broken file at once.

        Args:
            directory: Data directory; defaults to DATA_RAW_PATH

        Returns:
            OlistDataset with one frame per entity

        Raises:
            DatasetLoadError: If any required entity failed to load
        """
        directory = Path(directory or get_settings().data.raw_path)
        self.results = []

        logger.info("Starting dataset load", directory=str(directory), format=self.file_format.value)

        frames: Dict[str, pl.DataFrame] = {}
        for entity in TABLES:
            try:
                frames[entity.value] = self.load_table(directory, entity)
            except DatasetLoadError:
                continue

        failed = [r for r in self.results if r.status == LoadStatus.FAILED]
        if failed:
            raise DatasetLoadError(self.results)

        dataset = OlistDataset(**frames)
        logger.info("Dataset load completed", **dataset.row_counts)
        return dataset


def load_dataset(directory: Optional[Union[str, Path]] = None, **kwargs) -> OlistDataset:
    """Load the dataset with a default-configured DatasetLoader"""
    return DatasetLoader(**kwargs).load_dataset(directory)
