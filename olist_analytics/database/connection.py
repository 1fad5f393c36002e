"""
Database Connection Management

SQLAlchemy 2.0 engine and session handling for the warehouse export.
"""

from contextlib import contextmanager
from typing import Iterator, Optional

import structlog
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from olist_analytics.config import get_settings

logger = structlog.get_logger(__name__)

# Global engine and session factory
_engine: Optional[Engine] = None
_session_factory: Optional[sessionmaker] = None


def init_database(url: Optional[str] = None, echo: Optional[bool] = None) -> Engine:
    """
    Initialize the database engine.

    Args:
        url: SQLAlchemy URL; defaults to DATABASE_URL
        echo: Echo SQL statements; defaults to DATABASE_ECHO

    Returns:
        Engine: The initialized database engine
    """
    global _engine, _session_factory

    if _engine is not None:
        logger.warning("Database already initialized")
        return _engine

    settings = get_settings().database
    _engine = create_engine(
        url or settings.url,
        echo=settings.echo if echo is None else echo,
        future=True,
        pool_pre_ping=True,
    )
    _session_factory = sessionmaker(
        bind=_engine,
        class_=Session,
        expire_on_commit=False,
        autoflush=False,
    )

    # Verify connection
    try:
        with _engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        logger.info("Database connection established", url=_engine.url.render_as_string(hide_password=True))
    except Exception as e:
        logger.error("Failed to connect to database", error=str(e))
        close_database()
        raise

    return _engine


def close_database() -> None:
    """Dispose of the engine and its connection pool"""
    global _engine, _session_factory

    if _engine is not None:
        _engine.dispose()
        _engine = None
        _session_factory = None
        logger.info("Database connection pool closed")


def get_engine() -> Engine:
    """
    Get the database engine.

    Raises:
        RuntimeError: If database is not initialized
    """
    if _engine is None:
        raise RuntimeError("Database not initialized. Call init_database() first.")
    return _engine


@contextmanager
def get_db() -> Iterator[Session]:
    """
    Get a database session.

    Commits when the block completes and rolls back if it raises.

    Example:
        with get_db() as db:
            db.execute(query)
    """
    if _session_factory is None:
        logger.error("Database not initialized when get_db() called")
        raise RuntimeError("Database not initialized. Call init_database() first.")

    session = _session_factory()
    try:
        yield session
        session.commit()
        logger.debug("Database session committed successfully")
    except Exception as e:
        logger.error("Database session error, rolling back", error=str(e), error_type=type(e).__name__)
        session.rollback()
        raise
    finally:
        session.close()
