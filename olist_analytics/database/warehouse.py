"""
Warehouse Export

Creates the relational schema and copies a loaded dataset into it, so the
same data can be queried with SQL tools.
"""

from typing import Dict, Optional

import structlog
from sqlalchemy import delete, func, select

from olist_analytics.config import get_settings
from olist_analytics.data.dataset import OlistDataset
from .connection import get_db, get_engine
from .models import Base, MODELS_BY_ENTITY

logger = structlog.get_logger(__name__)


def create_schema(drop_existing: bool = False) -> None:
    """Create every table of the relational schema"""
    engine = get_engine()
    if drop_existing:
        Base.metadata.drop_all(engine)
        logger.info("Dropped existing schema")
    Base.metadata.create_all(engine)
    logger.info("Schema created", tables=sorted(Base.metadata.tables))


def export_dataset(
    dataset: OlistDataset,
    chunk_size: Optional[int] = None,
    replace: bool = True,
) -> Dict[str, int]:
    """
    Insert every entity of the dataset into its table.

    Missing tables are created first. Existing rows are then cleared
    (children first) and the tables filled (parents first) inside a single
    transaction, so a failed export leaves the previous data in place.

    Args:
        dataset: Loaded dataset
        chunk_size: Rows per insert batch; defaults to DATABASE_CHUNK_SIZE
        replace: Clear existing rows before loading

    Returns:
        Rows written per table
    """
    chunk_size = chunk_size or get_settings().database.chunk_size
    create_schema()

    written: Dict[str, int] = {}
    try:
        with get_engine().begin() as connection:
            if replace:
                for model in reversed(list(MODELS_BY_ENTITY.values())):
                    connection.execute(delete(model))

            for entity, model in MODELS_BY_ENTITY.items():
                df = dataset.table(entity)
                table_name = model.__tablename__
                if df.is_empty():
                    written[table_name] = 0
                    continue

                df.to_pandas().to_sql(
                    table_name,
                    con=connection,
                    if_exists="append",
                    index=False,
                    chunksize=chunk_size,
                )
                written[table_name] = df.height
                logger.info("Table exported", table=table_name, rows=df.height)
    except Exception as e:
        logger.error("Export failed, rolled back", error=str(e), error_type=type(e).__name__)
        raise

    return written


def table_row_counts() -> Dict[str, int]:
    """Row count of every warehouse table"""
    counts = {}
    with get_db() as db:
        for model in MODELS_BY_ENTITY.values():
            counts[model.__tablename__] = db.execute(
                select(func.count()).select_from(model)
            ).scalar_one()
    return counts
