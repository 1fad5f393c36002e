"""
Database Module
"""
from .connection import init_database, close_database, get_db, get_engine
from .models import Base
from .warehouse import create_schema, export_dataset, table_row_counts

__all__ = [
    "init_database",
    "close_database",
    "get_db",
    "get_engine",
    "Base",
    "create_schema",
    "export_dataset",
    "table_row_counts",
]
