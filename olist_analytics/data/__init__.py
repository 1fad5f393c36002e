"""
Dataset Schema and Container Module
"""
from .schema import Entity, OrderStatus, TableSpec, TABLES, get_table_spec
from .dataset import OlistDataset

__all__ = [
    "Entity",
    "OrderStatus",
    "TableSpec",
    "TABLES",
    "get_table_spec",
    "OlistDataset",
]
