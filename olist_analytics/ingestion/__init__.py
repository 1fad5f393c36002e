"""
Data Ingestion Module
"""
from .csv_loader import DatasetLoader, DatasetLoadError, FileFormat, LoadResult, LoadStatus, load_dataset

__all__ = [
    "DatasetLoader",
    "DatasetLoadError",
    "FileFormat",
    "LoadResult",
    "LoadStatus",
    "load_dataset",
]
