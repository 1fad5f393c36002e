"""
Loaded dataset container.
"""

from dataclasses import dataclass, fields
from typing import Dict, Iterator, Optional, Tuple

import polars as pl

from .schema import Entity, TABLES


@dataclass(frozen=True)
class OlistDataset:
    """
    One polars DataFrame per entity, loaded once and never mutated.

    Metric functions receive the whole dataset and pick the tables they
    need. Frames passed to the constructor are conformed to the declared
    schema, so tests can build a dataset from partial in-memory tables.
    """
    customers: pl.DataFrame
    orders: pl.DataFrame
    order_items: pl.DataFrame
    payments: pl.DataFrame
    reviews: pl.DataFrame
    products: pl.DataFrame
    sellers: pl.DataFrame
    category_translation: pl.DataFrame
    geolocation: pl.DataFrame

    @classmethod
    def from_frames(cls, **frames: Optional[pl.DataFrame]) -> "OlistDataset":
        """
        Build a dataset from keyword frames, filling omitted entities with
        empty tables and omitted columns with nulls.
        """
        unknown = set(frames) - {entity.value for entity in Entity}
        if unknown:
            raise ValueError(f"Unknown entities: {sorted(unknown)}")

        conformed = {}
        for entity, spec in TABLES.items():
            df = frames.get(entity.value)
            if df is None:
                conformed[entity.value] = spec.empty_frame()
                continue

            columns = []
            for name, dtype in spec.schema.items():
                if name in df.columns:
                    columns.append(pl.col(name).cast(dtype))
                else:
                    columns.append(pl.lit(None, dtype=dtype).alias(name))
            conformed[entity.value] = df.select(columns)

        return cls(**conformed)

    def table(self, entity: Entity) -> pl.DataFrame:
        """Get the frame of one entity"""
        return getattr(self, Entity(entity).value)

    def items(self) -> Iterator[Tuple[Entity, pl.DataFrame]]:
        """Iterate (entity, frame) pairs in schema order"""
        for f in fields(self):
            yield Entity(f.name), getattr(self, f.name)

    @property
    def row_counts(self) -> Dict[str, int]:
        """Row count per entity"""
        return {entity.value: df.height for entity, df in self.items()}
