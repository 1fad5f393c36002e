"""
Customer Metrics

Geographic revenue rankings, repeat-purchase rate and spend tiers. People
are counted by customer_unique_id, since one person can hold several
per-order customer_id values.
"""

import polars as pl

from olist_analytics.data.dataset import OlistDataset
from .common import delivered_items, delivered_orders, empty_result, money, percentage


class SpendSegment:
    """Spend tier labels"""
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


GEO_SCHEMA = {
    "unique_customers": pl.Int64,
    "total_orders": pl.Int64,
    "revenue": pl.Float64,
}

REPEAT_RATE_SCHEMA = {
    "total_unique_customers": pl.Int64,
    "repeat_customers": pl.Int64,
    "repeat_pct": pl.Float64,
}

SPEND_SEGMENTS_SCHEMA = {
    "segment": pl.Utf8,
    "customer_count": pl.Int64,
    "avg_spend": pl.Float64,
}


def _customer_items(dataset: OlistDataset) -> pl.DataFrame:
    """Delivered items joined to the purchasing customer"""
    customers = dataset.customers.select(
        ["customer_id", "customer_unique_id", "customer_city", "customer_state"]
    )
    return delivered_items(dataset).join(customers, on="customer_id", how="inner")


def _revenue_by(dataset: OlistDataset, keys: list, limit: int) -> pl.DataFrame:
    items = _customer_items(dataset)
    if items.is_empty():
        return empty_result({**{key: pl.Utf8 for key in keys}, **GEO_SCHEMA})

    return (
        items.group_by(keys)
        .agg(
            pl.col("customer_unique_id").n_unique().cast(pl.Int64).alias("unique_customers"),
            pl.col("order_id").n_unique().cast(pl.Int64).alias("total_orders"),
            pl.col("price").sum().alias("revenue"),
        )
        .sort(["revenue", *keys], descending=[True] + [False] * len(keys))
        .head(limit)
        .with_columns(money(pl.col("revenue")).alias("revenue"))
    )


def top_states_by_revenue(dataset: OlistDataset, limit: int = 10) -> pl.DataFrame:
    """States ranked by product revenue of delivered orders"""
    return _revenue_by(dataset, ["customer_state"], limit)


def top_cities_by_revenue(dataset: OlistDataset, limit: int = 10) -> pl.DataFrame:
    """City and state pairs ranked by product revenue of delivered orders"""
    return _revenue_by(dataset, ["customer_city", "customer_state"], limit)


def repeat_customer_rate(dataset: OlistDataset) -> pl.DataFrame:
    """
    Share of unique customers with more than one delivered order.

    repeat_pct = round(100 * repeat_customers / total_unique_customers, 2)
    """
    customers = dataset.customers.select(["customer_id", "customer_unique_id"])
    orders = delivered_orders(dataset).join(customers, on="customer_id", how="inner")
    if orders.is_empty():
        return empty_result(REPEAT_RATE_SCHEMA)

    per_customer = orders.group_by("customer_unique_id").agg(
        pl.col("order_id").n_unique().alias("order_count")
    )

    return per_customer.select(
        pl.len().cast(pl.Int64).alias("total_unique_customers"),
        (pl.col("order_count") > 1).sum().cast(pl.Int64).alias("repeat_customers"),
    ).with_columns(
        percentage(pl.col("repeat_customers"), pl.col("total_unique_customers")).alias("repeat_pct")
    )


def classify_spend(total: pl.Expr, high: float = 500.0, medium: float = 200.0) -> pl.Expr:
    """Spend tier of a total; both lower bounds are inclusive"""
    return (
        pl.when(total >= high)
        .then(pl.lit(SpendSegment.HIGH))
        .when(total >= medium)
        .then(pl.lit(SpendSegment.MEDIUM))
        .otherwise(pl.lit(SpendSegment.LOW))
    )


def customer_spend_segments(
    dataset: OlistDataset,
    high_threshold: float = 500.0,
    medium_threshold: float = 200.0,
) -> pl.DataFrame:
    """
    Customer count and average spend per tier, highest average first.

    Spend is the product price summed over a customer's delivered orders.
    """
    items = _customer_items(dataset)
    if items.is_empty():
        return empty_result(SPEND_SEGMENTS_SCHEMA)

    spend = items.group_by("customer_unique_id").agg(
        pl.col("price").sum().alias("total_spent")
    )

    # Tiers compare the cent total; summed float prices drift below exact bounds
    cents = pl.col("total_spent").round(2)

    return (
        spend.with_columns(
            classify_spend(cents, high_threshold, medium_threshold).alias("segment")
        )
        .group_by("segment")
        .agg(
            pl.len().cast(pl.Int64).alias("customer_count"),
            pl.col("total_spent").mean().alias("avg_spend"),
        )
        .sort(["avg_spend", "segment"], descending=[True, False])
        .with_columns(money(pl.col("avg_spend")).alias("avg_spend"))
    )
