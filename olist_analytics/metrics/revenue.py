"""
Revenue Metrics

Revenue roll-ups over delivered orders: overall totals, the monthly trend,
category ranking, the order value distribution and the weekday pattern.
"""

import polars as pl

from olist_analytics.data.dataset import OlistDataset
from .common import delivered_items, empty_result, money, with_category

DAY_NAMES = pl.DataFrame(
    {
        "day_of_week": list(range(7)),
        "day_name": ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"],
    },
    schema={"day_of_week": pl.Int64, "day_name": pl.Utf8},
)

TOTAL_REVENUE_SCHEMA = {
    "total_orders": pl.Int64,
    "total_product_revenue": pl.Float64,
    "total_freight": pl.Float64,
    "total_revenue": pl.Float64,
}

MONTHLY_TREND_SCHEMA = {
    "month": pl.Utf8,
    "order_count": pl.Int64,
    "product_revenue": pl.Float64,
    "total_revenue": pl.Float64,
}

TOP_CATEGORIES_SCHEMA = {
    "category": pl.Utf8,
    "order_count": pl.Int64,
    "items_sold": pl.Int64,
    "revenue": pl.Float64,
}

ORDER_VALUE_SCHEMA = {
    "order_count": pl.Int64,
    "avg_order_value": pl.Float64,
    "min_order_value": pl.Float64,
    "median_order_value": pl.Float64,
    "max_order_value": pl.Float64,
}

DAY_OF_WEEK_SCHEMA = {
    "day_of_week": pl.Int64,
    "day_name": pl.Utf8,
    "order_count": pl.Int64,
    "product_revenue": pl.Float64,
}


def total_revenue(dataset: OlistDataset) -> pl.DataFrame:
    """
    Product revenue and freight of delivered orders, reported separately
    and combined, with the number of distinct orders.
    """
    items = delivered_items(dataset)
    if items.is_empty():
        return empty_result(TOTAL_REVENUE_SCHEMA)

    product_revenue = pl.col("price").sum()
    freight = pl.col("freight_value").sum()

    return items.select(
        pl.col("order_id").n_unique().cast(pl.Int64).alias("total_orders"),
        money(product_revenue).alias("total_product_revenue"),
        money(freight).alias("total_freight"),
        money(product_revenue + freight).alias("total_revenue"),
    )


def monthly_revenue_trend(dataset: OlistDataset) -> pl.DataFrame:
    """Orders and revenue per purchase month (YYYY-MM), oldest first"""
    items = delivered_items(dataset).filter(pl.col("order_purchase_timestamp").is_not_null())
    if items.is_empty():
        return empty_result(MONTHLY_TREND_SCHEMA)

    return (
        items.with_columns(
            pl.col("order_purchase_timestamp").dt.strftime("%Y-%m").alias("month")
        )
        .group_by("month")
        .agg(
            pl.col("order_id").n_unique().cast(pl.Int64).alias("order_count"),
            money(pl.col("price").sum()).alias("product_revenue"),
            money((pl.col("price") + pl.col("freight_value")).sum()).alias("total_revenue"),
        )
        .sort("month")
    )


def top_categories_by_revenue(dataset: OlistDataset, limit: int = 10) -> pl.DataFrame:
    """
    Categories ranked by product revenue of delivered orders.

    Untranslated categories are grouped under "Unknown". Equal revenue is
    ordered by category name.
    """
    items = with_category(dataset, delivered_items(dataset))
    if items.is_empty():
        return empty_result(TOP_CATEGORIES_SCHEMA)

    return (
        items.group_by("category")
        .agg(
            pl.col("order_id").n_unique().cast(pl.Int64).alias("order_count"),
            pl.len().cast(pl.Int64).alias("items_sold"),
            pl.col("price").sum().alias("revenue"),
        )
        .sort(["revenue", "category"], descending=[True, False])
        .head(limit)
        .with_columns(money(pl.col("revenue")).alias("revenue"))
    )


def order_totals(dataset: OlistDataset) -> pl.DataFrame:
    """Per delivered order: sum of price + freight_value over its items"""
    return (
        delivered_items(dataset)
        .group_by("order_id")
        .agg((pl.col("price") + pl.col("freight_value")).sum().alias("order_total"))
        .sort("order_id")
    )


def order_value_distribution(dataset: OlistDataset) -> pl.DataFrame:
    """
    Mean, min, median and max of delivered order totals.

    The median is the continuous 50th percentile: with the n totals sorted
    as v[0..n-1] and p = 0.5 * (n - 1), it is
    v[floor(p)] + (p - floor(p)) * (v[ceil(p)] - v[floor(p)]).
    """
    totals = order_totals(dataset)
    if totals.is_empty():
        return empty_result(ORDER_VALUE_SCHEMA)

    value = pl.col("order_total")
    return totals.select(
        pl.len().cast(pl.Int64).alias("order_count"),
        money(value.mean()).alias("avg_order_value"),
        money(value.min()).alias("min_order_value"),
        money(value.quantile(0.5, interpolation="linear")).alias("median_order_value"),
        money(value.max()).alias("max_order_value"),
    )


def revenue_by_day_of_week(dataset: OlistDataset) -> pl.DataFrame:
    """Orders and product revenue per purchase weekday, 0 = Sunday"""
    items = delivered_items(dataset).filter(pl.col("order_purchase_timestamp").is_not_null())
    if items.is_empty():
        return empty_result(DAY_OF_WEEK_SCHEMA)

    # ISO weekday is 1 (Monday) .. 7 (Sunday)
    day_of_week = (pl.col("order_purchase_timestamp").dt.weekday() % 7).cast(pl.Int64)

    return (
        items.with_columns(day_of_week.alias("day_of_week"))
        .group_by("day_of_week")
        .agg(
            pl.col("order_id").n_unique().cast(pl.Int64).alias("order_count"),
            money(pl.col("price").sum()).alias("product_revenue"),
        )
        .join(DAY_NAMES, on="day_of_week", how="left")
        .select(list(DAY_OF_WEEK_SCHEMA))
        .sort("day_of_week")
    )
