"""
Delivery & Review Metrics

Delivery speed and punctuality, the review score distribution, and how
lateness and product category relate to satisfaction. Orders without an
actual delivery date are left out of every delivery-time figure.
"""

import polars as pl

from olist_analytics.data.dataset import OlistDataset
from .common import delivered_orders, empty_result, percentage, with_category

LATE = "Late"
ON_TIME = "On Time"

DELIVERY_PERFORMANCE_SCHEMA = {
    "orders_delivered": pl.Int64,
    "avg_delivery_days": pl.Float64,
    "min_delivery_days": pl.Int64,
    "max_delivery_days": pl.Int64,
    "late_delivery_pct": pl.Float64,
}

REVIEW_DISTRIBUTION_SCHEMA = {
    "review_score": pl.Int64,
    "review_count": pl.Int64,
    "percentage": pl.Float64,
}

TIMELINESS_SCHEMA = {
    "delivery_status": pl.Utf8,
    "avg_review_score": pl.Float64,
    "order_count": pl.Int64,
}

WORST_CATEGORIES_SCHEMA = {
    "category": pl.Utf8,
    "avg_review_score": pl.Float64,
    "review_count": pl.Int64,
}


def _is_late() -> pl.Expr:
    # A missing estimate never counts as late
    return (
        pl.col("order_delivered_customer_date") > pl.col("order_estimated_delivery_date")
    ).fill_null(False)


def _completed_deliveries(dataset: OlistDataset) -> pl.DataFrame:
    """Delivered orders that have both a purchase and an actual delivery timestamp"""
    return delivered_orders(dataset).filter(
        pl.col("order_delivered_customer_date").is_not_null()
        & pl.col("order_purchase_timestamp").is_not_null()
    )


def _delivered_reviews(dataset: OlistDataset) -> pl.DataFrame:
    """Scored reviews that belong to delivered orders"""
    orders = delivered_orders(dataset).select("order_id")
    return (
        dataset.reviews.filter(pl.col("review_score").is_not_null())
        .select(["review_id", "order_id", "review_score"])
        .join(orders, on="order_id", how="inner")
    )


def delivery_performance(dataset: OlistDataset) -> pl.DataFrame:
    """
    Average, min and max whole days from purchase to delivery, and the
    percentage of orders delivered after their estimated date.
    """
    orders = _completed_deliveries(dataset)
    if orders.is_empty():
        return empty_result(DELIVERY_PERFORMANCE_SCHEMA)

    elapsed = (
        pl.col("order_delivered_customer_date") - pl.col("order_purchase_timestamp")
    ).dt.total_days()

    return orders.with_columns(
        elapsed.alias("delivery_days"),
        _is_late().alias("is_late"),
    ).select(
        pl.len().cast(pl.Int64).alias("orders_delivered"),
        pl.col("delivery_days").mean().round(2).alias("avg_delivery_days"),
        pl.col("delivery_days").min().cast(pl.Int64).alias("min_delivery_days"),
        pl.col("delivery_days").max().cast(pl.Int64).alias("max_delivery_days"),
        percentage(pl.col("is_late").sum(), pl.len()).alias("late_delivery_pct"),
    )


def review_score_distribution(dataset: OlistDataset) -> pl.DataFrame:
    """Count and share of each review score (1-5) for delivered orders"""
    reviews = _delivered_reviews(dataset)
    if reviews.is_empty():
        return empty_result(REVIEW_DISTRIBUTION_SCHEMA)

    return (
        reviews.group_by("review_score")
        .agg(pl.len().cast(pl.Int64).alias("review_count"))
        .with_columns(
            percentage(pl.col("review_count"), pl.col("review_count").sum()).alias("percentage")
        )
        .sort("review_score")
    )


def delivery_timeliness_vs_satisfaction(dataset: OlistDataset) -> pl.DataFrame:
    """Average review score of late versus on-time deliveries"""
    orders = _completed_deliveries(dataset).select(
        "order_id",
        pl.when(_is_late())
        .then(pl.lit(LATE))
        .otherwise(pl.lit(ON_TIME))
        .alias("delivery_status"),
    )
    reviewed = _delivered_reviews(dataset).join(orders, on="order_id", how="inner")
    if reviewed.is_empty():
        return empty_result(TIMELINESS_SCHEMA)

    return (
        reviewed.group_by("delivery_status")
        .agg(
            pl.col("review_score").mean().round(2).alias("avg_review_score"),
            pl.col("order_id").n_unique().cast(pl.Int64).alias("order_count"),
        )
        .sort("delivery_status")
    )


def worst_categories_by_review(
    dataset: OlistDataset,
    min_reviews: int = 50,
    limit: int = 10,
) -> pl.DataFrame:
    """
    Categories with the lowest average review score.

    A category needs at least min_reviews reviews to be ranked; the
    threshold is applied after grouping, so smaller categories are absent
    rather than listed with zero. A review counts once per category even
    when its order holds several items of that category.
    """
    items = dataset.order_items.select(["order_id", "product_id"])
    rows = _delivered_reviews(dataset).join(items, on="order_id", how="inner")
    rows = with_category(dataset, rows).unique(subset=["review_id", "order_id", "category"])
    if rows.is_empty():
        return empty_result(WORST_CATEGORIES_SCHEMA)

    return (
        rows.group_by("category")
        .agg(
            pl.col("review_score").mean().alias("avg_review_score"),
            pl.len().cast(pl.Int64).alias("review_count"),
        )
        .filter(pl.col("review_count") >= min_reviews)
        .sort(["avg_review_score", "category"])
        .head(limit)
        .with_columns(pl.col("avg_review_score").round(2))
    )
