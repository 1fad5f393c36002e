"""
Payment Metrics
"""

import polars as pl

from olist_analytics.data.dataset import OlistDataset
from .common import delivered_orders, empty_result, money, percentage

PAYMENT_BREAKDOWN_SCHEMA = {
    "payment_type": pl.Utf8,
    "transaction_count": pl.Int64,
    "total_value": pl.Float64,
    "avg_value": pl.Float64,
    "pct_of_transactions": pl.Float64,
}


def payment_method_breakdown(dataset: OlistDataset) -> pl.DataFrame:
    """
    Transactions and value per payment type on delivered orders, largest
    total value first. Split payments count as separate transactions.
    """
    orders = delivered_orders(dataset).select("order_id")
    payments = dataset.payments.join(orders, on="order_id", how="inner")
    if payments.is_empty():
        return empty_result(PAYMENT_BREAKDOWN_SCHEMA)

    return (
        payments.group_by("payment_type")
        .agg(
            pl.len().cast(pl.Int64).alias("transaction_count"),
            pl.col("payment_value").sum().alias("total_value"),
            pl.col("payment_value").mean().alias("avg_value"),
        )
        .with_columns(
            percentage(pl.col("transaction_count"), pl.col("transaction_count").sum())
            .alias("pct_of_transactions")
        )
        .sort(["total_value", "payment_type"], descending=[True, False])
        .with_columns(
            money(pl.col("total_value")).alias("total_value"),
            money(pl.col("avg_value")).alias("avg_value"),
        )
    )
