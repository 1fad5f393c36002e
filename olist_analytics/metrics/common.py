"""
Shared building blocks for the metric functions.

Joins that several metrics repeat (delivered items, category resolution)
live here so every metric applies the same filter and join semantics.
"""

from typing import Dict

import polars as pl

from olist_analytics.data.dataset import OlistDataset
from olist_analytics.data.schema import OrderStatus

UNKNOWN_CATEGORY = "Unknown"

# Money and percentages are rounded only when a result is produced
OUTPUT_DECIMALS = 2


def empty_result(schema: Dict[str, pl.DataType]) -> pl.DataFrame:
    """Zero-row result with the metric's output columns"""
    return pl.DataFrame(schema=schema)


def delivered_orders(dataset: OlistDataset) -> pl.DataFrame:
    """Orders whose status is exactly 'delivered'"""
    return dataset.orders.filter(pl.col("order_status") == OrderStatus.DELIVERED.value)


def delivered_items(dataset: OlistDataset) -> pl.DataFrame:
    """
    Order items of delivered orders, carrying the order's customer and
    purchase timestamp. Items whose order is missing are dropped.
    """
    orders = delivered_orders(dataset).select(
        ["order_id", "customer_id", "order_purchase_timestamp"]
    )
    return dataset.order_items.join(orders, on="order_id", how="inner")


def with_category(dataset: OlistDataset, items: pl.DataFrame) -> pl.DataFrame:
    """
    Attach the English category name to item rows as 'category'.

    Items must match a product (inner join); the translation is optional
    (left join) and a missing one resolves to UNKNOWN_CATEGORY.
    """
    products = dataset.products.select(["product_id", "product_category_name"])
    translation = dataset.category_translation.select(
        ["product_category_name", "product_category_name_english"]
    ).unique(subset=["product_category_name"], keep="first")

    return (
        items.join(products, on="product_id", how="inner")
        .join(translation, on="product_category_name", how="left")
        .with_columns(
            pl.col("product_category_name_english")
            .fill_null(pl.lit(UNKNOWN_CATEGORY))
            .alias("category")
        )
    )


def percentage(part: pl.Expr, whole: pl.Expr) -> pl.Expr:
    """100 * part / whole, rounded for output"""
    return (part * 100.0 / whole).round(OUTPUT_DECIMALS)


def money(expr: pl.Expr) -> pl.Expr:
    """Round a currency aggregate for output"""
    return expr.round(OUTPUT_DECIMALS)
