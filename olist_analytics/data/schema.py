"""
Olist Dataset Schema

Declares the entities of the Brazilian e-commerce dataset: the CSV file each
one is loaded from, its columns and types, its key, and the foreign keys
that tie it to the other entities.

Orders sit at the center of the schema:

    customers 1──* orders 1──* order_items *──1 products *──0..1 category_translation
                        │              └──────*──1 sellers
                        ├──* payments
                        └──* reviews
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Tuple

import polars as pl


class Entity(str, Enum):
    """Dataset entities"""
    CUSTOMERS = "customers"
    ORDERS = "orders"
    ORDER_ITEMS = "order_items"
    PAYMENTS = "payments"
    REVIEWS = "reviews"
    PRODUCTS = "products"
    SELLERS = "sellers"
    CATEGORY_TRANSLATION = "category_translation"
    GEOLOCATION = "geolocation"


class OrderStatus(str, Enum):
    """Order status values found in the orders file"""
    CREATED = "created"
    APPROVED = "approved"
    INVOICED = "invoiced"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELED = "canceled"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class ForeignKey:
    """Reference from a column to the key column of another entity"""
    column: str
    references: Entity
    referenced_column: str


@dataclass(frozen=True)
class TableSpec:
    """Declared layout of one entity"""
    entity: Entity
    file_name: str
    columns: Dict[str, pl.DataType]
    primary_key: Tuple[str, ...] = ()
    foreign_keys: Tuple[ForeignKey, ...] = ()
    required: bool = True

    @property
    def datetime_columns(self) -> List[str]:
        """Columns parsed from timestamp strings"""
        return [name for name, dtype in self.columns.items() if dtype == pl.Datetime]

    @property
    def schema(self) -> Dict[str, pl.DataType]:
        """Polars schema of the loaded table"""
        return {
            name: pl.Datetime("us") if dtype == pl.Datetime else dtype
            for name, dtype in self.columns.items()
        }

    def empty_frame(self) -> pl.DataFrame:
        """Zero-row frame carrying the declared schema"""
        return pl.DataFrame(schema=self.schema)


CUSTOMERS = TableSpec(
    entity=Entity.CUSTOMERS,
    file_name="olist_customers_dataset.csv",
    columns={
        "customer_id": pl.Utf8,
        "customer_unique_id": pl.Utf8,
        "customer_zip_code_prefix": pl.Utf8,
        "customer_city": pl.Utf8,
        "customer_state": pl.Utf8,
    },
    primary_key=("customer_id",),
)

ORDERS = TableSpec(
    entity=Entity.ORDERS,
    file_name="olist_orders_dataset.csv",
    columns={
        "order_id": pl.Utf8,
        "customer_id": pl.Utf8,
        "order_status": pl.Utf8,
        "order_purchase_timestamp": pl.Datetime,
        "order_approved_at": pl.Datetime,
        "order_delivered_carrier_date": pl.Datetime,
        "order_delivered_customer_date": pl.Datetime,
        "order_estimated_delivery_date": pl.Datetime,
    },
    primary_key=("order_id",),
    foreign_keys=(ForeignKey("customer_id", Entity.CUSTOMERS, "customer_id"),),
)

ORDER_ITEMS = TableSpec(
    entity=Entity.ORDER_ITEMS,
    file_name="olist_order_items_dataset.csv",
    columns={
        "order_id": pl.Utf8,
        "order_item_id": pl.Int64,
        "product_id": pl.Utf8,
        "seller_id": pl.Utf8,
        "shipping_limit_date": pl.Datetime,
        "price": pl.Float64,
        "freight_value": pl.Float64,
    },
    primary_key=("order_id", "order_item_id"),
    foreign_keys=(
        ForeignKey("order_id", Entity.ORDERS, "order_id"),
        ForeignKey("product_id", Entity.PRODUCTS, "product_id"),
        ForeignKey("seller_id", Entity.SELLERS, "seller_id"),
    ),
)

PAYMENTS = TableSpec(
    entity=Entity.PAYMENTS,
    file_name="olist_order_payments_dataset.csv",
    columns={
        "order_id": pl.Utf8,
        "payment_sequential": pl.Int64,
        "payment_type": pl.Utf8,
        "payment_installments": pl.Int64,
        "payment_value": pl.Float64,
    },
    primary_key=("order_id", "payment_sequential"),
    foreign_keys=(ForeignKey("order_id", Entity.ORDERS, "order_id"),),
)

REVIEWS = TableSpec(
    entity=Entity.REVIEWS,
    file_name="olist_order_reviews_dataset.csv",
    columns={
        "review_id": pl.Utf8,
        "order_id": pl.Utf8,
        "review_score": pl.Int64,
        "review_comment_title": pl.Utf8,
        "review_comment_message": pl.Utf8,
        "review_creation_date": pl.Datetime,
        "review_answer_timestamp": pl.Datetime,
    },
    # The public dataset repeats a few review ids across orders
    primary_key=("review_id", "order_id"),
    foreign_keys=(ForeignKey("order_id", Entity.ORDERS, "order_id"),),
)

PRODUCTS = TableSpec(
    entity=Entity.PRODUCTS,
    file_name="olist_products_dataset.csv",
    columns={
        "product_id": pl.Utf8,
        "product_category_name": pl.Utf8,
        "product_name_lenght": pl.Float64,
        "product_description_lenght": pl.Float64,
        "product_photos_qty": pl.Float64,
        "product_weight_g": pl.Float64,
        "product_length_cm": pl.Float64,
        "product_height_cm": pl.Float64,
        "product_width_cm": pl.Float64,
    },
    primary_key=("product_id",),
)

SELLERS = TableSpec(
    entity=Entity.SELLERS,
    file_name="olist_sellers_dataset.csv",
    columns={
        "seller_id": pl.Utf8,
        "seller_zip_code_prefix": pl.Utf8,
        "seller_city": pl.Utf8,
        "seller_state": pl.Utf8,
    },
    primary_key=("seller_id",),
)

CATEGORY_TRANSLATION = TableSpec(
    entity=Entity.CATEGORY_TRANSLATION,
    file_name="product_category_name_translation.csv",
    columns={
        "product_category_name": pl.Utf8,
        "product_category_name_english": pl.Utf8,
    },
    primary_key=("product_category_name",),
)

GEOLOCATION = TableSpec(
    entity=Entity.GEOLOCATION,
    file_name="olist_geolocation_dataset.csv",
    columns={
        "geolocation_zip_code_prefix": pl.Utf8,
        "geolocation_lat": pl.Float64,
        "geolocation_lng": pl.Float64,
        "geolocation_city": pl.Utf8,
        "geolocation_state": pl.Utf8,
    },
    required=False,
)


TABLES: Dict[Entity, TableSpec] = {
    spec.entity: spec
    for spec in (
        CUSTOMERS,
        ORDERS,
        ORDER_ITEMS,
        PAYMENTS,
        REVIEWS,
        PRODUCTS,
        SELLERS,
        CATEGORY_TRANSLATION,
        GEOLOCATION,
    )
}


def get_table_spec(entity: Entity) -> TableSpec:
    """Look up the declared layout of an entity"""
    return TABLES[Entity(entity)]
