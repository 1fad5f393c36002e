"""
Database Models - Olist Relational Schema

Relational layout of the dataset for the warehouse export. Tables keep the
names and columns of the source CSV files:

- customers, sellers, products, product_category_name_translation
- orders (references customers)
- order_items (references orders, products, sellers)
- order_payments, order_reviews (reference orders)
- geolocation (no natural key; surrogate id)
"""

from datetime import datetime
from typing import Dict, Optional, Type

from sqlalchemy import DateTime, Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from olist_analytics.data.schema import Entity


class Base(DeclarativeBase):
    """Base class for all database models"""
    pass


class Customer(Base):
    """Per-order customer record; customer_unique_id identifies the person"""
    __tablename__ = "customers"

    customer_id: Mapped[str] = mapped_column(String(32), primary_key=True)
    customer_unique_id: Mapped[str] = mapped_column(String(32), nullable=False)
    customer_zip_code_prefix: Mapped[Optional[str]] = mapped_column(String(10))
    customer_city: Mapped[Optional[str]] = mapped_column(String(100))
    customer_state: Mapped[Optional[str]] = mapped_column(String(2))

    __table_args__ = (
        Index("ix_customers_unique_id", "customer_unique_id"),
        Index("ix_customers_state", "customer_state"),
    )


class Seller(Base):
    __tablename__ = "sellers"

    seller_id: Mapped[str] = mapped_column(String(32), primary_key=True)
    seller_zip_code_prefix: Mapped[Optional[str]] = mapped_column(String(10))
    seller_city: Mapped[Optional[str]] = mapped_column(String(100))
    seller_state: Mapped[Optional[str]] = mapped_column(String(2))


class CategoryTranslation(Base):
    __tablename__ = "product_category_name_translation"

    product_category_name: Mapped[str] = mapped_column(String(100), primary_key=True)
    product_category_name_english: Mapped[Optional[str]] = mapped_column(String(100))


class Product(Base):
    """
    Product catalog entry.

    product_category_name is not a foreign key: some categories have no
    English translation.
    """
    __tablename__ = "products"

    product_id: Mapped[str] = mapped_column(String(32), primary_key=True)
    product_category_name: Mapped[Optional[str]] = mapped_column(String(100))
    product_name_lenght: Mapped[Optional[float]] = mapped_column(Float)
    product_description_lenght: Mapped[Optional[float]] = mapped_column(Float)
    product_photos_qty: Mapped[Optional[float]] = mapped_column(Float)
    product_weight_g: Mapped[Optional[float]] = mapped_column(Float)
    product_length_cm: Mapped[Optional[float]] = mapped_column(Float)
    product_height_cm: Mapped[Optional[float]] = mapped_column(Float)
    product_width_cm: Mapped[Optional[float]] = mapped_column(Float)

    __table_args__ = (
        Index("ix_products_category", "product_category_name"),
    )


class Order(Base):
    __tablename__ = "orders"

    order_id: Mapped[str] = mapped_column(String(32), primary_key=True)
    customer_id: Mapped[str] = mapped_column(String(32), ForeignKey("customers.customer_id"), nullable=False)
    order_status: Mapped[str] = mapped_column(String(20), nullable=False)
    order_purchase_timestamp: Mapped[Optional[datetime]] = mapped_column(DateTime)
    order_approved_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    order_delivered_carrier_date: Mapped[Optional[datetime]] = mapped_column(DateTime)
    order_delivered_customer_date: Mapped[Optional[datetime]] = mapped_column(DateTime)
    order_estimated_delivery_date: Mapped[Optional[datetime]] = mapped_column(DateTime)

    __table_args__ = (
        Index("ix_orders_status", "order_status"),
        Index("ix_orders_purchase_ts", "order_purchase_timestamp"),
        Index("ix_orders_customer", "customer_id"),
    )


class OrderItem(Base):
    __tablename__ = "order_items"

    order_id: Mapped[str] = mapped_column(String(32), ForeignKey("orders.order_id"), primary_key=True)
    order_item_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    product_id: Mapped[str] = mapped_column(String(32), ForeignKey("products.product_id"), nullable=False)
    seller_id: Mapped[str] = mapped_column(String(32), ForeignKey("sellers.seller_id"), nullable=False)
    shipping_limit_date: Mapped[Optional[datetime]] = mapped_column(DateTime)
    price: Mapped[float] = mapped_column(Float, nullable=False)
    freight_value: Mapped[float] = mapped_column(Float, nullable=False)

    __table_args__ = (
        Index("ix_order_items_product", "product_id"),
    )


class Payment(Base):
    __tablename__ = "order_payments"

    order_id: Mapped[str] = mapped_column(String(32), ForeignKey("orders.order_id"), primary_key=True)
    payment_sequential: Mapped[int] = mapped_column(Integer, primary_key=True)
    payment_type: Mapped[str] = mapped_column(String(20), nullable=False)
    payment_installments: Mapped[Optional[int]] = mapped_column(Integer)
    payment_value: Mapped[float] = mapped_column(Float, nullable=False)

    __table_args__ = (
        Index("ix_order_payments_type", "payment_type"),
    )


class Review(Base):
    __tablename__ = "order_reviews"

    review_id: Mapped[str] = mapped_column(String(32), primary_key=True)
    order_id: Mapped[str] = mapped_column(String(32), ForeignKey("orders.order_id"), primary_key=True)
    review_score: Mapped[Optional[int]] = mapped_column(Integer)
    review_comment_title: Mapped[Optional[str]] = mapped_column(Text)
    review_comment_message: Mapped[Optional[str]] = mapped_column(Text)
    review_creation_date: Mapped[Optional[datetime]] = mapped_column(DateTime)
    review_answer_timestamp: Mapped[Optional[datetime]] = mapped_column(DateTime)


class Geolocation(Base):
    __tablename__ = "geolocation"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    geolocation_zip_code_prefix: Mapped[Optional[str]] = mapped_column(String(10))
    geolocation_lat: Mapped[Optional[float]] = mapped_column(Float)
    geolocation_lng: Mapped[Optional[float]] = mapped_column(Float)
    geolocation_city: Mapped[Optional[str]] = mapped_column(String(100))
    geolocation_state: Mapped[Optional[str]] = mapped_column(String(2))

    __table_args__ = (
        Index("ix_geolocation_zip", "geolocation_zip_code_prefix"),
    )


# Parents before children, the order rows must be inserted in
MODELS_BY_ENTITY: Dict[Entity, Type[Base]] = {
    Entity.CUSTOMERS: Customer,
    Entity.SELLERS: Seller,
    Entity.CATEGORY_TRANSLATION: CategoryTranslation,
    Entity.PRODUCTS: Product,
    Entity.ORDERS: Order,
    Entity.ORDER_ITEMS: OrderItem,
    Entity.PAYMENTS: Payment,
    Entity.REVIEWS: Review,
    Entity.GEOLOCATION: Geolocation,
}
