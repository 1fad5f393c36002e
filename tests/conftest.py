"""
Test Suite Configuration
"""
from collections import defaultdict
from datetime import datetime, timedelta
from typing import Optional

import polars as pl
import pytest

from olist_analytics.config import Settings
from olist_analytics.data.dataset import OlistDataset

_DEFAULT = object()


class DatasetBuilder:
    """Assemble small in-memory datasets row by row"""

    def __init__(self):
        self.rows = defaultdict(list)
        self._item_seq = defaultdict(int)
        self._payment_seq = defaultdict(int)

    def customer(self, customer_id: str, unique_id: Optional[str] = None,
                 city: str = "sao paulo", state: str = "SP") -> "DatasetBuilder":
        self.rows["customers"].append({
            "customer_id": customer_id,
            "customer_unique_id": unique_id or f"u-{customer_id}",
            "customer_zip_code_prefix": "01001",
            "customer_city": city,
            "customer_state": state,
        })
        return self

    def order(self, order_id: str, customer_id: str, status: str = "delivered",
              purchase: datetime = datetime(2018, 1, 10, 12, 0, 0),
              delivered=_DEFAULT, estimated=_DEFAULT) -> "DatasetBuilder":
        if delivered is _DEFAULT:
            delivered = purchase + timedelta(days=5) if status == "delivered" else None
        if estimated is _DEFAULT:
            estimated = purchase + timedelta(days=10)
        self.rows["orders"].append({
            "order_id": order_id,
            "customer_id": customer_id,
            "order_status": status,
            "order_purchase_timestamp": purchase,
            "order_approved_at": purchase + timedelta(hours=1),
            "order_delivered_carrier_date": None,
            "order_delivered_customer_date": delivered,
            "order_estimated_delivery_date": estimated,
        })
        return self

    def item(self, order_id: str, price: float, freight: float = 0.0,
             product_id: str = "p1", seller_id: str = "s1") -> "DatasetBuilder":
        self._item_seq[order_id] += 1
        self.rows["order_items"].append({
            "order_id": order_id,
            "order_item_id": self._item_seq[order_id],
            "product_id": product_id,
            "seller_id": seller_id,
            "shipping_limit_date": datetime(2018, 1, 1),
            "price": price,
            "freight_value": freight,
        })
        return self

    def payment(self, order_id: str, payment_type: str, value: float,
                installments: int = 1) -> "DatasetBuilder":
        self._payment_seq[order_id] += 1
        self.rows["payments"].append({
            "order_id": order_id,
            "payment_sequential": self._payment_seq[order_id],
            "payment_type": payment_type,
            "payment_installments": installments,
            "payment_value": value,
        })
        return self

    def review(self, review_id: str, order_id: str, score: Optional[int]) -> "DatasetBuilder":
        self.rows["reviews"].append({
            "review_id": review_id,
            "order_id": order_id,
            "review_score": score,
            "review_comment_title": None,
            "review_comment_message": None,
            "review_creation_date": datetime(2018, 3, 1),
            "review_answer_timestamp": datetime(2018, 3, 2),
        })
        return self

    def product(self, product_id: str, category: Optional[str]) -> "DatasetBuilder":
        self.rows["products"].append({
            "product_id": product_id,
            "product_category_name": category,
        })
        return self

    def translation(self, name: str, english: str) -> "DatasetBuilder":
        self.rows["category_translation"].append({
            "product_category_name": name,
            "product_category_name_english": english,
        })
        return self

    def seller(self, seller_id: str, state: str = "SP") -> "DatasetBuilder":
        self.rows["sellers"].append({
            "seller_id": seller_id,
            "seller_zip_code_prefix": "13000",
            "seller_city": "campinas",
            "seller_state": state,
        })
        return self

    def build(self) -> OlistDataset:
        frames = {
            name: pl.DataFrame(rows, infer_schema_length=None)
            for name, rows in self.rows.items()
        }
        return OlistDataset.from_frames(**frames)


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """Create test settings"""
    return Settings(APP_ENV="testing")


@pytest.fixture
def builder() -> DatasetBuilder:
    return DatasetBuilder()


@pytest.fixture
def sample_dataset() -> OlistDataset:
    """
    Five orders over two months:

    o1  u1  Sun 2018-01-07  delivered in 4 days, on time   items 100+10, 50+5
    o2  u1  Mon 2018-01-15  delivered in 10 days, late     item 300+20
    o3  u2  Sat 2018-02-03  delivered in 7 days, on time   item 80+8
    o4  u3  Mon 2018-02-05  canceled                       item 999+1
    o5  u4  Tue 2018-02-06  delivered, no delivery date    item 120+12
    """
    b = DatasetBuilder()
    (
        b.customer("c1", "u1", "sao paulo", "SP")
        .customer("c2", "u1", "sao paulo", "SP")
        .customer("c3", "u2", "rio de janeiro", "RJ")
        .customer("c4", "u3", "belo horizonte", "MG")
        .customer("c5", "u4", "campinas", "SP")
    )
    (
        b.product("p1", "beleza_saude")
        .product("p2", "pc_gamer")
        .product("p3", None)
        .product("p4", "telefonia")
        .translation("beleza_saude", "health_beauty")
        .translation("telefonia", "telephony")
        .seller("s1")
    )
    (
        b.order("o1", "c1", purchase=datetime(2018, 1, 7, 10, 0, 0),
                delivered=datetime(2018, 1, 12, 9, 0, 0), estimated=datetime(2018, 1, 20))
        .order("o2", "c2", purchase=datetime(2018, 1, 15, 8, 0, 0),
               delivered=datetime(2018, 1, 25, 8, 0, 0), estimated=datetime(2018, 1, 22))
        .order("o3", "c3", purchase=datetime(2018, 2, 3, 12, 0, 0),
               delivered=datetime(2018, 2, 10, 12, 0, 0), estimated=datetime(2018, 2, 15))
        .order("o4", "c4", status="canceled", purchase=datetime(2018, 2, 5, 9, 0, 0))
        .order("o5", "c5", purchase=datetime(2018, 2, 6, 9, 0, 0),
               delivered=None, estimated=datetime(2018, 2, 20))
    )
    (
        b.item("o1", 100.0, 10.0, "p1")
        .item("o1", 50.0, 5.0, "p2")
        .item("o2", 300.0, 20.0, "p4")
        .item("o3", 80.0, 8.0, "p3")
        .item("o4", 999.0, 1.0, "p1")
        .item("o5", 120.0, 12.0, "p1")
    )
    (
        b.payment("o1", "credit_card", 165.0)
        .payment("o2", "credit_card", 300.0)
        .payment("o2", "voucher", 20.0)
        .payment("o3", "boleto", 88.0)
        .payment("o4", "credit_card", 1000.0)
        .payment("o5", "boleto", 132.0)
    )
    (
        b.review("r1", "o1", 5)
        .review("r2", "o2", 1)
        .review("r3", "o3", 4)
        .review("r4", "o4", 2)
        .review("r5", "o5", 5)
    )
    return b.build()
