"""
Synthetic Data Generator

Generates an Olist-shaped dataset for development and testing.
Includes:
- Customers with repeat buyers (several customer_id per customer_unique_id)
- Products across translated, untranslated and missing categories
- Orders with realistic status mix and delivery timelines
- Items, split payments and reviews that favour punctual deliveries
"""

from datetime import datetime, timedelta
from pathlib import Path
from typing import Dict, List, Optional, Union

import numpy as np
import polars as pl
import structlog
from faker import Faker

from .dataset import OlistDataset
from .schema import Entity, TABLES

logger = structlog.get_logger(__name__)


# =============================================================================
# CONFIGURATION
# =============================================================================

CATEGORIES = [
    ("beleza_saude", "health_beauty"),
    ("cama_mesa_banho", "bed_bath_table"),
    ("esporte_lazer", "sports_leisure"),
    ("informatica_acessorios", "computers_accessories"),
    ("moveis_decoracao", "furniture_decor"),
    ("utilidades_domesticas", "housewares"),
    ("relogios_presentes", "watches_gifts"),
    ("telefonia", "telephony"),
    ("automotivo", "auto"),
    ("brinquedos", "toys"),
]

# Present in products but absent from the translation table
UNTRANSLATED_CATEGORIES = ["pc_gamer", "portateis_cozinha_e_preparadores_de_alimentos"]

STATES = [
    ("SP", 0.42), ("RJ", 0.13), ("MG", 0.12), ("RS", 0.06), ("PR", 0.05),
    ("SC", 0.04), ("BA", 0.04), ("DF", 0.03), ("GO", 0.03), ("ES", 0.03),
    ("PE", 0.03), ("CE", 0.02),
]

ORDER_STATUSES = [
    ("delivered", 0.90),
    ("shipped", 0.03),
    ("canceled", 0.02),
    ("unavailable", 0.01),
    ("invoiced", 0.02),
    ("processing", 0.02),
]

PAYMENT_TYPES = [
    ("credit_card", 0.74),
    ("boleto", 0.19),
    ("voucher", 0.05),
    ("debit_card", 0.02),
]

DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"


# =============================================================================
# GENERATOR
# =============================================================================

class OlistDataGenerator:
    """
    Reproducible generator for every entity of the dataset.

    Example:
        generator = OlistDataGenerator(seed=7)
        dataset = generator.generate(n_orders=500)
        generator.write_csv(dataset, "data/raw")
    """

    def __init__(
        self,
        seed: int = 42,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ):
        self.rng = np.random.default_rng(seed)
        self.fake = Faker("pt_BR")
        self.fake.seed_instance(seed)
        self.start_date = start_date or datetime(2017, 1, 1)
        self.end_date = end_date or datetime(2018, 8, 31)

    def _ids(self, n: int) -> List[str]:
        """32-character hex identifiers, like the public dataset"""
        return [self.rng.bytes(16).hex() for _ in range(n)]

    def _choice(self, weighted: List[tuple], n: int) -> np.ndarray:
        values, weights = zip(*weighted)
        p = np.array(weights) / sum(weights)
        return self.rng.choice(values, size=n, p=p)

    def _zip_prefixes(self, n: int) -> List[str]:
        return [f"{z:05d}" for z in self.rng.integers(1000, 99999, n)]

    def generate_category_translation(self) -> pl.DataFrame:
        """Translation table for the translated categories"""
        names, english = zip(*CATEGORIES)
        return pl.DataFrame({
            "product_category_name": list(names),
            "product_category_name_english": list(english),
        })

    def generate_products(self, n: int = 300) -> pl.DataFrame:
        """Generate n products; a few have no category at all"""
        categories = [name for name, _ in CATEGORIES] + UNTRANSLATED_CATEGORIES
        picked = self.rng.choice(categories, size=n).tolist()
        missing = self.rng.random(n) < 0.02
        picked = [None if m else c for c, m in zip(picked, missing)]

        return pl.DataFrame({
            "product_id": self._ids(n),
            "product_category_name": picked,
            "product_name_lenght": self.rng.integers(10, 70, n).astype(float),
            "product_description_lenght": self.rng.integers(50, 3000, n).astype(float),
            "product_photos_qty": self.rng.integers(1, 8, n).astype(float),
            "product_weight_g": self.rng.integers(100, 20000, n).astype(float),
            "product_length_cm": self.rng.integers(10, 100, n).astype(float),
            "product_height_cm": self.rng.integers(2, 80, n).astype(float),
            "product_width_cm": self.rng.integers(8, 100, n).astype(float),
        })

    def generate_sellers(self, n: int = 100) -> pl.DataFrame:
        """Generate n sellers"""
        return pl.DataFrame({
            "seller_id": self._ids(n),
            "seller_zip_code_prefix": self._zip_prefixes(n),
            "seller_city": [self.fake.city().lower() for _ in range(n)],
            "seller_state": self._choice(STATES, n).tolist(),
        })

    def generate_orders(self, n: int, n_people: int) -> Dict[str, pl.DataFrame]:
        """
        Generate n orders and their customers.

        Every order gets its own customer_id; people are drawn with a
        skewed distribution so some of them order more than once.
        """
        people = self._ids(n_people)
        person_state = dict(zip(people, self._choice(STATES, n_people).tolist()))
        person_city = {p: self.fake.city().lower() for p in people}
        weights = self.rng.pareto(2.0, n_people) + 1
        buyers = self.rng.choice(people, size=n, p=weights / weights.sum()).tolist()

        customer_ids = self._ids(n)
        customers = pl.DataFrame({
            "customer_id": customer_ids,
            "customer_unique_id": buyers,
            "customer_zip_code_prefix": self._zip_prefixes(n),
            "customer_city": [person_city[b] for b in buyers],
            "customer_state": [person_state[b] for b in buyers],
        })

        span_seconds = int((self.end_date - self.start_date).total_seconds())
        offsets = self.rng.integers(0, span_seconds, n)
        purchase = [self.start_date + timedelta(seconds=int(s)) for s in offsets]
        statuses = self._choice(ORDER_STATUSES, n).tolist()

        approval_hours = self.rng.exponential(10, n)
        carrier_days = self.rng.gamma(2.0, 1.5, n)
        delivery_days = self.rng.gamma(3.0, 4.0, n) + 1
        estimate_days = self.rng.integers(15, 35, n)
        # A handful of delivered orders never got a delivery date recorded
        no_delivery_date = self.rng.random(n) < 0.002

        approved, carrier, delivered, estimated = [], [], [], []
        for i, ts in enumerate(purchase):
            status = statuses[i]
            approved.append(ts + timedelta(hours=float(approval_hours[i])) if status != "canceled" else None)
            shipped = status in ("shipped", "delivered")
            carrier.append(ts + timedelta(days=float(carrier_days[i])) if shipped else None)
            if status == "delivered" and not no_delivery_date[i]:
                delivered.append(ts + timedelta(days=float(delivery_days[i])))
            else:
                delivered.append(None)
            estimated.append(
                datetime.combine((ts + timedelta(days=int(estimate_days[i]))).date(), datetime.min.time())
            )

        orders = pl.DataFrame(
            {
                "order_id": self._ids(n),
                "customer_id": customer_ids,
                "order_status": statuses,
                "order_purchase_timestamp": purchase,
                "order_approved_at": approved,
                "order_delivered_carrier_date": carrier,
                "order_delivered_customer_date": delivered,
                "order_estimated_delivery_date": estimated,
            },
            schema=TABLES[Entity.ORDERS].schema,
        )
        return {"customers": customers, "orders": orders}

    def generate_order_items(
        self,
        orders: pl.DataFrame,
        products: pl.DataFrame,
        sellers: pl.DataFrame,
    ) -> pl.DataFrame:
        """One to four items per order"""
        product_ids = products["product_id"].to_list()
        seller_ids = sellers["seller_id"].to_list()
        counts = self._choice([(1, 0.80), (2, 0.12), (3, 0.05), (4, 0.03)], orders.height)

        rows = []
        for order_id, purchase, count in zip(
            orders["order_id"], orders["order_purchase_timestamp"], counts
        ):
            product_id = product_ids[int(self.rng.integers(len(product_ids)))]
            seller_id = seller_ids[int(self.rng.integers(len(seller_ids)))]
            price = round(float(self.rng.lognormal(4.4, 0.8)), 2)
            freight = round(float(self.rng.gamma(2.0, 10.0)), 2)
            for seq in range(1, int(count) + 1):
                rows.append({
                    "order_id": order_id,
                    "order_item_id": seq,
                    "product_id": product_id,
                    "seller_id": seller_id,
                    "shipping_limit_date": purchase + timedelta(days=6),
                    "price": price,
                    "freight_value": freight,
                })

        return pl.DataFrame(rows, schema=TABLES[Entity.ORDER_ITEMS].schema)

    def generate_payments(self, items: pl.DataFrame) -> pl.DataFrame:
        """Pay each order total in one or, sometimes, two transactions"""
        totals = items.group_by("order_id", maintain_order=True).agg(
            (pl.col("price") + pl.col("freight_value")).sum().alias("total")
        )

        rows = []
        for order_id, total in totals.iter_rows():
            payment_type = str(self._choice(PAYMENT_TYPES, 1)[0])
            installments = int(self.rng.integers(1, 11)) if payment_type == "credit_card" else 1
            if self.rng.random() < 0.03:
                voucher = round(total * 0.3, 2)
                parts = [(payment_type, installments, round(total - voucher, 2)), ("voucher", 1, voucher)]
            else:
                parts = [(payment_type, installments, round(total, 2))]
            for seq, (kind, inst, value) in enumerate(parts, start=1):
                rows.append({
                    "order_id": order_id,
                    "payment_sequential": seq,
                    "payment_type": kind,
                    "payment_installments": inst,
                    "payment_value": value,
                })

        return pl.DataFrame(rows, schema=TABLES[Entity.PAYMENTS].schema)

    def generate_reviews(self, orders: pl.DataFrame) -> pl.DataFrame:
        """One review for most orders; late deliveries score lower"""
        reviewed = orders.filter(pl.Series(self.rng.random(orders.height) < 0.97))
        late = (
            reviewed["order_delivered_customer_date"] > reviewed["order_estimated_delivery_date"]
        ).fill_null(False).to_list()

        on_time_scores = [(5, 0.60), (4, 0.20), (3, 0.08), (2, 0.04), (1, 0.08)]
        late_scores = [(5, 0.20), (4, 0.12), (3, 0.13), (2, 0.10), (1, 0.45)]

        scores, created = [], []
        for is_late, purchase in zip(late, reviewed["order_purchase_timestamp"]):
            weighted = late_scores if is_late else on_time_scores
            scores.append(int(self._choice(weighted, 1)[0]))
            created.append(datetime.combine((purchase + timedelta(days=14)).date(), datetime.min.time()))

        n = reviewed.height
        return pl.DataFrame(
            {
                "review_id": self._ids(n),
                "order_id": reviewed["order_id"].to_list(),
                "review_score": scores,
                "review_comment_title": [None] * n,
                "review_comment_message": [
                    self.fake.sentence(nb_words=8) if self.rng.random() < 0.4 else None
                    for _ in range(n)
                ],
                "review_creation_date": created,
                "review_answer_timestamp": [c + timedelta(days=2) for c in created],
            },
            schema=TABLES[Entity.REVIEWS].schema,
        )

    def generate(
        self,
        n_orders: int = 2000,
        n_people: Optional[int] = None,
        n_products: int = 300,
        n_sellers: int = 100,
    ) -> OlistDataset:
        """Generate a complete, referentially consistent dataset"""
        n_people = n_people or max(1, int(n_orders * 0.9))
        logger.info("Generating synthetic dataset", orders=n_orders, people=n_people)

        products = self.generate_products(n_products)
        sellers = self.generate_sellers(n_sellers)
        generated = self.generate_orders(n_orders, n_people)
        items = self.generate_order_items(generated["orders"], products, sellers)

        return OlistDataset.from_frames(
            customers=generated["customers"],
            orders=generated["orders"],
            order_items=items,
            payments=self.generate_payments(items),
            reviews=self.generate_reviews(generated["orders"]),
            products=products,
            sellers=sellers,
            category_translation=self.generate_category_translation(),
        )

    def write_csv(self, dataset: OlistDataset, directory: Union[str, Path]) -> List[Path]:
        """
        Write every non-empty entity to its CSV file.

        Returns:
            Paths of the written files
        """
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)

        written = []
        for entity, df in dataset.items():
            spec = TABLES[entity]
            if df.is_empty() and not spec.required:
                continue
            path = directory / spec.file_name
            df.write_csv(path, datetime_format=DATETIME_FORMAT)
            written.append(path)
            logger.info("Written synthetic table", file=str(path), rows=df.height)

        return written
