"""
Metric Registry

Ordered catalogue of the fourteen metrics, grouped the way the findings
report presents them.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence

import polars as pl

from olist_analytics.config.settings import AnalyticsSettings
from olist_analytics.data.dataset import OlistDataset
from . import customers, delivery, payments, revenue


class MetricGroup(str, Enum):
    """Report sections"""
    REVENUE = "revenue"
    CUSTOMERS = "customers"
    DELIVERY = "delivery"
    PAYMENTS = "payments"


@dataclass(frozen=True)
class MetricDefinition:
    """A named metric function and how to parameterize it from settings"""
    key: str
    title: str
    group: MetricGroup
    func: Callable[..., pl.DataFrame]
    params: Callable[[AnalyticsSettings], Dict[str, Any]] = field(default=lambda s: {})

    def compute(self, dataset: OlistDataset, settings: Optional[AnalyticsSettings] = None) -> pl.DataFrame:
        """Run the metric against a dataset"""
        kwargs = self.params(settings) if settings is not None else {}
        return self.func(dataset, **kwargs)


METRICS: List[MetricDefinition] = [
    MetricDefinition("total_revenue", "Total Revenue", MetricGroup.REVENUE, revenue.total_revenue),
    MetricDefinition(
        "monthly_revenue_trend", "Monthly Revenue Trend", MetricGroup.REVENUE,
        revenue.monthly_revenue_trend,
    ),
    MetricDefinition(
        "top_categories_by_revenue", "Top Categories by Revenue", MetricGroup.REVENUE,
        revenue.top_categories_by_revenue,
        lambda s: {"limit": s.top_n},
    ),
    MetricDefinition(
        "order_value_distribution", "Order Value Distribution", MetricGroup.REVENUE,
        revenue.order_value_distribution,
    ),
    MetricDefinition(
        "revenue_by_day_of_week", "Revenue by Day of Week", MetricGroup.REVENUE,
        revenue.revenue_by_day_of_week,
    ),
    MetricDefinition(
        "top_states_by_revenue", "Top States by Revenue", MetricGroup.CUSTOMERS,
        customers.top_states_by_revenue,
        lambda s: {"limit": s.top_n},
    ),
    MetricDefinition(
        "top_cities_by_revenue", "Top Cities by Revenue", MetricGroup.CUSTOMERS,
        customers.top_cities_by_revenue,
        lambda s: {"limit": s.top_n},
    ),
    MetricDefinition(
        "repeat_customer_rate", "Repeat Customer Rate", MetricGroup.CUSTOMERS,
        customers.repeat_customer_rate,
    ),
    MetricDefinition(
        "customer_spend_segments", "Customer Spend Segmentation", MetricGroup.CUSTOMERS,
        customers.customer_spend_segments,
        lambda s: {
            "high_threshold": s.high_spend_threshold,
            "medium_threshold": s.medium_spend_threshold,
        },
    ),
    MetricDefinition(
        "delivery_performance", "Delivery Performance", MetricGroup.DELIVERY,
        delivery.delivery_performance,
    ),
    MetricDefinition(
        "review_score_distribution", "Review Score Distribution", MetricGroup.DELIVERY,
        delivery.review_score_distribution,
    ),
    MetricDefinition(
        "delivery_timeliness_vs_satisfaction", "Delivery Timeliness vs Satisfaction",
        MetricGroup.DELIVERY, delivery.delivery_timeliness_vs_satisfaction,
    ),
    MetricDefinition(
        "worst_categories_by_review", "Worst Categories by Review Score", MetricGroup.DELIVERY,
        delivery.worst_categories_by_review,
        lambda s: {"min_reviews": s.min_category_reviews, "limit": s.top_n},
    ),
    MetricDefinition(
        "payment_method_breakdown", "Payment Method Breakdown", MetricGroup.PAYMENTS,
        payments.payment_method_breakdown,
    ),
]

METRICS_BY_KEY: Dict[str, MetricDefinition] = {m.key: m for m in METRICS}


def select_metrics(
    groups: Optional[Sequence[str]] = None,
    keys: Optional[Sequence[str]] = None,
) -> List[MetricDefinition]:
    """
    Pick metrics by group and/or key, keeping catalogue order.

    With neither argument every metric is returned.

    Raises:
        ValueError: On an unknown group or metric key
    """
    unknown = [k for k in keys or [] if k not in METRICS_BY_KEY]
    if unknown:
        raise ValueError(f"Unknown metric(s): {unknown}")
    wanted_groups = {MetricGroup(g) for g in groups or []}
    wanted_keys = set(keys or [])

    if not wanted_groups and not wanted_keys:
        return list(METRICS)
    return [m for m in METRICS if m.group in wanted_groups or m.key in wanted_keys]
