"""
Metric Functions Module

Each metric is a pure function of an OlistDataset returning a small
polars DataFrame.
"""
from .revenue import (
    total_revenue,
    monthly_revenue_trend,
    top_categories_by_revenue,
    order_totals,
    order_value_distribution,
    revenue_by_day_of_week,
)
from .customers import (
    top_states_by_revenue,
    top_cities_by_revenue,
    repeat_customer_rate,
    customer_spend_segments,
)
from .delivery import (
    delivery_performance,
    review_score_distribution,
    delivery_timeliness_vs_satisfaction,
    worst_categories_by_review,
)
from .payments import payment_method_breakdown
from .registry import METRICS, MetricDefinition, MetricGroup, select_metrics

__all__ = [
    "total_revenue",
    "monthly_revenue_trend",
    "top_categories_by_revenue",
    "order_totals",
    "order_value_distribution",
    "revenue_by_day_of_week",
    "top_states_by_revenue",
    "top_cities_by_revenue",
    "repeat_customer_rate",
    "customer_spend_segments",
    "delivery_performance",
    "review_score_distribution",
    "delivery_timeliness_vs_satisfaction",
    "worst_categories_by_review",
    "payment_method_breakdown",
    "METRICS",
    "MetricDefinition",
    "MetricGroup",
    "select_metrics",
]
