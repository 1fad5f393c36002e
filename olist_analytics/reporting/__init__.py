"""
Reporting Module
"""
from .runner import AnalyticsReport, MetricExecutionError, MetricResult, ReportRunner
from .renderer import ReportFormat, render_report

__all__ = [
    "AnalyticsReport",
    "MetricExecutionError",
    "MetricResult",
    "ReportRunner",
    "ReportFormat",
    "render_report",
]
