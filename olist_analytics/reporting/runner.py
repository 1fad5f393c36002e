"""
Report Runner

Runs a selection of metrics against a loaded dataset and collects the
results, in catalogue order, with timing for each metric.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Sequence
import time

import polars as pl
import structlog

from olist_analytics.config import get_settings
from olist_analytics.config.settings import AnalyticsSettings
from olist_analytics.data.dataset import OlistDataset
from olist_analytics.metrics.registry import MetricDefinition, MetricGroup, select_metrics

logger = structlog.get_logger(__name__)


class MetricExecutionError(RuntimeError):
    """Raised when a metric function fails"""

    def __init__(self, key: str, error: Exception):
        self.key = key
        self.error = error
        super().__init__(f"Metric '{key}' failed: {error}")


@dataclass
class MetricResult:
    """Output of one metric"""
    key: str
    title: str
    group: MetricGroup
    frame: pl.DataFrame
    duration_seconds: float = 0.0

    @property
    def is_empty(self) -> bool:
        return self.frame.is_empty()


@dataclass
class AnalyticsReport:
    """All metric results of one run"""
    results: List[MetricResult] = field(default_factory=list)
    row_counts: Dict[str, int] = field(default_factory=dict)
    generated_at: datetime = field(default_factory=datetime.utcnow)

    def by_group(self) -> Dict[MetricGroup, List[MetricResult]]:
        """Results grouped by report section, sections in enum order"""
        grouped: Dict[MetricGroup, List[MetricResult]] = {}
        for group in MetricGroup:
            members = [r for r in self.results if r.group == group]
            if members:
                grouped[group] = members
        return grouped

    def get(self, key: str) -> pl.DataFrame:
        """Frame of a metric by key"""
        for result in self.results:
            if result.key == key:
                return result.frame
        raise KeyError(key)


class ReportRunner:
    """
    Runs metric definitions against a dataset.

    Example:
        runner = ReportRunner()
        report = runner.run(dataset, groups=["revenue"])
    """

    def __init__(self, settings: Optional[AnalyticsSettings] = None):
        self.settings = settings or get_settings().analytics

    def run_metric(self, definition: MetricDefinition, dataset: OlistDataset) -> MetricResult:
        """Run one metric, wrapping failures in MetricExecutionError"""
        started = time.perf_counter()
        try:
            frame = definition.compute(dataset, self.settings)
        except Exception as e:
            logger.error("Metric failed", metric=definition.key, error=str(e), error_type=type(e).__name__)
            raise MetricExecutionError(definition.key, e) from e
        duration = time.perf_counter() - started

        logger.debug(
            "Metric computed",
            metric=definition.key,
            rows=frame.height,
            duration_ms=round(duration * 1000, 2),
        )
        return MetricResult(
            key=definition.key,
            title=definition.title,
            group=definition.group,
            frame=frame,
            duration_seconds=duration,
        )

    def run(
        self,
        dataset: OlistDataset,
        groups: Optional[Sequence[str]] = None,
        keys: Optional[Sequence[str]] = None,
    ) -> AnalyticsReport:
        """
        Run the selected metrics.

        Args:
            dataset: Loaded dataset
            groups: Report sections to include (all when omitted)
            keys: Individual metric keys to include

        Returns:
            AnalyticsReport with one result per selected metric
        """
        definitions = select_metrics(groups, keys)
        logger.info("Running metrics", count=len(definitions))

        report = AnalyticsReport(row_counts=dataset.row_counts)
        for definition in definitions:
            report.results.append(self.run_metric(definition, dataset))

        empty = [r.key for r in report.results if r.is_empty]
        if empty:
            logger.warning("Metrics produced no rows", metrics=empty)

        logger.info(
            "Report complete",
            metrics=len(report.results),
            duration_seconds=round(sum(r.duration_seconds for r in report.results), 3),
        )
        return report
