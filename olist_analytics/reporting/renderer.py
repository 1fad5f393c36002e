"""
Report Renderer

Formats an AnalyticsReport as plain-text tables, markdown or JSON.
"""

from enum import Enum
from typing import Callable, Dict
import json

import polars as pl

from .runner import AnalyticsReport, MetricResult

SECTION_TITLES = {
    "revenue": "Revenue Analysis",
    "customers": "Customer Analysis",
    "delivery": "Delivery & Review Analysis",
    "payments": "Payment Analysis",
}


class ReportFormat(str, Enum):
    """Supported output formats"""
    TEXT = "text"
    MARKDOWN = "markdown"
    JSON = "json"


def _table(frame: pl.DataFrame, formatting: str) -> str:
    with pl.Config(
        tbl_formatting=formatting,
        tbl_rows=-1,
        tbl_cols=-1,
        tbl_hide_dataframe_shape=True,
        tbl_hide_column_data_types=True,
        fmt_str_lengths=80,
        float_precision=2,
    ):
        return str(frame)


def _render_tables(report: AnalyticsReport, formatting: str, heading: Callable[[str, int], str]) -> str:
    lines = [heading("Olist E-Commerce Findings", 1), ""]
    for group, results in report.by_group().items():
        lines.extend([heading(SECTION_TITLES[group.value], 2), ""])
        for result in results:
            lines.append(heading(result.title, 3))
            if result.is_empty:
                lines.append("No qualifying rows.")
            else:
                lines.append(_table(result.frame, formatting))
            lines.append("")
    return "\n".join(lines).rstrip() + "\n"


def _text_heading(title: str, level: int) -> str:
    if level == 1:
        return f"{title}\n{'=' * len(title)}"
    if level == 2:
        return f"{title}\n{'-' * len(title)}"
    return f"[{title}]"


def _markdown_heading(title: str, level: int) -> str:
    return f"{'#' * level} {title}"


def render_text(report: AnalyticsReport) -> str:
    """Plain-text tables grouped by section"""
    return _render_tables(report, "ASCII_MARKDOWN", _text_heading)


def render_markdown(report: AnalyticsReport) -> str:
    """Markdown document with one table per metric"""
    return _render_tables(report, "MARKDOWN", _markdown_heading)


def _result_to_dict(result: MetricResult) -> Dict:
    return {
        "key": result.key,
        "title": result.title,
        "group": result.group.value,
        "columns": result.frame.columns,
        "rows": result.frame.to_dicts(),
    }


def render_json(report: AnalyticsReport) -> str:
    """JSON document with the rows of every metric"""
    payload = {
        "generated_at": report.generated_at.isoformat(),
        "row_counts": report.row_counts,
        "metrics": [_result_to_dict(r) for r in report.results],
    }
    return json.dumps(payload, indent=2, default=str)


RENDERERS: Dict[ReportFormat, Callable[[AnalyticsReport], str]] = {
    ReportFormat.TEXT: render_text,
    ReportFormat.MARKDOWN: render_markdown,
    ReportFormat.JSON: render_json,
}


def render_report(report: AnalyticsReport, fmt: str = ReportFormat.TEXT) -> str:
    """Render a report in the requested format"""
    return RENDERERS[ReportFormat(fmt)](report)
