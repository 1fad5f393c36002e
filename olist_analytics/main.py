"""
Olist Analytics Report

Command-line entry point: load the dataset, check its quality, optionally
export it to a SQL database, run the metrics and print the findings.

Usage:
    olist-report --data-dir data/raw
    olist-report --group revenue --group payments --format markdown
    olist-report --metric repeat_customer_rate --format json
    olist-report --export-db sqlite:///data/olist.db
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

import structlog

from olist_analytics.config import get_settings
from olist_analytics.config.logging import configure_logging
from olist_analytics.data.dataset import OlistDataset
from olist_analytics.ingestion import DatasetLoader, DatasetLoadError, FileFormat
from olist_analytics.metrics.registry import METRICS_BY_KEY, MetricGroup
from olist_analytics.quality.validators import ValidationStatus, validate_dataset
from olist_analytics.reporting import MetricExecutionError, ReportFormat, ReportRunner, render_report

logger = structlog.get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="olist-report",
        description="Business metrics for the Olist Brazilian e-commerce dataset",
    )
    parser.add_argument(
        "--data-dir",
        help="Directory holding the dataset files (default: DATA_RAW_PATH)",
    )
    parser.add_argument(
        "--file-format",
        choices=[f.value for f in FileFormat],
        default=FileFormat.CSV.value,
        help="Format of the dataset files (default: csv)",
    )
    parser.add_argument(
        "--group",
        action="append",
        choices=[g.value for g in MetricGroup],
        help="Report section to run; repeatable (default: all)",
    )
    parser.add_argument(
        "--metric",
        action="append",
        choices=sorted(METRICS_BY_KEY),
        help="Single metric to run; repeatable",
    )
    parser.add_argument(
        "--format",
        choices=[f.value for f in ReportFormat],
        default=ReportFormat.TEXT.value,
        help="Output format (default: text)",
    )
    parser.add_argument(
        "--output",
        help="Write the report to this file instead of stdout",
    )
    parser.add_argument(
        "--export-db",
        metavar="URL",
        nargs="?",
        const="",
        help="Create the schema and load the dataset into a SQL database "
             "(default URL: DATABASE_URL)",
    )
    parser.add_argument(
        "--skip-quality-checks",
        action="store_true",
        help="Do not run data quality checks after loading",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Abort when a data quality check fails",
    )
    parser.add_argument(
        "--log-level",
        help="Log level override (DEBUG, INFO, WARNING, ERROR)",
    )
    return parser


def run_quality_checks(dataset: OlistDataset, strict: bool) -> bool:
    """Run the quality suite; returns False when strict mode should abort"""
    results = validate_dataset(dataset, strict_mode=strict)
    failed = [entity.value for entity, r in results.items() if r.status == ValidationStatus.FAILED]
    partial = [entity.value for entity, r in results.items() if r.status == ValidationStatus.PARTIAL]

    if failed or partial:
        logger.warning("Data quality issues found", failed=failed, warnings=partial)
    else:
        logger.info("All data quality checks passed")

    return not (strict and failed)


def export_to_database(dataset: OlistDataset, url: str) -> None:
    from olist_analytics.database import close_database, export_dataset, init_database

    init_database(url or None)
    try:
        written = export_dataset(dataset)
        logger.info("Dataset exported to database", **written)
    finally:
        close_database()


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    settings = get_settings()

    try:
        loader = DatasetLoader(file_format=FileFormat(args.file_format))
        dataset = loader.load_dataset(args.data_dir or settings.data.raw_path)
    except DatasetLoadError as e:
        logger.error("Dataset load failed", error=str(e))
        return 1

    if not args.skip_quality_checks and not run_quality_checks(dataset, args.strict):
        logger.error("Aborting: data quality checks failed in strict mode")
        return 1

    if args.export_db is not None:
        try:
            export_to_database(dataset, args.export_db)
        except Exception as e:
            logger.error("Database export failed", error=str(e), error_type=type(e).__name__)
            return 1

    try:
        report = ReportRunner(settings.analytics).run(dataset, groups=args.group, keys=args.metric)
    except MetricExecutionError as e:
        logger.error("Report failed", metric=e.key, error=str(e.error))
        return 1

    output = render_report(report, args.format)
    if args.output:
        Path(args.output).write_text(output, encoding="utf-8")
        logger.info("Report written", file=args.output)
    else:
        sys.stdout.write(output)

    return 0


if __name__ == "__main__":
    sys.exit(main())
