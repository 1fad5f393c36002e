"""
Data Validation Module

Rule-based data quality checks run on the loaded dataset before any
metric. Checks never modify data; their outcome is reported so orphaned
or malformed rows are visible, while the metrics still run.

Features:
- Key checks (not-null, uniqueness of single or composite keys)
- Range and allowed-value checks
- Referential integrity between entities
- Custom business rules
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

import polars as pl
import structlog

from olist_analytics.data.dataset import OlistDataset
from olist_analytics.data.schema import Entity, OrderStatus, get_table_spec

logger = structlog.get_logger(__name__)


class ValidationSeverity(str, Enum):
    """Severity levels for validation failures"""
    ERROR = "error"  # Fails the result; aborts the report in strict mode
    WARNING = "warning"  # Logged, never fails the result
    INFO = "info"


class ValidationStatus(str, Enum):
    """Overall validation status"""
    PASSED = "passed"
    FAILED = "failed"
    PARTIAL = "partial"


@dataclass
class ValidationCheck:
    """Single validation check result"""
    name: str
    passed: bool
    severity: ValidationSeverity
    message: str
    details: Optional[Dict[str, Any]] = None
    failed_rows: int = 0
    total_rows: int = 0


@dataclass
class ValidationResult:
    """Complete validation suite result"""
    status: ValidationStatus
    total_checks: int
    passed_checks: int
    failed_checks: int
    warning_count: int
    checks: List[ValidationCheck] = field(default_factory=list)
    started_at: datetime = field(default_factory=datetime.utcnow)
    completed_at: Optional[datetime] = None

    @property
    def success_rate(self) -> float:
        """Percentage of passed checks"""
        if self.total_checks == 0:
            return 100.0
        return (self.passed_checks / self.total_checks) * 100


def _as_list(columns: Union[str, Sequence[str]]) -> List[str]:
    return [columns] if isinstance(columns, str) else list(columns)


class DataValidator:
    """
    Data validator holding an ordered suite of checks.

    Example:
        validator = DataValidator(name="order_items")
        validator.add_not_null_check("order_id")
        validator.add_range_check("price", min_value=0)
        result = validator.validate(df)
    """

    def __init__(self, name: str = "dataframe", strict_mode: bool = False):
        self.name = name
        self.strict_mode = strict_mode  # Fail on any warning
        self._checks: List[Callable[[pl.DataFrame], ValidationCheck]] = []

    def reset(self) -> None:
        """Reset validator state"""
        self._checks = []

    def _missing(self, df: pl.DataFrame, name: str, columns: List[str], severity: ValidationSeverity) -> Optional[ValidationCheck]:
        missing = [c for c in columns if c not in df.columns]
        if not missing:
            return None
        return ValidationCheck(
            name=name,
            passed=False,
            severity=severity,
            message=f"Column(s) {missing} not found",
        )

    def add_not_null_check(
        self,
        column: str,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add check for null values in column"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            name = f"not_null_{column}"
            missing = self._missing(df, name, [column], severity)
            if missing:
                return missing

            null_count = df[column].null_count()
            total = len(df)
            passed = null_count == 0

            return ValidationCheck(
                name=name,
                passed=passed,
                severity=severity,
                message=f"Column '{column}' has {null_count} null values" if not passed else f"Column '{column}' has no null values",
                details={"null_count": null_count, "null_percentage": (null_count / total) * 100 if total > 0 else 0},
                failed_rows=null_count,
                total_rows=total,
            )

        self._checks.append(check)
        return self

    def add_unique_check(
        self,
        columns: Union[str, Sequence[str]],
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add check for uniqueness of a column or a composite key"""
        columns = _as_list(columns)
        label = "_".join(columns)

        def check(df: pl.DataFrame) -> ValidationCheck:
            name = f"unique_{label}"
            missing = self._missing(df, name, columns, severity)
            if missing:
                return missing

            total = len(df)
            unique_count = df.select(columns).unique().height
            duplicate_count = total - unique_count
            passed = duplicate_count == 0

            return ValidationCheck(
                name=name,
                passed=passed,
                severity=severity,
                message=f"Key {columns} has {duplicate_count} duplicate values" if not passed else f"Key {columns} values are unique",
                details={"unique_count": unique_count, "duplicate_count": duplicate_count},
                failed_rows=duplicate_count,
                total_rows=total,
            )

        self._checks.append(check)
        return self

    def add_range_check(
        self,
        column: str,
        min_value: Optional[float] = None,
        max_value: Optional[float] = None,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add check for values within specified range"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            name = f"range_{column}"
            missing = self._missing(df, name, [column], severity)
            if missing:
                return missing

            conditions = []
            if min_value is not None:
                conditions.append(pl.col(column) < min_value)
            if max_value is not None:
                conditions.append(pl.col(column) > max_value)

            if not conditions:
                return ValidationCheck(
                    name=name,
                    passed=True,
                    severity=severity,
                    message="No range specified",
                )

            # Combine conditions with OR
            combined = conditions[0]
            for cond in conditions[1:]:
                combined = combined | cond

            out_of_range = df.filter(combined).height
            total = len(df)
            passed = out_of_range == 0

            return ValidationCheck(
                name=name,
                passed=passed,
                severity=severity,
                message=f"Column '{column}' has {out_of_range} values outside range [{min_value}, {max_value}]" if not passed else "All values in range",
                details={"min": min_value, "max": max_value, "out_of_range_count": out_of_range},
                failed_rows=out_of_range,
                total_rows=total,
            )

        self._checks.append(check)
        return self

    def add_enum_check(
        self,
        column: str,
        allowed_values: List[Any],
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add check for values in allowed set"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            name = f"enum_{column}"
            missing = self._missing(df, name, [column], severity)
            if missing:
                return missing

            invalid = df.filter(
                ~pl.col(column).is_in(allowed_values) & pl.col(column).is_not_null()
            ).height
            total = len(df)
            passed = invalid == 0

            return ValidationCheck(
                name=name,
                passed=passed,
                severity=severity,
                message=f"Column '{column}' has {invalid} invalid values" if not passed else "All values are valid",
                details={"allowed_values": allowed_values, "invalid_count": invalid},
                failed_rows=invalid,
                total_rows=total,
            )

        self._checks.append(check)
        return self

    def add_custom_check(
        self,
        name: str,
        check_func: Callable[[pl.DataFrame], bool],
        message_on_fail: str,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add custom validation check"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            passed = bool(check_func(df))
            return ValidationCheck(
                name=name,
                passed=passed,
                severity=severity,
                message="Check passed" if passed else message_on_fail,
                total_rows=len(df),
            )

        self._checks.append(check)
        return self

    def add_referential_integrity_check(
        self,
        column: str,
        reference_df: pl.DataFrame,
        reference_column: str,
        severity: ValidationSeverity = ValidationSeverity.WARNING,
    ) -> "DataValidator":
        """Add check that every non-null value exists in the reference column"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            name = f"ref_integrity_{column}"
            missing = self._missing(df, name, [column], severity)
            if missing:
                return missing

            reference = reference_df.select(pl.col(reference_column).alias(column)).unique()
            orphans = (
                df.filter(pl.col(column).is_not_null())
                .join(reference, on=column, how="anti")
                .height
            )
            total = len(df)
            passed = orphans == 0

            return ValidationCheck(
                name=name,
                passed=passed,
                severity=severity,
                message=f"Column '{column}' has {orphans} orphan records" if not passed else "Referential integrity maintained",
                details={"orphan_count": orphans},
                failed_rows=orphans,
                total_rows=total,
            )

        self._checks.append(check)
        return self

    def validate(self, df: pl.DataFrame) -> ValidationResult:
        """
        Run all validation checks on DataFrame.

        Args:
            df: DataFrame to validate

        Returns:
            ValidationResult with all check results
        """
        started_at = datetime.utcnow()
        results = []

        logger.debug(f"Running {len(self._checks)} validation checks on {len(df)} rows", table=self.name)

        for check_func in self._checks:
            result = check_func(df)
            results.append(result)

            if not result.passed:
                logger.warning(
                    f"Validation failed: {result.name}",
                    table=self.name,
                    message=result.message,
                    severity=result.severity.value,
                )

        completed_at = datetime.utcnow()

        passed_checks = sum(1 for r in results if r.passed)
        failed_checks = sum(1 for r in results if not r.passed and r.severity == ValidationSeverity.ERROR)
        warning_count = sum(1 for r in results if not r.passed and r.severity == ValidationSeverity.WARNING)

        if failed_checks > 0:
            status = ValidationStatus.FAILED
        elif warning_count > 0 and self.strict_mode:
            status = ValidationStatus.FAILED
        elif warning_count > 0:
            status = ValidationStatus.PARTIAL
        else:
            status = ValidationStatus.PASSED

        validation_result = ValidationResult(
            status=status,
            total_checks=len(results),
            passed_checks=passed_checks,
            failed_checks=failed_checks,
            warning_count=warning_count,
            checks=results,
            started_at=started_at,
            completed_at=completed_at,
        )

        logger.info(
            f"Validation complete: {status.value}",
            table=self.name,
            passed=passed_checks,
            failed=failed_checks,
            warnings=warning_count,
        )

        return validation_result


def create_table_validator(entity: Entity, dataset: OlistDataset) -> DataValidator:
    """
    Validator derived from the declared schema of an entity: key columns
    must be present and unique, and foreign keys must resolve.
    """
    spec = get_table_spec(entity)
    validator = DataValidator(name=spec.entity.value)

    for column in spec.primary_key:
        validator.add_not_null_check(column)
    if spec.primary_key:
        validator.add_unique_check(spec.primary_key)

    for fk in spec.foreign_keys:
        validator.add_referential_integrity_check(
            fk.column,
            dataset.table(fk.references),
            fk.referenced_column,
        )

    return validator


def create_orders_validator(dataset: OlistDataset) -> DataValidator:
    """Create pre-configured validator for orders data"""
    return (
        create_table_validator(Entity.ORDERS, dataset)
        .add_not_null_check("order_purchase_timestamp", severity=ValidationSeverity.WARNING)
        .add_enum_check("order_status", [s.value for s in OrderStatus], severity=ValidationSeverity.WARNING)
    )


def create_order_items_validator(dataset: OlistDataset) -> DataValidator:
    """Create pre-configured validator for order items data"""
    return (
        create_table_validator(Entity.ORDER_ITEMS, dataset)
        .add_range_check("price", min_value=0, severity=ValidationSeverity.WARNING)
        .add_range_check("freight_value", min_value=0, severity=ValidationSeverity.WARNING)
    )


def create_payments_validator(dataset: OlistDataset) -> DataValidator:
    """Create pre-configured validator for payments data"""
    return (
        create_table_validator(Entity.PAYMENTS, dataset)
        .add_range_check("payment_value", min_value=0, severity=ValidationSeverity.WARNING)
        .add_range_check("payment_installments", min_value=0, severity=ValidationSeverity.WARNING)
    )


def create_reviews_validator(dataset: OlistDataset) -> DataValidator:
    """Create pre-configured validator for reviews data"""
    return (
        create_table_validator(Entity.REVIEWS, dataset)
        .add_range_check("review_score", min_value=1, max_value=5, severity=ValidationSeverity.WARNING)
    )


VALIDATOR_FACTORIES: Dict[Entity, Callable[[OlistDataset], DataValidator]] = {
    Entity.ORDERS: create_orders_validator,
    Entity.ORDER_ITEMS: create_order_items_validator,
    Entity.PAYMENTS: create_payments_validator,
    Entity.REVIEWS: create_reviews_validator,
}


def validate_dataset(dataset: OlistDataset, strict_mode: bool = False) -> Dict[Entity, ValidationResult]:
    """
    Run the quality suite on every entity of the dataset.

    Args:
        dataset: Loaded dataset
        strict_mode: Treat warnings as failures

    Returns:
        ValidationResult per entity
    """
    results = {}
    for entity, df in dataset.items():
        factory = VALIDATOR_FACTORIES.get(entity)
        validator = factory(dataset) if factory else create_table_validator(entity, dataset)
        validator.strict_mode = strict_mode
        results[entity] = validator.validate(df)
    return results
