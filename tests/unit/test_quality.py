"""
Unit Tests - Data Quality
"""
import polars as pl

from olist_analytics.data.schema import Entity
from olist_analytics.quality.validators import (
    DataValidator,
    ValidationSeverity,
    ValidationStatus,
    create_orders_validator,
    create_table_validator,
    validate_dataset,
)


class TestDataValidator:
    """Tests for DataValidator"""

    def test_not_null_check_passes(self):
        """Test not null check with valid data"""
        df = pl.DataFrame({"id": [1, 2, 3], "name": ["a", "b", "c"]})

        validator = DataValidator()
        validator.add_not_null_check("id")

        result = validator.validate(df)

        assert result.status == ValidationStatus.PASSED
        assert result.passed_checks == 1

    def test_not_null_check_fails(self):
        """Test not null check with null values"""
        df = pl.DataFrame({"id": [1, None, 3], "name": ["a", "b", "c"]})

        validator = DataValidator()
        validator.add_not_null_check("id")

        result = validator.validate(df)

        assert result.status == ValidationStatus.FAILED
        assert result.failed_checks == 1

    def test_unique_check_fails(self):
        """Test unique check with duplicates"""
        df = pl.DataFrame({"id": [1, 2, 1]})

        validator = DataValidator()
        validator.add_unique_check("id")

        result = validator.validate(df)

        assert result.status == ValidationStatus.FAILED

    def test_composite_unique_check(self):
        """Test a composite key is unique when the pairs differ"""
        df = pl.DataFrame({"order_id": ["o1", "o1", "o2"], "order_item_id": [1, 2, 1]})

        validator = DataValidator()
        validator.add_unique_check(["order_id", "order_item_id"])

        result = validator.validate(df)

        assert result.status == ValidationStatus.PASSED
        assert result.checks[0].name == "unique_order_id_order_item_id"

    def test_range_check(self):
        """Test range check"""
        df = pl.DataFrame({"review_score": [1, 5, 0, 6]})

        validator = DataValidator()
        validator.add_range_check("review_score", min_value=1, max_value=5)

        result = validator.validate(df)

        assert result.status == ValidationStatus.FAILED
        # Two values outside range: 0 and 6
        assert result.checks[0].failed_rows == 2

    def test_enum_check_ignores_nulls(self):
        """Test enum check with a null and an invalid value"""
        df = pl.DataFrame({"status": ["delivered", None, "lost"]})

        validator = DataValidator()
        validator.add_enum_check("status", ["delivered", "shipped"])

        result = validator.validate(df)

        assert result.status == ValidationStatus.FAILED
        assert result.checks[0].failed_rows == 1

    def test_custom_check(self):
        """Test custom validation check"""
        df = pl.DataFrame({"price": [100.0, 200.0, 300.0]})

        validator = DataValidator()
        validator.add_custom_check(
            name="price_sum",
            check_func=lambda df: df["price"].sum() < 1000,
            message_on_fail="Sum exceeds 1000",
        )

        result = validator.validate(df)

        assert result.status == ValidationStatus.PASSED

    def test_missing_column(self):
        """Test a check on an absent column fails"""
        df = pl.DataFrame({"id": [1]})

        validator = DataValidator()
        validator.add_not_null_check("order_id")

        result = validator.validate(df)

        assert result.status == ValidationStatus.FAILED
        assert "not found" in result.checks[0].message

    def test_referential_integrity(self):
        """Test orphan rows are counted as a warning"""
        orders = pl.DataFrame({"order_id": ["o1", "o2"]})
        items = pl.DataFrame({"order_id": ["o1", "o3", None]})

        validator = DataValidator()
        validator.add_referential_integrity_check("order_id", orders, "order_id")

        result = validator.validate(items)

        assert result.status == ValidationStatus.PARTIAL
        assert result.warning_count == 1
        assert result.checks[0].failed_rows == 1

    def test_strict_mode_fails_on_warning(self):
        """Test warnings fail the result in strict mode"""
        df = pl.DataFrame({"price": [-1.0]})

        validator = DataValidator(strict_mode=True)
        validator.add_range_check("price", min_value=0, severity=ValidationSeverity.WARNING)

        result = validator.validate(df)

        assert result.status == ValidationStatus.FAILED

    def test_success_rate(self):
        """Test success rate over mixed outcomes"""
        df = pl.DataFrame({"id": [1, 1]})

        validator = DataValidator()
        validator.add_not_null_check("id").add_unique_check("id")

        result = validator.validate(df)

        assert result.success_rate == 50.0


class TestDatasetValidation:
    """Tests for the schema-derived validators"""

    def test_sample_dataset_passes(self, sample_dataset):
        """Test a consistent dataset passes every check"""
        results = validate_dataset(sample_dataset)

        assert set(results) == set(Entity)
        assert all(r.status == ValidationStatus.PASSED for r in results.values())

    def test_orphan_items_are_warnings(self, builder):
        """Test an item whose order is missing is reported, not fatal"""
        dataset = (
            builder.customer("c1")
            .product("p1", "telefonia")
            .seller("s1")
            .order("o1", "c1")
            .item("o1", 10.0)
            .item("ghost", 10.0)
            .build()
        )

        results = validate_dataset(dataset)
        items = results[Entity.ORDER_ITEMS]

        assert items.status == ValidationStatus.PARTIAL
        failed = [c.name for c in items.checks if not c.passed]
        assert failed == ["ref_integrity_order_id"]

    def test_duplicate_order_id_fails(self, builder):
        """Test a repeated primary key is an error"""
        dataset = (
            builder.customer("c1")
            .order("o1", "c1")
            .order("o1", "c1")
            .build()
        )

        validator = create_orders_validator(dataset)
        result = validator.validate(dataset.orders)

        assert result.status == ValidationStatus.FAILED

    def test_review_score_out_of_range(self, builder):
        """Test a score outside 1-5 is flagged"""
        dataset = (
            builder.customer("c1")
            .order("o1", "c1")
            .review("r1", "o1", 7)
            .build()
        )

        results = validate_dataset(dataset)

        assert results[Entity.REVIEWS].status == ValidationStatus.PARTIAL

    def test_table_validator_checks_keys(self, sample_dataset):
        """Test the generic validator covers key and foreign-key columns"""
        validator = create_table_validator(Entity.PAYMENTS, sample_dataset)
        result = validator.validate(sample_dataset.payments)

        names = [c.name for c in result.checks]
        assert names == [
            "not_null_order_id",
            "not_null_payment_sequential",
            "unique_order_id_payment_sequential",
            "ref_integrity_order_id",
        ]
