"""
Unit Tests - Dataset Loading
"""
from datetime import datetime

import polars as pl
import pytest

from olist_analytics.data.generators import OlistDataGenerator
from olist_analytics.data.schema import Entity, TABLES
from olist_analytics.ingestion import (
    DatasetLoader,
    DatasetLoadError,
    FileFormat,
    LoadStatus,
    load_dataset,
)


@pytest.fixture
def csv_dir(tmp_path, sample_dataset):
    """The sample dataset written as an Olist CSV export"""
    OlistDataGenerator().write_csv(sample_dataset, tmp_path)
    return tmp_path


def _rewrite(directory, entity, transform):
    path = directory / TABLES[entity].file_name
    df = pl.read_csv(path, infer_schema_length=0)
    transform(df).write_csv(path)


class TestDatasetLoader:
    """Tests for DatasetLoader"""

    def test_load_dataset(self, csv_dir, sample_dataset):
        """Test every table loads with its declared types"""
        dataset = load_dataset(csv_dir)

        assert dataset.row_counts == sample_dataset.row_counts
        for entity, df in dataset.items():
            assert df.schema == TABLES[entity].schema

    def test_values_survive_the_file(self, csv_dir):
        """Test timestamps, empty fields and numbers are parsed"""
        dataset = DatasetLoader().load_dataset(csv_dir)

        o1 = dataset.orders.filter(pl.col("order_id") == "o1").row(0, named=True)
        assert o1["order_purchase_timestamp"] == datetime(2018, 1, 7, 10, 0, 0)
        assert o1["order_delivered_carrier_date"] is None

        p3 = dataset.products.filter(pl.col("product_id") == "p3").row(0, named=True)
        assert p3["product_category_name"] is None

        assert dataset.order_items["price"].sum() == pytest.approx(1649.0)

    def test_zip_prefix_keeps_leading_zero(self, csv_dir):
        """Test zip code prefixes stay text"""
        dataset = load_dataset(csv_dir)

        assert dataset.customers["customer_zip_code_prefix"][0] == "01001"

    def test_load_results(self, csv_dir):
        """Test a result is recorded for every table"""
        loader = DatasetLoader()
        loader.load_dataset(csv_dir)

        statuses = {r.entity: r.status for r in loader.results}
        assert statuses[Entity.ORDERS] == LoadStatus.COMPLETED
        assert statuses[Entity.GEOLOCATION] == LoadStatus.SKIPPED
        completed = [r for r in loader.results if r.status == LoadStatus.COMPLETED]
        assert all(r.file_hash for r in completed)

    def test_missing_optional_table(self, csv_dir):
        """Test a missing geolocation file gives an empty table"""
        dataset = load_dataset(csv_dir)

        assert dataset.geolocation.is_empty()
        assert dataset.geolocation.columns == list(TABLES[Entity.GEOLOCATION].columns)

    def test_missing_required_file(self, csv_dir):
        """Test a missing required file aborts the load"""
        (csv_dir / TABLES[Entity.CUSTOMERS].file_name).unlink()

        with pytest.raises(DatasetLoadError) as exc_info:
            load_dataset(csv_dir)

        assert "customers" in str(exc_info.value)

    def test_every_failure_is_reported(self, csv_dir):
        """Test all broken tables are listed in one error"""
        (csv_dir / TABLES[Entity.CUSTOMERS].file_name).unlink()
        (csv_dir / TABLES[Entity.SELLERS].file_name).unlink()

        with pytest.raises(DatasetLoadError) as exc_info:
            load_dataset(csv_dir)

        failed = [r.entity for r in exc_info.value.results if r.status == LoadStatus.FAILED]
        assert failed == [Entity.CUSTOMERS, Entity.SELLERS]
        assert "2 table(s)" in str(exc_info.value)

    def test_unparseable_number(self, csv_dir):
        """Test a non-numeric price aborts the load"""
        _rewrite(csv_dir, Entity.ORDER_ITEMS, lambda df: df.with_columns(pl.lit("abc").alias("price")))

        with pytest.raises(DatasetLoadError, match="order_items"):
            load_dataset(csv_dir)

    def test_unparseable_timestamp(self, csv_dir):
        """Test a timestamp in another format aborts the load"""
        _rewrite(
            csv_dir,
            Entity.ORDERS,
            lambda df: df.with_columns(pl.lit("07/01/2018 10:00").alias("order_purchase_timestamp")),
        )

        with pytest.raises(DatasetLoadError, match="orders"):
            load_dataset(csv_dir)

    def test_missing_column(self, csv_dir):
        """Test a file without a declared column aborts the load"""
        _rewrite(csv_dir, Entity.PAYMENTS, lambda df: df.drop("payment_value"))

        with pytest.raises(DatasetLoadError, match="Missing column: payment_value"):
            load_dataset(csv_dir)

    def test_extra_columns_are_dropped(self, csv_dir):
        """Test undeclared columns are not carried into the table"""
        _rewrite(csv_dir, Entity.SELLERS, lambda df: df.with_columns(pl.lit("x").alias("extra")))

        dataset = load_dataset(csv_dir)

        assert "extra" not in dataset.sellers.columns

    def test_header_only_file(self, csv_dir):
        """Test a file with no rows loads as an empty table"""
        _rewrite(csv_dir, Entity.REVIEWS, lambda df: df.head(0))

        dataset = load_dataset(csv_dir)

        assert dataset.reviews.is_empty()

    def test_load_single_table(self, csv_dir):
        """Test loading one entity"""
        df = DatasetLoader().load_table(csv_dir, Entity.PAYMENTS)

        assert df.height == 6
        assert df["payment_value"].dtype == pl.Float64

    def test_parquet(self, tmp_path, sample_dataset):
        """Test the Parquet format reads the same tables"""
        for entity, df in sample_dataset.items():
            df.write_parquet(tmp_path / TABLES[entity].file_name.replace(".csv", ".parquet"))

        dataset = load_dataset(tmp_path, file_format=FileFormat.PARQUET)

        assert dataset.row_counts == sample_dataset.row_counts
