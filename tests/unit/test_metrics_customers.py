"""
Unit tests for the customer metrics
"""
import polars as pl
import pytest

from olist_analytics.data.dataset import OlistDataset
from olist_analytics.metrics.customers import (
    SpendSegment,
    classify_spend,
    customer_spend_segments,
    repeat_customer_rate,
    top_cities_by_revenue,
    top_states_by_revenue,
)


class TestGeographicRevenue:
    """Tests for the state and city rankings"""

    def test_top_states(self, sample_dataset):
        """Test states ranked by revenue with people counted once"""
        result = top_states_by_revenue(sample_dataset)

        assert result.to_dicts() == [
            {"customer_state": "SP", "unique_customers": 2, "total_orders": 3, "revenue": 570.0},
            {"customer_state": "RJ", "unique_customers": 1, "total_orders": 1, "revenue": 80.0},
        ]

    def test_canceled_only_state_is_absent(self, sample_dataset):
        """Test a state whose only order was canceled does not appear"""
        result = top_states_by_revenue(sample_dataset)

        assert "MG" not in result["customer_state"].to_list()

    def test_top_cities(self, sample_dataset):
        """Test cities are keyed by city and state"""
        result = top_cities_by_revenue(sample_dataset)

        assert result.select(["customer_city", "customer_state", "revenue"]).rows() == [
            ("sao paulo", "SP", 450.0),
            ("campinas", "SP", 120.0),
            ("rio de janeiro", "RJ", 80.0),
        ]

    def test_same_city_name_in_two_states(self, builder):
        """Test homonymous cities in different states stay separate"""
        dataset = (
            builder.customer("c1", city="santa cruz", state="RS")
            .customer("c2", city="santa cruz", state="RN")
            .order("o1", "c1").item("o1", 10.0)
            .order("o2", "c2").item("o2", 20.0)
            .build()
        )

        result = top_cities_by_revenue(dataset)

        assert result.height == 2
        assert result["customer_state"].to_list() == ["RN", "RS"]

    def test_limit(self, sample_dataset):
        """Test the ranking is cut at the limit"""
        assert top_states_by_revenue(sample_dataset, limit=1).height == 1


class TestRepeatCustomerRate:
    """Tests for repeat_customer_rate"""

    def test_rate(self, sample_dataset):
        """Test one of three people ordered twice"""
        row = repeat_customer_rate(sample_dataset).row(0, named=True)

        assert row == {"total_unique_customers": 3, "repeat_customers": 1, "repeat_pct": 33.33}

    def test_single_person_two_orders(self, builder):
        """Test two delivered orders of one person give a 100% rate"""
        dataset = (
            builder.customer("c1", unique_id="u1")
            .customer("c2", unique_id="u1")
            .order("o1", "c1").item("o1", 10.0)
            .order("o2", "c2").item("o2", 20.0)
            .build()
        )

        row = repeat_customer_rate(dataset).row(0, named=True)

        assert row == {"total_unique_customers": 1, "repeat_customers": 1, "repeat_pct": 100.0}

    def test_repeat_across_customer_ids(self, builder):
        """Test two customer ids of one person make a repeat customer"""
        dataset = (
            builder.customer("c1", unique_id="u1")
            .customer("c2", unique_id="u1")
            .customer("c3", unique_id="u2")
            .order("o1", "c1").order("o2", "c2").order("o3", "c3")
            .build()
        )

        row = repeat_customer_rate(dataset).row(0, named=True)

        assert row == {"total_unique_customers": 2, "repeat_customers": 1, "repeat_pct": 50.0}

    def test_undelivered_orders_do_not_count(self, builder):
        """Test a second, canceled order does not make a repeat customer"""
        dataset = (
            builder.customer("c1", unique_id="u1")
            .customer("c2", unique_id="u1")
            .order("o1", "c1")
            .order("o2", "c2", status="canceled")
            .build()
        )

        row = repeat_customer_rate(dataset).row(0, named=True)

        assert row["repeat_customers"] == 0
        assert row["repeat_pct"] == 0.0


class TestSpendSegments:
    """Tests for the spend tiers"""

    def test_boundaries_are_inclusive(self):
        """Test 500 is High, 200 is Medium and 199.99 is Low"""
        df = pl.DataFrame({"total": [500.0, 200.0, 199.99, 1000.0, 0.0]})

        result = df.select(classify_spend(pl.col("total"), 500.0, 200.0).alias("segment"))

        assert result["segment"].to_list() == [
            SpendSegment.HIGH,
            SpendSegment.MEDIUM,
            SpendSegment.LOW,
            SpendSegment.HIGH,
            SpendSegment.LOW,
        ]

    def test_segments_from_orders(self, builder):
        """Test one customer lands in each tier"""
        dataset = (
            builder.customer("c1", unique_id="u1")
            .customer("c2", unique_id="u2")
            .customer("c3", unique_id="u3")
            .order("o1", "c1").item("o1", 500.00)
            .order("o2", "c2").item("o2", 200.00)
            .order("o3", "c3").item("o3", 199.99)
            .build()
        )

        result = customer_spend_segments(dataset)

        assert result.rows() == [
            ("High", 1, 500.0),
            ("Medium", 1, 200.0),
            ("Low", 1, 199.99),
        ]

    def test_multi_item_boundary_totals(self, builder):
        """Test item prices adding up to exactly 500.00 and 200.00 hit the upper tier"""
        dataset = (
            builder.customer("c1", unique_id="u1")
            .customer("c2", unique_id="u2")
            .order("o1", "c1")
            .item("o1", 252.48).item("o1", 137.82).item("o1", 109.70)
            .order("o2", "c2")
            .item("o2", 100.10).item("o2", 66.70).item("o2", 33.20)
            .build()
        )

        result = customer_spend_segments(dataset)

        assert result["segment"].to_list() == [SpendSegment.HIGH, SpendSegment.MEDIUM]
        assert result["avg_spend"].to_list() == [500.0, 200.0]

    def test_spend_sums_across_orders(self, sample_dataset):
        """Test a person's spend covers all their delivered orders"""
        result = customer_spend_segments(sample_dataset)

        assert result.rows() == [("Medium", 1, 450.0), ("Low", 2, 100.0)]

    def test_custom_thresholds(self, sample_dataset):
        """Test tiers follow the thresholds passed in"""
        result = customer_spend_segments(sample_dataset, high_threshold=400.0, medium_threshold=100.0)

        assert result.rows() == [("High", 1, 450.0), ("Medium", 1, 120.0), ("Low", 1, 80.0)]


@pytest.mark.parametrize(
    "metric",
    [top_states_by_revenue, top_cities_by_revenue, repeat_customer_rate, customer_spend_segments],
)
def test_empty_dataset_gives_empty_result(metric):
    """Test every customer metric returns zero rows on an empty dataset"""
    result = metric(OlistDataset.from_frames())

    assert result.is_empty()
    assert len(result.columns) > 0
