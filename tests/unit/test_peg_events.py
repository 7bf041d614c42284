"""
Unit tests for the peg-event extractor.

Covers the deviation ladder, significance filtering, (year, day-of-month // 7)
bucketing and the statistics consumed by the peg stability scorer.
"""

from datetime import date

import numpy as np
import pytest

from stablecoin_risk.core.peg_events import (
    describe_deviation,
    deviation_pct,
    extract_peg_events,
    samples_from_market_chart,
    significant_mask,
    summarize_peg_events,
)


class TestDescribeDeviation:
    """Tests for the event classification ladder."""

    @pytest.mark.unit
    @pytest.mark.parametrize("dev_pct,expected", [
        (12.0, "Major depeg event"),
        (5.0, "Major depeg event"),
        (4.99, "Significant price deviation"),
        (2.0, "Significant price deviation"),
        (1.5, "Minor price deviation"),
        (1.0, "Minor price deviation"),
        (0.5, "Normal market fluctuation"),
        (0.05, "At peg"),
        (0.0, "At peg"),
    ])
    def test_ladder(self, dev_pct, expected):
        assert describe_deviation(dev_pct) == expected

    @pytest.mark.unit
    def test_deviation_is_absolute_percent(self):
        assert deviation_pct(0.97) == pytest.approx(3.0)
        assert deviation_pct(1.03) == pytest.approx(3.0)


class TestSignificantMask:
    """Tests for the pre-dedup significance filter."""

    @pytest.mark.unit
    def test_edges_always_kept(self):
        prices = np.array([1.0, 1.0005, 0.9995, 1.0003, 0.9997, 1.0004, 0.9996, 1.0002, 0.9998, 1.0001])
        mask = significant_mask(prices)
        assert mask[:3].all()
        assert mask[-3:].all()

    @pytest.mark.unit
    def test_large_deviation_kept(self):
        prices = np.array([1.0] * 3 + [1.0001, 1.0002, 0.97, 1.0002, 1.0001] + [1.0] * 3)
        mask = significant_mask(prices)
        assert mask[5]

    @pytest.mark.unit
    def test_interior_sample_that_is_not_an_extremum_is_dropped(self):
        # index 5 sits strictly between the window min and max
        prices = np.array([1.0, 1.0, 1.0, 0.9990, 1.0010, 1.0001, 1.0009, 0.9991, 1.0, 1.0, 1.0])
        mask = significant_mask(prices)
        assert not mask[5]

    @pytest.mark.unit
    def test_empty(self):
        assert significant_mask(np.array([])).size == 0


class TestExtractPegEvents:
    """Tests for the full extraction pipeline."""

    @pytest.mark.unit
    def test_empty_series(self):
        assert extract_peg_events([]) == []

    @pytest.mark.unit
    @pytest.mark.smoke
    def test_depeg_spike_reported(self, price_series_factory):
        prices = [1.0] * 21
        prices[9] = 0.93  # 2024-01-10
        events = extract_peg_events(price_series_factory(prices))

        spike = [e for e in events if e.date == date(2024, 1, 10)]
        assert len(spike) == 1
        assert spike[0].description == "Major depeg event"

    @pytest.mark.unit
    def test_flat_series_keeps_earliest_sample_per_bucket(self, price_series_factory):
        events = extract_peg_events(price_series_factory([1.0] * 30))
        assert [e.date.day for e in events] == [1, 7, 14, 21, 28]
        assert all(e.description == "At peg" for e in events)

    @pytest.mark.unit
    def test_buckets_restart_each_month(self, price_series_factory):
        """Bucket key is (year, day-of-month // 7): February shares January's buckets."""
        events = extract_peg_events(price_series_factory([1.0] * 60))
        assert len(events) == 5
        assert all(e.date.month == 1 for e in events)

    @pytest.mark.unit
    def test_bucket_keeps_largest_deviation(self, price_series_factory):
        prices = [1.0] * 14
        prices[7] = 1.012  # 2024-01-08, bucket 1
        prices[10] = 0.975  # 2024-01-11, bucket 1, larger deviation
        events = extract_peg_events(price_series_factory(prices))

        bucket_one = [e for e in events if e.date.day // 7 == 1]
        assert len(bucket_one) == 1
        assert bucket_one[0].date == date(2024, 1, 11)
        assert bucket_one[0].description == "Significant price deviation"

    @pytest.mark.unit
    def test_random_series_invariants(self, price_series_factory):
        rng = np.random.default_rng(7)
        prices = list(1.0 + rng.normal(0, 0.01, 400))
        events = extract_peg_events(price_series_factory(prices, start=date(2023, 1, 1)))

        keys = [(e.date.year, e.date.day // 7) for e in events]
        assert len(keys) == len(set(keys)), "Two events share a (year, week bucket)"
        assert [e.date for e in events] == sorted(e.date for e in events)
        for event in events:
            assert event.description == describe_deviation(deviation_pct(event.price))


class TestSummarizePegEvents:
    """Tests for the scorer statistics."""

    @pytest.mark.unit
    def test_statistics(self, peg_event_factory):
        stats = summarize_peg_events(peg_event_factory([1.0, 0.94, 1.12]))
        assert stats.max_deviation_pct == pytest.approx(12.0)
        assert stats.avg_deviation_pct == pytest.approx(6.0)
        assert stats.depeg_count == 2
        assert stats.worst_event.price == 1.12

    @pytest.mark.unit
    def test_empty_is_zero_deviation(self):
        stats = summarize_peg_events([])
        assert stats.max_deviation_pct == 0.0
        assert stats.depeg_count == 0
        assert stats.worst_event is None


class TestSamplesFromMarketChart:
    """Tests for provider payload conversion."""

    @pytest.mark.unit
    def test_last_quote_per_day_wins(self):
        samples = samples_from_market_chart([
            [1704067200000, 1.0],     # 2024-01-01 00:00 UTC
            [1704110400000, 0.99],    # 2024-01-01 12:00 UTC
            [1704153600000, 1.001],   # 2024-01-02
            [1704240000000, None],    # missing quote
        ])
        assert [(s.date, s.price) for s in samples] == [
            (date(2024, 1, 1), 0.99),
            (date(2024, 1, 2), 1.001),
        ]
