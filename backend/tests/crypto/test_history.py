"""Tests for PriceHistory and ChartRing."""

import pytest

from app.crypto.history import ONE_HOUR_MS, ChartRing, PriceHistory
from app.crypto.models import ChartPoint, PriceSample

NOW = 10 * ONE_HOUR_MS


class TestPriceHistory:
    """Unit tests for the time-pruned sample window."""

    def test_average(self):
        history = PriceHistory()
        for price in (100.0, 102.0, 98.0):
            history.append(PriceSample(price=price, timestamp_ms=NOW))
        assert history.average() == 100.0

    def test_average_empty(self):
        assert PriceHistory().average() is None

    def test_prune_drops_old_samples(self):
        history = PriceHistory()
        history.append(PriceSample(price=1.0, timestamp_ms=NOW - 2 * ONE_HOUR_MS))
        history.append(PriceSample(price=2.0, timestamp_ms=NOW - 1000))
        history.prune(NOW)
        assert [s.price for s in history.samples()] == [2.0]

    def test_prune_boundary_is_exclusive(self):
        """A sample exactly one hour old is dropped."""
        history = PriceHistory()
        history.append(PriceSample(price=1.0, timestamp_ms=NOW - ONE_HOUR_MS))
        history.append(PriceSample(price=2.0, timestamp_ms=NOW - ONE_HOUR_MS + 1))
        history.prune(NOW)
        assert [s.price for s in history.samples()] == [2.0]

    def test_prune_handles_out_of_order(self):
        history = PriceHistory()
        history.append(PriceSample(price=2.0, timestamp_ms=NOW - 1000))
        history.append(PriceSample(price=1.0, timestamp_ms=NOW - 2 * ONE_HOUR_MS))
        history.prune(NOW)
        assert len(history) == 1

    def test_latest_at_or_before(self):
        history = PriceHistory(retention_ms=10 * ONE_HOUR_MS)
        history.append(PriceSample(price=1.0, timestamp_ms=100))
        history.append(PriceSample(price=2.0, timestamp_ms=200))
        history.append(PriceSample(price=3.0, timestamp_ms=300))
        assert history.latest_at_or_before(250).price == 2.0
        assert history.latest_at_or_before(200).price == 2.0
        assert history.latest_at_or_before(99) is None


class TestChartRing:
    """Unit tests for the fixed-capacity chart ring."""

    def test_capacity_bound(self):
        ring = ChartRing(capacity=30)
        for i in range(45):
            ring.append(ChartPoint(time_ms=i, price=float(i)))
        points = ring.points()
        assert len(points) == 30
        assert points[0].time_ms == 15
        assert points[-1].time_ms == 44

    def test_under_capacity(self):
        ring = ChartRing(capacity=30)
        ring.append(ChartPoint(time_ms=1, price=1.0))
        assert len(ring) == 1
        assert ring.capacity == 30

    def test_out_of_order_point_clamped(self):
        """An older point keeps its price but not its earlier timestamp."""
        ring = ChartRing()
        ring.append(ChartPoint(time_ms=200, price=1.0))
        ring.append(ChartPoint(time_ms=100, price=2.0))
        assert ring.points()[-1] == ChartPoint(time_ms=200, price=2.0)

    def test_invalid_capacity(self):
        with pytest.raises(ValueError):
            ChartRing(capacity=0)
