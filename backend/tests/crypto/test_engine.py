"""Tests for AggregationEngine."""

import pytest

from app.crypto.engine import AggregationEngine
from app.crypto.history import ONE_DAY_MS, ONE_HOUR_MS

ETH_USDC = "BINANCE:ETHUSDC"
ETH_BTC = "BINANCE:ETHBTC"


class TestAggregationEngine:
    """Unit tests for tick ingestion and summary derivation."""

    def test_initial_summaries_are_zero(self, engine):
        """Every pair has a zero-valued summary before its first tick."""
        summaries = engine.get_all()
        assert [s.id for s in summaries] == ["eth-usdc", "eth-usdt", "eth-btc"]
        for summary in summaries:
            assert summary.current_price == 0
            assert summary.hourly_average == 0
            assert summary.change_24h_percent == 0
            assert summary.chart_history == ()

    def test_single_tick_fallback_average(self, engine, clock):
        summary = engine.ingest_tick(ETH_USDC, 50.0, clock.now_ms)
        assert summary is not None
        assert summary.current_price == 50.0
        assert summary.hourly_average == 50.0

    def test_hourly_average(self, engine, clock):
        for i, price in enumerate((100.0, 102.0, 98.0)):
            engine.ingest_tick(ETH_USDC, price, clock.now_ms - 3000 + i * 1000)
        assert engine.get("eth-usdc").hourly_average == 100.0

    def test_stale_tick_pruned_falls_back_to_price(self, engine, clock):
        """A tick older than the retention window is pruned immediately."""
        summary = engine.ingest_tick(ETH_USDC, 75.0, clock.now_ms - 2 * ONE_HOUR_MS)
        assert summary.hourly_average == 75.0

    def test_old_samples_leave_average(self, engine, clock):
        engine.ingest_tick(ETH_USDC, 100.0, clock.now_ms)
        clock.advance(ONE_HOUR_MS + 1)
        summary = engine.ingest_tick(ETH_USDC, 200.0, clock.now_ms)
        assert summary.hourly_average == 200.0

    def test_change_is_zero_without_day_old_sample(self, engine, clock):
        engine.ingest_tick(ETH_USDC, 100.0, clock.now_ms - 1000)
        summary = engine.ingest_tick(ETH_USDC, 500.0, clock.now_ms)
        assert summary.change_24h_percent == 0

    def test_change_with_widened_retention(self, registry, clock):
        """With a window over 24h, the latest sample at/before the boundary is the base."""
        engine = AggregationEngine(registry, retention_ms=2 * ONE_DAY_MS, clock=clock)
        engine.ingest_tick(ETH_USDC, 100.0, clock.now_ms - ONE_DAY_MS - 60_000)
        engine.ingest_tick(ETH_USDC, 200.0, clock.now_ms - ONE_DAY_MS - 1000)
        engine.ingest_tick(ETH_USDC, 150.0, clock.now_ms - ONE_HOUR_MS)
        summary = engine.ingest_tick(ETH_USDC, 220.0, clock.now_ms)
        assert summary.change_24h_percent == pytest.approx(10.0)

    def test_change_guards_zero_base_price(self, registry, clock):
        engine = AggregationEngine(registry, retention_ms=2 * ONE_DAY_MS, clock=clock)
        engine.ingest_tick(ETH_USDC, 0.0, clock.now_ms - ONE_DAY_MS - 1000)
        summary = engine.ingest_tick(ETH_USDC, 220.0, clock.now_ms)
        assert summary.change_24h_percent == 0

    def test_chart_history_bounded_and_ordered(self, engine, clock):
        for i in range(40):
            clock.advance(1000)
            engine.ingest_tick(ETH_USDC, 100.0 + i, clock.now_ms)

        history = engine.get("eth-usdc").chart_history
        assert len(history) == 30
        times = [p.time_ms for p in history]
        assert times == sorted(times)
        assert history[-1].price == 139.0
        assert history[0].price == 110.0

    def test_tick_updates_only_its_pair(self, engine, clock):
        before = {s.id: s for s in engine.get_all()}
        engine.ingest_tick(ETH_BTC, 0.052, clock.now_ms)

        assert engine.get("eth-btc").current_price == 0.052
        assert engine.get("eth-usdc") is before["eth-usdc"]
        assert engine.get("eth-usdt") is before["eth-usdt"]

    def test_unknown_symbol_changes_nothing(self, engine, clock):
        before = engine.get_all()
        version = engine.version

        assert engine.ingest_tick("BINANCE:BTCUSDT", 60000.0, clock.now_ms) is None
        assert engine.get_all() == before
        assert engine.version == version

    def test_summary_replaced_not_mutated(self, engine, clock):
        first = engine.ingest_tick(ETH_USDC, 100.0, clock.now_ms)
        second = engine.ingest_tick(ETH_USDC, 101.0, clock.now_ms)
        assert first is not second
        assert first.current_price == 100.0
        assert len(first.chart_history) == 1

    def test_last_update_uses_clock(self, engine, clock):
        clock.advance(5000)
        summary = engine.ingest_tick(ETH_USDC, 100.0, clock.now_ms - 4000)
        assert summary.last_update_ms == clock.now_ms

    def test_version_increments(self, engine, clock):
        v0 = engine.version
        engine.ingest_tick(ETH_USDC, 100.0, clock.now_ms)
        assert engine.version == v0 + 1

    def test_get_unknown(self, engine):
        assert engine.get("nope") is None
        assert "nope" not in engine
        assert "eth-usdc" in engine
        assert len(engine) == 3
