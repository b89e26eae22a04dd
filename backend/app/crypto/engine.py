"""Thread-safe aggregation of trade ticks into per-pair summaries."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from threading import Lock

from .history import CHART_CAPACITY, ONE_DAY_MS, ONE_HOUR_MS, ChartRing, PriceHistory
from .models import ChartPoint, PairSummary, PriceSample
from .pairs import PairRegistry

logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


class AggregationEngine:
    """Owns the price history and latest summary for every tracked pair.

    Writers: FinnhubFeed or SimulatorFeed (one at a time).
    Readers: BroadcastHub, SSE streaming endpoint.

    Summaries are frozen and replaced wholesale under the lock, so readers
    always get either the previous or the new summary for a pair.
    """

    def __init__(
        self,
        registry: PairRegistry,
        retention_ms: int = ONE_HOUR_MS,
        chart_capacity: int = CHART_CAPACITY,
        clock: Callable[[], int] | None = None,
    ) -> None:
        self._registry = registry
        self._clock = clock or _now_ms
        self._lock = Lock()
        self._version: int = 0  # Bumped on every accepted tick

        now = self._clock()
        self._history: dict[str, PriceHistory] = {}
        self._charts: dict[str, ChartRing] = {}
        self._summaries: dict[str, PairSummary] = {}
        for pair in registry:
            self._history[pair.id] = PriceHistory(retention_ms=retention_ms)
            self._charts[pair.id] = ChartRing(capacity=chart_capacity)
            self._summaries[pair.id] = PairSummary.initial(pair, now)

    @property
    def registry(self) -> PairRegistry:
        return self._registry

    def ingest_tick(self, upstream_symbol: str, price: float, timestamp_ms: int) -> PairSummary | None:
        """Fold one trade tick into its pair's history. Returns the new summary.

        Ticks for symbols outside the registry are discarded and return None.
        """
        pair = self._registry.resolve_symbol(upstream_symbol)
        if pair is None:
            logger.debug("Ignoring tick for untracked symbol %s", upstream_symbol)
            return None

        with self._lock:
            now = self._clock()
            history = self._history[pair.id]
            history.append(PriceSample(price=price, timestamp_ms=timestamp_ms))
            history.prune(now)

            average = history.average()
            hourly_average = average if average is not None else price

            change = 0.0
            day_old = history.latest_at_or_before(now - ONE_DAY_MS)
            if day_old is not None and day_old.price != 0:
                change = (price - day_old.price) / day_old.price * 100

            chart = self._charts[pair.id]
            chart.append(ChartPoint(time_ms=timestamp_ms, price=price))

            summary = PairSummary(
                id=pair.id,
                base_asset=pair.base_asset,
                quote_asset=pair.quote_asset,
                current_price=price,
                hourly_average=hourly_average,
                change_24h_percent=change,
                last_update_ms=now,
                chart_history=chart.points(),
                display_color=pair.display_color,
            )
            self._summaries[pair.id] = summary
            self._version += 1

        logger.debug("Updated %s: %s", pair.id, price)
        return summary

    def get(self, pair_id: str) -> PairSummary | None:
        """Latest summary for one pair, or None if the id is unknown."""
        with self._lock:
            return self._summaries.get(pair_id)

    def get_all(self) -> list[PairSummary]:
        """Snapshot of every pair's summary in registry order."""
        with self._lock:
            return [self._summaries[pair.id] for pair in self._registry]

    @property
    def version(self) -> int:
        """Current version counter. Useful for change detection."""
        return self._version

    def __len__(self) -> int:
        return len(self._summaries)

    def __contains__(self, pair_id: object) -> bool:
        with self._lock:
            return pair_id in self._summaries
