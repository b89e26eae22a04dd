"""Per-pair price history: the analytical window and the chart ring."""

from __future__ import annotations

from collections import deque

from .models import ChartPoint, PriceSample

ONE_HOUR_MS = 60 * 60 * 1000
ONE_DAY_MS = 24 * ONE_HOUR_MS
CHART_CAPACITY = 30


class PriceHistory:
    """Time-pruned samples used for the hourly average and 24h change.

    Not thread-safe on its own; the AggregationEngine serializes access.
    """

    def __init__(self, retention_ms: int = ONE_HOUR_MS) -> None:
        self._retention_ms = retention_ms
        self._samples: deque[PriceSample] = deque()

    @property
    def retention_ms(self) -> int:
        return self._retention_ms

    def append(self, sample: PriceSample) -> None:
        self._samples.append(sample)

    def prune(self, now_ms: int) -> None:
        """Keep only samples strictly newer than ``now_ms - retention_ms``.

        Ticks can arrive slightly out of order, so this filters the whole
        window rather than popping from the left.
        """
        cutoff = now_ms - self._retention_ms
        self._samples = deque(s for s in self._samples if s.timestamp_ms > cutoff)

    def average(self) -> float | None:
        """Arithmetic mean of retained prices, or None when empty."""
        if not self._samples:
            return None
        return sum(s.price for s in self._samples) / len(self._samples)

    def latest_at_or_before(self, boundary_ms: int) -> PriceSample | None:
        """Retained sample with the greatest timestamp <= boundary_ms."""
        best: PriceSample | None = None
        for sample in self._samples:
            if sample.timestamp_ms <= boundary_ms and (
                best is None or sample.timestamp_ms >= best.timestamp_ms
            ):
                best = sample
        return best

    def samples(self) -> list[PriceSample]:
        return list(self._samples)

    def __len__(self) -> int:
        return len(self._samples)


class ChartRing:
    """Fixed-capacity FIFO of display points, oldest first."""

    def __init__(self, capacity: int = CHART_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._points: deque[ChartPoint] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._points.maxlen or 0

    def append(self, point: ChartPoint) -> None:
        """Append a point, evicting the oldest when full.

        A point older than the newest one is clamped forward so the ring
        stays in ascending time order.
        """
        if self._points and point.time_ms < self._points[-1].time_ms:
            point = ChartPoint(time_ms=self._points[-1].time_ms, price=point.price)
        self._points.append(point)

    def points(self) -> tuple[ChartPoint, ...]:
        return tuple(self._points)

    def __len__(self) -> int:
        return len(self._points)
