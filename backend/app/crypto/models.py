"""Data models for crypto pair tracking."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class TrackedPair:
    """Static configuration for one tracked currency pair."""

    id: str
    base_asset: str
    quote_asset: str
    upstream_symbol: str  # Vendor tick-stream identifier, e.g. "BINANCE:ETHUSDC"
    display_color: str


@dataclass(frozen=True, slots=True)
class PriceSample:
    """One accepted tick, kept for hourly average / 24h change computation."""

    price: float
    timestamp_ms: int


@dataclass(frozen=True, slots=True)
class ChartPoint:
    """One display point in a pair's chart history."""

    time_ms: int
    price: float

    def to_dict(self) -> dict:
        return {"time": self.time_ms, "price": self.price}


@dataclass(frozen=True, slots=True)
class PairSummary:
    """Immutable snapshot of a pair's derived metrics.

    A new instance replaces the previous one on every accepted tick, so a
    reader holding a summary always sees a consistent set of values.
    """

    id: str
    base_asset: str
    quote_asset: str
    current_price: float
    hourly_average: float
    change_24h_percent: float
    last_update_ms: int
    chart_history: tuple[ChartPoint, ...]
    display_color: str

    @classmethod
    def initial(cls, pair: TrackedPair, now_ms: int) -> PairSummary:
        """Zero-valued summary used before the first tick arrives."""
        return cls(
            id=pair.id,
            base_asset=pair.base_asset,
            quote_asset=pair.quote_asset,
            current_price=0.0,
            hourly_average=0.0,
            change_24h_percent=0.0,
            last_update_ms=now_ms,
            chart_history=(),
            display_color=pair.display_color,
        )

    def to_dict(self) -> dict:
        """Serialize for JSON / SSE transmission.

        Keys follow the presentation layer's naming (``from``/``to``,
        ``change24h``, ``history``, ``color``).
        """
        return {
            "id": self.id,
            "from": self.base_asset,
            "to": self.quote_asset,
            "currentPrice": self.current_price,
            "hourlyAverage": self.hourly_average,
            "change24h": self.change_24h_percent,
            "lastUpdate": self.last_update_ms,
            "history": [point.to_dict() for point in self.chart_history],
            "color": self.display_color,
        }
