"""Static registry of the currency pairs this service tracks."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from .models import TrackedPair

# Fixed for the lifetime of the process. Order here is the order pairs are
# published to subscribers.
TRACKED_PAIRS: tuple[TrackedPair, ...] = (
    TrackedPair(
        id="eth-usdc",
        base_asset="ETH",
        quote_asset="USDC",
        upstream_symbol="BINANCE:ETHUSDC",
        display_color="var(--chart-1)",
    ),
    TrackedPair(
        id="eth-usdt",
        base_asset="ETH",
        quote_asset="USDT",
        upstream_symbol="BINANCE:ETHUSDT",
        display_color="var(--chart-2)",
    ),
    TrackedPair(
        id="eth-btc",
        base_asset="ETH",
        quote_asset="BTC",
        upstream_symbol="BINANCE:ETHBTC",
        display_color="var(--chart-3)",
    ),
)


def list_tracked_pairs() -> list[TrackedPair]:
    """Return the configured pairs in publication order."""
    return list(TRACKED_PAIRS)


class PairRegistry:
    """Read-only lookup over a fixed set of tracked pairs.

    Resolves pairs both by their id and by the upstream vendor symbol that
    arrives on incoming ticks.
    """

    def __init__(self, pairs: Iterable[TrackedPair] | None = None) -> None:
        self._pairs: tuple[TrackedPair, ...] = tuple(TRACKED_PAIRS if pairs is None else pairs)
        self._by_id: dict[str, TrackedPair] = {}
        self._by_symbol: dict[str, TrackedPair] = {}

        for pair in self._pairs:
            if pair.id in self._by_id:
                raise ValueError(f"Duplicate pair id: {pair.id}")
            if pair.upstream_symbol in self._by_symbol:
                raise ValueError(f"Duplicate upstream symbol: {pair.upstream_symbol}")
            self._by_id[pair.id] = pair
            self._by_symbol[pair.upstream_symbol] = pair

    def list_tracked_pairs(self) -> list[TrackedPair]:
        return list(self._pairs)

    def get(self, pair_id: str) -> TrackedPair | None:
        return self._by_id.get(pair_id)

    def resolve_symbol(self, upstream_symbol: str) -> TrackedPair | None:
        """Map a vendor symbol to its pair, or None if it is not tracked."""
        return self._by_symbol.get(upstream_symbol)

    def __iter__(self) -> Iterator[TrackedPair]:
        return iter(self._pairs)

    def __len__(self) -> int:
        return len(self._pairs)

    def __contains__(self, pair_id: object) -> bool:
        return pair_id in self._by_id
