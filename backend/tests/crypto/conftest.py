"""Fixtures for crypto ticker tests."""

import pytest

from app.crypto.engine import AggregationEngine
from app.crypto.pairs import PairRegistry

# Fixed wall-clock origin for deterministic tests (2023-11-14T22:13:20Z)
T0 = 1_700_000_000_000


class FakeClock:
    """Manually advanced millisecond clock."""

    def __init__(self, now_ms: int = T0) -> None:
        self.now_ms = now_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, ms: int) -> None:
        self.now_ms += ms


@pytest.fixture
def event_loop_policy():
    """Use the default event loop policy for all async tests."""
    import asyncio

    return asyncio.DefaultEventLoopPolicy()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def registry() -> PairRegistry:
    return PairRegistry()


@pytest.fixture
def engine(registry: PairRegistry, clock: FakeClock) -> AggregationEngine:
    return AggregationEngine(registry, clock=clock)
