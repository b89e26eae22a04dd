"""Crypto pair ticker subsystem.

Public API:
    TrackedPair, PairSummary - Immutable pair config and summary snapshot
    PairRegistry         - Fixed set of tracked pairs
    AggregationEngine    - Folds trade ticks into per-pair summaries
    TickSource           - Abstract interface for tick providers
    create_tick_source   - Factory that selects Finnhub or the simulator
    BroadcastHub         - Timer-driven fan-out to subscribers
    create_stream_router - FastAPI router factory for the SSE endpoint
"""

from .broadcast import BroadcastHub
from .engine import AggregationEngine
from .factory import create_tick_source
from .interface import TickSource
from .models import PairSummary, TrackedPair
from .pairs import PairRegistry, list_tracked_pairs
from .stream import create_stream_router

__all__ = [
    "TrackedPair",
    "PairSummary",
    "PairRegistry",
    "list_tracked_pairs",
    "AggregationEngine",
    "TickSource",
    "create_tick_source",
    "BroadcastHub",
    "create_stream_router",
]
