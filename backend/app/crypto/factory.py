"""Factory for creating tick sources."""

from __future__ import annotations

import logging
import os

from .engine import AggregationEngine
from .interface import TickSource

logger = logging.getLogger(__name__)

_TRUTHY = {"1", "true", "yes", "on"}


def create_tick_source(engine: AggregationEngine) -> TickSource:
    """Create the tick source selected by environment variables.

    - CRYPTO_FEED_SIMULATOR truthy → SimulatorFeed (GBM simulation)
    - Otherwise → FinnhubFeed using FINNHUB_API_KEY. A missing key is not
      fatal: the feed logs an error on start and never connects, and
      subscribers keep receiving default summaries.

    Returns an unstarted source. Caller must await source.start().
    """
    if os.environ.get("CRYPTO_FEED_SIMULATOR", "").strip().lower() in _TRUTHY:
        from .simulator import SimulatorFeed

        logger.info("Tick source: GBM Simulator")
        return SimulatorFeed(engine=engine)

    from .finnhub_client import FinnhubFeed

    api_key = os.environ.get("FINNHUB_API_KEY", "").strip()
    logger.info("Tick source: Finnhub WebSocket")
    return FinnhubFeed(api_key=api_key, engine=engine)
