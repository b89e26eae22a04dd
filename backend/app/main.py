"""FastAPI application wiring for the crypto ticker."""

from __future__ import annotations

import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from .crypto import AggregationEngine, BroadcastHub, PairRegistry, create_stream_router, create_tick_source

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Build the app: registry → engine → tick source → broadcast hub."""
    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    registry = PairRegistry()
    engine = AggregationEngine(registry)
    source = create_tick_source(engine)
    hub = BroadcastHub(engine, source)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await source.start()
        await hub.start()
        logger.info("Crypto ticker running with %d pairs", len(registry))
        try:
            yield
        finally:
            await hub.stop()
            await source.stop()

    app = FastAPI(title="Crypto Ticker", lifespan=lifespan)
    app.state.engine = engine
    app.state.source = source
    app.state.hub = hub
    app.include_router(create_stream_router(hub))
    return app
