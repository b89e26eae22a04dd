"""Finnhub WebSocket client for live crypto trade ticks."""

from __future__ import annotations

import asyncio
import json
import logging
import math
from enum import Enum

import websockets

from .engine import AggregationEngine
from .interface import TickSource

logger = logging.getLogger(__name__)

FINNHUB_WS_URL = "wss://ws.finnhub.io"


class FeedState(str, Enum):
    """Upstream connection lifecycle."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    SUBSCRIBED = "subscribed"


class FinnhubFeed(TickSource):
    """TickSource backed by the Finnhub trades WebSocket.

    Opens one connection, subscribes every tracked pair's symbol, and forwards
    each trade in incoming ``{"type": "trade", "data": [...]}`` batches to the
    AggregationEngine.

    Any error or close while not already disconnected schedules exactly one
    reconnect after a fixed delay (5s by default).
    """

    def __init__(
        self,
        api_key: str,
        engine: AggregationEngine,
        url: str = FINNHUB_WS_URL,
        reconnect_delay: float = 5.0,
    ) -> None:
        self._api_key = api_key
        self._engine = engine
        self._url = url
        self._reconnect_delay = reconnect_delay
        self._state = FeedState.DISCONNECTED
        self._ws = None  # Set only while the transport is open
        self._running = False
        self._task: asyncio.Task | None = None
        self._reconnect_task: asyncio.Task | None = None

    @property
    def state(self) -> FeedState:
        return self._state

    async def start(self) -> None:
        if not self._api_key:
            logger.error("FINNHUB_API_KEY is not set; upstream feed disabled")
            return
        if self._running:
            return

        self._running = True
        self._connect()
        logger.info(
            "Finnhub feed started: %d pairs, %.1fs reconnect delay",
            len(self._engine.registry),
            self._reconnect_delay,
        )

    async def stop(self) -> None:
        self._running = False
        for task in (self._reconnect_task, self._task):
            if task and not task.done():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
        self._reconnect_task = None
        self._task = None
        self._ws = None
        self._state = FeedState.DISCONNECTED
        logger.info("Finnhub feed stopped")

    def is_connected(self) -> bool:
        return self._ws is not None

    def handle_message(self, raw: str | bytes) -> int:
        """Parse one inbound frame and ingest its trades.

        Returns the number of trade entries forwarded to the engine. Frames
        that are not trade batches (e.g. ``ping``) are ignored; unparseable
        frames and malformed entries are logged and dropped.
        """
        try:
            message = json.loads(raw)
        except (TypeError, ValueError) as e:
            logger.error("Error parsing Finnhub message: %s", e)
            return 0

        if not isinstance(message, dict) or message.get("type") != "trade":
            return 0

        trades = message.get("data")
        if not isinstance(trades, list):
            logger.warning("Trade message without a data list: %r", message)
            return 0

        processed = 0
        for trade in trades:
            try:
                symbol = trade["s"]
                price = float(trade["p"])
                timestamp_ms = int(trade["t"])
            except (KeyError, TypeError, ValueError, OverflowError) as e:
                logger.warning("Skipping malformed trade %r: %s", trade, e)
                continue
            if not isinstance(symbol, str):
                logger.warning("Skipping trade with non-string symbol %r", symbol)
                continue
            if not math.isfinite(price) or price <= 0:
                logger.warning("Skipping trade for %s with invalid price %r", symbol, price)
                continue
            self._engine.ingest_tick(symbol, price, timestamp_ms)
            processed += 1
        return processed

    # --- Internal ---

    def _redact(self, error: Exception) -> str:
        """Exception text with the API token masked."""
        text = f"{type(error).__name__}: {error}"
        return text.replace(self._api_key, "***") if self._api_key else text

    def _endpoint(self) -> str:
        return f"{self._url}?token={self._api_key}"

    def _connect(self) -> None:
        self._task = asyncio.create_task(self._run_connection(), name="finnhub-connection")

    async def _run_connection(self) -> None:
        """One connection lifetime: connect, subscribe, read until closed."""
        self._state = FeedState.CONNECTING
        logger.info("Connecting to Finnhub at %s", self._url)
        try:
            async with websockets.connect(self._endpoint(), open_timeout=10) as ws:
                self._ws = ws
                logger.info("Connected to Finnhub WebSocket")
                await self._subscribe_all(ws)
                self._state = FeedState.SUBSCRIBED

                async for raw in ws:
                    self.handle_message(raw)
            logger.warning("Finnhub WebSocket closed")
        except asyncio.CancelledError:
            raise
        except Exception as e:
            # Common failures: bad token (401), DNS/network errors, abnormal close.
            logger.error("Finnhub WebSocket error: %s", self._redact(e))
        finally:
            self._ws = None
            self._state = FeedState.DISCONNECTED

        self._schedule_reconnect()

    async def _subscribe_all(self, ws) -> None:
        for pair in self._engine.registry:
            await ws.send(json.dumps({"type": "subscribe", "symbol": pair.upstream_symbol}))
            logger.info("Subscribed to %s", pair.upstream_symbol)

    def _schedule_reconnect(self) -> None:
        if not self._running:
            return
        if self._reconnect_task and not self._reconnect_task.done():
            self._reconnect_task.cancel()
        logger.info("Reconnecting to Finnhub in %.1fs", self._reconnect_delay)
        self._reconnect_task = asyncio.create_task(
            self._reconnect_after(self._reconnect_delay), name="finnhub-reconnect"
        )

    async def _reconnect_after(self, delay: float) -> None:
        await asyncio.sleep(delay)
        if self._running:
            logger.info("Attempting to reconnect to Finnhub...")
            self._connect()
