"""Timer-driven fan-out of pair summaries to connected subscribers."""

from __future__ import annotations

import asyncio
import itertools
import logging

from .engine import AggregationEngine
from .interface import TickSource

logger = logging.getLogger(__name__)

_subscriber_ids = itertools.count(1)


class Subscriber:
    """Handle for one downstream connection.

    Holds a small queue of pending payloads. When the consumer falls behind,
    the oldest pending payload is dropped since every payload carries the
    full summary set.
    """

    def __init__(self, queue_size: int = 16, label: str | None = None) -> None:
        self.id = next(_subscriber_ids)
        self.label = label or f"subscriber-{self.id}"
        self._queue: asyncio.Queue[dict] = asyncio.Queue(maxsize=queue_size)

    def push(self, payload: dict) -> None:
        if self._queue.full():
            self._queue.get_nowait()
        self._queue.put_nowait(payload)

    async def next_payload(self) -> dict:
        return await self._queue.get()

    def pending(self) -> int:
        return self._queue.qsize()

    def __repr__(self) -> str:
        return f"Subscriber({self.label!r})"


class BroadcastHub:
    """Pushes the full summary set to every subscriber on a fixed interval.

    New subscribers get an immediate ``initial`` snapshot; everyone gets an
    ``update`` every `interval` seconds regardless of tick traffic, so a burst
    of ticks between two timer firings is coalesced into one push.
    """

    def __init__(
        self,
        engine: AggregationEngine,
        source: TickSource,
        interval: float = 2.0,
        queue_size: int = 16,
    ) -> None:
        self._engine = engine
        self._source = source
        self._interval = interval
        self._queue_size = queue_size
        self._subscribers: dict[int, Subscriber] = {}
        self._task: asyncio.Task | None = None

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def build_payload(self, kind: str) -> dict:
        """Wire payload: ``{"type": kind, "pairs": [...], "connected": bool}``."""
        return {
            "type": kind,
            "pairs": [summary.to_dict() for summary in self._engine.get_all()],
            "connected": self._source.is_connected(),
        }

    def subscribe(self, label: str | None = None) -> Subscriber:
        """Register a subscriber and queue its initial snapshot."""
        subscriber = Subscriber(queue_size=self._queue_size, label=label)
        self._subscribers[subscriber.id] = subscriber
        subscriber.push(self.build_payload("initial"))
        logger.info("Client connected: %s", subscriber.label)
        return subscriber

    def unsubscribe(self, subscriber: Subscriber) -> None:
        if self._subscribers.pop(subscriber.id, None) is not None:
            logger.info("Client disconnected: %s", subscriber.label)

    def broadcast_once(self) -> int:
        """Push one ``update`` payload to every subscriber. Returns the count."""
        subscribers = list(self._subscribers.values())
        if not subscribers:
            return 0
        payload = self.build_payload("update")
        for subscriber in subscribers:
            subscriber.push(payload)
        return len(subscribers)

    async def start(self) -> None:
        if self._task and not self._task.done():
            return
        self._task = asyncio.create_task(self._run_loop(), name="broadcast-loop")
        logger.info("Broadcast hub started: %.1fs interval", self._interval)

    async def stop(self) -> None:
        if self._task and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None
        logger.info("Broadcast hub stopped")

    async def _run_loop(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            try:
                sent = self.broadcast_once()
                logger.debug("Broadcast update to %d subscribers", sent)
            except Exception:
                logger.exception("Broadcast failed")
