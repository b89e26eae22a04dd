"""Abstract interface for tick sources."""

from __future__ import annotations

from abc import ABC, abstractmethod


class TickSource(ABC):
    """Contract for upstream price providers.

    Implementations push trade ticks into a shared AggregationEngine on their
    own schedule. Downstream code never calls the source for prices; it reads
    summaries from the engine and only asks the source whether it is live.

    Lifecycle:
        source = create_tick_source(engine)
        await source.start()
        # ... app runs ...
        await source.stop()
    """

    @abstractmethod
    async def start(self) -> None:
        """Begin producing ticks for every tracked pair.

        Starts background work and returns without waiting for data. Calling
        start() on a running source is a no-op.
        """

    @abstractmethod
    async def stop(self) -> None:
        """Stop background work and release resources.

        Safe to call multiple times. After stop(), the source will not write
        to the engine again.
        """

    @abstractmethod
    def is_connected(self) -> bool:
        """True while the source is live (for a network feed: transport open)."""
