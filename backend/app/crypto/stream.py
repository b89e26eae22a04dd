"""SSE streaming endpoint for live pair summaries."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import AsyncGenerator

from fastapi import APIRouter, Request
from fastapi.responses import StreamingResponse

from .broadcast import BroadcastHub

logger = logging.getLogger(__name__)

EVENT_NAME = "update"


def create_stream_router(hub: BroadcastHub) -> APIRouter:
    """Create the SSE streaming router with a reference to the broadcast hub.

    This factory pattern lets us inject the hub without globals.
    """
    router = APIRouter(prefix="/api/stream", tags=["streaming"])

    @router.get("/crypto")
    async def stream_crypto(request: Request) -> StreamingResponse:
        """SSE endpoint for pair summaries.

        The client connects with EventSource and listens for ``update``
        events:

            event: update
            data: {"type": "initial", "pairs": [...], "connected": true}

        The first event is the ``initial`` snapshot; ``update`` payloads
        follow every broadcast interval.
        """
        return StreamingResponse(
            _generate_events(hub, request),
            media_type="text/event-stream",
            headers={
                "Cache-Control": "no-cache",
                "Connection": "keep-alive",
                "X-Accel-Buffering": "no",  # Disable nginx buffering if proxied
            },
        )

    return router


def format_event(payload: dict) -> str:
    """Render one payload as an SSE frame."""
    return f"event: {EVENT_NAME}\ndata: {json.dumps(payload)}\n\n"


async def _generate_events(
    hub: BroadcastHub,
    request: Request,
    disconnect_poll: float = 1.0,
) -> AsyncGenerator[str, None]:
    """Async generator that yields SSE frames for one subscriber.

    Waits on the subscriber's queue, checking for client disconnect at least
    every `disconnect_poll` seconds.
    """
    # Tell the client to retry after 1 second if the connection drops
    yield "retry: 1000\n\n"

    client_ip = request.client.host if request.client else "unknown"
    subscriber = hub.subscribe(label=client_ip)

    try:
        while True:
            if await request.is_disconnected():
                break
            try:
                payload = await asyncio.wait_for(subscriber.next_payload(), timeout=disconnect_poll)
            except asyncio.TimeoutError:
                continue
            yield format_event(payload)
    except asyncio.CancelledError:
        logger.info("SSE stream cancelled for: %s", client_ip)
    finally:
        hub.unsubscribe(subscriber)
