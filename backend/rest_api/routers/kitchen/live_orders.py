"""
Live orders router.

- GET /api/live-orders: server-sent event stream of order lifecycle events
- GET /api/live-orders/list: kitchen-relevant orders for the initial load and re-sync
"""

import asyncio
from collections.abc import AsyncIterator

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from rest_api.core.dependencies import get_order_service, get_registry
from rest_api.services.domain import OrderService
from shared.config.logging import live_orders_logger as logger
from shared.config.settings import settings
from shared.infrastructure.events import ConnectedEvent, PublisherRegistry, QueueSink
from shared.utils.schemas import OrderListResponse, OrderOutput


router = APIRouter(prefix="/api/live-orders", tags=["live-orders"])

KEEPALIVE_FRAME = ": keepalive\n\n"

STREAM_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    # Disable proxy buffering (nginx) so frames leave immediately
    "X-Accel-Buffering": "no",
}


async def live_order_frames(
    registry: PublisherRegistry,
    keepalive_seconds: float | None = None,
    queue_size: int | None = None,
) -> AsyncIterator[str]:
    """
    Frames for one dashboard connection.

    The connected frame goes out before the subscriber is registered, so it
    is always the first thing the client reads. The subscriber is removed in
    ``finally``: client disconnect cancels this generator and a broken write
    closes it, and both paths run the cleanup.
    """
    keepalive = keepalive_seconds or settings.sse_keepalive_seconds
    sink = QueueSink(maxsize=queue_size or settings.sse_subscriber_queue_size)

    yield ConnectedEvent().to_frame()

    handle = registry.subscribe(sink)
    try:
        while True:
            try:
                frame = await sink.next_frame(timeout=keepalive)
            except asyncio.TimeoutError:
                yield KEEPALIVE_FRAME
                continue
            if frame is None:
                # Registry dropped this subscriber or the server is shutting down
                break
            yield frame
    finally:
        registry.unsubscribe(handle)
        sink.close()
        logger.debug("Live orders stream closed", subscriber_id=handle.id, delivered=handle.delivered)


@router.get("")
async def stream_live_orders(registry: PublisherRegistry = Depends(get_registry)) -> StreamingResponse:
    """
    Persistent text/event-stream of live order events.

    Each frame is ``data: <JSON>\\n\\n``. The stream carries no history: after
    the ``connected`` frame clients fetch /api/live-orders/list for state.
    """
    return StreamingResponse(
        live_order_frames(registry),
        media_type="text/event-stream",
        headers=STREAM_HEADERS,
    )


@router.get("/list", response_model=OrderListResponse)
def list_live_orders(service: OrderService = Depends(get_order_service)) -> OrderListResponse:
    """Orders in a kitchen-relevant status, newest first."""
    orders = service.kitchen_orders()
    return OrderListResponse(orders=[OrderOutput.model_validate(o) for o in orders])
