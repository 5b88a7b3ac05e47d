"""
HTTP client for the live orders REST API.

Uses httpx for the request/response endpoints and for reading the
server-sent event stream line by line.
"""

from __future__ import annotations

import json
from collections.abc import AsyncIterable, AsyncIterator

import httpx

from shared.config.logging import kitchen_display_logger as logger
from shared.infrastructure.events import LiveOrderEvent, parse_event
from shared.utils.schemas import OrderOutput

from kitchen_display.settings import DashboardSettings, get_dashboard_settings


async def iter_sse_data(lines: AsyncIterable[str]) -> AsyncIterator[str]:
    """
    Yield the data payload of each SSE frame.

    Multi-line ``data:`` fields are joined with newlines; comment lines
    (keep-alives) and other fields are skipped.
    """
    buffer: list[str] = []
    async for line in lines:
        line = line.rstrip("\r")
        if not line:
            if buffer:
                yield "\n".join(buffer)
                buffer = []
            continue
        if line.startswith(":"):
            continue
        if line.startswith("data:"):
            value = line[5:]
            buffer.append(value[1:] if value.startswith(" ") else value)
    if buffer:
        yield "\n".join(buffer)


def decode_event(data: str) -> LiveOrderEvent | None:
    """Decode one frame payload. Malformed frames are logged and skipped."""
    try:
        payload = json.loads(data)
        if not isinstance(payload, dict):
            raise ValueError("frame payload is not an object")
        event = parse_event(payload)
    except ValueError as e:
        logger.warning("Skipping malformed live order frame", error=str(e))
        return None
    if event is None:
        logger.debug("Ignoring unknown live order event", kind=payload.get("event") or payload.get("kind"))
    return event


class LiveOrdersClient:
    """
    Async client for the kitchen endpoints.

    Usage:
        async with LiveOrdersClient.from_settings() as client:
            orders = await client.fetch_kitchen_orders()
            async for event in client.stream_events():
                ...
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        stream_read_timeout: float | None = 45.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._http = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)
        self._stream_timeout = httpx.Timeout(timeout, read=stream_read_timeout)

    @classmethod
    def from_settings(
        cls,
        settings: DashboardSettings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> LiveOrdersClient:
        settings = settings or get_dashboard_settings()
        return cls(
            settings.api_base_url,
            timeout=settings.request_timeout_seconds,
            stream_read_timeout=settings.stream_read_timeout_seconds,
            transport=transport,
        )

    async def __aenter__(self) -> LiveOrdersClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def fetch_kitchen_orders(self) -> list[OrderOutput]:
        response = await self._http.get("/api/live-orders/list")
        response.raise_for_status()
        return [OrderOutput.model_validate(o) for o in response.json()["orders"]]

    async def update_status(self, order_id: int, status: str) -> OrderOutput:
        response = await self._http.patch(f"/api/orders/{order_id}", json={"status": status})
        response.raise_for_status()
        return OrderOutput.model_validate(response.json())

    async def adjust_eta(self, order_id: int, delta_minutes: int) -> OrderOutput:
        response = await self._http.post(
            f"/api/orders/{order_id}/adjust_eta",
            json={"delta_minutes": delta_minutes},
        )
        response.raise_for_status()
        return OrderOutput.model_validate(response.json())

    async def health(self) -> dict:
        response = await self._http.get("/api/health")
        response.raise_for_status()
        return response.json()

    async def stream_events(self) -> AsyncIterator[LiveOrderEvent]:
        """
        Open the event stream and yield typed events until it ends.

        Raises httpx.HTTPError on connection failures or a non-2xx response.
        """
        async with self._http.stream(
            "GET",
            "/api/live-orders",
            headers={"Accept": "text/event-stream"},
            timeout=self._stream_timeout,
        ) as response:
            response.raise_for_status()
            async for data in iter_sse_data(response.aiter_lines()):
                event = decode_event(data)
                if event is not None:
                    yield event
