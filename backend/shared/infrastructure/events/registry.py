"""
Publisher Registry.

Process-wide set of live order stream subscribers. Producers call
``publish(event)``; each stream endpoint owns one subscriber handle wrapping a
bounded in-memory channel that its response generator drains.

All mutation happens on the single asyncio event loop (subscribe and
unsubscribe from the stream generator, publish from async route handlers), so
the subscriber set needs no lock.
"""

from __future__ import annotations

import asyncio
import itertools
from dataclasses import dataclass, field
from typing import Protocol

from shared.config.logging import get_logger
from shared.infrastructure.events.event_schema import LiveOrderEvent

logger = get_logger(__name__)

DEFAULT_QUEUE_SIZE = 100


class SubscriberSink(Protocol):
    """Output side of one open stream connection."""

    @property
    def closed(self) -> bool: ...

    def send(self, frame: str) -> None:
        """Enqueue one frame without blocking. Raises if the sink cannot accept it."""
        ...

    def close(self) -> None: ...


class QueueSink:
    """
    Bounded channel between the registry and one stream response.

    ``send`` never blocks: a full channel raises ``asyncio.QueueFull`` so a
    stalled client is dropped instead of slowing down every other subscriber.
    ``close`` wakes the reader, which sees ``None`` and ends the stream.
    """

    def __init__(self, maxsize: int = DEFAULT_QUEUE_SIZE) -> None:
        self._queue: asyncio.Queue[str | None] = asyncio.Queue(maxsize=maxsize + 1)
        self._maxsize = maxsize
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, frame: str) -> None:
        if self._closed:
            raise ConnectionError("sink is closed")
        # One slot stays reserved for the close sentinel
        if self._queue.qsize() >= self._maxsize:
            raise asyncio.QueueFull()
        self._queue.put_nowait(frame)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(None)

    async def next_frame(self, timeout: float | None = None) -> str | None:
        """
        Wait for the next frame.

        Returns None once the sink is closed. Raises asyncio.TimeoutError when
        nothing arrives within ``timeout`` seconds.
        """
        if timeout is None:
            return await self._queue.get()
        return await asyncio.wait_for(self._queue.get(), timeout=timeout)

    def pending(self) -> int:
        return self._queue.qsize()


@dataclass(eq=False)
class SubscriberHandle:
    """The registry's representation of one open stream."""

    id: int
    sink: SubscriberSink
    delivered: int = field(default=0)


class PublisherRegistry:
    """
    Fan-out of live order events to every registered subscriber.

    - subscribe(sink) -> handle
    - unsubscribe(handle): idempotent
    - publish(event) -> number of subscribers the frame was delivered to

    A subscriber whose sink is closed or fails during ``publish`` is removed
    in the same call; delivery to the others continues. Only a failure to
    serialize the event itself propagates to the caller.
    """

    def __init__(self) -> None:
        self._handles: dict[int, SubscriberHandle] = {}
        self._ids = itertools.count(1)

    def __len__(self) -> int:
        return len(self._handles)

    def __contains__(self, handle: object) -> bool:
        return isinstance(handle, SubscriberHandle) and self._handles.get(handle.id) is handle

    @property
    def subscriber_count(self) -> int:
        return len(self._handles)

    def subscribe(self, sink: SubscriberSink) -> SubscriberHandle:
        handle = SubscriberHandle(id=next(self._ids), sink=sink)
        self._handles[handle.id] = handle
        logger.info("Live orders subscriber connected", subscriber_id=handle.id, total=len(self._handles))
        return handle

    def unsubscribe(self, handle: SubscriberHandle) -> None:
        if self._handles.get(handle.id) is not handle:
            return
        del self._handles[handle.id]
        logger.info("Live orders subscriber disconnected", subscriber_id=handle.id, total=len(self._handles))

    def publish(self, event: LiveOrderEvent) -> int:
        frame = event.to_frame()

        delivered = 0
        dead: list[SubscriberHandle] = []
        # Iterate a snapshot so removals don't disturb the loop
        for handle in list(self._handles.values()):
            if handle.sink.closed:
                dead.append(handle)
                continue
            try:
                handle.sink.send(frame)
            except Exception as e:
                logger.warning(
                    "Dropping live orders subscriber after failed delivery",
                    subscriber_id=handle.id,
                    error=type(e).__name__,
                )
                dead.append(handle)
                continue
            handle.delivered += 1
            delivered += 1

        for handle in dead:
            self.unsubscribe(handle)
            try:
                handle.sink.close()
            except Exception as e:
                logger.debug("Error closing dead sink", subscriber_id=handle.id, error=str(e))

        logger.debug(
            "Live order event published",
            event=event.kind,
            delivered=delivered,
            removed=len(dead),
        )
        return delivered

    def close_all(self) -> None:
        """Close every sink and empty the registry. Used at shutdown."""
        handles = list(self._handles.values())
        self._handles.clear()
        for handle in handles:
            try:
                handle.sink.close()
            except Exception as e:
                logger.debug("Error closing sink at shutdown", subscriber_id=handle.id, error=str(e))
        if handles:
            logger.info("Live orders subscribers closed", count=len(handles))
