"""
Kitchen dashboard controller.

Connects the reconciler to the API client and the alert state machine:

- after every ``connected`` event the full order list is fetched again, so
  anything missed while disconnected is recovered
- when the stream ends or fails it reconnects after a fixed delay
- status actions acknowledge and apply their change locally before the
  request is sent; ETA adjustments apply locally without acknowledging;
  a failed request triggers a full re-sync
"""

import asyncio
import time
from datetime import datetime, timedelta, timezone
from typing import Callable

import httpx

from shared.config.constants import OrderStatus
from shared.config.logging import kitchen_display_logger as logger
from shared.infrastructure.events import ConnectedEvent, LiveOrderEvent

from kitchen_display.alarm import AlertStateMachine
from kitchen_display.api_client import LiveOrdersClient
from kitchen_display.reconciler import OrderReconciler, compute_timing
from kitchen_display.settings import DashboardSettings, get_dashboard_settings


class KitchenDashboard:
    def __init__(
        self,
        client: LiveOrdersClient,
        reconciler: OrderReconciler,
        alarm: AlertStateMachine,
        settings: DashboardSettings | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.client = client
        self.reconciler = reconciler
        self.alarm = alarm
        self.settings = settings or get_dashboard_settings()
        self._clock = clock
        self.connected = False

    # =========================================================================
    # State sync
    # =========================================================================

    async def resync(self) -> bool:
        """Replace local state with the server's list. Returns False if the fetch failed."""
        try:
            orders = await self.client.fetch_kitchen_orders()
        except httpx.HTTPError as e:
            logger.warning("Kitchen order re-sync failed", error=str(e))
            return False
        self.reconciler.load(orders)
        self._evaluate_alarm()
        return True

    async def handle_event(self, event: LiveOrderEvent) -> None:
        if isinstance(event, ConnectedEvent):
            self.connected = True
            logger.info("Live orders stream connected")
            await self.resync()
            return
        if self.reconciler.apply(event):
            self._evaluate_alarm()

    async def run_stream_once(self) -> None:
        """Consume one stream connection until it closes."""
        try:
            async for event in self.client.stream_events():
                await self.handle_event(event)
        finally:
            self.connected = False

    async def run(self, stop: asyncio.Event | None = None) -> None:
        """Keep the stream open, reconnecting after each drop until ``stop`` is set."""
        stop = stop or asyncio.Event()
        while not stop.is_set():
            try:
                await self.run_stream_once()
                logger.info("Live orders stream ended")
            except httpx.HTTPError as e:
                logger.warning("Live orders stream failed", error=str(e))
            try:
                await asyncio.wait_for(stop.wait(), timeout=self.settings.reconnect_delay_seconds)
            except asyncio.TimeoutError:
                pass

    def tick(self) -> bool:
        """Drive the repeating alert cue. Call regularly (e.g. once per render)."""
        return self.alarm.tick(self._clock())

    def _evaluate_alarm(self) -> None:
        self.alarm.evaluate(self.reconciler.has_unacknowledged(), self._clock())

    # =========================================================================
    # Operator actions
    # =========================================================================

    async def accept(self, order_id: int) -> bool:
        return await self._transition(order_id, OrderStatus.PREPARING)

    async def mark_prepared(self, order_id: int) -> bool:
        return await self._transition(order_id, OrderStatus.PREPARED)

    async def complete(self, order_id: int) -> bool:
        return await self._transition(order_id, OrderStatus.COMPLETED)

    async def reject(self, order_id: int) -> bool:
        return await self._transition(order_id, OrderStatus.CANCELLED)

    async def adjust_eta(self, order_id: int, delta_minutes: int, now: datetime | None = None) -> bool:
        """Move the ready time. Unlike the status actions this does not acknowledge the order."""
        entry = self.reconciler.get(order_id)
        if entry is not None:
            timing = compute_timing(
                entry.snapshot,
                now or datetime.now(timezone.utc),
                self.settings.eta_base_minutes,
                self.settings.eta_per_item_minutes,
            )
            self.reconciler.set_local_eta(order_id, timing.estimated_ready_at + timedelta(minutes=delta_minutes))

        try:
            updated = await self.client.adjust_eta(order_id, delta_minutes)
        except httpx.HTTPError as e:
            logger.warning("ETA adjust failed, re-syncing", order_id=order_id, error=str(e))
            await self.resync()
            return False
        if updated.estimated_ready_at is not None:
            self.reconciler.set_local_eta(order_id, updated.estimated_ready_at)
        return True

    async def _transition(self, order_id: int, status: str) -> bool:
        self._acknowledge(order_id)
        self.reconciler.set_local_status(order_id, status)
        self._evaluate_alarm()

        try:
            await self.client.update_status(order_id, status)
        except httpx.HTTPError as e:
            logger.warning("Order action failed, re-syncing", order_id=order_id, status=status, error=str(e))
            await self.resync()
            return False
        logger.info("Order action sent", order_id=order_id, status=status)
        return True

    def _acknowledge(self, order_id: int) -> None:
        self.reconciler.acknowledge(order_id)
        self._evaluate_alarm()
