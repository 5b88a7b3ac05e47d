"""
Client-side reconciliation of live order events.

The reconciler holds the dashboard's ordered list of kitchen-relevant orders
(newest first). A full fetch replaces it via ``load``; pushed events patch it
via ``apply``:

- order_created / order_paid / order_updated: upsert in place (or prepend)
  while the status is kitchen-relevant, otherwise remove
- order_eta_updated: patch estimated_ready_at of a held order only
- order_cancelled: remove
- anything else: ignored
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta

from shared.config.constants import KITCHEN_STATUSES, NEW_ARRIVAL_STATUSES
from shared.config.logging import kitchen_display_logger as logger
from shared.infrastructure.events import (
    LiveOrderEvent,
    OrderCancelledEvent,
    OrderCreatedEvent,
    OrderEtaUpdatedEvent,
    OrderPaidEvent,
    OrderUpdatedEvent,
)
from shared.utils.eta import (
    DEFAULT_BASE_MINUTES,
    DEFAULT_PER_ITEM_MINUTES,
    ensure_aware,
    estimate_ready_at,
)
from shared.utils.schemas import OrderOutput

from kitchen_display.ack_store import AckStore


@dataclass
class KitchenOrder:
    """An order snapshot as held by the dashboard."""

    snapshot: OrderOutput
    acknowledged: bool = False

    @property
    def id(self) -> int:
        return self.snapshot.id

    @property
    def status(self) -> str:
        return self.snapshot.status


@dataclass(frozen=True)
class OrderTiming:
    """Derived countdown fields. Recomputed on every tick, never stored."""

    elapsed: timedelta
    estimated_ready_at: datetime
    remaining: timedelta
    due: bool
    estimated: bool  # True when derived from item count rather than set explicitly


def compute_timing(
    order: OrderOutput,
    now: datetime,
    base_minutes: int = DEFAULT_BASE_MINUTES,
    per_item_minutes: int = DEFAULT_PER_ITEM_MINUTES,
) -> OrderTiming:
    created_at = ensure_aware(order.created_at)
    now = ensure_aware(now)
    if order.estimated_ready_at is not None:
        ready_at = ensure_aware(order.estimated_ready_at)
        estimated = False
    else:
        ready_at = estimate_ready_at(created_at, order.items, base_minutes, per_item_minutes)
        estimated = True

    remaining = ready_at - now
    return OrderTiming(
        elapsed=max(now - created_at, timedelta(0)),
        estimated_ready_at=ready_at,
        remaining=remaining,
        due=remaining <= timedelta(0),
        estimated=estimated,
    )


def is_kitchen_relevant(status: str) -> bool:
    return status in KITCHEN_STATUSES


class OrderReconciler:
    """
    Local view of orders currently relevant to the kitchen.

    An order counts as acknowledged when the operator acknowledged it (the id
    is in the ack store) or when its status is already past the new-arrival
    statuses, meaning someone accepted it elsewhere.
    """

    def __init__(self, ack_store: AckStore | None = None):
        self._ack_store = ack_store if ack_store is not None else AckStore()
        self._orders: list[KitchenOrder] = []

    def __len__(self) -> int:
        return len(self._orders)

    @property
    def orders(self) -> list[KitchenOrder]:
        return list(self._orders)

    @property
    def ack_store(self) -> AckStore:
        return self._ack_store

    def get(self, order_id: int) -> KitchenOrder | None:
        index = self._index(order_id)
        return self._orders[index] if index is not None else None

    # =========================================================================
    # Full state
    # =========================================================================

    def load(self, orders: Iterable[OrderOutput]) -> None:
        """Replace local state with an authoritative list (newest first)."""
        held = [o for o in orders if is_kitchen_relevant(o.status)]
        held.sort(key=lambda o: (ensure_aware(o.created_at), o.id), reverse=True)
        self._orders = [KitchenOrder(o, self._is_acknowledged(o)) for o in held]
        logger.debug("Kitchen orders loaded", count=len(self._orders))

    # =========================================================================
    # Events
    # =========================================================================

    def apply(self, event: LiveOrderEvent | None) -> bool:
        """Apply one pushed event. Returns True if local state changed."""
        if isinstance(event, (OrderCreatedEvent, OrderPaidEvent, OrderUpdatedEvent)):
            return self._upsert_or_remove(event.order)
        if isinstance(event, OrderEtaUpdatedEvent):
            return self.set_local_eta(event.order_id, event.estimated_ready_at)
        if isinstance(event, OrderCancelledEvent):
            return self._remove(event.order_id)
        return False

    # =========================================================================
    # Local (optimistic) changes
    # =========================================================================

    def set_local_status(self, order_id: int, status: str) -> bool:
        current = self.get(order_id)
        if current is None:
            return False
        return self._upsert_or_remove(current.snapshot.model_copy(update={"status": status}))

    def set_local_eta(self, order_id: int, estimated_ready_at: datetime) -> bool:
        """Patch only estimated_ready_at. Orders not held locally are ignored."""
        index = self._index(order_id)
        if index is None:
            return False
        entry = self._orders[index]
        entry.snapshot = entry.snapshot.model_copy(update={"estimated_ready_at": estimated_ready_at})
        return True

    def acknowledge(self, order_id: int) -> None:
        """Record acknowledgment durably, whether or not the order is held yet."""
        self._ack_store.acknowledge(order_id)
        entry = self.get(order_id)
        if entry is not None:
            entry.acknowledged = True

    def has_unacknowledged(self) -> bool:
        return any(not o.acknowledged for o in self._orders)

    def unacknowledged(self) -> list[KitchenOrder]:
        return [o for o in self._orders if not o.acknowledged]

    # =========================================================================
    # Internals
    # =========================================================================

    def _index(self, order_id: int) -> int | None:
        for i, entry in enumerate(self._orders):
            if entry.id == order_id:
                return i
        return None

    def _is_acknowledged(self, order: OrderOutput) -> bool:
        return order.status not in NEW_ARRIVAL_STATUSES or order.id in self._ack_store

    def _upsert_or_remove(self, snapshot: OrderOutput) -> bool:
        if not is_kitchen_relevant(snapshot.status):
            return self._remove(snapshot.id)

        index = self._index(snapshot.id)
        if index is None:
            self._orders.insert(0, KitchenOrder(snapshot, self._is_acknowledged(snapshot)))
            return True

        entry = self._orders[index]
        entry.snapshot = snapshot
        entry.acknowledged = entry.acknowledged or self._is_acknowledged(snapshot)
        return True

    def _remove(self, order_id: int) -> bool:
        index = self._index(order_id)
        if index is None:
            return False
        del self._orders[index]
        return True
