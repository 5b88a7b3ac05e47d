"""
Live Order Event Schema.

One frozen dataclass per event kind, each carrying exactly the fields that
kind needs. Every serialized event has an ``event`` field naming its kind and
a ``ts`` ISO-8601 timestamp:

    {"event": "order_eta_updated", "order_id": 42,
     "estimated_ready_at": "2026-01-01T12:20:00+00:00", "ts": "..."}

Order snapshots are typed as ``OrderOutput`` so producers and the kitchen
display share a single shape.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, ClassVar, Union

from shared.config.constants import EventKind, OrderStatus
from shared.utils.schemas import OrderOutput


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _parse_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def _parse_timestamp(value: Any) -> datetime:
    """Frame timestamps are informational; anything unparseable becomes now."""
    if not value:
        return _utcnow()
    try:
        return _parse_datetime(value)
    except (TypeError, ValueError):
        return _utcnow()


@dataclass(frozen=True)
class _BaseEvent:
    kind: ClassVar[str]

    def _payload(self) -> dict[str, Any]:
        raise NotImplementedError

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready dict with the ``event`` discriminator and ``ts``."""
        data: dict[str, Any] = {"event": self.kind}
        data.update(self._payload())
        data["ts"] = self.ts.isoformat()  # type: ignore[attr-defined]
        return data

    def to_json(self) -> str:
        """Serialize to compact JSON. Raises on unserializable payloads."""
        return json.dumps(self.to_dict(), ensure_ascii=False, separators=(",", ":"))

    def to_frame(self) -> str:
        """Server-sent events frame for this event."""
        return format_frame(self.to_json())


@dataclass(frozen=True)
class ConnectedEvent(_BaseEvent):
    """Sent once to a freshly opened stream; the stream carries no backlog."""

    kind: ClassVar[str] = EventKind.CONNECTED
    ts: datetime = field(default_factory=_utcnow)

    def _payload(self) -> dict[str, Any]:
        return {}


@dataclass(frozen=True)
class _OrderSnapshotEvent(_BaseEvent):
    order: OrderOutput
    ts: datetime = field(default_factory=_utcnow)

    def _payload(self) -> dict[str, Any]:
        return {"order": self.order.model_dump(mode="json")}


@dataclass(frozen=True)
class OrderCreatedEvent(_OrderSnapshotEvent):
    """A new order was accepted for payment."""

    kind: ClassVar[str] = EventKind.ORDER_CREATED


@dataclass(frozen=True)
class OrderPaidEvent(_OrderSnapshotEvent):
    """Payment was confirmed for an order."""

    kind: ClassVar[str] = EventKind.ORDER_PAID


@dataclass(frozen=True)
class OrderUpdatedEvent(_OrderSnapshotEvent):
    """Status (or payment method) of an order changed."""

    kind: ClassVar[str] = EventKind.ORDER_UPDATED


@dataclass(frozen=True)
class OrderEtaUpdatedEvent(_BaseEvent):
    """Only the estimated ready time moved."""

    kind: ClassVar[str] = EventKind.ORDER_ETA_UPDATED
    order_id: int
    estimated_ready_at: datetime
    ts: datetime = field(default_factory=_utcnow)

    def _payload(self) -> dict[str, Any]:
        return {
            "order_id": self.order_id,
            "estimated_ready_at": self.estimated_ready_at.isoformat(),
        }


@dataclass(frozen=True)
class OrderCancelledEvent(_BaseEvent):
    """Order reached the cancelled terminal status."""

    kind: ClassVar[str] = EventKind.ORDER_CANCELLED
    order_id: int
    status: str = OrderStatus.CANCELLED
    ts: datetime = field(default_factory=_utcnow)

    def _payload(self) -> dict[str, Any]:
        return {"order_id": self.order_id, "status": self.status}


LiveOrderEvent = Union[
    ConnectedEvent,
    OrderCreatedEvent,
    OrderPaidEvent,
    OrderUpdatedEvent,
    OrderEtaUpdatedEvent,
    OrderCancelledEvent,
]

_SNAPSHOT_EVENTS: dict[str, type[_OrderSnapshotEvent]] = {
    EventKind.ORDER_CREATED: OrderCreatedEvent,
    EventKind.ORDER_PAID: OrderPaidEvent,
    EventKind.ORDER_UPDATED: OrderUpdatedEvent,
}


def format_frame(data: str) -> str:
    """Wrap a serialized payload as one ``data:`` frame."""
    return f"data: {data}\n\n"


def parse_event(data: dict[str, Any]) -> LiveOrderEvent | None:
    """
    Build the typed event from a decoded frame.

    Accepts either ``event`` or ``kind`` as the discriminator. Returns None for
    unknown kinds. Raises ValueError (pydantic's ValidationError included) when
    a known kind is missing the fields it needs.
    """
    kind = data.get("event") or data.get("kind")
    ts = _parse_timestamp(data.get("ts"))

    if kind == EventKind.CONNECTED:
        return ConnectedEvent(ts=ts)

    snapshot_cls = _SNAPSHOT_EVENTS.get(kind)
    if snapshot_cls is not None:
        if not isinstance(data.get("order"), dict):
            raise ValueError(f"{kind} event without an order snapshot")
        return snapshot_cls(order=OrderOutput.model_validate(data["order"]), ts=ts)

    if kind == EventKind.ORDER_ETA_UPDATED:
        try:
            return OrderEtaUpdatedEvent(
                order_id=int(data["order_id"]),
                estimated_ready_at=_parse_datetime(data["estimated_ready_at"]),
                ts=ts,
            )
        except (KeyError, TypeError) as exc:
            raise ValueError(f"malformed {kind} event") from exc

    if kind == EventKind.ORDER_CANCELLED:
        try:
            order_id = int(data["order_id"])
        except (KeyError, TypeError) as exc:
            raise ValueError(f"malformed {kind} event") from exc
        return OrderCancelledEvent(
            order_id=order_id,
            status=data.get("status") or OrderStatus.CANCELLED,
            ts=ts,
        )

    return None
