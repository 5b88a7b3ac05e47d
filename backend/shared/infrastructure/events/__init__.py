"""
Live order notification core: typed events and the in-process Publisher Registry.
"""

from shared.infrastructure.events.event_schema import (
    ConnectedEvent,
    LiveOrderEvent,
    OrderCancelledEvent,
    OrderCreatedEvent,
    OrderEtaUpdatedEvent,
    OrderPaidEvent,
    OrderUpdatedEvent,
    format_frame,
    parse_event,
)
from shared.infrastructure.events.registry import (
    PublisherRegistry,
    QueueSink,
    SubscriberHandle,
    SubscriberSink,
)

__all__ = [
    "ConnectedEvent",
    "LiveOrderEvent",
    "OrderCancelledEvent",
    "OrderCreatedEvent",
    "OrderEtaUpdatedEvent",
    "OrderPaidEvent",
    "OrderUpdatedEvent",
    "format_frame",
    "parse_event",
    "PublisherRegistry",
    "QueueSink",
    "SubscriberHandle",
    "SubscriberSink",
]
