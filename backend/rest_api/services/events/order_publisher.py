"""
Order Event Publisher.

Turns committed order changes into live order events. Callers invoke these
methods only after the write has committed. Publishing never fails the
request: any error (including a snapshot that cannot be serialized) is
logged and swallowed, and the committed change stands.
"""

from rest_api.models import Order
from shared.config.logging import get_logger
from shared.infrastructure.events import (
    LiveOrderEvent,
    OrderCancelledEvent,
    OrderCreatedEvent,
    OrderEtaUpdatedEvent,
    OrderPaidEvent,
    OrderUpdatedEvent,
    PublisherRegistry,
)
from shared.utils.eta import ensure_aware
from shared.utils.schemas import OrderOutput

logger = get_logger(__name__)


class OrderEventPublisher:
    """
    One method per trigger, each publishing exactly one event.

    Usage:
        publisher = OrderEventPublisher(registry)
        order = repo.mutate_status(order_id, "preparing")
        publisher.order_updated(order)
    """

    def __init__(self, registry: PublisherRegistry):
        self._registry = registry

    def order_created(self, order: Order) -> int:
        return self._publish_snapshot(OrderCreatedEvent, order)

    def order_paid(self, order: Order) -> int:
        return self._publish_snapshot(OrderPaidEvent, order)

    def order_updated(self, order: Order) -> int:
        return self._publish_snapshot(OrderUpdatedEvent, order)

    def order_eta_updated(self, order: Order) -> int:
        try:
            event = OrderEtaUpdatedEvent(
                order_id=order.id,
                estimated_ready_at=ensure_aware(order.estimated_ready_at),
            )
        except Exception as e:
            logger.error("Failed to build ETA event", order_id=order.id, error=str(e))
            return 0
        return self._publish(event, order.id)

    def order_cancelled(self, order: Order) -> int:
        return self._publish(OrderCancelledEvent(order_id=order.id, status=order.status), order.id)

    def _publish_snapshot(self, event_cls: type, order: Order) -> int:
        try:
            event = event_cls(order=OrderOutput.model_validate(order))
        except Exception as e:
            logger.error("Failed to build order snapshot", order_id=order.id, event=event_cls.kind, error=str(e))
            return 0
        return self._publish(event, order.id)

    def _publish(self, event: LiveOrderEvent, order_id: int) -> int:
        try:
            delivered = self._registry.publish(event)
        except Exception as e:
            logger.error("Failed to publish live order event", order_id=order_id, event=event.kind, error=str(e))
            return 0
        logger.info("Live order event published", order_id=order_id, event=event.kind, delivered=delivered)
        return delivered
