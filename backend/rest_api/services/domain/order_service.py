"""
Order Domain Service.

Kitchen-side order operations. Every mutation commits through the
repository first and publishes its live order event only afterwards; a
failed write raises before anything is published.
"""

from typing import Sequence

from sqlalchemy.orm import Session

from rest_api.models import Order
from rest_api.repositories import OrderRepository
from rest_api.services.events import OrderEventPublisher
from shared.config.constants import (
    STATUS_TRANSITIONS,
    OrderStatus,
    PaymentMethod,
)
from shared.config.logging import orders_logger as logger
from shared.config.settings import settings
from shared.utils.exceptions import (
    InvalidTransitionError,
    PaymentStateError,
    ValidationError,
)



class OrderService:
    """
    Domain service for Order operations.

    Usage:
        service = OrderService(db, OrderEventPublisher(registry))
        order = service.update_status(42, "preparing")
    """

    def __init__(self, db: Session, publisher: OrderEventPublisher):
        self._db = db
        self._repo = OrderRepository(db)
        self._publisher = publisher

    # =========================================================================
    # Reads
    # =========================================================================

    def get(self, order_id: int) -> Order:
        return self._repo.get_or_raise(order_id)

    def list_orders(self, status: str | None = None, limit: int | None = None, offset: int = 0) -> Sequence[Order]:
        return self._repo.list_orders(status=status, limit=limit, offset=offset)

    def kitchen_orders(self) -> Sequence[Order]:
        return self._repo.fetch_kitchen_relevant_orders()

    # =========================================================================
    # Mutations
    # =========================================================================

    def update_status(self, order_id: int, new_status: str) -> Order:
        """Accept, prepare, complete or reject an order. Publishes order_updated."""
        order = self._repo.get_or_raise(order_id)
        allowed = STATUS_TRANSITIONS.get(order.status, [])
        if new_status not in allowed:
            raise InvalidTransitionError(order.status, new_status, order_id=order_id)

        if new_status == OrderStatus.CANCELLED:
            order = self._repo.cancel(order_id)
        else:
            order = self._repo.mutate_status(order_id, new_status)

        logger.info("Order status changed", order_id=order_id, status=new_status)
        self._publisher.order_updated(order)
        return order

    def adjust_eta(self, order_id: int, delta_minutes: int) -> Order:
        """Shift the estimated ready time. Publishes order_eta_updated."""
        limit = settings.eta_max_adjust_minutes
        if delta_minutes == 0:
            raise ValidationError("delta_minutes must not be zero", order_id=order_id)
        if abs(delta_minutes) > limit:
            raise ValidationError(
                f"delta_minutes must be between -{limit} and {limit}",
                order_id=order_id,
                delta_minutes=delta_minutes,
            )

        order = self._repo.adjust_eta(order_id, delta_minutes)
        logger.info(
            "Order ETA adjusted",
            order_id=order_id,
            delta_minutes=delta_minutes,
            estimated_ready_at=order.estimated_ready_at,
        )
        self._publisher.order_eta_updated(order)
        return order

    def cancel(self, order_id: int) -> Order:
        """Cancel from any non-terminal status. Publishes order_cancelled."""
        order = self._repo.get_or_raise(order_id)
        if order.status in OrderStatus.TERMINAL:
            raise InvalidTransitionError(order.status, OrderStatus.CANCELLED, order_id=order_id)

        order = self._repo.cancel(order_id)
        logger.info("Order cancelled", order_id=order_id)
        self._publisher.order_cancelled(order)
        return order

    def mark_paid(self, order_id: int, method: str = PaymentMethod.CASH) -> Order:
        """Record payment taken at the counter. Publishes order_paid."""
        order = self._repo.get_or_raise(order_id)
        if order.paid_at is not None:
            raise PaymentStateError("Order is already paid", order_id=order_id)
        if order.status == OrderStatus.CANCELLED:
            raise PaymentStateError("Cancelled orders cannot be paid", order_id=order_id)

        next_status = OrderStatus.PAID if order.status == OrderStatus.NEW else None
        order = self._repo.mark_paid(order_id, method, status=next_status)
        logger.info("Order marked as paid", order_id=order_id, paid_by=method)
        self._publisher.order_paid(order)
        return order

    def change_payment_method(self, order_id: int, method: str) -> Order:
        """Switch between card and cash while unpaid. Publishes order_updated."""
        order = self._repo.get_or_raise(order_id)
        if order.paid_at is not None:
            raise PaymentStateError("Payment method cannot be changed after payment", order_id=order_id)

        order = self._repo.set_payment_method(order_id, method)
        logger.info("Order payment method changed", order_id=order_id, payment_method=method)
        self._publisher.order_updated(order)
        return order
