"""
Payment Domain Service.

Checkout for card and cash, plus the confirm/cancel callbacks a card
processor would deliver. Totals are always computed here from the cart,
never taken from the client.
"""

import secrets

from sqlalchemy.orm import Session

from rest_api.models import Order
from rest_api.repositories import OrderRepository
from rest_api.services.events import OrderEventPublisher
from shared.config.constants import OrderStatus, PaymentMethod
from shared.config.logging import payments_logger as logger
from shared.config.settings import settings
from shared.utils.exceptions import (
    MinimumOrderError,
    OrderNotFoundError,
    PaymentStateError,
    ValidationError,
)
from shared.utils.schemas import CheckoutRequest


def compute_total(request: CheckoutRequest) -> float:
    """Sum of qty * unit price, rounded to pence."""
    return round(sum(item.qty * item.price for item in request.items), 2)


def new_payment_reference() -> str:
    return f"pi_{secrets.token_hex(12)}"


class PaymentService:
    """
    Domain service for checkout and card payment callbacks.

    Usage:
        service = PaymentService(db, OrderEventPublisher(registry))
        order = service.checkout_card(body)
    """

    def __init__(self, db: Session, publisher: OrderEventPublisher):
        self._db = db
        self._repo = OrderRepository(db)
        self._publisher = publisher

    def _validate_checkout(self, request: CheckoutRequest) -> float:
        if not request.customer.name.strip():
            raise ValidationError("Full name is required")
        if not request.customer.phone.strip():
            raise ValidationError("Mobile number is required")
        if not request.items:
            raise ValidationError("Cart is empty")

        total = compute_total(request)
        if total < settings.minimum_order_total:
            raise MinimumOrderError(total, settings.minimum_order_total, settings.currency)
        return total

    def _create(self, request: CheckoutRequest, total: float, method: str, reference: str | None) -> Order:
        return self._repo.create(
            items=[item.model_dump() for item in request.items],
            total=total,
            status=OrderStatus.NEW,
            payment_method=method,
            payment_reference=reference,
            delivery_type=request.delivery_type,
            customer_name=request.customer.name.strip(),
            customer_phone=request.customer.phone.strip(),
            customer_address=request.customer.address,
            notes=request.notes,
        )

    def checkout_card(self, request: CheckoutRequest) -> Order:
        """Create a card order awaiting confirmation. Publishes order_created."""
        total = self._validate_checkout(request)
        order = self._create(request, total, PaymentMethod.CARD, new_payment_reference())
        logger.info(
            "Card checkout created",
            order_id=order.id,
            total=total,
            payment_reference=order.payment_reference,
        )
        self._publisher.order_created(order)
        return order

    def checkout_cash(self, request: CheckoutRequest) -> Order:
        """Create a cash order, collected later at the counter. Publishes order_created."""
        total = self._validate_checkout(request)
        order = self._create(request, total, PaymentMethod.CASH, None)
        logger.info("Cash checkout created", order_id=order.id, total=total)
        self._publisher.order_created(order)
        return order

    def confirm_card(self, reference: str) -> Order:
        """Card payment succeeded: new -> paid. Publishes order_paid."""
        order = self._get_by_reference(reference)
        if order.paid_at is not None:
            raise PaymentStateError("Order is already paid", order_id=order.id)
        if order.status == OrderStatus.CANCELLED:
            raise PaymentStateError("Cancelled orders cannot be paid", order_id=order.id)

        next_status = OrderStatus.PAID if order.status == OrderStatus.NEW else None
        order = self._repo.mark_paid(order.id, PaymentMethod.CARD, status=next_status)
        logger.info("Card payment confirmed", order_id=order.id, payment_reference=reference)
        self._publisher.order_paid(order)
        return order

    def cancel_card(self, reference: str) -> Order:
        """Card checkout abandoned or failed. Publishes order_cancelled."""
        order = self._get_by_reference(reference)
        if order.paid_at is not None:
            raise PaymentStateError("Paid orders cannot be cancelled here", order_id=order.id)
        if order.status in OrderStatus.TERMINAL:
            raise PaymentStateError(f"Order is already {order.status}", order_id=order.id)

        order = self._repo.cancel(order.id)
        logger.info("Card checkout cancelled", order_id=order.id, payment_reference=reference)
        self._publisher.order_cancelled(order)
        return order

    def _get_by_reference(self, reference: str) -> Order:
        order = self._repo.get_by_payment_reference(reference)
        if order is None:
            raise OrderNotFoundError(reference, lookup="payment_reference")
        return order
