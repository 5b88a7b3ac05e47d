"""
Order Repository - the Order Store.

Reads use eager loading of items. Writes commit through safe_commit, so a
method that returns has durably stored its change; a method that raises has
rolled it back.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Sequence

from sqlalchemy import Select, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from rest_api.models import Order, OrderItem
from shared.config.constants import KITCHEN_STATUSES, DeliveryType, Limits, OrderStatus
from shared.config.settings import settings
from shared.infrastructure.db import safe_commit
from shared.utils.eta import ensure_aware, estimate_ready_at
from shared.utils.exceptions import DatabaseError, OrderNotFoundError
from .base import BaseRepository, RepositoryFilters


@dataclass
class OrderFilters(RepositoryFilters):
    """Filters specific to orders."""

    status: str | None = None
    statuses: list[str] | None = None


class OrderRepository(BaseRepository[Order]):
    """Repository for Order entities. Items are always eager loaded."""

    @property
    def model(self) -> type[Order]:
        return Order

    def _base_query(self) -> Select:
        return (
            select(Order)
            .options(selectinload(Order.items))
            .order_by(Order.created_at.desc(), Order.id.desc())
        )

    def _apply_filters(self, query: Select, filters: RepositoryFilters) -> Select:
        if not isinstance(filters, OrderFilters):
            filters = OrderFilters(**filters.__dict__)

        if filters.status:
            query = query.where(Order.status == filters.status)
        elif filters.statuses:
            query = query.where(Order.status.in_(filters.statuses))

        return query

    # =========================================================================
    # Reads
    # =========================================================================

    def get(self, order_id: int) -> Order | None:
        return self.find_by_id(order_id)

    def get_or_raise(self, order_id: int) -> Order:
        order = self.find_by_id(order_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        return order

    def get_by_payment_reference(self, reference: str) -> Order | None:
        query = self._base_query().where(Order.payment_reference == reference)
        return self._db.scalar(query)

    def fetch_kitchen_relevant_orders(self) -> Sequence[Order]:
        """Orders currently shown on the kitchen dashboard, newest first."""
        query = self._base_query().where(Order.status.in_(sorted(KITCHEN_STATUSES)))
        return self._db.execute(query).scalars().unique().all()

    def list_orders(
        self,
        status: str | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> Sequence[Order]:
        filters = OrderFilters(
            status=status,
            limit=limit or Limits.DEFAULT_PAGE_SIZE,
            offset=offset,
        )
        return self.find_all(filters)

    # =========================================================================
    # Writes
    # =========================================================================

    def create(
        self,
        items: list[dict],
        total: float,
        status: str,
        payment_method: str | None = None,
        paid_by: str | None = None,
        payment_reference: str | None = None,
        delivery_type: str = DeliveryType.PICKUP,
        customer_name: str | None = None,
        customer_phone: str | None = None,
        customer_address: str | None = None,
        notes: str | None = None,
    ) -> Order:
        order = Order(
            status=status,
            total=total,
            payment_method=payment_method,
            paid_by=paid_by,
            payment_reference=payment_reference,
            delivery_type=delivery_type,
            customer_name=customer_name,
            customer_phone=customer_phone,
            customer_address=customer_address,
            notes=notes,
        )
        order.items = [
            OrderItem(position=i, title=item["title"], qty=item["qty"], price=item["price"])
            for i, item in enumerate(items)
        ]
        self._db.add(order)
        return self._commit(order, "create order")

    def mutate_status(self, order_id: int, new_status: str) -> Order:
        order = self.get_or_raise(order_id)
        order.status = new_status
        return self._commit(order)

    def adjust_eta(self, order_id: int, delta_minutes: int) -> Order:
        """
        Move the ETA by delta_minutes.

        Without an explicit ETA the base is the item-count estimate counted
        from created_at, the same estimate the kitchen display shows.
        """
        order = self.get_or_raise(order_id)
        if order.estimated_ready_at is not None:
            base = ensure_aware(order.estimated_ready_at)
        else:
            base = estimate_ready_at(
                order.created_at,
                order.items,
                base_minutes=settings.eta_base_minutes,
                per_item_minutes=settings.eta_per_item_minutes,
            )
        order.estimated_ready_at = base + timedelta(minutes=delta_minutes)
        return self._commit(order)

    def mark_paid(self, order_id: int, method: str, status: str | None = None) -> Order:
        order = self.get_or_raise(order_id)
        order.paid_by = method
        order.payment_method = method
        order.paid_at = datetime.now(timezone.utc)
        if status is not None:
            order.status = status
        return self._commit(order)

    def cancel(self, order_id: int) -> Order:
        order = self.get_or_raise(order_id)
        order.status = OrderStatus.CANCELLED
        order.paid_by = None
        return self._commit(order)

    def set_payment_method(self, order_id: int, method: str) -> Order:
        order = self.get_or_raise(order_id)
        order.payment_method = method
        return self._commit(order)

    def _commit(self, order: Order, operation: str = "update order") -> Order:
        try:
            safe_commit(self._db)
        except SQLAlchemyError as e:
            raise DatabaseError(operation, order_id=order.id, error=str(e)) from e
        self._db.refresh(order)
        return order
