"""
Order Models: Order, OrderItem.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, Numeric, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, IdType, TimestampMixin


class Order(TimestampMixin, Base):
    """
    A customer order as seen by the kitchen.

    Lifecycle: new -> (paid) -> preparing -> prepared -> completed,
    with cancelled reachable from any non-terminal status.

    - payment_method: what the customer chose at checkout (card or cash)
    - paid_by: how it was actually paid; set once when payment is confirmed
    - payment_reference: opaque card payment id issued at checkout
    """

    __tablename__ = "customer_order"

    id: Mapped[int] = mapped_column(IdType, primary_key=True)
    status: Mapped[str] = mapped_column(Text, default="new", nullable=False, index=True)
    estimated_ready_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    # GBP, fixed once the order is created
    total: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=False)

    payment_method: Mapped[Optional[str]] = mapped_column(Text)
    paid_by: Mapped[Optional[str]] = mapped_column(Text)
    paid_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    payment_reference: Mapped[Optional[str]] = mapped_column(Text, unique=True)

    delivery_type: Mapped[str] = mapped_column(Text, default="pickup", nullable=False)
    customer_name: Mapped[Optional[str]] = mapped_column(Text)
    customer_phone: Mapped[Optional[str]] = mapped_column(Text)
    customer_address: Mapped[Optional[str]] = mapped_column(Text)
    notes: Mapped[Optional[str]] = mapped_column(Text)

    items: Mapped[list["OrderItem"]] = relationship(
        back_populates="order",
        order_by="OrderItem.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __table_args__ = (
        CheckConstraint("total >= 0", name="chk_order_total_non_negative"),
        # Live orders list: kitchen statuses, newest first
        Index("ix_order_status_created", "status", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Order(id={self.id}, status='{self.status}', total={self.total})>"


class OrderItem(Base):
    """A line item. Immutable after the order is created."""

    __tablename__ = "order_item"

    id: Mapped[int] = mapped_column(IdType, primary_key=True)
    order_id: Mapped[int] = mapped_column(
        IdType, ForeignKey("customer_order.id", ondelete="CASCADE"), nullable=False, index=True
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    qty: Mapped[int] = mapped_column(Integer, nullable=False)
    # Unit price in GBP
    price: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=False)

    order: Mapped["Order"] = relationship(back_populates="items")

    __table_args__ = (
        CheckConstraint("qty > 0", name="chk_order_item_qty_positive"),
        CheckConstraint("price >= 0", name="chk_order_item_price_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<OrderItem(id={self.id}, title='{self.title}', qty={self.qty})>"
