"""
SQLAlchemy ORM Models Package.

- base: Base class and TimestampMixin
- order: Order, OrderItem
"""

from .base import Base, TimestampMixin
from .order import Order, OrderItem

__all__ = [
    "Base",
    "TimestampMixin",
    "Order",
    "OrderItem",
]
