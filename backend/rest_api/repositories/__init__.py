"""
Repository Pattern implementation.
Centralizes data access with guaranteed eager loading.

Usage:
    from rest_api.repositories import OrderRepository

    repo = OrderRepository(db)
    orders = repo.fetch_kitchen_relevant_orders()
    order = repo.mutate_status(42, "preparing")
"""

from .base import BaseRepository, RepositoryFilters
from .order import OrderRepository, OrderFilters

__all__ = [
    # Base
    "BaseRepository",
    "RepositoryFilters",
    # Order
    "OrderRepository",
    "OrderFilters",
]
