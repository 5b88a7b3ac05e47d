"""
Utilities module: Exceptions, schemas, ETA estimate.
"""

from shared.utils.exceptions import (
    NotFoundError,
    OrderNotFoundError,
    ValidationError,
    InvalidTransitionError,
    PaymentStateError,
)
from shared.utils.eta import estimate_ready_at, count_item_units

__all__ = [
    # exceptions
    "NotFoundError",
    "OrderNotFoundError",
    "ValidationError",
    "InvalidTransitionError",
    "PaymentStateError",
    # eta
    "estimate_ready_at",
    "count_item_units",
]
