"""
Centralized constants for the live orders backend.
Avoids magic strings for statuses, payment methods and event kinds.

Usage:
    from shared.config.constants import OrderStatus, KITCHEN_STATUSES

    if order.status in KITCHEN_STATUSES:
        ...
"""

from typing import Final


# =============================================================================
# Order Status
# =============================================================================


class OrderStatus:
    """Order status constants. The set is closed and mutually exclusive."""

    NEW: Final[str] = "new"  # Accepted for payment, not yet picked up by the kitchen
    PAID: Final[str] = "paid"  # Payment confirmed before the kitchen accepted it
    PREPARING: Final[str] = "preparing"
    PREPARED: Final[str] = "prepared"
    COMPLETED: Final[str] = "completed"
    CANCELLED: Final[str] = "cancelled"

    ALL: Final[list[str]] = [NEW, PAID, PREPARING, PREPARED, COMPLETED, CANCELLED]
    TERMINAL: Final[list[str]] = [COMPLETED, CANCELLED]


# Statuses shown on the live kitchen dashboard
KITCHEN_STATUSES: Final[frozenset[str]] = frozenset(
    {OrderStatus.NEW, OrderStatus.PAID, OrderStatus.PREPARING, OrderStatus.PREPARED}
)

# Statuses of orders nobody in the kitchen has accepted yet
NEW_ARRIVAL_STATUSES: Final[frozenset[str]] = frozenset({OrderStatus.NEW, OrderStatus.PAID})

# Status changes the kitchen may request through the status endpoint
STATUS_TRANSITIONS: Final[dict[str, list[str]]] = {
    OrderStatus.NEW: [OrderStatus.PREPARING, OrderStatus.CANCELLED],
    OrderStatus.PAID: [OrderStatus.PREPARING, OrderStatus.CANCELLED],
    OrderStatus.PREPARING: [OrderStatus.PREPARED, OrderStatus.CANCELLED],
    OrderStatus.PREPARED: [OrderStatus.COMPLETED, OrderStatus.CANCELLED],
}


# =============================================================================
# Payment
# =============================================================================


class PaymentMethod:
    """How an order is (or will be) paid."""

    CARD: Final[str] = "card"
    CASH: Final[str] = "cash"

    ALL: Final[list[str]] = [CARD, CASH]


class DeliveryType:
    """Fulfilment type chosen at checkout."""

    PICKUP: Final[str] = "pickup"
    DELIVERY: Final[str] = "delivery"

    ALL: Final[list[str]] = [PICKUP, DELIVERY]


# =============================================================================
# Live Order Events
# =============================================================================


class EventKind:
    """Discriminator values carried in the `event` field of every stream frame."""

    CONNECTED: Final[str] = "connected"
    ORDER_CREATED: Final[str] = "order_created"
    ORDER_PAID: Final[str] = "order_paid"
    ORDER_UPDATED: Final[str] = "order_updated"
    ORDER_ETA_UPDATED: Final[str] = "order_eta_updated"
    ORDER_CANCELLED: Final[str] = "order_cancelled"


# =============================================================================
# Limits
# =============================================================================


class Limits:
    """Validation and pagination limits."""

    DEFAULT_PAGE_SIZE: Final[int] = 50
    MAX_PAGE_SIZE: Final[int] = 200
    MAX_ITEMS_PER_ORDER: Final[int] = 100
    MAX_ITEM_QTY: Final[int] = 99
    MAX_NOTES_LENGTH: Final[int] = 1000
