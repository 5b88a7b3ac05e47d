"""
Configuration module: Settings, logging, constants.
"""

from shared.config.settings import settings, get_settings, DATABASE_URL
from shared.config.logging import get_logger, setup_logging
from shared.config.constants import (
    OrderStatus,
    PaymentMethod,
    DeliveryType,
    EventKind,
    Limits,
    KITCHEN_STATUSES,
    NEW_ARRIVAL_STATUSES,
)

__all__ = [
    # settings
    "settings",
    "get_settings",
    "DATABASE_URL",
    # logging
    "get_logger",
    "setup_logging",
    # constants
    "OrderStatus",
    "PaymentMethod",
    "DeliveryType",
    "EventKind",
    "Limits",
    "KITCHEN_STATUSES",
    "NEW_ARRIVAL_STATUSES",
]
