"""
Kitchen ETA estimate.

Used by the server when adjusting an order with no explicit ready time and by
the kitchen display when deriving countdowns, so both sides agree on the base.
"""

from collections.abc import Iterable
from datetime import datetime, timedelta, timezone
from typing import Any

DEFAULT_BASE_MINUTES = 5
DEFAULT_PER_ITEM_MINUTES = 8


def count_item_units(items: Iterable[Any]) -> int:
    """
    Total quantity across line items.

    Accepts ORM rows, pydantic models or plain dicts; a missing or
    non-positive quantity counts as one unit.
    """
    total = 0
    for item in items or ():
        qty = item.get("qty") if isinstance(item, dict) else getattr(item, "qty", None)
        try:
            qty = int(qty)
        except (TypeError, ValueError):
            qty = 1
        total += qty if qty > 0 else 1
    return total


def estimate_ready_at(
    created_at: datetime,
    items: Iterable[Any],
    base_minutes: int = DEFAULT_BASE_MINUTES,
    per_item_minutes: int = DEFAULT_PER_ITEM_MINUTES,
) -> datetime:
    """Estimated ready time when no explicit ETA has been set."""
    minutes = base_minutes + per_item_minutes * count_item_units(items)
    return ensure_aware(created_at) + timedelta(minutes=minutes)


def ensure_aware(value: datetime) -> datetime:
    """Treat naive datetimes (SQLite round-trips) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
