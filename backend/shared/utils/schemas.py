"""
Shared Pydantic schemas used across the API and the kitchen display.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from shared.config.constants import Limits


# =============================================================================
# Common Types
# =============================================================================

OrderStatusValue = Literal["new", "paid", "preparing", "prepared", "completed", "cancelled"]
PaymentMethodValue = Literal["card", "cash"]
DeliveryTypeValue = Literal["pickup", "delivery"]


# =============================================================================
# Order Schemas
# =============================================================================


class OrderItemOutput(BaseModel):
    """A line item as stored on the order. `price` is the unit price in GBP."""

    title: str
    qty: int
    price: float

    class Config:
        from_attributes = True


class OrderOutput(BaseModel):
    """Full order snapshot, as returned by the API and carried by live events."""

    id: int
    status: OrderStatusValue
    created_at: datetime
    estimated_ready_at: datetime | None = None
    total: float
    items: list[OrderItemOutput] = []
    paid_by: PaymentMethodValue | None = None
    paid_at: datetime | None = None
    payment_method: PaymentMethodValue | None = None
    payment_reference: str | None = None
    delivery_type: DeliveryTypeValue = "pickup"
    customer_name: str | None = None
    customer_phone: str | None = None
    customer_address: str | None = None
    notes: str | None = None

    class Config:
        from_attributes = True


class OrderListResponse(BaseModel):
    """Envelope for order lists."""

    orders: list[OrderOutput]


class UpdateOrderStatusRequest(BaseModel):
    """Kitchen status change (accept, prepare, complete, reject)."""

    status: OrderStatusValue


class AdjustEtaRequest(BaseModel):
    """Move the estimated ready time by a number of minutes (may be negative)."""

    delta_minutes: int


class ChangePaymentMethodRequest(BaseModel):
    """Switch an unpaid order between card and cash."""

    payment_method: PaymentMethodValue


# =============================================================================
# Checkout Schemas
# =============================================================================


class OrderItemInput(BaseModel):
    """A cart line submitted at checkout."""

    title: str = Field(min_length=1, max_length=200)
    qty: int = Field(ge=1, le=Limits.MAX_ITEM_QTY)
    price: float = Field(ge=0)


class CustomerInput(BaseModel):
    """Customer contact details. Name and phone are checked for blanks by the service."""

    name: str = Field(max_length=100)
    phone: str = Field(max_length=30)
    address: str | None = Field(default=None, max_length=300)


class CheckoutRequest(BaseModel):
    """Checkout body shared by card and cash payments."""

    items: list[OrderItemInput] = Field(default_factory=list, max_length=Limits.MAX_ITEMS_PER_ORDER)
    customer: CustomerInput
    delivery_type: DeliveryTypeValue = "pickup"
    notes: str | None = Field(default=None, max_length=Limits.MAX_NOTES_LENGTH)


class CheckoutResponse(BaseModel):
    """Result of a checkout: the stored order and, for card, the payment reference."""

    order: OrderOutput
    payment_reference: str | None = None


class PaymentReferenceRequest(BaseModel):
    """Identifies a card checkout by the reference issued at creation."""

    payment_reference: str = Field(min_length=1, max_length=100)
