"""
Orders router.
Kitchen operations on orders. Every mutation publishes one live order event
after its write commits.
"""

from fastapi import APIRouter, Depends, Query

from rest_api.core.dependencies import get_order_service
from rest_api.services.domain import OrderService
from shared.config.constants import Limits, PaymentMethod
from shared.utils.schemas import (
    AdjustEtaRequest,
    ChangePaymentMethodRequest,
    OrderListResponse,
    OrderOutput,
    OrderStatusValue,
    UpdateOrderStatusRequest,
)


router = APIRouter(prefix="/api/orders", tags=["orders"])


@router.get("", response_model=OrderListResponse)
def list_orders(
    status: OrderStatusValue | None = None,
    limit: int = Query(default=Limits.DEFAULT_PAGE_SIZE, ge=1, le=Limits.MAX_PAGE_SIZE),
    offset: int = Query(default=0, ge=0),
    service: OrderService = Depends(get_order_service),
) -> OrderListResponse:
    """Order history, newest first, optionally filtered by status."""
    orders = service.list_orders(status=status, limit=limit, offset=offset)
    return OrderListResponse(orders=[OrderOutput.model_validate(o) for o in orders])


@router.get("/{order_id}", response_model=OrderOutput)
def get_order(order_id: int, service: OrderService = Depends(get_order_service)) -> OrderOutput:
    return OrderOutput.model_validate(service.get(order_id))


# Mutations are async so event publishing runs on the event loop that owns
# the publisher registry.


@router.patch("/{order_id}", response_model=OrderOutput)
async def update_order_status(
    order_id: int,
    body: UpdateOrderStatusRequest,
    service: OrderService = Depends(get_order_service),
) -> OrderOutput:
    """Accept, prepare, complete or reject an order. Publishes order_updated."""
    return OrderOutput.model_validate(service.update_status(order_id, body.status))


@router.post("/{order_id}/adjust_eta", response_model=OrderOutput)
async def adjust_order_eta(
    order_id: int,
    body: AdjustEtaRequest,
    service: OrderService = Depends(get_order_service),
) -> OrderOutput:
    """Move the estimated ready time by ± minutes. Publishes order_eta_updated."""
    return OrderOutput.model_validate(service.adjust_eta(order_id, body.delta_minutes))


@router.post("/{order_id}/cancel", response_model=OrderOutput)
async def cancel_order(order_id: int, service: OrderService = Depends(get_order_service)) -> OrderOutput:
    """Cancel an order and clear its payment. Publishes order_cancelled."""
    return OrderOutput.model_validate(service.cancel(order_id))


@router.patch("/{order_id}/pay", response_model=OrderOutput)
async def mark_order_paid(order_id: int, service: OrderService = Depends(get_order_service)) -> OrderOutput:
    """Record cash collected at the counter. Publishes order_paid."""
    return OrderOutput.model_validate(service.mark_paid(order_id, PaymentMethod.CASH))


@router.patch("/{order_id}/payment-method", response_model=OrderOutput)
async def change_payment_method(
    order_id: int,
    body: ChangePaymentMethodRequest,
    service: OrderService = Depends(get_order_service),
) -> OrderOutput:
    """Switch an unpaid order between card and cash. Publishes order_updated."""
    return OrderOutput.model_validate(service.change_payment_method(order_id, body.payment_method))
