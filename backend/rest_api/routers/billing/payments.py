"""
Payments router - /api/payments/*

Card and cash checkout, and the confirm/cancel callbacks that stand in for
a card processor's webhook.
"""

from fastapi import APIRouter, Depends, Request, status

from rest_api.core.dependencies import get_payment_service
from rest_api.services.domain import PaymentService
from shared.rate_limit import limiter, CHECKOUT_RATE_LIMIT
from shared.utils.schemas import (
    CheckoutRequest,
    CheckoutResponse,
    OrderOutput,
    PaymentReferenceRequest,
)


router = APIRouter(prefix="/api/payments", tags=["payments"])


@router.post("/card", response_model=CheckoutResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(CHECKOUT_RATE_LIMIT)
async def checkout_card(
    request: Request,
    body: CheckoutRequest,
    service: PaymentService = Depends(get_payment_service),
) -> CheckoutResponse:
    """Create a card order awaiting payment. Publishes order_created."""
    order = service.checkout_card(body)
    return CheckoutResponse(order=OrderOutput.model_validate(order), payment_reference=order.payment_reference)


@router.post("/cash", response_model=CheckoutResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(CHECKOUT_RATE_LIMIT)
async def checkout_cash(
    request: Request,
    body: CheckoutRequest,
    service: PaymentService = Depends(get_payment_service),
) -> CheckoutResponse:
    """Create a cash order to be paid on collection. Publishes order_created."""
    order = service.checkout_cash(body)
    return CheckoutResponse(order=OrderOutput.model_validate(order))


@router.post("/confirm", response_model=OrderOutput)
async def confirm_card_payment(
    body: PaymentReferenceRequest,
    service: PaymentService = Depends(get_payment_service),
) -> OrderOutput:
    """Card payment succeeded. Publishes order_paid."""
    return OrderOutput.model_validate(service.confirm_card(body.payment_reference))


@router.post("/cancel", response_model=OrderOutput)
async def cancel_card_payment(
    body: PaymentReferenceRequest,
    service: PaymentService = Depends(get_payment_service),
) -> OrderOutput:
    """Card checkout abandoned or failed. Publishes order_cancelled."""
    return OrderOutput.model_validate(service.cancel_card(body.payment_reference))
