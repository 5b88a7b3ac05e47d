"""
FastAPI dependencies for the live order notification core.

The Publisher Registry is created once in the lifespan handler and stored on
app.state; handlers receive it (and the services built on it) through these
dependencies instead of a module-level singleton.
"""

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from rest_api.services.domain import OrderService, PaymentService
from rest_api.services.events import OrderEventPublisher
from shared.infrastructure.db import get_db
from shared.infrastructure.events import PublisherRegistry


def get_registry(request: Request) -> PublisherRegistry:
    return request.app.state.publisher_registry


def get_order_publisher(registry: PublisherRegistry = Depends(get_registry)) -> OrderEventPublisher:
    return OrderEventPublisher(registry)


def get_order_service(
    db: Session = Depends(get_db),
    publisher: OrderEventPublisher = Depends(get_order_publisher),
) -> OrderService:
    return OrderService(db, publisher)


def get_payment_service(
    db: Session = Depends(get_db),
    publisher: OrderEventPublisher = Depends(get_order_publisher),
) -> PaymentService:
    return PaymentService(db, publisher)
