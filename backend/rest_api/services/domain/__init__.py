"""
Domain Services - Application Layer.

Services contain business logic and orchestrate operations.
They use Repositories for data access and publish live order events
after every committed change.

Structure:
    Router (thin controller)
        ↓
    Service (business logic)  ← YOU ARE HERE
        ↓
    Repository (data access)
        ↓
    Model (entity)

Usage:
    from rest_api.services.domain import OrderService

    # In router
    service = OrderService(db, publisher)
    order = service.update_status(order_id, "preparing")
"""

from .order_service import OrderService
from .payment_service import PaymentService

__all__ = [
    "OrderService",
    "PaymentService",
]
