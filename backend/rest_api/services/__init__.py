"""
Services module for business logic.

- domain/: Application services (order and payment operations)
- events/: Live order event publishing

Usage:
    from rest_api.services.domain import OrderService
    from rest_api.services.events import OrderEventPublisher
"""
