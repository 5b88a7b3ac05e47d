"""
Billing routers - /api/payments/*
Checkout and card payment callbacks.
"""

from .payments import router as payments_router

__all__ = ["payments_router"]
