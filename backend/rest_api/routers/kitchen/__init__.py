"""
Kitchen routers - /api/orders/*, /api/live-orders/*
Order operations and the live order stream for kitchen dashboards.
"""

from .orders import router as orders_router
from .live_orders import router as live_orders_router

__all__ = ["orders_router", "live_orders_router"]
