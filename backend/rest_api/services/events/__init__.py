"""
Event publishing for order changes.
"""

from .order_publisher import OrderEventPublisher

__all__ = ["OrderEventPublisher"]
