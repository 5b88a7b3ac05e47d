"""
Centralized HTTP exceptions for consistent error handling.

Usage:
    from shared.utils.exceptions import NotFoundError, ValidationError

    raise OrderNotFoundError(order_id)
    raise ValidationError("Cart is empty")
"""

from fastapi import HTTPException, status
from typing import Any

from shared.config.logging import get_logger

logger = get_logger(__name__)


class AppException(HTTPException):
    """
    Base exception with automatic logging.

    All custom exceptions should inherit from this class
    to ensure consistent logging and response format.
    """

    def __init__(
        self,
        status_code: int,
        detail: str,
        log_level: str = "warning",
        headers: dict[str, str] | None = None,
        **log_context: Any,
    ):
        log_fn = getattr(logger, log_level, logger.warning)
        log_fn(detail, status_code=status_code, **log_context)

        super().__init__(status_code=status_code, detail=detail, headers=headers)


# =============================================================================
# 404 Not Found Errors
# =============================================================================


class NotFoundError(AppException):
    """
    Entity not found error (404).

    Usage:
        raise NotFoundError("Order", 42)
    """

    def __init__(self, entity: str, entity_id: int | str | None = None, **log_context: Any):
        if entity_id is not None:
            detail = f"{entity} {entity_id} not found"
        else:
            detail = f"{entity} not found"

        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            log_level="warning",
            entity=entity,
            entity_id=entity_id,
            **log_context,
        )


class OrderNotFoundError(NotFoundError):
    """Order not found."""

    def __init__(self, order_id: int | str | None = None, **log_context: Any):
        super().__init__("Order", order_id, **log_context)


# =============================================================================
# 400 Bad Request Errors
# =============================================================================


class ValidationError(AppException):
    """
    Business validation error (400).

    Usage:
        raise ValidationError("Cart is empty")
    """

    def __init__(self, detail: str, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            log_level="info",
            **log_context,
        )


class InvalidTransitionError(ValidationError):
    """Requested status change is not allowed from the current status."""

    def __init__(self, current: str, target: str, **log_context: Any):
        super().__init__(
            f"Cannot move order from '{current}' to '{target}'",
            current_status=current,
            target_status=target,
            **log_context,
        )


class PaymentStateError(ValidationError):
    """Payment operation not valid for the order's payment state."""

    def __init__(self, detail: str, **log_context: Any):
        super().__init__(detail, **log_context)


class MinimumOrderError(ValidationError):
    """Checkout total below the processor minimum."""

    def __init__(self, total: float, minimum: float, currency: str, **log_context: Any):
        super().__init__(
            f"Order total must be at least {minimum:.2f} {currency.upper()}",
            total=total,
            minimum=minimum,
            **log_context,
        )


# =============================================================================
# 500 Internal Errors
# =============================================================================


class DatabaseError(AppException):
    """A write could not be committed. The transaction has been rolled back."""

    def __init__(self, operation: str, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to {operation} - please try again",
            log_level="error",
            operation=operation,
            **log_context,
        )
