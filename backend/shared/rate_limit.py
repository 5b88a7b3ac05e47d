"""
Rate limiting utilities using slowapi.
Protects the public checkout endpoints from abuse.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from fastapi import Request
from fastapi.responses import JSONResponse

from shared.config.settings import settings


# Create limiter instance using client IP as key
limiter = Limiter(key_func=get_remote_address)

# Limit applied to card and cash checkout
CHECKOUT_RATE_LIMIT = settings.checkout_rate_limit


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """
    Custom handler for rate limit exceeded errors.
    Returns a JSON response with retry information.
    """
    return JSONResponse(
        status_code=429,
        content={
            "detail": "Rate limit exceeded. Please try again later.",
            "retry_after": exc.detail,
        },
        headers={"Retry-After": str(exc.detail)},
    )


# Usage in router:
# from shared.rate_limit import limiter, CHECKOUT_RATE_LIMIT
#
# @router.post("/card")
# @limiter.limit(CHECKOUT_RATE_LIMIT)
# async def checkout_card(request: Request, ...):
#     ...
