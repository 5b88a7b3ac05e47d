"""
Application settings loaded from environment variables.
Uses pydantic-settings for type-safe configuration.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with defaults for development."""

    # Database
    database_url: str = "sqlite:///./live_orders.db"

    # Comma-separated list of allowed origins (empty uses default localhost list)
    allowed_origins: str = ""

    # Server
    rest_api_port: int = 4000

    # Environment
    environment: str = "development"
    debug: bool = True

    # Live order stream
    # Idle connections get a comment frame this often so dead sockets surface as write errors
    sse_keepalive_seconds: float = 15.0
    # Frames buffered per dashboard before the subscriber is considered dead
    sse_subscriber_queue_size: int = 100

    # Kitchen ETA estimate used when an order has no explicit ready time
    eta_base_minutes: int = 5
    eta_per_item_minutes: int = 8
    eta_max_adjust_minutes: int = 120

    # Checkout
    checkout_rate_limit: str = "10/minute"
    minimum_order_total: float = 0.50  # GBP
    currency: str = "gbp"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"

    def validate_production_settings(self) -> list[str]:
        """
        Validate that the configuration is safe for production.
        Returns a list of validation errors. Empty list means all checks pass.
        """
        errors = []

        if self.environment == "production":
            if self.debug:
                errors.append("DEBUG must be False in production")

            if not self.allowed_origins:
                errors.append(
                    "ALLOWED_ORIGINS must be set in production (comma-separated list of allowed domains)"
                )

            if self.database_url.startswith("sqlite"):
                errors.append("DATABASE_URL must point to a server database in production")

        if self.sse_keepalive_seconds <= 0:
            errors.append("SSE_KEEPALIVE_SECONDS must be positive")

        if self.sse_subscriber_queue_size < 1:
            errors.append("SSE_SUBSCRIBER_QUEUE_SIZE must be at least 1")

        return errors


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Convenience exports
settings = get_settings()

DATABASE_URL = settings.database_url
