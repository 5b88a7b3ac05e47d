"""
Kitchen display settings loaded from KITCHEN_DISPLAY_* environment variables.
Uses pydantic-settings for type-safe configuration.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings


class DashboardSettings(BaseSettings):
    """Client settings with defaults for a dashboard next to a local API."""

    api_base_url: str = "http://localhost:4000"
    request_timeout_seconds: float = 10.0
    # Longer than the server keep-alive interval so a silent socket means a dead one
    stream_read_timeout_seconds: float = 45.0
    reconnect_delay_seconds: float = 3.0

    # Acknowledged order ids survive restarts; entries older than this are dropped.
    # None keeps acknowledgments in memory only.
    ack_store_path: str | None = "~/.kitchen_display/acknowledged.json"
    ack_retention_hours: float = 24.0

    alarm_interval_seconds: float = 2.2
    refresh_interval_seconds: float = 1.0

    # Must match the server's estimate
    eta_base_minutes: int = 5
    eta_per_item_minutes: int = 8

    class Config:
        env_prefix = "KITCHEN_DISPLAY_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


@lru_cache
def get_dashboard_settings() -> DashboardSettings:
    """Get cached settings instance."""
    return DashboardSettings()
