"""
Configuration settings for the Pet Shop Shipping Admin.

This module handles application configuration using Pydantic settings.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings."""

    # Application
    app_name: str = "Pet Shop Shipping Admin"
    api_version: str = "v1"
    debug: bool = True
    log_level: str = "INFO"

    # Storefront Backend (orders / tracking REST API)
    backend_url: str = "http://localhost:8000"
    tracking_api_path: str = "/api/v1/tracking"
    orders_api_path: str = "/api/v1/orders"
    # None keeps the HTTP client's own default timeout
    request_timeout_seconds: Optional[float] = None

    # Session / Credential Store
    session_backend: str = "memory"  # memory | redis
    token_storage_key: str = "token"
    tracking_history_key: str = "trackingHistory"
    tracking_history_limit: int = 5

    # Redis Configuration
    redis_url: str = "redis://localhost:6379/0"
    redis_decode_responses: bool = True

    # Shipment Rules
    strict_special_exit: bool = False
    estimated_delivery_min_days: int = 3
    estimated_delivery_max_days: int = 5

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
