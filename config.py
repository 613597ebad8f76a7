"""Configuration management for URL shortener."""

from typing import Literal, Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class Config(BaseSettings):
    """Application configuration."""

    # Store settings
    store_backend: Literal["memory", "redis"] = Field(
        default="memory",
        description="Mapping store backend: 'memory' (process lifetime) or 'redis'"
    )

    redis_url: Optional[str] = Field(
        default=None,
        description="Redis connection URL, required when store_backend is 'redis'"
    )

    redis_fallback_to_memory: bool = Field(
        default=True,
        description="Use the in-memory store when Redis cannot be reached at startup"
    )

    redis_key_prefix: str = Field(
        default="url:",
        description="Key prefix for mapping hashes in Redis"
    )

    analytics_key_prefix: str = Field(
        default="analytics:",
        description="Key prefix for click counter hashes in Redis"
    )

    click_history_key_prefix: str = Field(
        default="clicks:",
        description="Key prefix for click history lists in Redis"
    )

    # URL shortener settings
    base_url: str = Field(
        default="http://localhost:8080",
        description="Base URL for displaying short links (not used for lookups)"
    )

    path_prefix: str = Field(
        default="",
        description="Path prefix for short URLs (e.g., '/s' for /s/abc123)"
    )

    short_code_length: int = Field(
        default=6,
        ge=1,
        le=10,
        description="Length of generated short codes"
    )

    default_expiration_days: int = Field(
        default=365,
        ge=0,
        description="Expiration applied when a request gives no positive TTL; 0 means never expire"
    )

    max_collision_retries: int = Field(
        default=10,
        ge=1,
        description="Code generation attempts before reporting an exhausted code space"
    )

    # Analytics settings
    analytics_timezone: str = Field(
        default="UTC",
        description="Timezone used to decide which clicks and links count as 'today'"
    )

    click_history_limit: int = Field(
        default=100,
        ge=1,
        description="Click records retained per short code"
    )

    cleanup_interval_seconds: int = Field(
        default=3600,
        ge=0,
        description="Interval for the expiry cleanup loop; 0 disables it"
    )

    # Logging settings
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    log_file: Optional[str] = Field(
        default=None,
        description="Log file path (logs to stdout if not specified)"
    )

    log_json: bool = Field(
        default=False,
        description="Use JSON format for logs"
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",  # Ignore extra environment variables
    }


def load_config(**overrides) -> Config:
    """Load configuration from environment."""
    return Config(**overrides)
