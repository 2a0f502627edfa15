"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Backend choice is validated at load time.
"""

from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from querymemo.core.constants import (
    DEFAULT_QUERY_CACHE_TTL_SECONDS,
    QUERY_CACHE_NAMESPACE,
)


class Settings(BaseSettings):
    """Application settings loaded from environment and .env.

    All settings are optional with defaults. query_cache_backend must be
    'memory' or 'redis' (see validate_backend).
    """

    # App
    app_name: str = "querymemo"
    app_version: str = "1.0.0"
    debug: bool = False

    # Security (bearer tokens identify the requester; sub claim becomes the cache scope)
    secret_key: SecretStr = SecretStr("")
    algorithm: str = "HS256"

    # Query cache
    query_cache_enabled: bool = True
    query_cache_backend: str = "memory"
    query_cache_namespace: str = QUERY_CACHE_NAMESPACE
    query_cache_ttl_seconds: float = DEFAULT_QUERY_CACHE_TTL_SECONDS
    # Bodies larger than this are passed through without cache participation.
    query_cache_max_body_bytes: int = 1024 * 1024
    # Only requests under these path prefixes are intercepted by the query cache.
    query_cache_paths: list[str] = ["/api/v1/query"]

    # Redis (used when query_cache_backend is "redis")
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: SecretStr | None = None
    redis_socket_timeout: float = 5.0
    # Minimum wait between connection attempts while Redis is unreachable
    redis_reconnect_backoff_seconds: float = 5.0

    # OpenTelemetry
    telemetry_enabled: bool = False
    telemetry_exporter: str = "console"
    telemetry_otlp_endpoint: str | None = None
    telemetry_sample_rate: float = 1.0
    telemetry_environment: str = "development"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_backend(self) -> "Settings":
        """Validate query cache backend and TTL."""
        if self.query_cache_backend not in ("memory", "redis"):
            raise ValueError(
                f"query_cache_backend must be 'memory' or 'redis', got: {self.query_cache_backend!r}"
            )
        if self.query_cache_ttl_seconds <= 0:
            raise ValueError("QUERY_CACHE_TTL_SECONDS must be positive")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() before overriding env vars so the next
    get_settings() uses the new values.

    Returns:
        Loaded and validated Settings instance.
    """
    return Settings()
