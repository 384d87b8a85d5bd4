"""Fail-fast environment validation for the API service."""

from __future__ import annotations

import os
from functools import lru_cache
from urllib.parse import urlparse


ALLOWED_ENVIRONMENTS = {"development", "test", "staging", "production"}


def _require_env(name: str) -> str:
    value = os.getenv(name)
    if value is None or not value.strip():
        raise RuntimeError(f"{name} is required and must be set before startup.")
    return value.strip()


def _validate_environment_value(environment: str) -> None:
    if environment not in ALLOWED_ENVIRONMENTS:
        allowed = ", ".join(sorted(ALLOWED_ENVIRONMENTS))
        raise RuntimeError(f"ENVIRONMENT must be one of: {allowed}.")


def _validate_database_url(value: str, *, production: bool) -> None:
    parsed = urlparse(value)
    if not parsed.scheme.startswith("postgresql"):
        raise RuntimeError("DATABASE_URL must be a postgresql URL (postgresql+asyncpg://...).")
    if not production:
        return
    if parsed.hostname in {None, "localhost", "127.0.0.1"}:
        raise RuntimeError("DATABASE_URL must not point to localhost in production.")
    if parsed.username == "postgres" and parsed.password == "postgres":
        raise RuntimeError("DATABASE_URL must not use default postgres credentials in production.")


def _validate_positive_number(name: str) -> None:
    raw = os.getenv(name)
    if raw is None:
        return
    try:
        value = float(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be a number.") from None
    if value <= 0:
        raise RuntimeError(f"{name} must be greater than zero.")


@lru_cache(maxsize=1)
def validate_env() -> None:
    """Validate required environment variables before the API starts."""
    environment = _require_env("ENVIRONMENT")
    _validate_environment_value(environment)

    production = environment == "production"
    _validate_database_url(_require_env("DATABASE_URL"), production=production)

    for name in ("STORE_TIMEOUT_SECONDS", "PERIOD_LENGTH_MINUTES", "RATE_LIMIT_REQUESTS"):
        _validate_positive_number(name)

    if production:
        allowed_cors = _require_env("ALLOWED_CORS_ORIGINS")
        if "localhost" in allowed_cors or "127.0.0.1" in allowed_cors:
            raise RuntimeError("ALLOWED_CORS_ORIGINS must not include localhost in production.")
