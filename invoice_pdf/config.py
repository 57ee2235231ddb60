"""Runtime configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

TRUTHY = {"1", "true", "yes", "on"}
FALSY = {"0", "false", "no", "off"}


def env_int(name: str, default: int, minimum: int = 1) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value >= minimum else default


def env_bool(name: str, default: Optional[bool] = None) -> Optional[bool]:
    raw = os.getenv(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in TRUTHY:
        return True
    if value in FALSY:
        return False
    return default


@dataclass(frozen=True)
class Settings:
    """Environment switches resolved once at startup.

    ``is_development`` picks the local browser executable and a visible
    window. ``is_serverless`` selects ``https`` for the self-referential
    render target and disables the sample rendering on ``GET /``.
    ``headless_override`` (``INVOICE_HEADLESS``) is needed in development
    because PDF export fails in a visible browser.
    """

    is_development: bool = False
    is_serverless: bool = False
    headless_override: Optional[bool] = None
    host: str = "0.0.0.0"
    port: int = 8080
    max_body_bytes: int = 10 * 1024 * 1024
    listen_backlog: int = 512
    navigation_timeout_ms: int = 30000
    conversion_timeout_ms: int = 30000
    sentry_dsn: Optional[str] = None
    sentry_environment: str = "production"

    @classmethod
    def from_env(cls) -> "Settings":
        env_name = (os.getenv("INVOICE_ENV") or os.getenv("APP_ENV") or "production").strip().lower()
        serverless = env_bool("INVOICE_SERVERLESS")
        if serverless is None:
            serverless = bool(os.getenv("VERCEL"))
        return cls(
            is_development=env_name == "development",
            is_serverless=serverless,
            headless_override=env_bool("INVOICE_HEADLESS"),
            host=os.getenv("INVOICE_HOST", "0.0.0.0"),
            port=env_int("INVOICE_PORT", 8080, minimum=0),
            max_body_bytes=env_int("INVOICE_MAX_BODY_BYTES", 10 * 1024 * 1024, minimum=1024),
            listen_backlog=env_int("INVOICE_LISTEN_BACKLOG", 512, minimum=1),
            navigation_timeout_ms=env_int("INVOICE_NAVIGATION_TIMEOUT_MS", 30000, minimum=1000),
            conversion_timeout_ms=env_int("INVOICE_CONVERSION_TIMEOUT_MS", 30000, minimum=1000),
            sentry_dsn=os.getenv("SENTRY_DSN") or None,
            sentry_environment=os.getenv("SENTRY_ENVIRONMENT", env_name),
        )


_SETTINGS: Optional[Settings] = None


def get_settings() -> Settings:
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = Settings.from_env()
    return _SETTINGS
