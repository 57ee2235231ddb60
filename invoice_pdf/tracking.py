"""Out-of-band error tracking."""

from __future__ import annotations

import logging
from typing import Any

import sentry_sdk

from .config import Settings

logger = logging.getLogger(__name__)


def init_tracking(settings: Settings) -> bool:
    if not settings.sentry_dsn:
        return False
    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.sentry_environment,
        traces_sample_rate=0.1,
    )
    logger.info("Sentry monitoring enabled")
    return True


def capture_failure(exc: BaseException, body: Any) -> None:
    """Send ``exc`` to Sentry with the request body attached as context."""
    with sentry_sdk.new_scope() as scope:
        scope.set_context("body", body if isinstance(body, dict) else {"value": body})
        sentry_sdk.capture_exception(exc)
