"""Headless browser conversion of the rendered invoice page into PDF bytes."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict, Optional
from urllib.parse import urlsplit

from .config import Settings, get_settings
from .errors import (
    ConversionTimeout,
    DependencyError,
    InvalidNavigationTarget,
    RenderResponseError,
)
from .interception import PostPayloadInterceptor
from .launch import resolve_launch_options

logger = logging.getLogger(__name__)

NAVIGATION_WAIT_UNTIL = "networkidle"

PDF_OPTIONS: Dict[str, Any] = {
    "format": "A4",
    "display_header_footer": False,
    "header_template": "",
    "footer_template": "",
    "print_background": True,
    "margin": {"top": "25px", "right": "25px", "bottom": "25px", "left": "25px"},
    "scale": 0.95,
}

# Scrolls 100px every 5ms until the travelled distance covers the page so
# lazy images get requested. Timing heuristic only: images may still be in
# flight when it resolves.
SCROLL_TO_BOTTOM_SCRIPT = """
async () => {
    await new Promise((resolve) => {
        let totalHeight = 0;
        const distance = 100;
        const timer = setInterval(() => {
            const scrollHeight = document.body.scrollHeight;
            window.scrollBy(0, distance);
            totalHeight += distance;
            if (totalHeight >= scrollHeight) {
                clearInterval(timer);
                resolve();
            }
        }, 5);
    });
}
"""


def load_playwright() -> Callable[[], Any]:
    try:
        from playwright.async_api import async_playwright
    except ModuleNotFoundError as exc:
        if exc.name and exc.name.startswith("playwright"):
            raise DependencyError(
                "Missing dependency 'playwright'. Install it with 'pip install playwright' "
                "and run 'playwright install chromium'."
            ) from exc
        raise
    return async_playwright


def validate_target_url(url: str) -> None:
    try:
        parts = urlsplit(url)
    except ValueError as exc:
        raise InvalidNavigationTarget(f"Cannot navigate to invalid URL {url!r}") from exc
    if parts.scheme not in ("http", "https") or not parts.hostname:
        raise InvalidNavigationTarget(f"Cannot navigate to invalid URL {url!r}")


async def _navigate(page: Any, url: str, timeout_ms: int) -> Any:
    from playwright.async_api import Error as PlaywrightError
    from playwright.async_api import TimeoutError as PlaywrightTimeoutError

    try:
        return await page.goto(url, wait_until=NAVIGATION_WAIT_UNTIL, timeout=timeout_ms)
    except PlaywrightTimeoutError as exc:
        raise ConversionTimeout(f"Navigation to {url} timed out after {timeout_ms} ms") from exc
    except PlaywrightError as exc:
        raise InvalidNavigationTarget(str(exc)) from exc


async def get_pdf(
    url: str,
    payload: Any,
    settings: Optional[Settings] = None,
    playwright_factory: Optional[Callable[[], Any]] = None,
) -> bytes:
    """Load ``url`` with ``payload`` as its POST body and print it to PDF.

    One browser is launched per call and closed before returning, whether
    the conversion succeeded or not.
    """
    settings = settings or get_settings()
    validate_target_url(url)
    factory = playwright_factory or load_playwright()

    async with factory() as playwright:
        browser_type = playwright.chromium
        options = resolve_launch_options(settings, browser_type)
        browser = await browser_type.launch(**options.as_kwargs())
        try:
            page = await browser.new_page()
            interceptor = PostPayloadInterceptor(payload)
            await interceptor.install(page)

            response = await _navigate(page, url, settings.navigation_timeout_ms)
            status = response.status if response is not None else None
            logger.info("Status Code = %s", status)
            if status is not None and status > 300:
                raise RenderResponseError(status)

            await page.evaluate(SCROLL_TO_BOTTOM_SCRIPT)
            await page.emulate_media(media="screen")
            pdf_bytes = await page.pdf(**PDF_OPTIONS)
        finally:
            await browser.close()

    return bytes(pdf_bytes)


def convert(url: str, payload: Any, settings: Optional[Settings] = None) -> bytes:
    """Blocking entry point bounded by the conversion time budget."""
    settings = settings or get_settings()
    timeout = settings.conversion_timeout_ms / 1000.0

    async def _bounded() -> bytes:
        try:
            return await asyncio.wait_for(get_pdf(url, payload, settings), timeout=timeout)
        except asyncio.TimeoutError as exc:
            raise ConversionTimeout(
                f"Conversion exceeded {settings.conversion_timeout_ms} ms"
            ) from exc

    return asyncio.run(_bounded())
