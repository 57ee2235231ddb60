"""One-shot request interception that turns the first navigation into a POST."""

from __future__ import annotations

import enum
import json
import logging
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

ROUTE_PATTERN = "**/*"


class InterceptionState(enum.Enum):
    AWAITING_FIRST_REQUEST = "awaiting_first_request"
    INTERCEPTION_DISABLED = "interception_disabled"


class PostPayloadInterceptor:
    """Route handler that rewrites exactly one request.

    The first request observed is sent as ``POST`` with the JSON payload as
    body. After that the handler deregisters itself and any request that
    still reaches it is continued untouched.
    """

    def __init__(self, payload: Any) -> None:
        self.body = json.dumps(payload)
        self.state = InterceptionState.AWAITING_FIRST_REQUEST
        self.fired = 0
        self.intercepted_url: Optional[str] = None
        self._page: Any = None

    async def install(self, page: Any) -> None:
        self._page = page
        await page.route(ROUTE_PATTERN, self, times=1)

    def _rewritten_headers(self, request: Any) -> Dict[str, str]:
        headers = {
            name: value
            for name, value in dict(request.headers).items()
            if name.lower() != "content-type"
        }
        headers["Content-Type"] = "application/json"
        return headers

    async def __call__(self, route: Any) -> None:
        if self.state is InterceptionState.INTERCEPTION_DISABLED:
            await route.continue_()
            return

        request = route.request
        self.state = InterceptionState.INTERCEPTION_DISABLED
        self.fired += 1
        self.intercepted_url = request.url
        logger.info("Intercepted URL %s", request.url)

        await route.continue_(
            method="POST",
            post_data=self.body,
            headers=self._rewritten_headers(request),
        )
        if self._page is not None:
            await self._page.unroute(ROUTE_PATTERN, self)
