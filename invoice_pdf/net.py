"""Network-related helpers."""

from __future__ import annotations

import errno
from typing import Optional

DISCONNECT_ERRNOS = {
    errno.EPIPE,
    errno.ECONNRESET,
    errno.ETIMEDOUT,
}
if hasattr(errno, "WSAECONNRESET"):
    DISCONNECT_ERRNOS.add(errno.WSAECONNRESET)  # pragma: no cover


def is_client_disconnect(exc: BaseException) -> bool:
    if isinstance(exc, (BrokenPipeError, ConnectionResetError, TimeoutError)):
        return True
    return isinstance(exc, OSError) and exc.errno in DISCONNECT_ERRNOS


def render_target_url(host: Optional[str], serverless: bool) -> str:
    """URL the browser is pointed at: this same service, over https when serverless."""
    scheme = "https" if serverless else "http"
    return f"{scheme}://{(host or '').strip()}"
