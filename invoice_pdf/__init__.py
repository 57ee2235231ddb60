"""Public package API for order invoice rendering and PDF conversion."""

from __future__ import annotations

from typing import Any, Dict, Optional


def render_invoice_html(order: Dict[str, Any]) -> str:
    from .rendering import render_invoice_html as _render_invoice_html

    return _render_invoice_html(order)


def convert(url: str, payload: Any, settings: Optional[Any] = None) -> bytes:
    from .convert import convert as _convert

    return _convert(url, payload, settings)


def run(host: Optional[str] = None, port: Optional[int] = None) -> None:
    from .server import run as _run

    _run(host, port)


__all__ = ["convert", "render_invoice_html", "run"]
