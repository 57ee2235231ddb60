"""Value formatting helpers used by the invoice template."""

from __future__ import annotations

from typing import Any

from dateutil import parser as dateutil_parser

DEFAULT_CURRENCY_SYMBOL = "R"


def fmt_money(amount: Any, symbol: str = DEFAULT_CURRENCY_SYMBOL) -> str:
    value = safe_float(amount)
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol} {abs(value):,.2f}"


def fmt_qty(qty: Any) -> str:
    try:
        quantity = float(qty)
        if quantity.is_integer():
            return str(int(quantity))
        return str(quantity)
    except Exception:
        return str(qty)


def safe_float(value: Any, default: float = 0.0) -> float:
    try:
        return float(value)
    except Exception:
        return default


def fmt_long_date(raw: Any) -> str:
    """Parse a date string and return it formatted as '14 March 2025'."""
    if raw is None:
        return ""
    raw = str(raw).strip()
    if not raw:
        return raw
    try:
        dt = dateutil_parser.parse(raw)
    except (ValueError, OverflowError):
        return raw
    return f"{dt.day} {dt.strftime('%B %Y')}"
