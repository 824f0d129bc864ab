"""Display formatting for amounts and dates."""

from __future__ import annotations

import math
from datetime import date, datetime
from typing import Optional, Union

DEFAULT_CURRENCY_SYMBOL = "₱"


def format_currency(amount: object, symbol: str = DEFAULT_CURRENCY_SYMBOL) -> str:
    """``₱1,234.50`` style; unusable values render as zero."""

    try:
        value = float(amount)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        value = 0.0
    if math.isnan(value) or math.isinf(value):
        value = 0.0
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{abs(value):,.2f}"


def format_money_plain(amount: object) -> str:
    """Machine-readable two-decimal amount with no symbol or separators."""

    try:
        value = float(amount)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        value = 0.0
    if math.isnan(value) or math.isinf(value):
        value = 0.0
    return f"{value:.2f}"


def format_date(value: Optional[Union[str, date, datetime]]) -> str:
    """``Jan 5, 2024``; unparseable strings are returned unchanged."""

    if value is None or value == "":
        return ""
    if isinstance(value, datetime):
        parsed: date = value.date()
    elif isinstance(value, date):
        parsed = value
    else:
        try:
            parsed = date.fromisoformat(str(value)[:10])
        except ValueError:
            return str(value)
    return f"{parsed.strftime('%b')} {parsed.day}, {parsed.year}"


def format_timestamp(value: datetime) -> str:
    """``Jan 5, 2024, 3:07 PM``."""

    hour = value.hour % 12 or 12
    meridiem = "AM" if value.hour < 12 else "PM"
    return f"{format_date(value)}, {hour}:{value.minute:02d} {meridiem}"


def abbreviate_number(amount: Optional[float], *, currency: bool = False, symbol: str = DEFAULT_CURRENCY_SYMBOL) -> str:
    """Compact figure for stat cards: ``1.2K``, ``3.4M``."""

    sign = "-" if amount and amount < 0 else ""
    prefix = sign + (symbol if currency else "")
    if not amount:
        return f"{symbol}0.00" if currency else "0"
    magnitude = abs(amount)
    if magnitude >= 1_000_000:
        return f"{prefix}{magnitude / 1_000_000:.1f}M"
    if magnitude >= 1_000:
        return f"{prefix}{magnitude / 1_000:.1f}K"
    if currency:
        return format_currency(amount, symbol)
    return f"{amount:g}"
