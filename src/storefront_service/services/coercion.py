"""Coercion of optional remote values into column-safe defaults.

Remote records routinely omit prices, counts and timestamps. Columns backing
those values are NOT NULL, so every optional field passes through one of these
helpers before it reaches the database.
"""

import math
from datetime import date, datetime, time, timedelta, timezone
from typing import Any


def safe_string(value: Any, default: str | None = None) -> str | None:
    """Return ``value`` as a string, or ``default`` when it is None."""
    if value is None:
        return default
    return str(value)


def safe_number(value: Any, default: float = 0) -> float:
    """
    Return ``value`` as a number, or ``default`` when missing or not numeric.

    Decimal strings (``"19.99"``) are parsed; NaN and infinities count as not
    numeric.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        try:
            number = float(str(value).strip())
        except ValueError:
            return default
    if math.isnan(number) or math.isinf(number):
        return default
    return number


def safe_int(value: Any, default: int = 0) -> int:
    """Integer variant of :func:`safe_number` (truncates toward zero)."""
    return int(safe_number(value, default))


def utcnow() -> datetime:
    """Current time as a naive UTC datetime (DB convention)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def safe_datetime(value: Any, default: datetime | None = None) -> datetime | None:
    """
    Parse an ISO-8601 timestamp into a naive UTC datetime.

    Aware values are converted to UTC; naive values are assumed to be UTC
    already. Missing or unparseable input yields ``default``.
    """
    if value is None or value == "":
        return default
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            return default
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def money_amount(money: dict[str, Any] | None, default: float = 0) -> float:
    """Amount of a ``{"amount", "currencyCode"}`` dict."""
    if not money:
        return default
    return safe_number(money.get("amount"), default)


def money_currency(money: dict[str, Any] | None, default: str | None = None) -> str | None:
    """Currency code of a ``{"amount", "currencyCode"}`` dict."""
    if not money:
        return default
    return safe_string(money.get("currencyCode"), default)


def day_range(start_date: date | None, end_date: date | None) -> tuple[datetime | None, datetime | None]:
    """
    Whole-day bounds for a date filter.

    Returns ``(lower, upper)`` for the half-open interval
    ``[start 00:00, end + 1 day 00:00)`` so every timestamp on ``end_date`` is
    included. Either side is None when the matching date is None.
    """
    lower = datetime.combine(start_date, time.min) if start_date else None
    upper = datetime.combine(end_date + timedelta(days=1), time.min) if end_date else None
    return lower, upper
