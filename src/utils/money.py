from __future__ import annotations

import math
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Iterable


def to_decimal(value: Any) -> Decimal | None:
    if value is None:
        return None
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        return Decimal(int(value))
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return None
        return Decimal(str(value))
    s = str(value).strip()
    if not s:
        return None
    s = s.replace(",", "")
    try:
        d = Decimal(s)
    except InvalidOperation:
        return None
    return d if d.is_finite() else None


def sum_amounts(values: Iterable[Any]) -> float:
    """Sum monetary floats through Decimal so 0.1 + 0.2 stays 0.3."""
    total = Decimal("0")
    for v in values:
        d = to_decimal(v)
        if d is not None:
            total += d
    return float(total)


def format_money(value: Any, currency: str = "USD", digits: int = 2, dash: str = "-") -> str:
    """
    Display formatter for CLI tables.

    - `None` -> dash
    - numeric -> "$1,234.56" for USD, "1,234.56 EUR" for anything else
    - non-numeric string -> returned as-is
    """
    d = to_decimal(value)
    if d is None:
        if value is None:
            return dash
        s = str(value).strip()
        return s if s else dash

    digits = max(0, int(digits))
    q = Decimal(1) if digits == 0 else Decimal("1").scaleb(-digits)
    d = d.quantize(q, rounding=ROUND_HALF_UP)

    sign = "-" if d < 0 else ""
    d_abs = -d if d < 0 else d
    if (currency or "USD").upper() == "USD":
        return f"{sign}${d_abs:,.{digits}f}"
    return f"{sign}{d_abs:,.{digits}f} {currency.upper()}"
