"""
Numeric coercion for loosely-typed store payloads.

RPC results arrive with numbers as strings, nulls, or real numbers depending
on the Postgres type behind them; these helpers normalise them for display.
"""
import math
from datetime import date
from typing import Any, Optional


def to_num(value: Any, fallback: float = 0) -> float:
    """Coerce a value to a finite number, or return fallback."""
    if value is None or isinstance(value, bool):
        return fallback
    if isinstance(value, (int, float)):
        n = value
    else:
        try:
            n = float(str(value).strip())
        except ValueError:
            return fallback
    return n if math.isfinite(n) else fallback


def to_int(value: Any, fallback: int = 0) -> int:
    """Coerce a value to an int (truncating), or return fallback."""
    n = to_num(value, None)
    if n is None:
        return fallback
    return int(n)


def first_row(data: Any) -> Optional[Any]:
    """First element of a list payload, the payload itself, or None."""
    if not data:
        return None
    if isinstance(data, (list, tuple)):
        return data[0]
    return data


def ym_to_date(ym: str) -> date:
    """'2025-09' -> date(2025, 9, 1)."""
    year, month = ym.split("-")[:2]
    return date(int(year), int(month), 1)
