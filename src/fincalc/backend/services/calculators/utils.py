"""Utility helpers for calculator modules."""

from __future__ import annotations

import math
from numbers import Real
from typing import Any


def format_percentage(value: float) -> str:
    """Return a human-readable percentage label for ``value``."""

    percentage = round(value * 100, 6)
    if float(int(percentage)) == percentage:
        return f"{int(percentage)}%"
    return f"{percentage:.2f}%"


def format_dollars(value: float) -> str:
    """Return ``value`` as a whole-dollar label such as ``$18,201``."""

    return f"${value:,.0f}"


def is_finite_number(value: Any) -> bool:
    """Return ``True`` for real, finite numbers (booleans excluded)."""

    if isinstance(value, bool) or not isinstance(value, Real):
        return False
    return math.isfinite(value)


def round_currency(value: float) -> float:
    """Round monetary amounts to two decimals."""

    return round(value, 2)


def round_rate(value: float) -> float:
    """Round rate values to four decimals."""

    return round(value, 4)
