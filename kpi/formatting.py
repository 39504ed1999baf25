"""
kpi/formatting.py

Display formatting for dashboard values.

The thresholds here are part of the dashboard contract: ``999999`` renders
as ``$1000K`` and is not promoted to millions.
"""

from __future__ import annotations

import math
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from app.domain.client_fields import parse_date
from kpi.portfolio import today_from


def format_currency(value: float) -> str:
    """
    ``$0``, ``$<v>`` below 1,000, ``$<k>K`` below 1,000,000, else ``$<m.m>M``.
    """

    if value == 0:
        return "$0"
    if value < 1000:
        return f"${_plain_number(value)}"
    if value < 1_000_000:
        return f"${_to_fixed(value / 1000, 0)}K"
    return f"${_to_fixed(value / 1_000_000, 1)}M"


def format_percentage(value: float | None) -> str:
    number = value or 0
    return f"{int(math.floor(number + 0.5))}%"


def format_relative_date(
    date_value: Any,
    *,
    now: datetime | date | None = None,
) -> str:
    """
    Human-readable distance from today to ``date_value``.
    """

    if date_value is None or date_value == "":
        return "Unknown"

    target = parse_date(date_value)
    if target is None:
        return "Unknown"

    diff_days = (target - today_from(now)).days
    if diff_days < 0:
        return "Overdue"
    if diff_days == 0:
        return "Today"
    if diff_days == 1:
        return "Tomorrow"
    if diff_days < 7:
        return f"{diff_days} days"
    if diff_days < 30:
        return f"{math.ceil(diff_days / 7)} weeks"
    return f"{math.ceil(diff_days / 30)} months"


def _to_fixed(value: float, digits: int) -> str:
    quantum = Decimal(1).scaleb(-digits)
    return str(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def _plain_number(value: float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
