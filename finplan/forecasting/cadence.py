"""
Cadence Converter

Turns an amount paid on any schedule into its monthly equivalent.
Negative amounts pass through unchanged; callers that need
non-negative values clamp the input first.
"""

import math
from collections.abc import Mapping
from typing import Any, Optional

from finplan.normalization.scalars import number_or, optional_string

WEEKS_PER_YEAR = 52
BIWEEKLY_PERIODS_PER_YEAR = 26
DAYS_PER_MONTH = 30.4375
WEEKS_PER_MONTH = 4.34524


def monthly_equivalent(
    amount: float,
    cadence: Optional[str],
    custom_interval: Any = None,
    custom_unit: Optional[str] = None,
) -> float:
    """
    Convert an amount to a monthly value.

    Args:
        amount: Amount paid per cadence period
        cadence: weekly, biweekly, quarterly, yearly/annual, custom, or
            monthly. Unknown cadences are treated as monthly.
        custom_interval: Period length for the custom cadence (>= 1)
        custom_unit: days, months, years; anything else means weeks

    Returns:
        The monthly-equivalent amount
    """
    cadence = (optional_string(cadence) or "monthly").lower()

    if cadence == "weekly":
        return amount * WEEKS_PER_YEAR / 12
    if cadence == "biweekly":
        return amount * BIWEEKLY_PERIODS_PER_YEAR / 12
    if cadence == "quarterly":
        return amount / 3
    if cadence in ("yearly", "annual"):
        return amount / 12
    if cadence == "custom":
        interval = max(1, math.trunc(number_or(custom_interval, 1)))
        unit = (optional_string(custom_unit) or "weeks").lower()
        if unit.startswith("day"):
            return amount * (DAYS_PER_MONTH / interval)
        if unit.startswith("month"):
            return amount / interval
        if unit.startswith("year"):
            return amount / (12 * interval)
        return amount * (WEEKS_PER_MONTH / interval)
    return amount


def scheduled_monthly_amount(row: Mapping) -> float:
    """Monthly equivalent of an income or bill row; negative amounts count as zero."""
    return monthly_equivalent(
        max(0.0, number_or(row.get("amount"))),
        row.get("cadence"),
        row.get("customInterval"),
        row.get("customUnit"),
    )


def minimum_payment(row: Mapping) -> float:
    """Non-negative minimum payment of a card or loan row."""
    return max(0.0, number_or(row.get("minimumPayment")))
