"""Rounding utilities for the billing engine.

This module provides the low-level numeric helpers every biller uses:
- Rounding task minutes up to a billing increment
- Converting minutes to decimal hours
- Normalising hours and currency to 2 decimal places

All hours and money values are Decimal and are normalised with ROUND_HALF_UP
after any arithmetic step, so repeated summation never drifts.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Union

from timesheet_billing.models.project import ROUNDING_INCREMENTS

TWO_PLACES = Decimal("0.01")
MINUTES_PER_HOUR = Decimal("60")
ZERO = Decimal("0.00")


def apply_rounding(minutes: int, increment: int) -> int:
    """Round minutes up to the nearest billing increment.

    An increment of 0 means "actual time": the minutes are returned unchanged.
    Any other increment rounds UP, never down, so a partial increment is
    always billed in full.

    Args:
        minutes: Non-negative number of minutes to round
        increment: Rounding increment (0, 5, 15 or 30)

    Returns:
        The rounded minutes

    Raises:
        ValueError: If increment is not one of the supported values

    Example:
        >>> apply_rounding(7, 15)
        15
        >>> apply_rounding(30, 15)
        30
        >>> apply_rounding(7, 0)
        7
    """
    if increment not in ROUNDING_INCREMENTS:
        raise ValueError(
            f"Invalid rounding increment: {increment}. "
            f"Must be one of {ROUNDING_INCREMENTS}"
        )
    if increment == 0:
        return minutes
    return -(-minutes // increment) * increment


def round_hours(value: Union[Decimal, int]) -> Decimal:
    """Round an hours value to 2 decimal places (half up).

    Example:
        >>> round_hours(Decimal("1.005"))
        Decimal('1.01')
    """
    return Decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def round_currency(value: Union[Decimal, int]) -> Decimal:
    """Round a money value to 2 decimal places (half up).

    Example:
        >>> round_currency(Decimal("12.345"))
        Decimal('12.35')
    """
    return Decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def minutes_to_hours(minutes: int) -> Decimal:
    """Convert minutes to decimal hours with 2 decimal precision.

    Example:
        >>> minutes_to_hours(90)
        Decimal('1.50')
        >>> minutes_to_hours(10)
        Decimal('0.17')
    """
    return round_hours(Decimal(minutes) / MINUTES_PER_HOUR)


def sum_hours(values: Iterable[Decimal]) -> Decimal:
    """Sum hours values and normalise the total."""
    return round_hours(sum(values, ZERO))


def sum_currency(values: Iterable[Decimal]) -> Decimal:
    """Sum money values and normalise the total."""
    return round_currency(sum(values, ZERO))
