"""Carryover batch ledger.

The project biller only sees a single carryover-in figure per month. This
module tracks where that figure comes from: a small queue of batches, one per
month that produced excess hours, consumed oldest-first and dropped once
their expiry window has passed. Rolling a month forward yields the batches
that feed the next month's carryover_hours_in.
"""

import datetime as dt
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import List, Optional, Sequence, Tuple

from timesheet_billing.calculators.project_billing import ProjectBillingResult
from timesheet_billing.calculators.rounding import ZERO, round_hours, sum_hours
from timesheet_billing.models.project import ProjectBillingConfig


def month_start(day: dt.date) -> dt.date:
    """Return the first day of the month containing day."""
    return day.replace(day=1)


def parse_billing_month(value: str) -> dt.date:
    """Parse "YYYY-MM" (or any ISO date) into the first day of that month.

    Raises:
        ValueError: If the value is not a month or date
    """
    text = str(value).strip()
    try:
        if len(text) == 7:
            return dt.datetime.strptime(text, "%Y-%m").date()
        return month_start(dt.date.fromisoformat(text))
    except ValueError:
        raise ValueError(f"Invalid billing month: {value!r}. Expected YYYY-MM")


def months_between(start: dt.date, end: dt.date) -> int:
    """Whole calendar months from start's month to end's month."""
    return (end.year - start.year) * 12 + (end.month - start.month)


@dataclass(frozen=True)
class CarryoverBatch:
    """Excess hours produced by one billing month.

    Attributes:
        source_month: First day of the month that produced the hours
        hours: Hours still available from this batch
        expiry_months: Months the batch stays usable (None never expires)
    """

    source_month: dt.date
    hours: Decimal
    expiry_months: Optional[int] = None

    def is_expired(self, month: dt.date) -> bool:
        """Whether the batch can no longer be billed in month.

        A January batch with a 3 month window is usable up to April.
        """
        if self.expiry_months is None:
            return False
        return months_between(self.source_month, month) > self.expiry_months


def _oldest_first(batches: Sequence[CarryoverBatch]) -> List[CarryoverBatch]:
    return sorted(batches, key=lambda b: b.source_month)


def live_batches(
    batches: Sequence[CarryoverBatch], month: dt.date
) -> List[CarryoverBatch]:
    """Unexpired, non-empty batches for month, oldest first."""
    return [
        b for b in _oldest_first(batches) if b.hours > 0 and not b.is_expired(month)
    ]


def available_carryover(batches: Sequence[CarryoverBatch], month: dt.date) -> Decimal:
    """Carryover hours that can be billed in month."""
    return sum_hours(b.hours for b in live_batches(batches, month))


def consume_carryover(
    batches: Sequence[CarryoverBatch], hours: Decimal
) -> Tuple[List[CarryoverBatch], Decimal]:
    """Consume hours from the batches, oldest first.

    Args:
        batches: Batches to draw from
        hours: Hours to consume

    Returns:
        Tuple of (remaining batches, hours actually consumed)
    """
    remaining: List[CarryoverBatch] = []
    to_consume = round_hours(hours)
    consumed = ZERO

    for batch in _oldest_first(batches):
        if to_consume <= 0:
            remaining.append(batch)
            continue
        used = min(batch.hours, to_consume)
        to_consume = round_hours(to_consume - used)
        consumed = round_hours(consumed + used)
        left = round_hours(batch.hours - used)
        if left > 0:
            remaining.append(replace(batch, hours=left))

    return remaining, consumed


def _apply_carryover_cap(
    batches: List[CarryoverBatch], cap: Optional[Decimal]
) -> List[CarryoverBatch]:
    # Trim the newest hours first so older batches keep their place in line
    if cap is None:
        return batches
    total = sum_hours(b.hours for b in batches)
    excess = round_hours(total - cap)
    if excess <= 0:
        return batches

    kept: List[CarryoverBatch] = []
    for batch in reversed(batches):
        if excess <= 0:
            kept.append(batch)
            continue
        trimmed = min(batch.hours, excess)
        excess = round_hours(excess - trimmed)
        left = round_hours(batch.hours - trimmed)
        if left > 0:
            kept.append(replace(batch, hours=left))
    return list(reversed(kept))


def roll_forward_carryover(
    result: ProjectBillingResult,
    config: ProjectBillingConfig,
    month: dt.date,
    batches: Sequence[CarryoverBatch],
) -> List[CarryoverBatch]:
    """Derive the carryover batches left after billing month.

    Inbound batches pay for the billed hours first; whatever they could not
    cover stays in the queue, and hours newly earned above the maximum become
    a batch dated to month. The carryover cap is then enforced by trimming
    the newest hours.

    Args:
        result: Billing result of the project for month
        config: Billing configuration used for month
        month: Billing month (any day of it)
        batches: Batches that made up the month's carryover_hours_in

    Returns:
        Batches available to the following months, oldest first
    """
    if not config.carryover_enabled:
        return []

    billing_month = month_start(month)
    inbound = live_batches(batches, billing_month)
    remaining, _ = consume_carryover(inbound, result.carryover_consumed)

    new_hours = round_hours(result.carryover_out - sum_hours(b.hours for b in remaining))
    if new_hours > 0:
        remaining.append(
            CarryoverBatch(
                source_month=billing_month,
                hours=new_hours,
                expiry_months=config.carryover_expiry_months,
            )
        )

    return _apply_carryover_cap(remaining, config.carryover_max_hours)
