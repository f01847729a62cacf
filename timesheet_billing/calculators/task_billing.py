"""Task-level billing calculation.

A task is the finest grain the engine bills at: all entries recorded against
the same task of a project in a month are summed first, and only that total
is rounded. Task revenue is "base" revenue; the billed amount is decided at
project level once minimum/maximum limits are applied.
"""

from dataclasses import dataclass
from decimal import Decimal

from timesheet_billing.calculators.rounding import (
    apply_rounding,
    minutes_to_hours,
    round_currency,
)


@dataclass
class TaskInput:
    """Summed minutes for one task of a project.

    Attributes:
        task_name: Task display name
        total_minutes: Sum of all entry minutes recorded against the task
    """

    task_name: str
    total_minutes: int


@dataclass
class TaskBillingResult:
    """Billing breakdown for a single task.

    Attributes:
        task_name: Task display name
        actual_minutes: Minutes as recorded
        rounded_minutes: Minutes after rounding up to the increment
        actual_hours: Recorded hours (2dp)
        rounded_hours: Rounded hours (2dp)
        base_revenue: rounded_hours × rate, before project adjustments

    Example:
        >>> result = calculate_task_billing(TaskInput("Review", 50), 15, Decimal("60"))
        >>> result.rounded_minutes
        60
        >>> result.base_revenue
        Decimal('60.00')
    """

    task_name: str
    actual_minutes: int
    rounded_minutes: int
    actual_hours: Decimal
    rounded_hours: Decimal
    base_revenue: Decimal


def calculate_task_billing(
    task: TaskInput, rounding: int, rate: Decimal
) -> TaskBillingResult:
    """Calculate billing for a single task.

    Args:
        task: Task with its summed minutes
        rounding: Rounding increment in minutes (0, 5, 15 or 30)
        rate: Hourly rate of the project

    Returns:
        TaskBillingResult with actual/rounded time and base revenue
    """
    actual_minutes = task.total_minutes
    rounded_minutes = apply_rounding(actual_minutes, rounding)
    rounded_hours = minutes_to_hours(rounded_minutes)

    return TaskBillingResult(
        task_name=task.task_name,
        actual_minutes=actual_minutes,
        rounded_minutes=rounded_minutes,
        actual_hours=minutes_to_hours(actual_minutes),
        rounded_hours=rounded_hours,
        base_revenue=round_currency(rounded_hours * rate),
    )
