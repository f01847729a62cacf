"""Project-level billing with minimum, maximum and carryover rules.

This module turns a project's tasks into its billed hours and revenue.

Calculation order:
1. Round each task's summed minutes up to the project's increment
2. Sum rounded minutes -> rounded hours
3. Add carryover hours from prior months -> adjusted hours
4. Apply the minimum (active projects below their minimum are padded)
5. Apply the maximum (hours above it are carried forward or lost)
6. billed hours × rate -> billed revenue

Minimum is always evaluated before maximum. The billers never raise for
inconsistent limits (minimum above maximum); that check belongs to
validate_min_max_limits, which callers run before saving a configuration.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import ClassVar, List, Optional, Sequence, Union

from timesheet_billing.calculators.rounding import (
    ZERO,
    apply_rounding,
    minutes_to_hours,
    round_currency,
    round_hours,
)
from timesheet_billing.calculators.task_billing import (
    TaskBillingResult,
    TaskInput,
    calculate_task_billing,
)
from timesheet_billing.models.project import ProjectBillingConfig


# ============================================================================
# Billing adjustments
# ============================================================================


@dataclass(frozen=True)
class NoAdjustment:
    """Billed hours equal adjusted hours."""

    type: ClassVar[str] = "none"


@dataclass(frozen=True)
class MinimumApplied:
    """Billed hours were padded up to the project minimum.

    Attributes:
        minimum_hours: The minimum that was billed
        padding_hours: Hours added on top of the adjusted hours
    """

    minimum_hours: Decimal
    padding_hours: Decimal
    type: ClassVar[str] = "minimum_applied"


@dataclass(frozen=True)
class MaximumApplied:
    """Billed hours were capped and the excess carried to next month.

    Attributes:
        maximum_hours: The cap that was billed
        carryover_out: Excess hours carried forward
    """

    maximum_hours: Decimal
    carryover_out: Decimal
    type: ClassVar[str] = "maximum_applied"


@dataclass(frozen=True)
class MaximumAppliedUnbillable:
    """Billed hours were capped and the excess is lost.

    Attributes:
        maximum_hours: The cap that was billed
        unbillable_hours: Excess hours that will never be billed
    """

    maximum_hours: Decimal
    unbillable_hours: Decimal
    type: ClassVar[str] = "maximum_applied_unbillable"


BillingAdjustment = Union[
    NoAdjustment, MinimumApplied, MaximumApplied, MaximumAppliedUnbillable
]


class BillingState(str, Enum):
    """Terminal state of the minimum/maximum evaluation."""

    UNADJUSTED = "unadjusted"
    MINIMUM_APPLIED = "minimum_applied"
    MAXIMUM_APPLIED = "maximum_applied"
    MINIMUM_THEN_MAXIMUM_APPLIED = "minimum_then_maximum_applied"


def _format_hours(value: Decimal) -> str:
    # Whole numbers without decimals, everything else with two
    if value == value.to_integral_value():
        return str(int(value))
    return f"{value:.2f}"


def format_billing_adjustment(adjustment: BillingAdjustment) -> str:
    """Format a billing adjustment for display.

    Example:
        >>> format_billing_adjustment(MinimumApplied(Decimal("10"), Decimal("2.5")))
        'Minimum applied (+2.50h)'
    """
    if isinstance(adjustment, MinimumApplied):
        return f"Minimum applied (+{_format_hours(adjustment.padding_hours)}h)"
    if isinstance(adjustment, MaximumApplied):
        return (
            f"Maximum applied ({_format_hours(adjustment.carryover_out)}h "
            f"carried over)"
        )
    if isinstance(adjustment, MaximumAppliedUnbillable):
        return (
            f"Maximum applied ({_format_hours(adjustment.unbillable_hours)}h "
            f"unbillable)"
        )
    return "No adjustment"


# ============================================================================
# Limits
# ============================================================================


def validate_min_max_limits(
    minimum_hours: Optional[Decimal], maximum_hours: Optional[Decimal]
) -> bool:
    """Check that an (effective) minimum does not exceed the maximum.

    Args:
        minimum_hours: Effective minimum hours, possibly inherited
        maximum_hours: Effective maximum hours, possibly inherited

    Returns:
        True if valid (or either limit is unset), False if min > max
    """
    if minimum_hours is None or maximum_hours is None:
        return True
    return minimum_hours <= maximum_hours


def has_billing_limits(config: ProjectBillingConfig) -> bool:
    """Whether any minimum, maximum or inbound carryover affects billing."""
    return (
        config.minimum_hours is not None
        or config.maximum_hours is not None
        or config.carryover_hours_in > 0
    )


@dataclass
class BilledHoursResult:
    """Every stage of the minimum/maximum/carryover evaluation.

    Attributes:
        rounded_hours: Hours after per-task rounding
        carryover_in: Hours carried in from prior months
        adjusted_hours: rounded_hours + carryover_in
        billed_hours: Hours invoiced after limits
        carryover_out: Excess hours carried to next month
        unbillable_hours: Excess hours lost (carryover disabled)
        carryover_consumed: Carryover counted as billed (FIFO approximation)
        minimum_padding: Hours added to reach the minimum
        minimum_applied: Whether the minimum fired
        maximum_applied: Whether the maximum fired
        adjustment: The adjustment that determined the final figure
        revenue: billed_hours × rate
    """

    rounded_hours: Decimal
    carryover_in: Decimal
    adjusted_hours: Decimal
    billed_hours: Decimal
    carryover_out: Decimal
    unbillable_hours: Decimal
    carryover_consumed: Decimal
    minimum_padding: Decimal
    minimum_applied: bool
    maximum_applied: bool
    adjustment: BillingAdjustment
    revenue: Decimal

    @property
    def state(self) -> BillingState:
        """Terminal state reached by the evaluation."""
        if self.minimum_applied and self.maximum_applied:
            return BillingState.MINIMUM_THEN_MAXIMUM_APPLIED
        if self.maximum_applied:
            return BillingState.MAXIMUM_APPLIED
        if self.minimum_applied:
            return BillingState.MINIMUM_APPLIED
        return BillingState.UNADJUSTED


def calculate_billed_hours(
    rounded_minutes: int, config: ProjectBillingConfig
) -> BilledHoursResult:
    """Apply minimum, maximum and carryover rules to a project's hours.

    Args:
        rounded_minutes: Total minutes after per-task rounding
        config: Billing configuration of the project for the month

    Returns:
        BilledHoursResult with all calculation stages

    Example:
        >>> config = ProjectBillingConfig(
        ...     rate=Decimal("50"), maximum_hours=Decimal("40"),
        ...     carryover_enabled=True,
        ... )
        >>> result = calculate_billed_hours(3000, config)
        >>> result.billed_hours, result.carryover_out
        (Decimal('40.00'), Decimal('10.00'))
    """
    rounded_hours = minutes_to_hours(rounded_minutes)
    carryover_in = round_hours(config.carryover_hours_in)
    adjusted_hours = round_hours(rounded_hours + carryover_in)

    minimum_hours = config.minimum_hours
    maximum_hours = config.maximum_hours

    billed_hours = adjusted_hours
    carryover_out = ZERO
    unbillable_hours = ZERO
    carryover_consumed = carryover_in
    minimum_padding = ZERO
    minimum_applied = False
    maximum_applied = False
    adjustment: BillingAdjustment = NoAdjustment()

    if (
        config.is_active
        and minimum_hours is not None
        and adjusted_hours < minimum_hours
    ):
        minimum_padding = round_hours(minimum_hours - adjusted_hours)
        billed_hours = round_hours(minimum_hours)
        minimum_applied = True
        adjustment = MinimumApplied(
            minimum_hours=billed_hours, padding_hours=minimum_padding
        )

    if maximum_hours is not None and billed_hours > maximum_hours:
        excess_hours = round_hours(billed_hours - maximum_hours)
        billed_hours = round_hours(maximum_hours)
        maximum_applied = True

        if config.carryover_enabled:
            carryover_out = excess_hours
            adjustment = MaximumApplied(
                maximum_hours=billed_hours, carryover_out=excess_hours
            )
        else:
            unbillable_hours = excess_hours
            adjustment = MaximumAppliedUnbillable(
                maximum_hours=billed_hours, unbillable_hours=excess_hours
            )

        # Carryover is treated as billed before newly earned hours
        if carryover_in > 0:
            carryover_consumed = min(carryover_in, billed_hours)

    return BilledHoursResult(
        rounded_hours=rounded_hours,
        carryover_in=carryover_in,
        adjusted_hours=adjusted_hours,
        billed_hours=billed_hours,
        carryover_out=carryover_out,
        unbillable_hours=unbillable_hours,
        carryover_consumed=carryover_consumed,
        minimum_padding=minimum_padding,
        minimum_applied=minimum_applied,
        maximum_applied=maximum_applied,
        adjustment=adjustment,
        revenue=round_currency(billed_hours * config.rate),
    )


def calculate_billed_hours_from_tasks(
    task_minutes: Sequence[int], config: ProjectBillingConfig
) -> BilledHoursResult:
    """Round each task's minutes individually, then apply billing limits.

    Args:
        task_minutes: Summed raw minutes per task
        config: Billing configuration of the project for the month

    Returns:
        BilledHoursResult with all calculation stages
    """
    total_rounded_minutes = sum(
        apply_rounding(minutes, config.rounding) for minutes in task_minutes
    )
    return calculate_billed_hours(total_rounded_minutes, config)


# ============================================================================
# Project billing
# ============================================================================


@dataclass
class ProjectInput:
    """A project's tasks for the month together with its configuration.

    Attributes:
        project_id: External (canonical) project id
        project_name: Project display name
        tasks: Summed minutes per task
        billing_config: Billing configuration for the month
    """

    project_id: Optional[str]
    project_name: str
    tasks: List[TaskInput]
    billing_config: ProjectBillingConfig


@dataclass
class ProjectBillingResult:
    """Billing outcome of one project for one month.

    Task-level aggregates describe the work as rounded; the adjustment
    fields describe what the minimum/maximum/carryover rules did to it.
    """

    project_id: Optional[str]
    project_name: str

    # Task-level aggregates (before billing adjustments)
    actual_minutes: int
    rounded_minutes: int
    actual_hours: Decimal
    rounded_hours: Decimal

    # Billing adjustments
    carryover_in: Decimal
    adjusted_hours: Decimal
    billed_hours: Decimal
    unbillable_hours: Decimal
    carryover_out: Decimal
    minimum_padding: Decimal
    carryover_consumed: Decimal

    minimum_applied: bool
    maximum_applied: bool
    has_billing_limits: bool

    base_revenue: Decimal
    billed_revenue: Decimal

    rate: Decimal
    rounding: int

    adjustment: BillingAdjustment = field(default_factory=NoAdjustment)
    tasks: List[TaskBillingResult] = field(default_factory=list)


def calculate_project_billing(project: ProjectInput) -> ProjectBillingResult:
    """Calculate billing for a project (collection of tasks).

    Args:
        project: Project tasks and billing configuration

    Returns:
        ProjectBillingResult with hours, adjustments and revenue

    Example:
        >>> project = ProjectInput(
        ...     project_id="P-1",
        ...     project_name="Retainer",
        ...     tasks=[],
        ...     billing_config=ProjectBillingConfig(
        ...         rate=Decimal("50"), minimum_hours=Decimal("10")
        ...     ),
        ... )
        >>> calculate_project_billing(project).billed_revenue
        Decimal('500.00')
    """
    config = project.billing_config

    task_results = [
        calculate_task_billing(task, config.rounding, config.rate)
        for task in project.tasks
    ]

    actual_minutes = sum(t.actual_minutes for t in task_results)
    rounded_minutes = sum(t.rounded_minutes for t in task_results)
    actual_hours = minutes_to_hours(actual_minutes)
    rounded_hours = minutes_to_hours(rounded_minutes)
    base_revenue = round_currency(rounded_hours * config.rate)

    limited = has_billing_limits(config)

    if limited:
        billed = calculate_billed_hours(rounded_minutes, config)
        carryover_in = billed.carryover_in
        adjusted_hours = billed.adjusted_hours
        billed_hours = billed.billed_hours
        unbillable_hours = billed.unbillable_hours
        carryover_out = billed.carryover_out
        minimum_padding = billed.minimum_padding
        carryover_consumed = billed.carryover_consumed
        minimum_applied = billed.minimum_applied
        maximum_applied = billed.maximum_applied
        adjustment = billed.adjustment
        billed_revenue = billed.revenue
    else:
        carryover_in = ZERO
        adjusted_hours = rounded_hours
        billed_hours = rounded_hours
        unbillable_hours = ZERO
        carryover_out = ZERO
        minimum_padding = ZERO
        carryover_consumed = ZERO
        minimum_applied = False
        maximum_applied = False
        adjustment = NoAdjustment()
        billed_revenue = base_revenue

    return ProjectBillingResult(
        project_id=project.project_id,
        project_name=project.project_name,
        actual_minutes=actual_minutes,
        rounded_minutes=rounded_minutes,
        actual_hours=actual_hours,
        rounded_hours=rounded_hours,
        carryover_in=carryover_in,
        adjusted_hours=adjusted_hours,
        billed_hours=billed_hours,
        unbillable_hours=unbillable_hours,
        carryover_out=carryover_out,
        minimum_padding=minimum_padding,
        carryover_consumed=carryover_consumed,
        minimum_applied=minimum_applied,
        maximum_applied=maximum_applied,
        has_billing_limits=limited,
        base_revenue=base_revenue,
        billed_revenue=billed_revenue,
        rate=config.rate,
        rounding=config.rounding,
        adjustment=adjustment,
        tasks=task_results,
    )
