"""Monthly billing aggregator.

This module runs the whole engine for one billing month: it resolves project
identities, reports entries that cannot be billed, builds the nested inputs
(including configured projects without entries) and calculates the monthly
result that every report reads.
"""

import datetime as dt
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from timesheet_billing.aggregators.billing_input_builder import (
    NO_TASK_LABEL,
    build_billing_inputs,
)
from timesheet_billing.aggregators.identity_resolver import (
    ProjectIdentityResolver,
    UnmatchedProject,
)
from timesheet_billing.calculators.carryover import (
    CarryoverBatch,
    roll_forward_carryover,
)
from timesheet_billing.calculators.rollup_billing import (
    CompanyInput,
    MonthlyBillingResult,
    calculate_monthly_billing,
)
from timesheet_billing.calculators.rounding import minutes_to_hours
from timesheet_billing.models.project import ProjectRecord
from timesheet_billing.models.timesheet import TimesheetEntry
from timesheet_billing.utils.logging_utils import LogContext, log_function_call

logger = logging.getLogger(__name__)


@dataclass
class UnifiedBillingResult:
    """Monthly billing together with the entries that could not be billed.

    Callers should check all_projects_matched before trusting a total.

    Attributes:
        billing_result: Complete company/project/task billing tree
        unmatched_projects: Projects excluded because they have no config
        billing_inputs: Inputs the result was calculated from
    """

    billing_result: MonthlyBillingResult
    unmatched_projects: List[UnmatchedProject] = field(default_factory=list)
    billing_inputs: List[CompanyInput] = field(default_factory=list)

    @property
    def all_projects_matched(self) -> bool:
        """True when no entry was excluded for lack of configuration."""
        return len(self.unmatched_projects) == 0

    @property
    def total_revenue(self) -> Decimal:
        return self.billing_result.billed_revenue

    @property
    def total_billed_hours(self) -> Decimal:
        return self.billing_result.billed_hours

    @property
    def total_actual_hours(self) -> Decimal:
        return self.billing_result.actual_hours

    @property
    def unmatched_hours(self) -> Decimal:
        """Hours excluded from billing because their project is unmatched."""
        return minutes_to_hours(sum(p.total_minutes for p in self.unmatched_projects))


class MonthlyBillingAggregator:
    """Calculates a month's billing from raw entries and project records.

    The aggregator:
    1. Optionally restricts entries to the billing month
    2. Maps alias project ids to canonical ids
    3. Separates entries whose project has no billing configuration
    4. Groups matched entries company -> project -> task
    5. Adds configured projects without entries that still need billing
    6. Calculates task, project, company and monthly billing

    Attributes:
        resolver: Identity resolver holding the month's project records
        no_task_label: Task name used for entries without a task

    Example:
        >>> resolver = ProjectIdentityResolver(projects, project_aliases)
        >>> aggregator = MonthlyBillingAggregator(resolver)
        >>> result = aggregator.calculate(entries, month=dt.date(2026, 1, 1))
        >>> result.all_projects_matched
        True
    """

    def __init__(
        self,
        resolver: ProjectIdentityResolver,
        no_task_label: str = NO_TASK_LABEL,
    ):
        """Initialize the aggregator.

        Args:
            resolver: Identity resolver holding the month's project records
            no_task_label: Task name used for entries without a task
        """
        self.resolver = resolver
        self.no_task_label = no_task_label

    def calculate(
        self,
        entries: Iterable[TimesheetEntry],
        month: Optional[dt.date] = None,
    ) -> UnifiedBillingResult:
        """Calculate billing for a month.

        Args:
            entries: Timesheet entries (already fetched for the month, or a
                wider range when month is given)
            month: Billing month (any day of it); entries outside it are
                ignored when given

        Returns:
            UnifiedBillingResult with the billing tree and unmatched projects

        Raises:
            BillingInvariantError: If a matched project lost its configuration
        """
        entries = list(entries)
        month_label = month.strftime("%Y-%m") if month else "all"

        with LogContext(billing_month=month_label):
            logger.info(
                f"Starting billing calculation for {month_label}: "
                f"{len(entries)} entries"
            )

            if month is not None:
                entries = [
                    e
                    for e in entries
                    if e.date.year == month.year and e.date.month == month.month
                ]
                logger.info(
                    f"Filtered to billing month {month_label}: "
                    f"{len(entries)} entries remaining"
                )

            matched, unmatched = self.resolver.partition_entries(entries)
            logger.info(
                f"Matched {len(matched)} entries; "
                f"{len(unmatched)} unmatched project(s)"
            )

            inputs = build_billing_inputs(
                matched,
                get_billing_config=self.resolver.get_billing_config,
                get_canonical_company_by_project=(
                    self.resolver.get_canonical_company_by_project
                ),
                configured_projects=self.resolver.configured_projects,
                get_project_name=self.resolver.project_name,
                no_task_label=self.no_task_label,
            )

            billing_result = calculate_monthly_billing(inputs)

            logger.info(
                f"Billing complete for {month_label}: "
                f"{len(billing_result.companies)} companies, "
                f"{billing_result.billed_hours}h billed, "
                f"revenue {billing_result.billed_revenue}"
            )

        return UnifiedBillingResult(
            billing_result=billing_result,
            unmatched_projects=unmatched,
            billing_inputs=inputs,
        )

    def roll_forward(
        self,
        result: UnifiedBillingResult,
        month: dt.date,
        carryover_batches: Optional[Mapping[str, Sequence[CarryoverBatch]]] = None,
    ) -> Dict[str, List[CarryoverBatch]]:
        """Carryover batches each carryover-enabled project leaves behind.

        Args:
            result: Billing result of month
            month: The billed month
            carryover_batches: Batches that made up each project's
                carryover_hours_in (by canonical project id)

        Returns:
            Mapping of project id to next month's batches; projects with
            carryover disabled or without a maximum are omitted
        """
        carryover_batches = carryover_batches or {}
        next_batches: Dict[str, List[CarryoverBatch]] = {}

        for _, project in result.billing_result.iter_projects():
            if not project.project_id:
                continue
            config = self.resolver.get_billing_config(project.project_id)
            if config is None:
                continue
            if not config.carryover_enabled or config.maximum_hours is None:
                continue

            next_batches[project.project_id] = roll_forward_carryover(
                project,
                config,
                month,
                carryover_batches.get(project.project_id, []),
            )

        return next_batches


@log_function_call
def compute_unified_billing(
    entries: Iterable[TimesheetEntry],
    projects: Iterable[ProjectRecord],
    project_aliases: Optional[Mapping[str, str]] = None,
    month: Optional[dt.date] = None,
) -> UnifiedBillingResult:
    """Calculate a month's billing from entries and project records.

    Functional shortcut for MonthlyBillingAggregator(...).calculate(...).

    Args:
        entries: Timesheet entries
        projects: Project records for the billing month
        project_aliases: Alias project id -> canonical project id
        month: Optional billing month used to filter entries

    Returns:
        UnifiedBillingResult
    """
    resolver = ProjectIdentityResolver(projects, project_aliases)
    return MonthlyBillingAggregator(resolver).calculate(entries, month=month)
