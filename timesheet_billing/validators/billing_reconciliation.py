"""Reconciliation of two billing computations for the same month.

Used to run two engines in parallel (e.g. a locally computed month against
figures exported by another system) and report per-project drift in billed
hours and billed revenue.
"""

import logging
from decimal import Decimal
from enum import Enum
from typing import Dict, Mapping, Optional, Union

from timesheet_billing.calculators.rollup_billing import MonthlyBillingResult
from timesheet_billing.models.billing_summary import ProjectBillingSummary
from timesheet_billing.validators.validation_report import (
    ValidationReport,
    ValidationSeverity,
)

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE = Decimal("0.01")

# Differences up to this multiple of the tolerance are reported as warnings
WARNING_TOLERANCE_FACTOR = 10

BillingSource = Union[MonthlyBillingResult, Mapping[str, ProjectBillingSummary]]


class ReconciliationStatus(str, Enum):
    """Outcome of comparing one figure between two computations."""

    PASS = "pass"
    WARNING = "warning"
    FAIL = "fail"


def compare_with_tolerance(
    expected: Decimal, actual: Decimal, tolerance: Decimal = DEFAULT_TOLERANCE
) -> ReconciliationStatus:
    """Compare two figures within a tolerance.

    Args:
        expected: Figure from the reference computation
        actual: Figure from the computation under test
        tolerance: Largest difference considered equal

    Returns:
        PASS within tolerance, WARNING within ten times the tolerance,
        FAIL otherwise
    """
    difference = abs(expected - actual)
    if difference <= tolerance:
        return ReconciliationStatus.PASS
    if difference <= tolerance * WARNING_TOLERANCE_FACTOR:
        return ReconciliationStatus.WARNING
    return ReconciliationStatus.FAIL


def summarize_projects(result: MonthlyBillingResult) -> Dict[str, ProjectBillingSummary]:
    """Reduce a monthly result to billed totals keyed by project id.

    Args:
        result: Computed monthly billing

    Returns:
        Mapping of project id to its billed hours and revenue
    """
    summaries: Dict[str, ProjectBillingSummary] = {}
    for _company, project in result.iter_projects():
        if not project.project_id:
            continue
        summaries[project.project_id] = ProjectBillingSummary(
            project_id=project.project_id,
            project_name=project.project_name,
            billed_hours=project.billed_hours,
            billed_revenue=project.billed_revenue,
        )
    return summaries


def _as_summaries(source: BillingSource) -> Mapping[str, ProjectBillingSummary]:
    if isinstance(source, MonthlyBillingResult):
        return summarize_projects(source)
    return source


_STATUS_SEVERITY = {
    ReconciliationStatus.WARNING: ValidationSeverity.WARNING,
    ReconciliationStatus.FAIL: ValidationSeverity.ERROR,
}


def reconcile_billing(
    computed: BillingSource,
    reference: BillingSource,
    tolerance: Optional[Decimal] = None,
) -> ValidationReport:
    """Compare billed hours and revenue per project between two computations.

    Args:
        computed: Monthly result (or project summaries) under test
        reference: Monthly result (or project summaries) to compare against
        tolerance: Largest difference considered equal (default 0.01)

    Returns:
        ValidationReport with a warning or error per drifting figure and an
        error per project present on one side only
    """
    if tolerance is None:
        tolerance = DEFAULT_TOLERANCE

    computed_projects = _as_summaries(computed)
    reference_projects = _as_summaries(reference)
    report = ValidationReport()

    for project_id in sorted(set(computed_projects) | set(reference_projects)):
        ours = computed_projects.get(project_id)
        theirs = reference_projects.get(project_id)

        if ours is None or theirs is None:
            side = "reference" if ours is None else "computed"
            present = theirs if ours is None else ours
            logger.warning(f"Project {project_id} only present in {side} billing")
            report.add_error(
                "project_id",
                f"Project only present in {side} billing",
                project_id,
                project_id=project_id,
                context={"billed_revenue": present.billed_revenue},
            )
            continue

        for metric in ("billed_hours", "billed_revenue"):
            expected = getattr(theirs, metric)
            actual = getattr(ours, metric)
            status = compare_with_tolerance(expected, actual, tolerance)
            if status is ReconciliationStatus.PASS:
                continue

            difference = actual - expected
            logger.warning(
                f"Billing drift for {project_id} {metric}: "
                f"expected {expected}, got {actual} ({status.value})"
            )
            report.add(
                _STATUS_SEVERITY[status],
                metric,
                f"Differs from reference by {difference}",
                actual,
                project_id=project_id,
                context={"expected": expected, "actual": actual},
            )

    logger.info(
        f"Reconciled {len(computed_projects)} computed against "
        f"{len(reference_projects)} reference projects: {report.summary()}"
    )
    return report
