"""Aggregators turning flat timesheet entries into monthly billing.

This package groups entries into billing inputs, resolves canonical project
and company identities, and runs the billers for a month.
"""

from timesheet_billing.aggregators.billing_input_builder import (
    NO_TASK_LABEL,
    BillingInvariantError,
    build_billing_inputs,
    inject_configured_projects,
)
from timesheet_billing.aggregators.identity_resolver import (
    ProjectIdentityResolver,
    UnmatchedProject,
)
from timesheet_billing.aggregators.monthly_billing_aggregator import (
    MonthlyBillingAggregator,
    UnifiedBillingResult,
    compute_unified_billing,
)

__all__ = [
    "NO_TASK_LABEL",
    "BillingInvariantError",
    "build_billing_inputs",
    "inject_configured_projects",
    "ProjectIdentityResolver",
    "UnmatchedProject",
    "MonthlyBillingAggregator",
    "UnifiedBillingResult",
    "compute_unified_billing",
]
