"""Validation layer for billing configuration and reconciliation."""

from timesheet_billing.validators.billing_config_validator import (
    BillingConfigValidator,
)
from timesheet_billing.validators.billing_reconciliation import (
    ReconciliationStatus,
    compare_with_tolerance,
    reconcile_billing,
    summarize_projects,
)
from timesheet_billing.validators.validation_report import (
    ValidationIssue,
    ValidationReport,
    ValidationSeverity,
)

__all__ = [
    "BillingConfigValidator",
    "ReconciliationStatus",
    "ValidationReport",
    "ValidationIssue",
    "ValidationSeverity",
    "compare_with_tolerance",
    "reconcile_billing",
    "summarize_projects",
]
