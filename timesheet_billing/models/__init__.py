"""Data models for the billing engine.

This package contains Pydantic models for the engine's inputs:
- BaseDataModel: Base class with common configuration
- TimesheetEntry: Individual tracked work record
- ProjectBillingConfig: Per-project, per-month billing configuration
- ProjectRecord: Externally supplied project row with identity fields
- CanonicalCompany: Primary company identity used for grouping
- ProjectBillingSummary: Billed totals for one project, used for reconciliation
"""

from timesheet_billing.models.base import BaseDataModel
from timesheet_billing.models.billing_summary import ProjectBillingSummary
from timesheet_billing.models.project import (
    DEFAULT_ROUNDING_INCREMENT,
    ROUNDING_INCREMENTS,
    UNASSIGNED_COMPANY,
    CanonicalCompany,
    ProjectBillingConfig,
    ProjectRecord,
    RoundingIncrement,
)
from timesheet_billing.models.timesheet import TimesheetEntry

__all__ = [
    "BaseDataModel",
    "CanonicalCompany",
    "DEFAULT_ROUNDING_INCREMENT",
    "ProjectBillingConfig",
    "ProjectBillingSummary",
    "ProjectRecord",
    "ROUNDING_INCREMENTS",
    "RoundingIncrement",
    "TimesheetEntry",
    "UNASSIGNED_COMPANY",
]
