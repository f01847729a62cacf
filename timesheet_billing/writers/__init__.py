"""Writers module for generating billing report tables."""

from timesheet_billing.writers.billing_report_generator import (
    BillingReportData,
    BillingReportGenerator,
)

__all__ = [
    "BillingReportData",
    "BillingReportGenerator",
]
