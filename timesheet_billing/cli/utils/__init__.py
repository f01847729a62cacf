"""CLI utility functions."""

from timesheet_billing.cli.utils.formatters import (
    format_currency,
    format_error,
    format_hours,
    format_info,
    format_issue,
    format_success,
    format_table,
    format_warning,
)

__all__ = [
    "format_currency",
    "format_error",
    "format_hours",
    "format_info",
    "format_issue",
    "format_success",
    "format_table",
    "format_warning",
]
