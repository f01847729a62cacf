"""Shared utilities for the billing engine."""

from timesheet_billing.utils.logging_utils import (
    LogContext,
    generate_correlation_id,
    get_correlation_id,
    log_function_call,
)

__all__ = [
    "LogContext",
    "generate_correlation_id",
    "get_correlation_id",
    "log_function_call",
]
