"""Output formatting utilities for CLI."""

from decimal import Decimal
from typing import List, Optional, Sequence

import click

from timesheet_billing.validators.validation_report import (
    ValidationIssue,
    ValidationSeverity,
)


def format_success(message: str) -> str:
    return click.style(f"✓ {message}", fg="green", bold=True)


def format_error(message: str) -> str:
    return click.style(f"✗ {message}", fg="red", bold=True)


def format_warning(message: str) -> str:
    return click.style(f"⚠ {message}", fg="yellow", bold=True)


def format_info(message: str) -> str:
    return click.style(f"ℹ {message}", fg="blue")


def format_hours(hours: Decimal) -> str:
    """Format hours with two decimals and an "h" suffix, e.g. "12.50h"."""
    return f"{hours:,.2f}h"


def format_currency(amount: Decimal) -> str:
    """Format a monetary amount with thousands separators, e.g. "1,250.00"."""
    return f"{amount:,.2f}"


def format_issue(issue: ValidationIssue) -> str:
    """Format a validation issue in the colour of its severity."""
    text = f"  {issue}"
    if issue.severity == ValidationSeverity.ERROR:
        return format_error(text)
    if issue.severity == ValidationSeverity.WARNING:
        return format_warning(text)
    return format_info(text)


def format_table(
    headers: List[str],
    rows: Sequence[Sequence[object]],
    max_width: int = 40,
    right_align: Optional[Sequence[int]] = None,
) -> str:
    """Format data as a table.

    Args:
        headers: List of column headers
        rows: Data rows (each row is a sequence of cell values)
        max_width: Maximum width for each column (default: 40)
        right_align: Indexes of columns to right-align (numbers)

    Returns:
        Formatted table as a string
    """
    if not headers:
        return ""

    right = set(right_align or [])
    cells = [[str(cell) for cell in row[: len(headers)]] for row in rows]

    col_widths = [len(h) for h in headers]
    for row in cells:
        for i, cell in enumerate(row):
            col_widths[i] = max(col_widths[i], len(cell))
    col_widths = [min(w, max_width) for w in col_widths]

    def render(values: Sequence[str]) -> str:
        parts = []
        for i, value in enumerate(values):
            value = value[: col_widths[i]]
            align = ">" if i in right else "<"
            parts.append(f" {value:{align}{col_widths[i]}} ")
        return "|" + "|".join(parts) + "|"

    separator = "+" + "+".join("-" * (w + 2) for w in col_widths) + "+"

    table_lines = [separator, render(headers), separator]
    if cells:
        table_lines.extend(render(row) for row in cells)
        table_lines.append(separator)

    return "\n".join(table_lines)
