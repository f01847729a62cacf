"""Readers for loading billing engine inputs from flat files."""

from timesheet_billing.readers.csv_reader import (
    ProjectCsvReader,
    TimesheetCsvReader,
    read_billing_summary,
    read_project_aliases,
)

__all__ = [
    "ProjectCsvReader",
    "TimesheetCsvReader",
    "read_billing_summary",
    "read_project_aliases",
]
