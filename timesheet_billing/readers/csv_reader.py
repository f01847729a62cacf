"""CSV readers for timesheet entries, project records and billing summaries.

The engine itself is storage-agnostic; these readers load the flat exports
the CLI works with. Files are read with pandas as text so that blank cells
stay blank, and every row is validated through the pydantic models. Rows
that fail validation are skipped with a warning.

Expected columns:

Timesheet entries:
```
date       | project_id | project_name | client_id | client_name | task_name | user_name | duration_minutes | source
-----------|------------|--------------|-----------|-------------|-----------|-----------|------------------|---------
2026-01-05 | P-100      | Website      | C-1       | Acme Corp   | Design    | Jane Doe  | 95               | clockify
```

Projects:
```
external_project_id | project_name | client_id | client_name | canonical_client_id | canonical_client_name | rate | rounding | minimum_hours | maximum_hours | is_active | carryover_enabled | carryover_hours_in | carryover_max_hours | carryover_expiry_months
```

Project aliases:
```
alias_project_id | canonical_project_id
```

Billing summary:
```
project_id | project_name | billed_hours | billed_revenue
```
"""

import datetime as dt
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Type, TypeVar, Union

import pandas as pd
from pydantic import ValidationError

from timesheet_billing.models.base import BaseDataModel
from timesheet_billing.models.billing_summary import ProjectBillingSummary
from timesheet_billing.models.project import ProjectBillingConfig, ProjectRecord
from timesheet_billing.models.timesheet import TimesheetEntry

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]
ModelT = TypeVar("ModelT", bound=BaseDataModel)

TIMESHEET_COLUMNS = [
    "date",
    "project_id",
    "project_name",
    "client_id",
    "client_name",
    "task_name",
    "user_name",
    "duration_minutes",
    "source",
]

PROJECT_COLUMNS = [
    "external_project_id",
    "project_name",
    "client_id",
    "client_name",
    "canonical_client_id",
    "canonical_client_name",
]

BILLING_CONFIG_COLUMNS = list(ProjectBillingConfig.model_fields)

ALIAS_COLUMNS = ["alias_project_id", "canonical_project_id"]

SUMMARY_COLUMNS = ["project_id", "project_name", "billed_hours", "billed_revenue"]


def _read_csv(path: PathLike, required_columns: Iterable[str]) -> pd.DataFrame:
    """Read a CSV file as text, checking that required columns exist.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If required columns are missing
    """
    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    df.columns = [str(c).strip() for c in df.columns]

    missing = [c for c in required_columns if c not in df.columns]
    if missing:
        raise ValueError(f"{path}: missing required column(s): {', '.join(missing)}")

    logger.debug(f"Read {len(df)} rows from {path}")
    return df


def _row_values(row: Dict[str, Any], columns: Iterable[str]) -> Dict[str, Any]:
    """Pick the non-blank cells of the given columns from a row."""
    values = {}
    for column in columns:
        value = row.get(column)
        if value is None:
            continue
        value = str(value).strip()
        if value:
            values[column] = value
    return values


def _parse_rows(
    df: pd.DataFrame,
    model: Type[ModelT],
    columns: List[str],
    path: PathLike,
) -> List[ModelT]:
    records: List[ModelT] = []
    skipped = 0
    for index, row in enumerate(df.to_dict(orient="records"), start=2):
        try:
            records.append(model(**_row_values(row, columns)))
        except ValidationError as e:
            skipped += 1
            logger.warning(
                f"{path} line {index}: skipping invalid {model.__name__} row: "
                f"{e.error_count()} validation error(s)"
            )
            logger.debug(str(e))

    if skipped:
        logger.warning(f"{path}: skipped {skipped} invalid row(s)")
    return records


class TimesheetCsvReader:
    """Reader for timesheet entry exports.

    Example:
        >>> reader = TimesheetCsvReader()
        >>> entries = reader.read_entries("entries.csv", month=dt.date(2026, 1, 1))
    """

    def read_entries(
        self, path: PathLike, month: Optional[dt.date] = None
    ) -> List[TimesheetEntry]:
        """Read timesheet entries from a CSV file.

        Args:
            path: Path to the CSV export
            month: Only keep entries in this month (any day of it)

        Returns:
            List of valid TimesheetEntry objects
        """
        df = _read_csv(path, ["date", "duration_minutes"])
        entries = _parse_rows(df, TimesheetEntry, TIMESHEET_COLUMNS, path)

        if month is not None:
            entries = [
                e
                for e in entries
                if e.date.year == month.year and e.date.month == month.month
            ]

        logger.info(f"Loaded {len(entries)} timesheet entries from {path}")
        return entries


class ProjectCsvReader:
    """Reader for project records with their effective billing configuration.

    Each row carries identity columns and billing configuration columns.
    Blank configuration cells fall back to the model defaults (rounding 15,
    no limits, active, carryover disabled). A blank rounding cell uses
    default_rounding when given.
    """

    def __init__(self, default_rounding: Optional[int] = None):
        """Initialize the reader.

        Args:
            default_rounding: Rounding increment for rows that leave it blank
        """
        self.default_rounding = default_rounding

    def read_projects(self, path: PathLike) -> List[ProjectRecord]:
        """Read project records from a CSV file.

        Args:
            path: Path to the CSV export

        Returns:
            List of valid ProjectRecord objects
        """
        df = _read_csv(path, ["external_project_id", "project_name"])
        records = []
        for index, row in enumerate(df.to_dict(orient="records"), start=2):
            record = self._parse_project_row(row, index, path)
            if record:
                records.append(record)

        logger.info(f"Loaded {len(records)} project records from {path}")
        return records

    def _parse_project_row(
        self, row: Dict[str, Any], index: int, path: PathLike
    ) -> Optional[ProjectRecord]:
        config_values = _row_values(row, BILLING_CONFIG_COLUMNS)
        if "rounding" not in config_values and self.default_rounding is not None:
            config_values["rounding"] = self.default_rounding

        try:
            return ProjectRecord(
                **_row_values(row, PROJECT_COLUMNS),
                billing_config=ProjectBillingConfig(**config_values),
            )
        except ValidationError as e:
            logger.warning(
                f"{path} line {index}: skipping invalid project row "
                f"{row.get('external_project_id', '')!r}: "
                f"{e.error_count()} validation error(s)"
            )
            logger.debug(str(e))
            return None


def read_project_aliases(path: PathLike) -> Dict[str, str]:
    """Read alias project id -> canonical project id mappings.

    Rows with a blank side or mapping an id onto itself are skipped.

    Args:
        path: Path to the CSV export

    Returns:
        Dictionary of alias id to canonical id
    """
    df = _read_csv(path, ALIAS_COLUMNS)
    aliases: Dict[str, str] = {}
    for row in df.to_dict(orient="records"):
        alias_id = str(row["alias_project_id"]).strip()
        canonical_id = str(row["canonical_project_id"]).strip()
        if not alias_id or not canonical_id or alias_id == canonical_id:
            continue
        aliases[alias_id] = canonical_id

    logger.info(f"Loaded {len(aliases)} project aliases from {path}")
    return aliases


def read_billing_summary(path: PathLike) -> Dict[str, ProjectBillingSummary]:
    """Read a per-project billing summary exported by another computation.

    Args:
        path: Path to the CSV export

    Returns:
        Dictionary of project id to ProjectBillingSummary
    """
    df = _read_csv(path, ["project_id", "billed_hours", "billed_revenue"])
    summaries = _parse_rows(df, ProjectBillingSummary, SUMMARY_COLUMNS, path)

    logger.info(f"Loaded {len(summaries)} project summaries from {path}")
    return {summary.project_id: summary for summary in summaries}
