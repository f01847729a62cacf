"""Loading inputs and running a billing month for CLI commands."""

import datetime as dt
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

import click

from timesheet_billing.aggregators.identity_resolver import ProjectIdentityResolver
from timesheet_billing.aggregators.monthly_billing_aggregator import (
    MonthlyBillingAggregator,
    UnifiedBillingResult,
)
from timesheet_billing.calculators.carryover import parse_billing_month
from timesheet_billing.cli.error_handlers import ConfigurationError
from timesheet_billing.config.settings import BillingEngineConfig
from timesheet_billing.models.project import ProjectRecord
from timesheet_billing.models.timesheet import TimesheetEntry
from timesheet_billing.readers.csv_reader import (
    ProjectCsvReader,
    TimesheetCsvReader,
    read_project_aliases,
)

logger = logging.getLogger(__name__)


def resolve_input_path(
    option_value: Optional[str], setting_value: Optional[str], option_name: str
) -> str:
    """Pick a path from a command option, falling back to settings.

    Raises:
        ConfigurationError: If neither is set
    """
    path = option_value or setting_value
    if not path:
        setting_name = option_name.lstrip("-").upper().replace("-", "_") + "_FILE"
        raise ConfigurationError(
            f"No {option_name.lstrip('-')} file given",
            recovery_hint=f"Pass {option_name} or set {setting_name} in .env",
        )
    return path


@dataclass
class BillingRunInputs:
    """Everything read from disk for one billing month."""

    entries: List[TimesheetEntry]
    projects: List[ProjectRecord]
    project_aliases: Dict[str, str]


def load_run_inputs(
    settings: BillingEngineConfig,
    month: dt.date,
    entries_path: Optional[str],
    projects_path: Optional[str],
    aliases_path: Optional[str],
) -> BillingRunInputs:
    """Read entries, project records and aliases for a month.

    Option values take precedence over the *_FILE settings. The alias file
    is optional.
    """
    entries_file = resolve_input_path(entries_path, settings.entries_file, "--entries")
    projects_file = resolve_input_path(
        projects_path, settings.projects_file, "--projects"
    )
    aliases_file = aliases_path or settings.project_aliases_file

    entries = TimesheetCsvReader().read_entries(entries_file, month=month)
    projects = ProjectCsvReader(
        default_rounding=settings.default_rounding_increment
    ).read_projects(projects_file)
    aliases = read_project_aliases(aliases_file) if aliases_file else {}

    return BillingRunInputs(entries=entries, projects=projects, project_aliases=aliases)


def run_billing_month(
    settings: BillingEngineConfig, month: dt.date, inputs: BillingRunInputs
) -> UnifiedBillingResult:
    """Calculate a month's billing with the configured unassigned company."""
    resolver = ProjectIdentityResolver(
        inputs.projects,
        inputs.project_aliases,
        unassigned_company=settings.unassigned_company,
    )
    aggregator = MonthlyBillingAggregator(resolver, no_task_label=settings.no_task_label)
    return aggregator.calculate(inputs.entries, month=month)


def parse_month_option(ctx, param, value: str) -> dt.date:
    """click callback turning a YYYY-MM option into the month's first day."""
    try:
        return parse_billing_month(value)
    except ValueError as e:
        raise click.BadParameter(str(e))
