"""Validate billing configuration command."""

from typing import Optional

import click

from timesheet_billing.cli.error_handlers import (
    DataValidationError,
    with_error_handling,
)
from timesheet_billing.cli.utils.billing_run import resolve_input_path
from timesheet_billing.cli.utils.formatters import (
    format_info,
    format_issue,
    format_success,
    format_warning,
)
from timesheet_billing.readers.csv_reader import ProjectCsvReader
from timesheet_billing.validators.billing_config_validator import (
    BillingConfigValidator,
)
from timesheet_billing.validators.validation_report import ValidationSeverity

MAX_ISSUES_PER_SEVERITY = 20


@click.command(name="validate-config")
@click.option(
    "--projects",
    "projects_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Project records CSV (default: PROJECTS_FILE setting)",
)
@click.option(
    "--severity",
    type=click.Choice(["error", "warning", "info"], case_sensitive=False),
    default="warning",
    help="Minimum severity level to display (default: warning)",
)
@click.pass_context
def validate_config(ctx: click.Context, projects_path: Optional[str], severity: str):
    """Validate project billing configuration.

    Checks for:
    - Minimum hours above maximum hours
    - Carryover enabled without a maximum
    - Carryover settings on projects without carryover
    - Zero rates and duplicate project ids

    Returns non-zero exit code if errors are found.

    Example:
        billing-cli validate-config --projects projects.csv
        billing-cli validate-config --severity info
    """
    settings = ctx.obj["settings"]

    with with_error_handling(ctx.obj["debug"]):
        projects_file = resolve_input_path(
            projects_path, settings.projects_file, "--projects"
        )
        click.echo(format_info(f"Validating billing configuration in {projects_file}"))

        records = ProjectCsvReader(
            default_rounding=settings.default_rounding_increment
        ).read_projects(projects_file)
        report = BillingConfigValidator().validate_projects(records)

        severity_level = ValidationSeverity[severity.upper()]

        click.echo()
        click.echo(f"Projects checked: {len(records)}")
        click.echo(f"Errors:           {report.error_count}")
        click.echo(f"Warnings:         {report.warning_count}")
        click.echo(f"Info:             {report.info_count}")

        for sev in (
            ValidationSeverity.ERROR,
            ValidationSeverity.WARNING,
            ValidationSeverity.INFO,
        ):
            if sev < severity_level:
                continue
            issues = report.get_issues(sev)
            if not issues:
                continue
            click.echo()
            click.echo(f"{sev.name}S ({len(issues)}):")
            for issue in issues[:MAX_ISSUES_PER_SEVERITY]:
                click.echo(format_issue(issue))
            if len(issues) > MAX_ISSUES_PER_SEVERITY:
                click.echo(f"  ... and {len(issues) - MAX_ISSUES_PER_SEVERITY} more")

        click.echo()
        if report.has_errors():
            raise DataValidationError(
                f"Validation failed with {report.error_count} error(s)"
            )
        if report.warning_count:
            click.echo(
                format_warning(
                    f"Validation completed with {report.warning_count} warning(s)"
                )
            )
        else:
            click.echo(format_success("Validation passed! No issues found."))
