"""Reconcile computed billing against a reference summary command."""

import datetime as dt
from decimal import Decimal
from typing import Optional

import click

from timesheet_billing.cli.error_handlers import (
    DataValidationError,
    with_error_handling,
)
from timesheet_billing.cli.utils.billing_run import (
    load_run_inputs,
    parse_month_option,
    run_billing_month,
)
from timesheet_billing.cli.utils.formatters import (
    format_info,
    format_issue,
    format_success,
    format_warning,
)
from timesheet_billing.readers.csv_reader import read_billing_summary
from timesheet_billing.utils.logging_utils import LogContext, generate_correlation_id
from timesheet_billing.validators.billing_reconciliation import reconcile_billing


def _parse_tolerance(ctx, param, value):
    if value is None:
        return None
    try:
        tolerance = Decimal(value)
    except ArithmeticError:
        raise click.BadParameter(f"{value!r} is not a number")
    if tolerance < 0:
        raise click.BadParameter("tolerance cannot be negative")
    return tolerance


@click.command(name="reconcile")
@click.option(
    "--month",
    required=True,
    type=str,
    callback=parse_month_option,
    help="Billing month (YYYY-MM format)",
)
@click.option(
    "--reference",
    "reference_path",
    required=True,
    type=click.Path(dir_okay=False),
    help="Reference billing summary CSV (project_id, billed_hours, billed_revenue)",
)
@click.option(
    "--entries",
    "entries_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Timesheet entries CSV (default: ENTRIES_FILE setting)",
)
@click.option(
    "--projects",
    "projects_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Project records CSV (default: PROJECTS_FILE setting)",
)
@click.option(
    "--aliases",
    "aliases_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Project aliases CSV (default: PROJECT_ALIASES_FILE setting)",
)
@click.option(
    "--tolerance",
    type=str,
    default=None,
    callback=_parse_tolerance,
    help="Largest difference treated as equal (default: RECONCILIATION_TOLERANCE)",
)
@click.pass_context
def reconcile(
    ctx: click.Context,
    month: dt.date,
    reference_path: str,
    entries_path: Optional[str],
    projects_path: Optional[str],
    aliases_path: Optional[str],
    tolerance: Optional[Decimal],
):
    """Compare computed billing with a reference billing summary.

    Differences within the tolerance pass, differences up to ten times the
    tolerance are warnings, anything larger (or a project on one side only)
    is an error.

    Example:
        billing-cli reconcile --month 2026-01 --reference server_summary.csv
        billing-cli reconcile --month 2026-01 --reference summary.csv --tolerance 0.05
    """
    settings = ctx.obj["settings"]

    with with_error_handling(ctx.obj["debug"]):
        with LogContext(correlation_id=generate_correlation_id()):
            month_label = month.strftime("%Y-%m")
            tolerance_value = (
                tolerance if tolerance is not None else settings.reconciliation_tolerance
            )

            click.echo(format_info(f"Reconciling billing for {month_label}..."))
            inputs = load_run_inputs(
                settings, month, entries_path, projects_path, aliases_path
            )
            result = run_billing_month(settings, month, inputs)
            reference = read_billing_summary(reference_path)

            report = reconcile_billing(
                result.billing_result, reference, tolerance=tolerance_value
            )

            click.echo()
            click.echo(f"Reference projects: {len(reference)}")
            click.echo(f"Tolerance:          {tolerance_value}")
            click.echo(f"Errors:             {report.error_count}")
            click.echo(f"Warnings:           {report.warning_count}")

            if report.issues:
                click.echo()
                for issue in report.issues:
                    click.echo(format_issue(issue))

            click.echo()
            if report.has_errors():
                raise DataValidationError(
                    f"Reconciliation failed with {report.error_count} error(s)"
                )
            if report.warning_count:
                click.echo(
                    format_warning(
                        f"Reconciliation completed with "
                        f"{report.warning_count} warning(s)"
                    )
                )
            else:
                click.echo(format_success("Billing matches the reference"))
