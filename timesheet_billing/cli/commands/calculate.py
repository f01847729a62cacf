"""Calculate monthly billing command."""

import datetime as dt
from typing import Optional

import click

from timesheet_billing.aggregators.monthly_billing_aggregator import (
    UnifiedBillingResult,
)
from timesheet_billing.calculators.project_billing import format_billing_adjustment
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
    format_currency,
    format_hours,
    format_info,
    format_success,
    format_table,
    format_warning,
)
from timesheet_billing.utils.logging_utils import LogContext, generate_correlation_id
from timesheet_billing.writers.billing_report_generator import BillingReportGenerator


def _echo_companies(result: UnifiedBillingResult) -> None:
    rows = [
        [
            company.company_name,
            len(company.projects),
            format_hours(company.actual_hours),
            format_hours(company.billed_hours),
            format_currency(company.billed_revenue),
        ]
        for company in result.billing_result.companies
    ]
    click.echo(
        format_table(
            ["Company", "Projects", "Actual", "Billed", "Revenue"],
            rows,
            right_align=[1, 2, 3, 4],
        )
    )


def _echo_projects(result: UnifiedBillingResult) -> None:
    rows = [
        [
            company.company_name,
            project.project_name,
            format_hours(project.rounded_hours),
            format_hours(project.billed_hours),
            format_currency(project.billed_revenue),
            format_billing_adjustment(project.adjustment),
        ]
        for company, project in result.billing_result.iter_projects()
    ]
    click.echo(
        format_table(
            ["Company", "Project", "Rounded", "Billed", "Revenue", "Adjustment"],
            rows,
            right_align=[2, 3, 4],
        )
    )


def _echo_unmatched(result: UnifiedBillingResult) -> None:
    click.echo()
    click.echo(
        format_warning(
            f"{len(result.unmatched_projects)} project(s) could not be matched "
            f"({format_hours(result.unmatched_hours)} excluded from billing):"
        )
    )
    for project in result.unmatched_projects:
        label = project.project_id or "(no project id)"
        click.echo(
            format_warning(
                f"  {label} {project.project_name}: "
                f"{format_hours(project.total_hours)} in {project.entry_count} entries"
            )
        )


@click.command(name="calculate")
@click.option(
    "--month",
    required=True,
    type=str,
    callback=parse_month_option,
    help="Billing month (YYYY-MM format)",
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
    "--output-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Write company, project and unmatched tables as CSV to this directory",
)
@click.option(
    "--details",
    is_flag=True,
    default=False,
    help="Show the per-project breakdown",
)
@click.option(
    "--strict",
    is_flag=True,
    default=False,
    help="Exit with an error when any entries could not be matched to a project",
)
@click.pass_context
def calculate_billing(
    ctx: click.Context,
    month: dt.date,
    entries_path: Optional[str],
    projects_path: Optional[str],
    aliases_path: Optional[str],
    output_dir: Optional[str],
    details: bool,
    strict: bool,
):
    """Calculate billing for one month.

    Applies per-task rounding, minimum and maximum hours and carryover to
    every project, rolls totals up per company and reports time that
    could not be matched to a configured project.

    Example:
        billing-cli calculate --month 2026-01 --entries entries.csv --projects projects.csv
        billing-cli calculate --month 2026-01 --details --output-dir out/
        billing-cli calculate --month 2026-01 --strict
    """
    settings = ctx.obj["settings"]

    with with_error_handling(ctx.obj["debug"]):
        with LogContext(correlation_id=generate_correlation_id()):
            month_label = month.strftime("%Y-%m")
            click.echo(format_info(f"Calculating billing for {month_label}..."))

            inputs = load_run_inputs(
                settings, month, entries_path, projects_path, aliases_path
            )
            click.echo(
                format_info(
                    f"  {len(inputs.entries)} entries, "
                    f"{len(inputs.projects)} projects, "
                    f"{len(inputs.project_aliases)} aliases"
                )
            )

            result = run_billing_month(settings, month, inputs)
            billing = result.billing_result

            click.echo()
            _echo_companies(result)
            if details:
                click.echo()
                _echo_projects(result)

            click.echo()
            click.echo(f"Actual hours:     {format_hours(billing.actual_hours)}")
            click.echo(f"Billed hours:     {format_hours(billing.billed_hours)}")
            click.echo(f"Unbillable hours: {format_hours(billing.unbillable_hours)}")
            click.echo(f"Carryover out:    {format_hours(billing.carryover_out)}")
            click.echo(f"Billed revenue:   {format_currency(billing.billed_revenue)}")

            if output_dir:
                written = BillingReportGenerator(result).write_csv(output_dir)
                click.echo()
                for path in written:
                    click.echo(format_info(f"Wrote {path}"))

            if not result.all_projects_matched:
                _echo_unmatched(result)
                if strict:
                    raise DataValidationError(
                        f"{len(result.unmatched_projects)} unmatched project(s)",
                        recovery_hint=(
                            "Add the projects to the project records or map "
                            "them with a project alias"
                        ),
                    )

            click.echo()
            click.echo(format_success(f"Billing for {month_label} calculated"))
