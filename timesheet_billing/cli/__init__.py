"""Billing engine CLI.

This module provides a command-line interface for the billing engine.
It includes commands for calculating a month's billing, validating project
billing configuration, and reconciling against a reference computation.
"""

from typing import Optional

import click

from timesheet_billing import __version__
from timesheet_billing.cli.commands.calculate import calculate_billing
from timesheet_billing.cli.commands.reconcile import reconcile
from timesheet_billing.cli.commands.validate import validate_config
from timesheet_billing.cli.error_handlers import handle_cli_error
from timesheet_billing.config.logging_config import LoggingConfig, configure_logging
from timesheet_billing.config.settings import get_config, reload_config


@click.group(
    help="Billing Engine CLI - Calculate monthly billing from timesheet entries"
)
@click.version_option(version=__version__)
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug logging and full stack traces",
)
@click.option(
    "--env-file",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Load settings from this .env file",
)
@click.pass_context
def cli(ctx: click.Context, debug: bool, env_file: Optional[str]):
    """Billing engine CLI main entry point."""
    ctx.ensure_object(dict)

    try:
        settings = reload_config(env_file) if env_file else get_config()
    except Exception as e:
        ctx.exit(handle_cli_error(e, debug))

    configure_logging(LoggingConfig.from_settings(settings, debug=debug))
    ctx.obj["settings"] = settings
    ctx.obj["debug"] = debug or settings.debug


# Register commands
cli.add_command(calculate_billing)
cli.add_command(validate_config)
cli.add_command(reconcile)


def main():
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
