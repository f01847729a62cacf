"""Error handling for CLI commands."""

import sys
import traceback
from typing import Optional

import click
from pydantic import ValidationError

from timesheet_billing.aggregators.billing_input_builder import BillingInvariantError
from timesheet_billing.cli.utils.formatters import format_error, format_warning


class CLIError(Exception):
    """Base exception for CLI errors with user-friendly messages."""

    exit_code = 1
    label = "Error"

    def __init__(self, message: str, recovery_hint: Optional[str] = None):
        """
        Initialize CLI error.

        Args:
            message: Error message to display
            recovery_hint: Optional hint for recovering from the error
        """
        self.message = message
        self.recovery_hint = recovery_hint
        super().__init__(message)


class ConfigurationError(CLIError):
    """Missing or invalid settings, input paths or input files."""

    exit_code = 1
    label = "Configuration Error"


class DataValidationError(CLIError):
    """Input data that fails validation, or unmatched/reconciliation failures."""

    exit_code = 2
    label = "Data Validation Error"


class ProcessingError(CLIError):
    """Failure while calculating billing."""

    exit_code = 3
    label = "Processing Error"


def _as_cli_error(error: Exception) -> Optional[CLIError]:
    """Translate known library exceptions into CLI errors."""
    if isinstance(error, CLIError):
        return error
    if isinstance(error, FileNotFoundError):
        return ConfigurationError(
            f"File not found: {error.filename or error}",
            recovery_hint="Check the input paths or the *_FILE settings in .env",
        )
    if isinstance(error, ValidationError):
        return ConfigurationError(
            f"Invalid settings: {error.error_count()} validation error(s)\n{error}",
            recovery_hint="Check the environment variables or .env file",
        )
    if isinstance(error, BillingInvariantError):
        return ProcessingError(
            str(error),
            recovery_hint="Check that every project record has billing configuration",
        )
    return None


def handle_cli_error(error: Exception, debug: bool = False) -> int:
    """
    Handle CLI errors with user-friendly messages.

    Args:
        error: The exception that occurred
        debug: Whether to show full stack trace

    Returns:
        Exit code (1 configuration, 2 data validation, 3 processing,
        130 cancelled, 255 unexpected)
    """
    cli_error = _as_cli_error(error)
    if cli_error is not None:
        click.echo(format_error(f"{cli_error.label}: {cli_error.message}"))
        if cli_error.recovery_hint:
            click.echo(format_warning(f"Hint: {cli_error.recovery_hint}"))
        return cli_error.exit_code

    if isinstance(error, click.Abort):
        click.echo(format_warning("\nOperation cancelled by user"))
        return 130  # Standard exit code for SIGINT

    click.echo(format_error(f"Unexpected Error: {type(error).__name__}"))
    click.echo(str(error))

    if debug:
        click.echo("\nFull stack trace:")
        click.echo(
            "".join(
                traceback.format_exception(type(error), error, error.__traceback__)
            )
        )
    else:
        click.echo(format_warning("\nRun with --debug flag for full stack trace"))

    return 255


def with_error_handling(debug: bool = False):
    """
    Context manager adding standardized error handling to CLI commands.

    Any exception raised in the block is reported by handle_cli_error and
    turned into a process exit with the matching code.

    Args:
        debug: Whether to show full stack traces

    Example:
        @click.command()
        @click.pass_context
        def my_command(ctx):
            with with_error_handling(ctx.obj["debug"]):
                ...
    """

    class ErrorHandler:
        """Context manager for error handling."""

        def __init__(self, show_debug: bool):
            self.show_debug = show_debug

        def __enter__(self):
            return self

        def __exit__(self, exc_type, exc_val, exc_tb):
            if exc_val is not None and isinstance(exc_val, Exception):
                exit_code = handle_cli_error(exc_val, self.show_debug)
                sys.exit(exit_code)
            return False  # Don't suppress exceptions

    return ErrorHandler(debug)
