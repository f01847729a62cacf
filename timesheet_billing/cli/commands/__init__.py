"""CLI commands."""

from timesheet_billing.cli.commands.calculate import calculate_billing
from timesheet_billing.cli.commands.reconcile import reconcile
from timesheet_billing.cli.commands.validate import validate_config

__all__ = ["calculate_billing", "reconcile", "validate_config"]
