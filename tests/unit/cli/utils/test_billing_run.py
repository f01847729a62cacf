"""Tests for loading inputs and running a billing month from the CLI."""

import datetime as dt
from decimal import Decimal

import click
import pytest

from timesheet_billing.cli.error_handlers import ConfigurationError
from timesheet_billing.cli.utils.billing_run import (
    load_run_inputs,
    parse_month_option,
    resolve_input_path,
    run_billing_month,
)

JANUARY = dt.date(2026, 1, 1)


class TestResolveInputPath:
    """Test option/setting fallback for input paths."""

    def test_option_wins(self):
        assert resolve_input_path("a.csv", "b.csv", "--entries") == "a.csv"

    def test_setting_fallback(self):
        assert resolve_input_path(None, "b.csv", "--entries") == "b.csv"

    def test_missing(self):
        with pytest.raises(ConfigurationError) as exc_info:
            resolve_input_path(None, None, "--projects")

        assert exc_info.value.message == "No projects file given"
        assert exc_info.value.recovery_hint == (
            "Pass --projects or set PROJECTS_FILE in .env"
        )


class TestParseMonthOption:
    """Test the --month callback."""

    def test_valid(self):
        assert parse_month_option(None, None, "2026-01") == JANUARY

    def test_invalid(self):
        with pytest.raises(click.BadParameter, match="Invalid billing month"):
            parse_month_option(None, None, "2026/01")


class TestRunBillingMonth:
    """Test loading files and calculating a month."""

    def test_load_and_run(self, test_config, billing_files):
        inputs = load_run_inputs(
            test_config,
            JANUARY,
            billing_files["entries"],
            billing_files["projects"],
            billing_files["aliases"],
        )

        assert len(inputs.entries) == 6
        assert inputs.project_aliases == {"CU-200": "P-200"}

        result = run_billing_month(test_config, JANUARY, inputs)

        assert result.total_revenue == Decimal("2675.00")
        assert [p.project_id for p in result.unmatched_projects] == ["X123"]

    def test_aliases_are_optional(self, test_config, billing_files):
        inputs = load_run_inputs(
            test_config, JANUARY, billing_files["entries"], billing_files["projects"], None
        )
        assert inputs.project_aliases == {}
