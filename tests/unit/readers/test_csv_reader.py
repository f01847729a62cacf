"""Unit tests for the CSV readers."""

import datetime as dt
import logging
from decimal import Decimal

import pytest

from timesheet_billing.readers.csv_reader import (
    ProjectCsvReader,
    TimesheetCsvReader,
    read_billing_summary,
    read_project_aliases,
)

ENTRIES_CSV = """date,project_id,project_name,client_id,client_name,task_name,user_name,duration_minutes,source
2026-01-05,P-100,Website Redesign,C-1,Acme Corp,Design,Jane Doe,95,clockify
2026-01-06,P-100,Website Redesign,C-1,Acme Corp,,Jane Doe,30,
2026-02-01,P-100,Website Redesign,C-1,Acme Corp,Design,Jane Doe,60,clickup
2026-01-07,,Lunch,,,,John Roe,45,
"""

PROJECTS_CSV = """external_project_id,project_name,client_id,client_name,canonical_client_id,canonical_client_name,rate,rounding,minimum_hours,maximum_hours,is_active,carryover_enabled,carryover_hours_in,carryover_max_hours,carryover_expiry_months
P-100,Website Redesign,C-1,Acme Corp,,,100,15,,,,,,,
P-200,Support Retainer,C-2,Acme Labs,C-1,Acme Corp,50,,10,,true,,,,
P-300,Data Platform,C-3,Globex,,,50,0,,40,,true,5,20,3
"""


@pytest.fixture
def write_csv(tmp_path):
    def _write(name, content):
        path = tmp_path / name
        path.write_text(content)
        return path

    return _write


class TestTimesheetCsvReader:
    """Test reading timesheet entries."""

    def test_reads_entries(self, write_csv):
        entries = TimesheetCsvReader().read_entries(write_csv("entries.csv", ENTRIES_CSV))

        assert len(entries) == 4
        first = entries[0]
        assert first.date == dt.date(2026, 1, 5)
        assert first.duration_minutes == 95
        assert first.source == "clockify"

    def test_blank_cells_become_missing(self, write_csv):
        entries = TimesheetCsvReader().read_entries(write_csv("entries.csv", ENTRIES_CSV))

        assert entries[1].task_name is None
        assert entries[1].source is None
        assert entries[3].project_id is None
        assert entries[3].project_name == "Lunch"

    def test_filters_by_month(self, write_csv):
        entries = TimesheetCsvReader().read_entries(
            write_csv("entries.csv", ENTRIES_CSV), month=dt.date(2026, 2, 1)
        )

        assert [e.duration_minutes for e in entries] == [60]

    def test_skips_invalid_rows(self, write_csv, caplog):
        content = (
            "date,project_id,duration_minutes\n"
            "2026-01-05,P-100,60\n"
            "not-a-date,P-100,60\n"
            "2026-01-06,P-100,-15\n"
        )

        with caplog.at_level(logging.WARNING):
            entries = TimesheetCsvReader().read_entries(write_csv("e.csv", content))

        assert len(entries) == 1
        assert "line 3" in caplog.text
        assert "skipped 2 invalid row(s)" in caplog.text

    def test_missing_required_column(self, write_csv):
        path = write_csv("e.csv", "date,project_id\n2026-01-05,P-100\n")

        with pytest.raises(ValueError, match="duration_minutes"):
            TimesheetCsvReader().read_entries(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            TimesheetCsvReader().read_entries(tmp_path / "missing.csv")


class TestProjectCsvReader:
    """Test reading project records."""

    def test_reads_identity_and_config(self, write_csv):
        records = ProjectCsvReader().read_projects(
            write_csv("projects.csv", PROJECTS_CSV)
        )

        assert [r.external_project_id for r in records] == ["P-100", "P-200", "P-300"]
        assert records[0].canonical_client_id is None
        assert records[0].billing_config.rate == Decimal("100")
        assert records[1].canonical_client_id == "C-1"
        assert records[1].billing_config.minimum_hours == Decimal("10")
        assert records[1].billing_config.is_active is True

        data_platform = records[2].billing_config
        assert data_platform.rounding == 0
        assert data_platform.maximum_hours == Decimal("40")
        assert data_platform.carryover_enabled is True
        assert data_platform.carryover_hours_in == Decimal("5")
        assert data_platform.carryover_max_hours == Decimal("20")
        assert data_platform.carryover_expiry_months == 3

    def test_blank_rounding_uses_model_default(self, write_csv):
        records = ProjectCsvReader().read_projects(
            write_csv("projects.csv", PROJECTS_CSV)
        )
        assert records[1].billing_config.rounding == 15

    def test_blank_rounding_uses_reader_default(self, write_csv):
        records = ProjectCsvReader(default_rounding=30).read_projects(
            write_csv("projects.csv", PROJECTS_CSV)
        )

        assert records[0].billing_config.rounding == 15
        assert records[1].billing_config.rounding == 30

    def test_identity_only_file(self, write_csv):
        records = ProjectCsvReader().read_projects(
            write_csv("p.csv", "external_project_id,project_name\nP-1,Internal\n")
        )

        assert records[0].billing_config.rate == Decimal("0")
        assert records[0].billing_config.rounding == 15

    def test_skips_invalid_rows(self, write_csv, caplog):
        content = (
            "external_project_id,project_name,rate,rounding\n"
            "P-1,Retainer,50,15\n"
            "P-2,Broken,50,10\n"
            "P-3,,50,15\n"
        )

        with caplog.at_level(logging.WARNING):
            records = ProjectCsvReader().read_projects(write_csv("p.csv", content))

        assert [r.external_project_id for r in records] == ["P-1"]
        assert "'P-2'" in caplog.text
        assert "'P-3'" in caplog.text


class TestReadProjectAliases:
    """Test reading alias mappings."""

    def test_reads_aliases(self, write_csv):
        content = (
            "alias_project_id,canonical_project_id\n"
            "CU-100,P-100\n"
            "CU-200, P-200 \n"
            ",P-300\n"
            "P-400,P-400\n"
        )

        aliases = read_project_aliases(write_csv("aliases.csv", content))

        assert aliases == {"CU-100": "P-100", "CU-200": "P-200"}

    def test_missing_columns(self, write_csv):
        with pytest.raises(ValueError, match="canonical_project_id"):
            read_project_aliases(write_csv("aliases.csv", "alias_project_id\nCU-1\n"))


class TestReadBillingSummary:
    """Test reading a reference billing summary."""

    def test_reads_summary(self, write_csv):
        content = (
            "project_id,project_name,billed_hours,billed_revenue\n"
            "P-100,Website Redesign,1.75,175.00\n"
            "P-200,,10,500\n"
        )

        summaries = read_billing_summary(write_csv("summary.csv", content))

        assert set(summaries) == {"P-100", "P-200"}
        assert summaries["P-100"].billed_revenue == Decimal("175.00")
        assert summaries["P-200"].project_name == ""
        assert summaries["P-200"].billed_hours == Decimal("10")
