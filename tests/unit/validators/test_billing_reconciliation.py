"""Unit tests for billing reconciliation."""

import logging
from decimal import Decimal

import pytest

from timesheet_billing.calculators.project_billing import ProjectInput
from timesheet_billing.calculators.rollup_billing import (
    CompanyInput,
    calculate_monthly_billing,
)
from timesheet_billing.calculators.task_billing import TaskInput
from timesheet_billing.models.billing_summary import ProjectBillingSummary
from timesheet_billing.models.project import ProjectBillingConfig
from timesheet_billing.validators.billing_reconciliation import (
    ReconciliationStatus,
    compare_with_tolerance,
    reconcile_billing,
    summarize_projects,
)
from timesheet_billing.validators.validation_report import ValidationSeverity


@pytest.fixture
def monthly_result():
    return calculate_monthly_billing(
        [
            CompanyInput(
                "C-1",
                "Acme Corp",
                [
                    ProjectInput(
                        "P-100",
                        "Website Redesign",
                        [TaskInput("Development", 105)],
                        ProjectBillingConfig(rate=Decimal("100")),
                    ),
                    ProjectInput(
                        "P-200",
                        "Support Retainer",
                        [],
                        ProjectBillingConfig(
                            rate=Decimal("50"), minimum_hours=Decimal("10")
                        ),
                    ),
                ],
            )
        ]
    )


def summary(project_id, hours, revenue):
    return ProjectBillingSummary(
        project_id=project_id, billed_hours=hours, billed_revenue=revenue
    )


class TestCompareWithTolerance:
    """Test tolerance bands."""

    @pytest.mark.parametrize(
        "expected,actual,status",
        [
            ("100.00", "100.00", ReconciliationStatus.PASS),
            ("100.00", "100.01", ReconciliationStatus.PASS),
            ("100.00", "100.10", ReconciliationStatus.WARNING),
            ("100.00", "99.89", ReconciliationStatus.FAIL),
        ],
    )
    def test_bands(self, expected, actual, status):
        assert compare_with_tolerance(Decimal(expected), Decimal(actual)) == status

    def test_custom_tolerance(self):
        assert (
            compare_with_tolerance(Decimal("100"), Decimal("104"), Decimal("5"))
            == ReconciliationStatus.PASS
        )


class TestSummarizeProjects:
    """Test reducing a monthly result to project summaries."""

    def test_summaries(self, monthly_result):
        summaries = summarize_projects(monthly_result)

        assert list(summaries) == ["P-100", "P-200"]
        assert summaries["P-100"].billed_hours == Decimal("1.75")
        assert summaries["P-100"].billed_revenue == Decimal("175.00")
        assert summaries["P-200"].billed_revenue == Decimal("500.00")
        assert summaries["P-200"].project_name == "Support Retainer"


class TestReconcileBilling:
    """Test comparing two computations."""

    def test_identical_results(self, monthly_result):
        report = reconcile_billing(monthly_result, monthly_result)

        assert report.issues == []

    def test_against_matching_summaries(self, monthly_result):
        reference = {
            "P-100": summary("P-100", "1.75", "175"),
            "P-200": summary("P-200", "10", "500"),
        }

        assert reconcile_billing(monthly_result, reference).is_valid()

    def test_drift_within_warning_band(self, monthly_result):
        reference = {
            "P-100": summary("P-100", "1.75", "175.05"),
            "P-200": summary("P-200", "10", "500"),
        }

        report = reconcile_billing(monthly_result, reference)

        assert report.is_valid() is True
        warning = report.get_warnings()[0]
        assert warning.field == "billed_revenue"
        assert warning.project_id == "P-100"
        assert warning.message == "Differs from reference by -0.05"
        assert warning.context == {
            "expected": Decimal("175.05"),
            "actual": Decimal("175.00"),
        }

    def test_large_drift_is_error(self, monthly_result, caplog):
        reference = {
            "P-100": summary("P-100", "1.75", "175"),
            "P-200": summary("P-200", "7.5", "375"),
        }

        with caplog.at_level(logging.WARNING):
            report = reconcile_billing(monthly_result, reference)

        errors = report.get_errors()
        assert [(e.project_id, e.field) for e in errors] == [
            ("P-200", "billed_hours"),
            ("P-200", "billed_revenue"),
        ]
        assert all(e.severity == ValidationSeverity.ERROR for e in errors)
        assert "Billing drift for P-200" in caplog.text

    def test_project_missing_on_one_side(self, monthly_result):
        reference = {
            "P-100": summary("P-100", "1.75", "175"),
            "P-900": summary("P-900", "3", "300"),
        }

        report = reconcile_billing(monthly_result, reference)

        messages = {e.project_id: e.message for e in report.get_errors()}
        assert messages == {
            "P-200": "Project only present in computed billing",
            "P-900": "Project only present in reference billing",
        }

    def test_custom_tolerance(self, monthly_result):
        reference = {
            "P-100": summary("P-100", "1.75", "176"),
            "P-200": summary("P-200", "10", "500"),
        }

        report = reconcile_billing(monthly_result, reference, tolerance=Decimal("1"))

        assert report.issues == []
