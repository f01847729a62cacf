"""Tests for the reconcile command."""

import pytest
from click.testing import CliRunner

from timesheet_billing.cli import cli


@pytest.fixture
def reconcile_args(billing_files):
    return [
        "reconcile",
        "--month",
        "2026-01",
        "--entries",
        billing_files["entries"],
        "--projects",
        billing_files["projects"],
        "--aliases",
        billing_files["aliases"],
    ]


def write_reference(tmp_path, rows):
    path = tmp_path / "reference.csv"
    path.write_text(
        "project_id,billed_hours,billed_revenue\n"
        + "".join(f"{row}\n" for row in rows)
    )
    return str(path)


class TestReconcileCommand:
    """Test billing-cli reconcile."""

    def test_matching_reference(self, mock_env, billing_files, reconcile_args):
        runner = CliRunner()
        result = runner.invoke(
            cli, reconcile_args + ["--reference", billing_files["reference"]]
        )

        assert result.exit_code == 0
        assert "Reference projects: 3" in result.output
        assert "Tolerance:          0.01" in result.output
        assert "Billing matches the reference" in result.output

    def test_small_drift_warns(self, mock_env, reconcile_args, tmp_path):
        reference = write_reference(
            tmp_path,
            ["P-100,1.75,175.05", "P-200,10,500", "P-300,40,2000"],
        )

        runner = CliRunner()
        result = runner.invoke(cli, reconcile_args + ["--reference", reference])

        assert result.exit_code == 0
        assert "P-100.billed_revenue: Differs from reference by -0.05" in result.output
        assert "Reconciliation completed with 1 warning(s)" in result.output

    def test_large_drift_fails(self, mock_env, reconcile_args, tmp_path):
        reference = write_reference(
            tmp_path,
            ["P-100,1.75,175", "P-200,7.5,375", "P-300,40,2000"],
        )

        runner = CliRunner()
        result = runner.invoke(cli, reconcile_args + ["--reference", reference])

        assert result.exit_code == 2
        assert "Errors:             2" in result.output
        assert "Reconciliation failed with 2 error(s)" in result.output

    def test_missing_project_fails(self, mock_env, reconcile_args, tmp_path):
        reference = write_reference(tmp_path, ["P-100,1.75,175", "P-200,10,500"])

        runner = CliRunner()
        result = runner.invoke(cli, reconcile_args + ["--reference", reference])

        assert result.exit_code == 2
        assert "Project only present in computed billing" in result.output

    def test_custom_tolerance(self, mock_env, reconcile_args, tmp_path):
        reference = write_reference(
            tmp_path,
            ["P-100,1.75,176", "P-200,10,500", "P-300,40,2000"],
        )

        runner = CliRunner()
        result = runner.invoke(
            cli, reconcile_args + ["--reference", reference, "--tolerance", "1"]
        )

        assert result.exit_code == 0
        assert "Billing matches the reference" in result.output

    def test_tolerance_from_settings(
        self, mock_env, monkeypatch, reconcile_args, tmp_path
    ):
        monkeypatch.setenv("RECONCILIATION_TOLERANCE", "1")
        reference = write_reference(
            tmp_path,
            ["P-100,1.75,176", "P-200,10,500", "P-300,40,2000"],
        )

        runner = CliRunner()
        result = runner.invoke(cli, reconcile_args + ["--reference", reference])

        assert result.exit_code == 0
        assert "Tolerance:          1" in result.output

    @pytest.mark.parametrize("value", ["abc", "-1"])
    def test_invalid_tolerance(self, mock_env, billing_files, reconcile_args, value):
        runner = CliRunner()
        result = runner.invoke(
            cli,
            reconcile_args
            + ["--reference", billing_files["reference"], "--tolerance", value],
        )

        assert result.exit_code == 2
        assert "--tolerance" in result.output

    def test_reference_required(self, mock_env, reconcile_args):
        runner = CliRunner()
        result = runner.invoke(cli, reconcile_args)

        assert result.exit_code == 2
        assert "--reference" in result.output
