"""Billing report generator for creating output DataFrames.

This module turns a UnifiedBillingResult into flat tables (one row per
company, per project and per unmatched project) ready for export.
Monetary and hour figures keep their Decimal values so exported totals match
the billing tree exactly.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Union

import pandas as pd

from timesheet_billing.aggregators.monthly_billing_aggregator import (
    UnifiedBillingResult,
)
from timesheet_billing.calculators.project_billing import format_billing_adjustment

COMPANY_COLUMNS = [
    "Company ID",
    "Company",
    "Projects",
    "Actual Hours",
    "Rounded Hours",
    "Billed Hours",
    "Unbillable Hours",
    "Carryover Out",
    "Base Revenue",
    "Billed Revenue",
]

PROJECT_COLUMNS = [
    "Company ID",
    "Company",
    "Project ID",
    "Project",
    "Rate",
    "Rounding",
    "Actual Hours",
    "Rounded Hours",
    "Carryover In",
    "Billed Hours",
    "Unbillable Hours",
    "Carryover Out",
    "Minimum Padding",
    "Adjustment",
    "Base Revenue",
    "Billed Revenue",
]

UNMATCHED_COLUMNS = ["Project ID", "Project", "Entries", "Minutes", "Hours"]


@dataclass
class BillingReportData:
    """Container for all billing report tables.

    Attributes:
        company_summary: One row per canonical company
        project_detail: One row per billed project
        unmatched_projects: One row per project that could not be billed
    """

    company_summary: pd.DataFrame
    project_detail: pd.DataFrame
    unmatched_projects: pd.DataFrame

    def as_dict(self) -> Dict[str, pd.DataFrame]:
        return {
            "company_summary": self.company_summary,
            "project_detail": self.project_detail,
            "unmatched_projects": self.unmatched_projects,
        }


class BillingReportGenerator:
    """Generate billing report DataFrames from a unified billing result.

    Example:
        >>> generator = BillingReportGenerator(result)
        >>> report = generator.generate()
        >>> report.company_summary["Billed Revenue"].iloc[0]
        Decimal('500.00')
    """

    def __init__(self, result: UnifiedBillingResult):
        """Initialize with a unified billing result.

        Args:
            result: Monthly billing result with unmatched projects
        """
        self.result = result

    def generate(self) -> BillingReportData:
        """Generate all report DataFrames."""
        return BillingReportData(
            company_summary=self._generate_company_summary(),
            project_detail=self._generate_project_detail(),
            unmatched_projects=self._generate_unmatched_projects(),
        )

    def write_csv(self, output_dir: Union[str, Path]) -> List[Path]:
        """Write every report table to output_dir as CSV.

        Args:
            output_dir: Directory to write into (created if missing)

        Returns:
            Paths of the written files
        """
        output_path = Path(output_dir)
        output_path.mkdir(parents=True, exist_ok=True)

        written = []
        for name, df in self.generate().as_dict().items():
            file_path = output_path / f"{name}.csv"
            df.to_csv(file_path, index=False)
            written.append(file_path)
        return written

    def _generate_company_summary(self) -> pd.DataFrame:
        companies = self.result.billing_result.companies
        if not companies:
            return pd.DataFrame(columns=COMPANY_COLUMNS)

        rows = [
            {
                "Company ID": company.company_id,
                "Company": company.company_name,
                "Projects": len(company.projects),
                "Actual Hours": company.actual_hours,
                "Rounded Hours": company.rounded_hours,
                "Billed Hours": company.billed_hours,
                "Unbillable Hours": company.unbillable_hours,
                "Carryover Out": company.carryover_out,
                "Base Revenue": company.base_revenue,
                "Billed Revenue": company.billed_revenue,
            }
            for company in companies
        ]
        return pd.DataFrame(rows, columns=COMPANY_COLUMNS)

    def _generate_project_detail(self) -> pd.DataFrame:
        rows = []
        for company, project in self.result.billing_result.iter_projects():
            rows.append(
                {
                    "Company ID": company.company_id,
                    "Company": company.company_name,
                    "Project ID": project.project_id or "",
                    "Project": project.project_name,
                    "Rate": project.rate,
                    "Rounding": project.rounding,
                    "Actual Hours": project.actual_hours,
                    "Rounded Hours": project.rounded_hours,
                    "Carryover In": project.carryover_in,
                    "Billed Hours": project.billed_hours,
                    "Unbillable Hours": project.unbillable_hours,
                    "Carryover Out": project.carryover_out,
                    "Minimum Padding": project.minimum_padding,
                    "Adjustment": format_billing_adjustment(project.adjustment),
                    "Base Revenue": project.base_revenue,
                    "Billed Revenue": project.billed_revenue,
                }
            )

        if not rows:
            return pd.DataFrame(columns=PROJECT_COLUMNS)
        return pd.DataFrame(rows, columns=PROJECT_COLUMNS)

    def _generate_unmatched_projects(self) -> pd.DataFrame:
        unmatched = self.result.unmatched_projects
        if not unmatched:
            return pd.DataFrame(columns=UNMATCHED_COLUMNS)

        rows = [
            {
                "Project ID": project.project_id or "",
                "Project": project.project_name,
                "Entries": project.entry_count,
                "Minutes": project.total_minutes,
                "Hours": project.total_hours,
            }
            for project in unmatched
        ]
        return pd.DataFrame(rows, columns=UNMATCHED_COLUMNS)
