"""Company and monthly billing roll-ups.

Companies and months have no billing rules of their own: every figure is the
sum of the children's figures, re-normalised to 2 decimal places so totals
across many projects stay exact.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterator, List, Sequence, Tuple

from timesheet_billing.calculators.project_billing import (
    ProjectBillingResult,
    ProjectInput,
    calculate_project_billing,
)
from timesheet_billing.calculators.rounding import sum_currency, sum_hours


@dataclass
class CompanyInput:
    """All projects billed under one canonical company.

    Attributes:
        company_id: Canonical company id
        company_name: Canonical company display name
        projects: Project inputs of the company
    """

    company_id: str
    company_name: str
    projects: List[ProjectInput] = field(default_factory=list)


@dataclass
class CompanyBillingResult:
    """Aggregated billing for one company."""

    company_id: str
    company_name: str

    actual_minutes: int
    rounded_minutes: int
    actual_hours: Decimal
    rounded_hours: Decimal
    adjusted_hours: Decimal
    billed_hours: Decimal
    unbillable_hours: Decimal
    carryover_out: Decimal

    base_revenue: Decimal
    billed_revenue: Decimal

    projects: List[ProjectBillingResult] = field(default_factory=list)


@dataclass
class MonthlyBillingResult:
    """Grand total of a billing period; the root every report reads."""

    actual_minutes: int
    rounded_minutes: int
    actual_hours: Decimal
    rounded_hours: Decimal
    adjusted_hours: Decimal
    billed_hours: Decimal
    unbillable_hours: Decimal
    carryover_out: Decimal

    base_revenue: Decimal
    billed_revenue: Decimal

    companies: List[CompanyBillingResult] = field(default_factory=list)

    def iter_projects(
        self,
    ) -> Iterator[Tuple[CompanyBillingResult, ProjectBillingResult]]:
        """Yield (company, project) pairs across all companies."""
        for company in self.companies:
            for project in company.projects:
                yield company, project


def calculate_company_billing(company: CompanyInput) -> CompanyBillingResult:
    """Calculate billing for a company (collection of projects).

    Args:
        company: Company with its project inputs

    Returns:
        CompanyBillingResult summing every project result
    """
    projects = [calculate_project_billing(p) for p in company.projects]

    return CompanyBillingResult(
        company_id=company.company_id,
        company_name=company.company_name,
        actual_minutes=sum(p.actual_minutes for p in projects),
        rounded_minutes=sum(p.rounded_minutes for p in projects),
        actual_hours=sum_hours(p.actual_hours for p in projects),
        rounded_hours=sum_hours(p.rounded_hours for p in projects),
        adjusted_hours=sum_hours(p.adjusted_hours for p in projects),
        billed_hours=sum_hours(p.billed_hours for p in projects),
        unbillable_hours=sum_hours(p.unbillable_hours for p in projects),
        carryover_out=sum_hours(p.carryover_out for p in projects),
        base_revenue=sum_currency(p.base_revenue for p in projects),
        billed_revenue=sum_currency(p.billed_revenue for p in projects),
        projects=projects,
    )


def calculate_monthly_billing(
    companies: Sequence[CompanyInput],
) -> MonthlyBillingResult:
    """Calculate billing for a month (collection of companies).

    Args:
        companies: Company inputs built for the billing month

    Returns:
        MonthlyBillingResult summing every company result
    """
    results = [calculate_company_billing(c) for c in companies]

    return MonthlyBillingResult(
        actual_minutes=sum(c.actual_minutes for c in results),
        rounded_minutes=sum(c.rounded_minutes for c in results),
        actual_hours=sum_hours(c.actual_hours for c in results),
        rounded_hours=sum_hours(c.rounded_hours for c in results),
        adjusted_hours=sum_hours(c.adjusted_hours for c in results),
        billed_hours=sum_hours(c.billed_hours for c in results),
        unbillable_hours=sum_hours(c.unbillable_hours for c in results),
        carryover_out=sum_hours(c.carryover_out for c in results),
        base_revenue=sum_currency(c.base_revenue for c in results),
        billed_revenue=sum_currency(c.billed_revenue for c in results),
        companies=results,
    )
