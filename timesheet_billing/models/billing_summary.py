"""Per-project billed totals used for reconciliation."""

from decimal import Decimal

from pydantic import Field, field_validator

from timesheet_billing.models.base import BaseDataModel, to_decimal


class ProjectBillingSummary(BaseDataModel):
    """Billed hours and revenue for one project in one month.

    Produced from a computed MonthlyBillingResult or read from a
    previously exported billing summary.

    Attributes:
        project_id: External project identifier
        project_name: Project display name
        billed_hours: Hours billed after minimum/maximum adjustments
        billed_revenue: Revenue billed for the month
    """

    project_id: str = Field(..., min_length=1)
    project_name: str = ""
    billed_hours: Decimal = Field(Decimal("0"), ge=0)
    billed_revenue: Decimal = Field(Decimal("0"), ge=0)

    @field_validator("billed_hours", "billed_revenue", mode="before")
    @classmethod
    def convert_to_decimal(cls, v):
        """Convert numeric values to Decimal for precision."""
        if v is None or (isinstance(v, str) and not v.strip()):
            return Decimal("0")
        return to_decimal(v)

    @field_validator("project_name", mode="before")
    @classmethod
    def strip_name(cls, v):
        if v is None:
            return ""
        return str(v).strip()
