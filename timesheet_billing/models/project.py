"""Project billing configuration models.

This module defines the per-project, per-month billing configuration the
engine consumes, the project record that external data access supplies, and
the canonical company identity used for grouping.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Literal, Optional, Union

from pydantic import Field, field_validator

from timesheet_billing.models.base import (
    BaseDataModel,
    to_decimal,
    to_optional_decimal,
)

RoundingIncrement = Literal[0, 5, 15, 30]

ROUNDING_INCREMENTS = (0, 5, 15, 30)

DEFAULT_ROUNDING_INCREMENT: RoundingIncrement = 15

UNASSIGNED_COMPANY_ID = "__UNASSIGNED__"
UNASSIGNED_COMPANY_NAME = "Unassigned"


def parse_rounding_increment(value: Union[str, int, float, Decimal]) -> int:
    """Parse a rounding increment from loosely typed input.

    Args:
        value: Increment as int, float (e.g. 15.0 from a spreadsheet) or string

    Returns:
        The increment as an int

    Raises:
        ValueError: If the value is not one of 0, 5, 15 or 30
    """
    try:
        increment = int(to_decimal(value))
    except (ValueError, ArithmeticError):
        raise ValueError(f"Invalid rounding increment: {value!r}")
    if increment not in ROUNDING_INCREMENTS:
        raise ValueError(
            f"Invalid rounding increment: {value!r}. "
            f"Must be one of {ROUNDING_INCREMENTS}"
        )
    return increment


class ProjectBillingConfig(BaseDataModel):
    """Billing configuration for one project in one billing month.

    Attributes:
        rate: Hourly billing rate
        rounding: Rounding increment in minutes applied per task
        minimum_hours: Hours billed at least (only while the project is active)
        maximum_hours: Hours billed at most per month
        is_active: Whether the minimum applies this month
        carryover_enabled: Whether hours over the maximum roll to next month
        carryover_hours_in: Hours carried in from prior months
        carryover_max_hours: Cap on hours that may be carried forward
        carryover_expiry_months: Months after which carried hours expire

    Example:
        >>> config = ProjectBillingConfig(
        ...     rate=Decimal("50.00"),
        ...     minimum_hours=Decimal("10"),
        ... )
        >>> config.rounding
        15
    """

    rate: Decimal = Field(Decimal("0"), ge=0, description="Hourly rate")
    rounding: RoundingIncrement = Field(
        DEFAULT_ROUNDING_INCREMENT, description="Rounding increment (minutes)"
    )
    minimum_hours: Optional[Decimal] = Field(None, ge=0)
    maximum_hours: Optional[Decimal] = Field(None, ge=0)
    is_active: bool = True
    carryover_enabled: bool = False
    carryover_hours_in: Decimal = Field(Decimal("0"), ge=0)
    carryover_max_hours: Optional[Decimal] = Field(None, ge=0)
    carryover_expiry_months: Optional[int] = Field(None, ge=1)

    @field_validator("rate", "carryover_hours_in", mode="before")
    @classmethod
    def convert_to_decimal(cls, v):
        """Convert numeric values to Decimal for precision."""
        if v is None or (isinstance(v, str) and not v.strip()):
            return Decimal("0")
        return to_decimal(v)

    @field_validator(
        "minimum_hours", "maximum_hours", "carryover_max_hours", mode="before"
    )
    @classmethod
    def convert_optional_decimal(cls, v):
        """Convert optional numeric limits to Decimal, keeping None."""
        return to_optional_decimal(v)

    @field_validator("rounding", mode="before")
    @classmethod
    def convert_rounding(cls, v):
        """Accept increments given as strings or floats."""
        if v is None:
            return DEFAULT_ROUNDING_INCREMENT
        return parse_rounding_increment(v)


class ProjectRecord(BaseDataModel):
    """Externally supplied project row for a billing month.

    The data-access layer resolves effective rates, rounding and limits for
    the month; this record only carries the result plus identity fields.

    Attributes:
        external_project_id: Project id used by the time-tracking source
        project_name: Display name of the project
        client_id: Company id the project belongs to
        client_name: Company display name
        canonical_client_id: Primary company id when the company is merged
        canonical_client_name: Primary company display name
        billing_config: Effective billing configuration for the month
    """

    external_project_id: str = Field(..., min_length=1)
    project_name: str = Field(..., min_length=1)
    client_id: Optional[str] = None
    client_name: Optional[str] = None
    canonical_client_id: Optional[str] = None
    canonical_client_name: Optional[str] = None
    billing_config: ProjectBillingConfig = Field(default_factory=ProjectBillingConfig)

    @field_validator("external_project_id", "project_name")
    @classmethod
    def validate_not_empty(cls, v: str, info) -> str:
        """Validate that string fields are not empty or whitespace only.

        Raises:
            ValueError: If the value is empty or whitespace only
        """
        if not v or not v.strip():
            raise ValueError(f"{info.field_name} cannot be empty or whitespace")
        return v.strip()

    @field_validator(
        "client_id",
        "client_name",
        "canonical_client_id",
        "canonical_client_name",
        mode="before",
    )
    @classmethod
    def blank_to_none(cls, v):
        """Treat blank identity fields as missing."""
        if v is None:
            return None
        v = str(v).strip()
        return v or None


@dataclass(frozen=True)
class CanonicalCompany:
    """Primary company identity that member/alias companies aggregate under.

    Attributes:
        canonical_client_id: Id of the primary company
        canonical_display_name: Display name of the primary company
    """

    canonical_client_id: str
    canonical_display_name: str


UNASSIGNED_COMPANY = CanonicalCompany(
    canonical_client_id=UNASSIGNED_COMPANY_ID,
    canonical_display_name=UNASSIGNED_COMPANY_NAME,
)
