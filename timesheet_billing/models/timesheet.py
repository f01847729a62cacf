"""Timesheet data model for the billing engine.

This module defines the TimesheetEntry model which represents a single
recorded work item coming from one of the upstream time-tracking sources.
"""

import datetime as dt
from typing import Literal, Optional

from pydantic import Field, field_validator

from timesheet_billing.models.base import BaseDataModel


class TimesheetEntry(BaseDataModel):
    """Represents a single timesheet entry.

    Entries are the immutable source of truth for a billing month. The
    engine never mutates them; identity resolution produces copies that
    carry the canonical project id and name.

    Attributes:
        date: Date the work was performed
        project_id: External project identifier (None when the source
            did not attach the entry to a project)
        project_name: Project display name as reported by the source
        client_id: External company/client identifier
        client_name: Company display name as reported by the source
        task_name: Task display name (None when no task was recorded)
        user_name: Person who recorded the time
        duration_minutes: Recorded duration in minutes
        source: Upstream time-tracking system the entry came from

    Example:
        >>> entry = TimesheetEntry(
        ...     date=dt.date(2026, 1, 15),
        ...     project_id="P-100",
        ...     project_name="Website Redesign",
        ...     client_id="C-1",
        ...     client_name="Acme Corp",
        ...     task_name="Design review",
        ...     user_name="Jane Doe",
        ...     duration_minutes=95,
        ... )
        >>> entry.duration_minutes
        95
    """

    date: dt.date = Field(..., description="Date of work")
    project_id: Optional[str] = Field(None, description="External project id")
    project_name: str = Field("", description="Project display name")
    client_id: Optional[str] = Field(None, description="External company id")
    client_name: str = Field("", description="Company display name")
    task_name: Optional[str] = Field(None, description="Task display name")
    user_name: str = Field("", description="User who tracked the time")
    duration_minutes: int = Field(..., ge=0, description="Duration in minutes")
    source: Optional[Literal["clockify", "clickup"]] = Field(
        None, description="Upstream time-tracking source"
    )

    @field_validator("project_id", "client_id", "task_name", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        """Treat empty or whitespace-only identifiers as missing.

        Args:
            v: The value to normalise

        Returns:
            The stripped value, or None when blank
        """
        if v is None:
            return None
        v = str(v).strip()
        return v or None

    @field_validator("project_name", "client_name", "user_name", mode="before")
    @classmethod
    def strip_names(cls, v):
        """Strip surrounding whitespace from display names."""
        if v is None:
            return ""
        return str(v).strip()
