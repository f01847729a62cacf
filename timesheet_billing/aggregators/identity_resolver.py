"""Project and company identity resolution.

Two upstream time-tracking sources feed the engine, and projects or companies
are sometimes duplicated and later merged. This module maps alias project ids
to their canonical id, resolves each project's canonical company, and
separates entries whose project cannot be matched to a billing configuration.

Matching is by id only. Display names are neither unique nor stable across
sources, so an unresolvable id is reported as an UnmatchedProject instead of
being billed at a guessed or default rate.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from timesheet_billing.calculators.rounding import minutes_to_hours
from timesheet_billing.models.project import (
    UNASSIGNED_COMPANY,
    CanonicalCompany,
    ProjectBillingConfig,
    ProjectRecord,
)
from timesheet_billing.models.timesheet import TimesheetEntry

logger = logging.getLogger(__name__)


@dataclass
class UnmatchedProject:
    """A project id seen in the entries without billing configuration.

    Attributes:
        project_id: Project id as reported by the source (None if missing)
        project_name: Project name as reported by the source
        total_minutes: Minutes excluded from billing
        entry_count: Number of entries excluded
    """

    project_id: Optional[str]
    project_name: str
    total_minutes: int
    entry_count: int = 0

    @property
    def total_hours(self) -> Decimal:
        """Excluded time in hours (2dp)."""
        return minutes_to_hours(self.total_minutes)


class ProjectIdentityResolver:
    """Resolves canonical project and company identities for a month.

    Attributes:
        project_aliases: Mapping of alias project id to canonical project id
        unassigned_company: Company used for projects without a client

    Example:
        >>> resolver = ProjectIdentityResolver(
        ...     projects=[record],
        ...     project_aliases={"CU-77": "CL-100"},
        ... )
        >>> resolver.canonical_project_id("CU-77")
        'CL-100'
        >>> matched, unmatched = resolver.partition_entries(entries)
    """

    def __init__(
        self,
        projects: Iterable[ProjectRecord],
        project_aliases: Optional[Mapping[str, str]] = None,
        unassigned_company: CanonicalCompany = UNASSIGNED_COMPANY,
    ):
        """Initialize the resolver.

        Args:
            projects: Project records supplied for the billing month
            project_aliases: Alias project id -> canonical project id
            unassigned_company: Company used when a project has no client
        """
        self.project_aliases: Dict[str, str] = dict(project_aliases or {})
        self.unassigned_company = unassigned_company
        self._records: Dict[str, ProjectRecord] = {}

        for record in projects:
            if record.external_project_id in self._records:
                logger.warning(
                    f"Duplicate project record for {record.external_project_id}; "
                    f"using the last one ({record.project_name})"
                )
            self._records[record.external_project_id] = record

    @property
    def configured_projects(self) -> Dict[str, ProjectBillingConfig]:
        """Billing configuration by canonical project id."""
        return {pid: r.billing_config for pid, r in self._records.items()}

    def canonical_project_id(self, project_id: str) -> str:
        """Follow alias links to the canonical project id.

        Ids without an alias are their own canonical id.
        """
        seen = {project_id}
        current = project_id
        while current in self.project_aliases:
            target = self.project_aliases[current]
            if target in seen:
                logger.warning(f"Alias cycle detected for project {project_id}")
                break
            seen.add(target)
            current = target
        return current

    def get_billing_config(self, project_id: str) -> Optional[ProjectBillingConfig]:
        """Billing configuration of a canonical project id, or None."""
        record = self._records.get(project_id)
        return record.billing_config if record else None

    def project_name(self, project_id: str) -> Optional[str]:
        """Configured display name of a canonical project id, or None."""
        record = self._records.get(project_id)
        return record.project_name if record else None

    def get_canonical_company_by_project(self, project_id: str) -> CanonicalCompany:
        """Resolve the primary company a project is billed under.

        Prefers the project's canonical company, then its own company, then
        the unassigned company.
        """
        record = self._records.get(project_id)
        if record is None:
            return self.unassigned_company

        client_id = record.canonical_client_id or record.client_id
        if not client_id:
            return self.unassigned_company

        display_name = (
            record.canonical_client_name
            or record.client_name
            or self.unassigned_company.canonical_display_name
        )
        return CanonicalCompany(
            canonical_client_id=client_id, canonical_display_name=display_name
        )

    def partition_entries(
        self, entries: Iterable[TimesheetEntry]
    ) -> Tuple[List[TimesheetEntry], List[UnmatchedProject]]:
        """Split entries into matched (canonicalised) and unmatched projects.

        Matched entries are copies carrying the canonical project id and the
        configured project name. Entries without a project id, or whose
        canonical id has no configuration, are accumulated per reported id.

        Args:
            entries: Raw entries for the billing month

        Returns:
            Tuple of (matched entries, unmatched projects)
        """
        matched: List[TimesheetEntry] = []
        unmatched: Dict[Tuple[Optional[str], str], UnmatchedProject] = {}

        for entry in entries:
            canonical_id = (
                self.canonical_project_id(entry.project_id)
                if entry.project_id
                else None
            )

            if canonical_id is not None and canonical_id in self._records:
                if canonical_id != entry.project_id or (
                    self._records[canonical_id].project_name != entry.project_name
                ):
                    entry = entry.model_copy(
                        update={
                            "project_id": canonical_id,
                            "project_name": self._records[canonical_id].project_name,
                        }
                    )
                matched.append(entry)
                continue

            # Entries without an id are told apart by their reported name
            key = (
                (entry.project_id, "")
                if entry.project_id
                else (None, entry.project_name)
            )
            project = unmatched.get(key)
            if project is None:
                project = UnmatchedProject(
                    project_id=entry.project_id,
                    project_name=entry.project_name,
                    total_minutes=0,
                )
                unmatched[key] = project
            project.total_minutes += entry.duration_minutes
            project.entry_count += 1

        if unmatched:
            logger.warning(
                f"{len(unmatched)} project(s) could not be matched to billing "
                f"configuration: "
                + ", ".join(
                    f"{p.project_id or '<no id>'} ({p.project_name})"
                    for p in unmatched.values()
                )
            )

        return matched, list(unmatched.values())
