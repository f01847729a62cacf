"""Build the nested billing inputs from flat timesheet entries.

Entries are grouped company -> project -> task with minutes summed per task,
which is the shape the billers need: rounding happens per task, so grouping
must come first. Grouping uses the canonical company returned by the injected
resolver, never the entry's own client id, so entries of merged companies
land under one primary company.

Configured projects without any entries in the month are added afterwards by
inject_configured_projects(); a project with an active minimum or inbound
carryover still has to be billed even when nobody logged time on it.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Mapping, Optional

from timesheet_billing.calculators.project_billing import ProjectInput
from timesheet_billing.calculators.rollup_billing import CompanyInput
from timesheet_billing.calculators.task_billing import TaskInput
from timesheet_billing.models.project import CanonicalCompany, ProjectBillingConfig
from timesheet_billing.models.timesheet import TimesheetEntry

logger = logging.getLogger(__name__)

NO_TASK_LABEL = "No Task"

BillingConfigLookup = Callable[[str], Optional[ProjectBillingConfig]]
CanonicalCompanyLookup = Callable[[str], CanonicalCompany]
ProjectNameLookup = Callable[[str], Optional[str]]


class BillingInvariantError(RuntimeError):
    """Raised when grouped data and billing configuration disagree.

    This signals a bug in the calling pipeline (e.g. a project that passed
    identity matching has no configuration when inputs are built), not bad
    input data.
    """


def require_billing_config(
    get_billing_config: BillingConfigLookup, project_id: str
) -> ProjectBillingConfig:
    config = get_billing_config(project_id)
    if config is None:
        raise BillingInvariantError(
            f"Project '{project_id}' passed identity matching but has no "
            f"billing configuration"
        )
    return config


@dataclass
class _ProjectGroup:
    project_name: str
    tasks: Dict[str, int] = field(default_factory=dict)


@dataclass
class _CompanyGroup:
    company_name: str
    projects: Dict[str, _ProjectGroup] = field(default_factory=dict)


def needs_zero_entry_billing(config: ProjectBillingConfig) -> bool:
    """Whether a project without entries still produces billable hours.

    True when hours are carried in from prior months or an active minimum
    applies.
    """
    if config.carryover_hours_in > 0:
        return True
    return (
        config.is_active
        and config.minimum_hours is not None
        and config.minimum_hours > 0
    )


def group_entries(
    entries: Iterable[TimesheetEntry],
    get_canonical_company_by_project: CanonicalCompanyLookup,
    no_task_label: str = NO_TASK_LABEL,
) -> Dict[str, _CompanyGroup]:
    """Group entries by canonical company, project and task.

    Args:
        entries: Entries to group (project ids already canonical)
        get_canonical_company_by_project: Resolves a project id to its company
        no_task_label: Task name used for entries without a task

    Returns:
        Mapping of company id to grouped projects, in first-seen order
    """
    companies: Dict[str, _CompanyGroup] = {}

    for entry in entries:
        project_id = entry.project_id or ""
        company = get_canonical_company_by_project(project_id)
        task_name = entry.task_name or no_task_label

        company_group = companies.get(company.canonical_client_id)
        if company_group is None:
            company_group = _CompanyGroup(company_name=company.canonical_display_name)
            companies[company.canonical_client_id] = company_group

        project_group = company_group.projects.get(project_id)
        if project_group is None:
            project_group = _ProjectGroup(project_name=entry.project_name)
            company_group.projects[project_id] = project_group

        project_group.tasks[task_name] = (
            project_group.tasks.get(task_name, 0) + entry.duration_minutes
        )

    return companies


def inject_configured_projects(
    companies: List[CompanyInput],
    configured_projects: Mapping[str, ProjectBillingConfig],
    get_canonical_company_by_project: CanonicalCompanyLookup,
    get_project_name: Optional[ProjectNameLookup] = None,
) -> List[CompanyInput]:
    """Add zero-task inputs for configured projects missing from the month.

    Only projects whose configuration still produces billable hours without
    entries (see needs_zero_entry_billing) are added.

    Args:
        companies: Company inputs built from the month's entries (extended
            in place)
        configured_projects: Billing configuration by canonical project id
        get_canonical_company_by_project: Resolves a project id to its company
        get_project_name: Optional display-name lookup (falls back to the id)

    Returns:
        The same list, with synthesised projects appended
    """
    present = {
        project.project_id
        for company in companies
        for project in company.projects
        if project.project_id
    }
    by_company_id = {company.company_id: company for company in companies}

    for project_id, config in configured_projects.items():
        if project_id in present or not needs_zero_entry_billing(config):
            continue

        company = get_canonical_company_by_project(project_id)
        company_input = by_company_id.get(company.canonical_client_id)
        if company_input is None:
            company_input = CompanyInput(
                company_id=company.canonical_client_id,
                company_name=company.canonical_display_name,
            )
            companies.append(company_input)
            by_company_id[company.canonical_client_id] = company_input

        project_name = get_project_name(project_id) if get_project_name else None
        company_input.projects.append(
            ProjectInput(
                project_id=project_id,
                project_name=project_name or project_id,
                tasks=[],
                billing_config=config,
            )
        )
        logger.debug(
            f"Added project {project_id} without entries to "
            f"{company.canonical_client_id} (carryover in "
            f"{config.carryover_hours_in}, minimum {config.minimum_hours})"
        )

    return companies


def build_billing_inputs(
    entries: Iterable[TimesheetEntry],
    get_billing_config: BillingConfigLookup,
    get_canonical_company_by_project: CanonicalCompanyLookup,
    configured_projects: Optional[Mapping[str, ProjectBillingConfig]] = None,
    get_project_name: Optional[ProjectNameLookup] = None,
    no_task_label: str = NO_TASK_LABEL,
) -> List[CompanyInput]:
    """Build billing inputs from timesheet entries and billing configuration.

    Args:
        entries: Matched entries carrying canonical project ids
        get_billing_config: ID-only billing configuration lookup
        get_canonical_company_by_project: Resolves a project id to its company
        configured_projects: When given, configured projects without entries
            that still need billing are injected as zero-task projects
        get_project_name: Display-name lookup used for injected projects
        no_task_label: Task name used for entries without a task

    Returns:
        List of CompanyInput ready for calculate_monthly_billing()

    Raises:
        BillingInvariantError: If the lookup has no configuration for a
            grouped project

    Example:
        inputs = build_billing_inputs(
            matched_entries,
            resolver.get_billing_config,
            resolver.get_canonical_company_by_project,
        )
    """
    grouped = group_entries(entries, get_canonical_company_by_project, no_task_label)

    companies: List[CompanyInput] = []
    for company_id, company_group in grouped.items():
        projects = [
            ProjectInput(
                project_id=project_id or None,
                project_name=project_group.project_name,
                tasks=[
                    TaskInput(task_name=name, total_minutes=minutes)
                    for name, minutes in project_group.tasks.items()
                ],
                billing_config=require_billing_config(get_billing_config, project_id),
            )
            for project_id, project_group in company_group.projects.items()
        ]
        companies.append(
            CompanyInput(
                company_id=company_id,
                company_name=company_group.company_name,
                projects=projects,
            )
        )

    logger.debug(
        f"Grouped entries into {len(companies)} companies, "
        f"{sum(len(c.projects) for c in companies)} projects"
    )

    if configured_projects is not None:
        inject_configured_projects(
            companies,
            configured_projects,
            get_canonical_company_by_project,
            get_project_name,
        )

    return companies
