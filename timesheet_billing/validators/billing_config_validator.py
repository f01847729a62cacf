"""Validation of project billing configuration.

These checks catch configurations the billers would accept but that are
almost certainly data-entry mistakes (a minimum above the maximum, carryover
switched on with nothing to carry over, a zero rate on a billable project).
"""

from collections import Counter
from typing import List

from timesheet_billing.calculators.project_billing import validate_min_max_limits
from timesheet_billing.models.project import ProjectBillingConfig, ProjectRecord
from timesheet_billing.validators.validation_report import ValidationReport


class BillingConfigValidator:
    """Validator for project billing configuration.

    Example:
        >>> validator = BillingConfigValidator()
        >>> report = validator.validate_projects(records)
        >>> if not report.is_valid():
        ...     print(report.format())
    """

    def validate_config(
        self, project_id: str, config: ProjectBillingConfig
    ) -> ValidationReport:
        """Validate the billing configuration of one project.

        Args:
            project_id: Project the configuration belongs to
            config: Effective billing configuration for the month

        Returns:
            ValidationReport with any issues found
        """
        report = ValidationReport()

        if not validate_min_max_limits(config.minimum_hours, config.maximum_hours):
            report.add_error(
                "minimum_hours",
                f"Minimum hours ({config.minimum_hours}) exceed "
                f"maximum hours ({config.maximum_hours})",
                config.minimum_hours,
                project_id=project_id,
            )

        if config.carryover_enabled and config.maximum_hours is None:
            report.add_warning(
                "carryover_enabled",
                "Carryover is enabled but no maximum is set; "
                "no hours will ever be carried over",
                config.carryover_enabled,
                project_id=project_id,
            )

        if not config.carryover_enabled:
            if config.carryover_max_hours is not None:
                report.add_info(
                    "carryover_max_hours",
                    "Carryover cap is set but carryover is disabled",
                    config.carryover_max_hours,
                    project_id=project_id,
                )
            if config.carryover_expiry_months is not None:
                report.add_info(
                    "carryover_expiry_months",
                    "Carryover expiry is set but carryover is disabled",
                    config.carryover_expiry_months,
                    project_id=project_id,
                )

        if config.rate == 0 and config.is_active:
            report.add_warning(
                "rate",
                "Hourly rate is zero; billed hours will produce no revenue",
                config.rate,
                project_id=project_id,
            )

        return report

    def validate_projects(self, records: List[ProjectRecord]) -> ValidationReport:
        """Validate a set of project records.

        Checks every record's billing configuration and reports external
        project ids that appear more than once.

        Args:
            records: Project records for one billing month

        Returns:
            ValidationReport with all issues found
        """
        combined_report = ValidationReport()

        id_counts = Counter(record.external_project_id for record in records)
        for project_id, count in sorted(id_counts.items()):
            if count > 1:
                combined_report.add_error(
                    "external_project_id",
                    f"Project id appears {count} times",
                    project_id,
                    project_id=project_id,
                )

        for record in records:
            combined_report.merge(
                self.validate_config(record.external_project_id, record.billing_config)
            )

        return combined_report
