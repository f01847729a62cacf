"""Validation report for collecting billing configuration and reconciliation issues."""

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, List, Optional


class ValidationSeverity(IntEnum):
    """Severity levels for validation issues."""

    INFO = 1
    WARNING = 2
    ERROR = 3


@dataclass
class ValidationIssue:
    """A single finding about a project's billing data.

    Attributes:
        severity: The severity level of the issue
        field: The configuration field or metric the issue is about
        message: Human-readable description of the issue
        value: The value that caused the issue
        project_id: Project the issue belongs to, if any
        context: Optional extra details (e.g. expected and actual values)
    """

    severity: ValidationSeverity
    field: str
    message: str
    value: Any
    project_id: Optional[str] = None
    context: Optional[Dict[str, Any]] = None

    def __str__(self) -> str:
        prefix = f"{self.project_id}." if self.project_id else ""
        context_str = ""
        if self.context:
            context_parts = [f"{k}={v}" for k, v in self.context.items()]
            context_str = f" ({', '.join(context_parts)})"

        return f"[{self.severity.name}] {prefix}{self.field}: {self.message}{context_str}"


class ValidationReport:
    """Collects validation issues across projects.

    Errors make the report invalid; warnings and info messages do not.

    Example:
        >>> report = ValidationReport()
        >>> report.add_error("minimum_hours", "Minimum exceeds maximum", 20,
        ...                  project_id="P-1")
        >>> report.is_valid()
        False
    """

    def __init__(self) -> None:
        self.issues: List[ValidationIssue] = []

    def _count(self, severity: ValidationSeverity) -> int:
        return sum(1 for issue in self.issues if issue.severity == severity)

    @property
    def error_count(self) -> int:
        return self._count(ValidationSeverity.ERROR)

    @property
    def warning_count(self) -> int:
        return self._count(ValidationSeverity.WARNING)

    @property
    def info_count(self) -> int:
        return self._count(ValidationSeverity.INFO)

    @property
    def highest_severity(self) -> Optional[ValidationSeverity]:
        """Most severe level present in the report, or None when empty."""
        if not self.issues:
            return None
        return max(issue.severity for issue in self.issues)

    def is_valid(self) -> bool:
        """Check if validation passed (no errors).

        Returns:
            True if no errors are present, False otherwise
        """
        return self.error_count == 0

    def has_errors(self) -> bool:
        return self.error_count > 0

    def add(
        self,
        severity: ValidationSeverity,
        field: str,
        message: str,
        value: Any,
        project_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> ValidationIssue:
        """Add an issue with the given severity.

        Args:
            severity: Severity of the issue
            field: The configuration field or metric concerned
            message: Human-readable description
            value: The offending value
            project_id: Project the issue belongs to
            context: Optional extra details

        Returns:
            The issue that was added
        """
        issue = ValidationIssue(
            severity=severity,
            field=field,
            message=message,
            value=value,
            project_id=project_id,
            context=context,
        )
        self.issues.append(issue)
        return issue

    def add_error(
        self,
        field: str,
        message: str,
        value: Any,
        project_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> ValidationIssue:
        return self.add(
            ValidationSeverity.ERROR, field, message, value, project_id, context
        )

    def add_warning(
        self,
        field: str,
        message: str,
        value: Any,
        project_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> ValidationIssue:
        return self.add(
            ValidationSeverity.WARNING, field, message, value, project_id, context
        )

    def add_info(
        self,
        field: str,
        message: str,
        value: Any,
        project_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> ValidationIssue:
        return self.add(
            ValidationSeverity.INFO, field, message, value, project_id, context
        )

    def get_issues(self, severity: ValidationSeverity) -> List[ValidationIssue]:
        return [issue for issue in self.issues if issue.severity == severity]

    def get_errors(self) -> List[ValidationIssue]:
        return self.get_issues(ValidationSeverity.ERROR)

    def get_warnings(self) -> List[ValidationIssue]:
        return self.get_issues(ValidationSeverity.WARNING)

    def get_project_issues(self, project_id: str) -> List[ValidationIssue]:
        """Get all issues recorded for one project."""
        return [issue for issue in self.issues if issue.project_id == project_id]

    def merge(self, other: "ValidationReport") -> None:
        """Merge another validation report into this one.

        Args:
            other: Another ValidationReport to merge
        """
        self.issues.extend(other.issues)

    def summary(self) -> str:
        """Get a summary of the validation report.

        Returns:
            Summary string with counts of errors, warnings, and info messages
        """
        parts = []
        if self.error_count > 0:
            parts.append(f"{self.error_count} error(s)")
        if self.warning_count > 0:
            parts.append(f"{self.warning_count} warning(s)")
        if self.info_count > 0:
            parts.append(f"{self.info_count} info message(s)")

        if not parts:
            return "No issues found"

        return ", ".join(parts)

    def format(self) -> str:
        """Format the validation report for display, most severe first."""
        if not self.issues:
            return "Validation successful - no issues found"

        lines = [f"Validation Report - {self.summary()}", "=" * 60]

        for severity, heading in (
            (ValidationSeverity.ERROR, "ERRORS"),
            (ValidationSeverity.WARNING, "WARNINGS"),
            (ValidationSeverity.INFO, "INFO"),
        ):
            issues = self.get_issues(severity)
            if issues:
                lines.append(f"\n{heading}:")
                lines.extend(f"  - {issue}" for issue in issues)

        return "\n".join(lines)
