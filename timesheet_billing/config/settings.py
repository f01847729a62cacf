"""
Configuration management for the billing engine.
"""

from decimal import Decimal
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from timesheet_billing.models.project import (
    DEFAULT_ROUNDING_INCREMENT,
    UNASSIGNED_COMPANY_ID,
    UNASSIGNED_COMPANY_NAME,
    CanonicalCompany,
    parse_rounding_increment,
)


class BillingEngineConfig(BaseSettings):
    """Configuration settings for the billing engine."""

    # Application Configuration
    environment: str = Field(default="development", alias="ENVIRONMENT")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_format: str = Field(default="standard", alias="LOG_FORMAT")
    log_file: Optional[str] = Field(default=None, alias="LOG_FILE")

    # Billing defaults
    default_rounding_increment: int = Field(
        default=DEFAULT_ROUNDING_INCREMENT, alias="DEFAULT_ROUNDING_INCREMENT"
    )
    unassigned_company_id: str = Field(
        default=UNASSIGNED_COMPANY_ID, alias="UNASSIGNED_COMPANY_ID"
    )
    unassigned_company_name: str = Field(
        default=UNASSIGNED_COMPANY_NAME, alias="UNASSIGNED_COMPANY_NAME"
    )
    no_task_label: str = Field(default="No Task", alias="NO_TASK_LABEL")
    reconciliation_tolerance: Decimal = Field(
        default=Decimal("0.01"), alias="RECONCILIATION_TOLERANCE"
    )

    # Data files
    entries_file: Optional[str] = Field(default=None, alias="ENTRIES_FILE")
    projects_file: Optional[str] = Field(default=None, alias="PROJECTS_FILE")
    project_aliases_file: Optional[str] = Field(
        default=None, alias="PROJECT_ALIASES_FILE"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        populate_by_name=True,
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Ensure log level is valid."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v):
        """Ensure log format is valid."""
        if v.lower() not in ("standard", "json"):
            raise ValueError("Log format must be one of: ['standard', 'json']")
        return v.lower()

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v):
        """Ensure environment is valid."""
        valid_envs = ["development", "testing", "production"]
        if v.lower() not in valid_envs:
            raise ValueError(f"Environment must be one of: {valid_envs}")
        return v.lower()

    @field_validator("default_rounding_increment", mode="before")
    @classmethod
    def validate_rounding_increment(cls, v):
        """Ensure the default rounding increment is a supported value."""
        return parse_rounding_increment(v)

    @field_validator("reconciliation_tolerance")
    @classmethod
    def validate_tolerance(cls, v):
        """Ensure the reconciliation tolerance is not negative."""
        if v < 0:
            raise ValueError("Reconciliation tolerance cannot be negative")
        return v

    @property
    def unassigned_company(self) -> CanonicalCompany:
        """Company used for projects without a client."""
        return CanonicalCompany(
            canonical_client_id=self.unassigned_company_id,
            canonical_display_name=self.unassigned_company_name,
        )


def load_config(env_file: Optional[str] = None) -> BillingEngineConfig:
    """Load configuration from environment variables and .env file."""
    if env_file:
        load_dotenv(env_file)
    else:
        load_dotenv()

    return BillingEngineConfig()


# Global configuration instance
_config: Optional[BillingEngineConfig] = None


def get_config() -> BillingEngineConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reload_config(env_file: Optional[str] = None) -> BillingEngineConfig:
    """Reload configuration (useful for testing)."""
    global _config
    _config = load_config(env_file)
    return _config
