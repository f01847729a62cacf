"""
Global pytest configuration and fixtures.
"""
import datetime as dt
import os
from decimal import Decimal
from typing import Dict, List

import pytest

import timesheet_billing.config.settings
from timesheet_billing.config import BillingEngineConfig, reload_config
from timesheet_billing.config.logging_config import reset_logging
from timesheet_billing.models import ProjectBillingConfig, ProjectRecord, TimesheetEntry

SETTINGS_ENV_VARS = [
    'ENVIRONMENT',
    'DEBUG',
    'LOG_LEVEL',
    'LOG_FORMAT',
    'LOG_FILE',
    'DEFAULT_ROUNDING_INCREMENT',
    'UNASSIGNED_COMPANY_ID',
    'UNASSIGNED_COMPANY_NAME',
    'NO_TASK_LABEL',
    'RECONCILIATION_TOLERANCE',
    'ENTRIES_FILE',
    'PROJECTS_FILE',
    'PROJECT_ALIASES_FILE',
]


@pytest.fixture(scope="session")
def test_env_vars() -> Dict[str, str]:
    """Test environment variables for configuration."""
    return {
        'ENVIRONMENT': 'testing',
        'DEBUG': 'false',
        'LOG_LEVEL': 'DEBUG',
        'LOG_FORMAT': 'standard',
        'DEFAULT_ROUNDING_INCREMENT': '15',
    }


@pytest.fixture
def mock_env(test_env_vars, monkeypatch, tmp_path):
    """Mock environment variables for testing."""
    # Run from an empty directory so a developer's .env is not picked up
    monkeypatch.chdir(tmp_path)
    for key in SETTINGS_ENV_VARS:
        monkeypatch.delenv(key, raising=False)
    for key, value in test_env_vars.items():
        monkeypatch.setenv(key, value)

    # Clear the global config to force reload with test values
    timesheet_billing.config.settings._config = None

    yield test_env_vars

    # Clean up
    timesheet_billing.config.settings._config = None


@pytest.fixture
def test_config(mock_env) -> BillingEngineConfig:
    """Test configuration instance."""
    return reload_config()


@pytest.fixture
def billing_month() -> dt.date:
    return dt.date(2026, 1, 1)


@pytest.fixture
def make_entry():
    """Factory for timesheet entries in January 2026."""

    def _make_entry(
        project_id="P-100",
        minutes=60,
        task_name="Development",
        day=15,
        project_name="Website Redesign",
        client_id="C-1",
        client_name="Acme Corp",
        user_name="Jane Doe",
    ) -> TimesheetEntry:
        return TimesheetEntry(
            date=dt.date(2026, 1, day),
            project_id=project_id,
            project_name=project_name,
            client_id=client_id,
            client_name=client_name,
            task_name=task_name,
            user_name=user_name,
            duration_minutes=minutes,
        )

    return _make_entry


@pytest.fixture
def sample_project_records() -> List[ProjectRecord]:
    """Two companies, one merged into a primary company."""
    return [
        ProjectRecord(
            external_project_id='P-100',
            project_name='Website Redesign',
            client_id='C-1',
            client_name='Acme Corp',
            billing_config=ProjectBillingConfig(rate=Decimal('100'), rounding=15),
        ),
        ProjectRecord(
            external_project_id='P-200',
            project_name='Support Retainer',
            client_id='C-2',
            client_name='Acme Labs',
            canonical_client_id='C-1',
            canonical_client_name='Acme Corp',
            billing_config=ProjectBillingConfig(
                rate=Decimal('50'), rounding=15, minimum_hours=Decimal('10')
            ),
        ),
        ProjectRecord(
            external_project_id='P-300',
            project_name='Data Platform',
            client_id='C-3',
            client_name='Globex',
            billing_config=ProjectBillingConfig(
                rate=Decimal('50'),
                rounding=0,
                maximum_hours=Decimal('40'),
                carryover_enabled=True,
            ),
        ),
    ]


@pytest.fixture(autouse=True)
def reset_root_logging():
    """Remove handlers installed by configure_logging during a test."""
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def cleanup_test_files():
    """Clean up any test files created during testing."""
    yield

    # Remove test coverage files in case they're created
    test_files = ['coverage.xml', '.coverage']
    for file in test_files:
        if os.path.exists(file):
            os.remove(file)


# Pytest configuration for different test types
def pytest_configure(config):
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers based on location."""
    for item in items:
        # Add unit marker for tests in tests/unit/
        if "tests/unit/" in str(item.fspath):
            item.add_marker(pytest.mark.unit)

        # Add integration marker for tests in tests/integration/
        elif "tests/integration/" in str(item.fspath):
            item.add_marker(pytest.mark.integration)


ENTRIES_CSV = """date,project_id,project_name,client_id,client_name,task_name,user_name,duration_minutes,source
2026-01-05,P-100,Website Redesign,C-1,Acme Corp,Development,Jane Doe,50,clockify
2026-01-06,P-100,Website Redesign,C-1,Acme Corp,Development,Jane Doe,40,clockify
2026-01-06,P-100,Website Redesign,C-1,Acme Corp,Review,John Roe,7,clockify
2026-01-07,CU-200,support retainer,C-2,Acme Labs,Support,John Roe,450,clickup
2026-01-08,P-300,Data Platform,C-3,Globex,Pipelines,Jane Doe,3000,clockify
2026-01-09,X123,Unknown,,,,John Roe,120,clickup
2026-02-02,P-100,Website Redesign,C-1,Acme Corp,Development,Jane Doe,600,clockify
"""

PROJECTS_CSV = """external_project_id,project_name,client_id,client_name,canonical_client_id,canonical_client_name,rate,rounding,minimum_hours,maximum_hours,is_active,carryover_enabled,carryover_hours_in,carryover_max_hours,carryover_expiry_months
P-100,Website Redesign,C-1,Acme Corp,,,100,15,,,,,,,
P-200,Support Retainer,C-2,Acme Labs,C-1,Acme Corp,50,15,10,,true,,,,
P-300,Data Platform,C-3,Globex,,,50,0,,40,true,true,,,
"""

ALIASES_CSV = """alias_project_id,canonical_project_id
CU-200,P-200
"""

REFERENCE_CSV = """project_id,project_name,billed_hours,billed_revenue
P-100,Website Redesign,1.75,175.00
P-200,Support Retainer,10.00,500.00
P-300,Data Platform,40.00,2000.00
"""


@pytest.fixture
def billing_files(tmp_path) -> Dict[str, str]:
    """January 2026 input files for CLI and pipeline tests.

    Expected billing: P-100 1.75h/175.00, P-200 10h/500.00 (minimum),
    P-300 40h/2000.00 (10h carried over); X123 is unmatched (2h).
    """
    files = {
        'entries': ENTRIES_CSV,
        'projects': PROJECTS_CSV,
        'aliases': ALIASES_CSV,
        'reference': REFERENCE_CSV,
    }
    data_dir = tmp_path / 'data'
    data_dir.mkdir()
    paths = {}
    for name, content in files.items():
        path = data_dir / f'{name}.csv'
        path.write_text(content)
        paths[name] = str(path)
    return paths
