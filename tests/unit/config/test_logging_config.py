"""Tests for centralized logging configuration."""

import json
import logging
import logging.handlers
import sys
from decimal import Decimal

import pytest

from timesheet_billing.config.logging_config import (
    JSONFormatter,
    LoggingConfig,
    configure_logging,
    reset_logging,
)
from timesheet_billing.config.settings import BillingEngineConfig
from timesheet_billing.utils.logging_utils import LogContext


def make_record(message="Billing complete", args=()):
    return logging.LogRecord(
        name="timesheet_billing.aggregators",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg=message,
        args=args,
        exc_info=None,
    )


class TestLoggingConfig:
    """Test LoggingConfig validation and construction."""

    def test_defaults(self):
        config = LoggingConfig()

        assert config.log_level == "INFO"
        assert config.log_format == "standard"
        assert config.enable_console is True
        assert config.enable_file is False

    def test_level_is_normalised(self):
        assert LoggingConfig(log_level="debug").log_level == "DEBUG"

    def test_invalid_level(self):
        with pytest.raises(ValueError, match="Invalid log level"):
            LoggingConfig(log_level="LOUD")

    def test_invalid_format(self):
        with pytest.raises(ValueError, match="Invalid log format"):
            LoggingConfig(log_format="xml")

    def test_file_requires_path(self):
        with pytest.raises(ValueError, match="log_file must be specified"):
            LoggingConfig(enable_file=True)

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "WARNING")
        monkeypatch.setenv("LOG_FORMAT", "json")
        monkeypatch.setenv("LOG_CONSOLE", "false")
        monkeypatch.delenv("LOG_FILE", raising=False)

        config = LoggingConfig.from_env()

        assert config.log_level == "WARNING"
        assert config.log_format == "json"
        assert config.enable_console is False

    def test_from_settings(self, test_config):
        config = LoggingConfig.from_settings(test_config)

        assert config.log_level == "DEBUG"
        assert config.enable_file is False

    def test_from_settings_debug_overrides_level(self, mock_env, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "ERROR")
        settings = BillingEngineConfig()

        assert LoggingConfig.from_settings(settings).log_level == "ERROR"
        assert LoggingConfig.from_settings(settings, debug=True).log_level == "DEBUG"

    def test_from_settings_with_log_file(self, mock_env, monkeypatch, tmp_path):
        monkeypatch.setenv("LOG_FILE", str(tmp_path / "billing.log"))

        config = LoggingConfig.from_settings(BillingEngineConfig())

        assert config.enable_file is True
        assert config.log_file == str(tmp_path / "billing.log")


class TestJSONFormatter:
    """Test JSON log output."""

    def test_basic_fields(self):
        data = json.loads(JSONFormatter().format(make_record("Loaded %d rows", (3,))))

        assert data["message"] == "Loaded 3 rows"
        assert data["level"] == "INFO"
        assert data["logger"] == "timesheet_billing.aggregators"
        assert "timestamp" in data

    def test_extra_fields_are_included(self):
        record = make_record()
        record.billing_month = "2026-01"
        record.billed_revenue = Decimal("2675.00")

        data = json.loads(JSONFormatter().format(record))

        assert data["billing_month"] == "2026-01"
        assert data["billed_revenue"] == "2675.00"

    def test_exception_is_included(self):
        try:
            raise ValueError("bad row")
        except ValueError:
            record = logging.LogRecord(
                "billing", logging.ERROR, __file__, 1, "failed", (), sys.exc_info()
            )

        data = json.loads(JSONFormatter().format(record))

        assert "ValueError: bad row" in data["exception"]


class TestConfigureLogging:
    """Test handler installation."""

    def test_console_handler(self):
        configure_logging(LoggingConfig(log_level="WARNING"))
        root = logging.getLogger()

        assert root.level == logging.WARNING
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0], logging.StreamHandler)

    def test_reconfigure_replaces_handlers(self):
        configure_logging(LoggingConfig())
        configure_logging(LoggingConfig())

        assert len(logging.getLogger().handlers) == 1

    def test_json_format(self):
        configure_logging(LoggingConfig(log_format="json"))

        handler = logging.getLogger().handlers[0]
        assert isinstance(handler.formatter, JSONFormatter)

    def test_file_handler_writes_context(self, tmp_path):
        log_file = tmp_path / "logs" / "billing.log"
        configure_logging(
            LoggingConfig(
                log_format="json",
                log_file=str(log_file),
                enable_console=False,
                enable_file=True,
            )
        )

        with LogContext(billing_month="2026-01"):
            logging.getLogger("timesheet_billing.test").info("Billing complete")
        for handler in logging.getLogger().handlers:
            handler.flush()

        root = logging.getLogger()
        assert isinstance(root.handlers[0], logging.handlers.RotatingFileHandler)
        data = json.loads(log_file.read_text().splitlines()[-1])
        assert data["message"] == "Billing complete"
        assert data["billing_month"] == "2026-01"

    def test_reset_logging(self):
        configure_logging(LoggingConfig(log_level="DEBUG"))
        reset_logging()
        root = logging.getLogger()

        assert root.handlers == []
        assert root.level == logging.WARNING
