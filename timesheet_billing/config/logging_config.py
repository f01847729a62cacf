"""Centralized logging configuration for the billing engine.

The engine modules only ever call logging.getLogger(__name__); handlers,
formatters and levels are installed here once by the entry point (the CLI or
an embedding application).
"""

import json
import logging
import logging.handlers
import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from timesheet_billing.utils.logging_utils import _ContextFilter

if TYPE_CHECKING:
    from timesheet_billing.config.settings import BillingEngineConfig

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("standard", "json")

STANDARD_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
STANDARD_DATEFMT = "%Y-%m-%d %H:%M:%S"

# Attributes every LogRecord has; anything else came from LogContext or extra=
_BUILTIN_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))
) | {"message", "asctime", "taskName"}


class JSONFormatter(logging.Formatter):
    """One JSON object per record, with context fields at the top level."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }
        payload.update(
            (key, value)
            for key, value in vars(record).items()
            if key not in _BUILTIN_ATTRS and not key.startswith("_")
        )
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        # Decimal amounts and dates serialise as their string form
        return json.dumps(payload, default=str)


def _env_flag(name: str, default: bool) -> bool:
    return os.getenv(name, str(default)).strip().lower() in ("1", "true", "yes")


@dataclass
class LoggingConfig:
    """
    Where and how billing runs log.

    Attributes:
        log_level: Threshold level name, normalised to upper case
        log_format: 'standard' text lines or 'json' records
        log_file: Target of the rotating file handler
        enable_console: Log to stderr
        enable_file: Log to log_file
        max_file_size: Bytes before the log file rotates
        backup_count: Rotated files kept
    """

    log_level: str = "INFO"
    log_format: str = "standard"
    log_file: Optional[str] = None
    enable_console: bool = True
    enable_file: bool = False
    max_file_size: int = 10 * 1024 * 1024
    backup_count: int = 5

    def __post_init__(self):
        self.log_level = self.log_level.upper()
        if self.log_level not in LOG_LEVELS:
            raise ValueError(
                f"Invalid log level: {self.log_level}. Must be one of {', '.join(LOG_LEVELS)}"
            )
        if self.log_format not in LOG_FORMATS:
            raise ValueError(
                f"Invalid log format: {self.log_format}. Must be one of {', '.join(LOG_FORMATS)}"
            )
        if self.enable_file and not self.log_file:
            raise ValueError("log_file must be specified when enable_file is True")

    @property
    def level(self) -> int:
        return logging.getLevelName(self.log_level)

    @classmethod
    def from_env(cls) -> "LoggingConfig":
        """
        Read LOG_LEVEL, LOG_FORMAT, LOG_FILE, LOG_CONSOLE, LOG_FILE_ENABLED,
        LOG_MAX_FILE_SIZE and LOG_BACKUP_COUNT from the environment.
        """
        return cls(
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", "standard"),
            log_file=os.getenv("LOG_FILE"),
            enable_console=_env_flag("LOG_CONSOLE", True),
            enable_file=_env_flag("LOG_FILE_ENABLED", False),
            max_file_size=int(os.getenv("LOG_MAX_FILE_SIZE", cls.max_file_size)),
            backup_count=int(os.getenv("LOG_BACKUP_COUNT", cls.backup_count)),
        )

    @classmethod
    def from_settings(
        cls, settings: "BillingEngineConfig", debug: bool = False
    ) -> "LoggingConfig":
        """Derive logging from loaded settings; ``debug`` forces DEBUG."""
        return cls(
            log_level="DEBUG" if debug or settings.debug else settings.log_level,
            log_format=settings.log_format,
            log_file=settings.log_file,
            enable_file=settings.log_file is not None,
        )


def _clear_root_handlers() -> logging.Logger:
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    return root


def _build_handlers(config: LoggingConfig):
    if config.enable_console:
        yield logging.StreamHandler()
    if config.enable_file and config.log_file:
        Path(config.log_file).parent.mkdir(parents=True, exist_ok=True)
        yield logging.handlers.RotatingFileHandler(
            config.log_file,
            maxBytes=config.max_file_size,
            backupCount=config.backup_count,
        )


def configure_logging(config: LoggingConfig) -> None:
    """
    Install the root handlers for a billing run.

    Any existing root handlers are closed and replaced, so calling this twice
    does not duplicate output. Every handler carries the LogContext filter.
    """
    root = _clear_root_handlers()
    root.setLevel(config.level)

    if config.log_format == "json":
        formatter: logging.Formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(STANDARD_FORMAT, datefmt=STANDARD_DATEFMT)
    context_filter = _ContextFilter()

    for handler in _build_handlers(config):
        handler.setLevel(config.level)
        handler.setFormatter(formatter)
        handler.addFilter(context_filter)
        root.addHandler(handler)


def reset_logging() -> None:
    """Drop all root handlers and restore the WARNING default. Used by tests."""
    _clear_root_handlers().setLevel(logging.WARNING)
