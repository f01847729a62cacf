"""Log context and call tracing for billing runs.

A billing run is tagged with a correlation id and the billing month; every
record emitted while the tags are active carries them as attributes, so the
JSON formatter can write them out as fields.
"""

import functools
import logging
import threading
import time
import uuid
from typing import Any, Callable, Dict, Optional

_state = threading.local()


def _fields() -> Dict[str, Any]:
    return getattr(_state, "fields", {})


def generate_correlation_id() -> str:
    """Return a fresh id for tagging the records of one billing run."""
    return uuid.uuid4().hex


def get_correlation_id() -> Optional[str]:
    return _fields().get("correlation_id")


def get_log_context() -> Dict[str, Any]:
    """Return a copy of the fields currently attached to log records."""
    return dict(_fields())


class LogContext:
    """
    Attach fields to every log record emitted inside a ``with`` block.

    Contexts nest; leaving a block restores the fields that were active when
    it was entered, including when the block raises.

    Example:
        with LogContext(correlation_id=generate_correlation_id()):
            with LogContext(billing_month="2026-01"):
                logger.info("Billing month computed")
    """

    def __init__(self, **fields: Any):
        self.fields = fields
        self._saved: Dict[str, Any] = {}

    def __enter__(self) -> "LogContext":
        self._saved = _fields()
        _state.fields = {**self._saved, **self.fields}
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        _state.fields = self._saved


class _ContextFilter(logging.Filter):
    """Copy the active LogContext fields onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in _fields().items():
            setattr(record, key, value)
        return True


def _describe_call(name: str, args: tuple, kwargs: Dict[str, Any]) -> str:
    parts = [repr(a) for a in args]
    parts.extend(f"{key}={value!r}" for key, value in kwargs.items())
    return f"{name}({', '.join(parts)})"


def log_function_call(
    func: Optional[Callable] = None, *, include_args: bool = False, level: str = "DEBUG"
) -> Callable:
    """
    Trace calls to a billing step.

    Logs a start record, then a finish record with the elapsed time. A
    failing call is logged at ERROR with its traceback and the exception
    propagates unchanged. Usable bare or with keyword options.

    Args:
        func: Function being decorated when used as ``@log_function_call``
        include_args: Render positional and keyword arguments in the start record
        level: Level name for the start and finish records

    Example:
        @log_function_call(include_args=True, level="INFO")
        def load_month(month):
            ...
    """
    log_level = logging.getLevelName(level.upper())

    def decorator(f: Callable) -> Callable:
        logger = logging.getLogger(f.__module__)

        @functools.wraps(f)
        def wrapper(*args, **kwargs):
            label = _describe_call(f.__name__, args, kwargs) if include_args else f.__name__
            logger.log(log_level, "Starting %s", label)
            started = time.perf_counter()
            try:
                result = f(*args, **kwargs)
            except Exception as e:
                logger.error(
                    "%s failed: %s: %s", f.__name__, type(e).__name__, e, exc_info=True
                )
                raise
            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.log(log_level, "Finished %s in %.1f ms", f.__name__, elapsed_ms)
            return result

        return wrapper

    if func is None:
        return decorator
    return decorator(func)
