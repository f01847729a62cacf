"""
Configuration module for the billing engine.
"""
from .logging_config import LoggingConfig, configure_logging
from .settings import (
    BillingEngineConfig,
    get_config,
    load_config,
    reload_config
)

__all__ = [
    'BillingEngineConfig',
    'LoggingConfig',
    'configure_logging',
    'get_config',
    'load_config',
    'reload_config'
]
