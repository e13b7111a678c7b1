"""
Core module - Engineering foundation

Contains configuration, logging, errors and time utilities.
"""

from twoleg.core.config import Settings, get_settings, load_yaml_config
from twoleg.core.errors import (
    TwolegError,
    ArbitrageError,
    ConfigurationError,
    NotAuthorizedError,
)
from twoleg.core.logging import setup_logging, get_logger

__all__ = [
    "Settings",
    "get_settings",
    "load_yaml_config",
    "TwolegError",
    "ArbitrageError",
    "ConfigurationError",
    "NotAuthorizedError",
    "setup_logging",
    "get_logger",
]
