"""
Logging configuration for twoleg.

Supports:
- config/logging.yaml (dictConfig) when present
- Local fallback: human-readable lines
- Cloud fallback: one JSON object per line
"""

import logging
import logging.config
import sys
from pathlib import Path
from typing import Optional

import yaml

from twoleg.core.config import Settings, find_project_root, get_settings

# Libraries that log every job run / statement at INFO
NOISY_LOGGERS = ("apscheduler", "sqlalchemy.engine")


def setup_logging(
    config_path: Optional[str] = None,
    log_level: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> None:
    """
    Setup logging configuration.

    Args:
        config_path: Path to logging.yaml. Auto-detected if not provided.
        log_level: Override for the configured log level.
        settings: Application settings. Uses global if not provided.
    """
    settings = settings or get_settings()
    level = (log_level or settings.log_level).upper()

    if config_path is None:
        root = find_project_root()
        if root is not None:
            config_path = str(root / "config" / "logging.yaml")

    if config_path and Path(config_path).exists():
        with open(config_path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f)

        # File handlers need their directory up front
        for handler in config.get("handlers", {}).values():
            if "filename" in handler:
                Path(handler["filename"]).parent.mkdir(parents=True, exist_ok=True)

        logging.config.dictConfig(config)
    else:
        _setup_basic_logging(settings.is_local, level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger("twoleg").setLevel(getattr(logging, level))


def _setup_basic_logging(is_local: bool, level: str) -> None:
    """Setup basic logging when YAML config is not available."""
    if is_local:
        fmt = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
    else:
        fmt = '{"time": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", "message": "%(message)s"}'

    logging.basicConfig(
        level=getattr(logging, level),
        format=fmt,
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger with the given name.

    Args:
        name: Logger name. Will be prefixed with 'twoleg.' if not already.

    Returns:
        Logger instance
    """
    if not name.startswith("twoleg"):
        name = f"twoleg.{name}"
    return logging.getLogger(name)


class LoggerMixin:
    """Mixin class to add logging capability to any class."""

    @property
    def logger(self) -> logging.Logger:
        """Get logger for this class."""
        if not hasattr(self, "_logger"):
            self._logger = get_logger(self.__class__.__name__)
        return self._logger
