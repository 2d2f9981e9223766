"""purpleifypdf package."""

from purpleifypdf.exceptions import (
    DependencyError,
    PackageError,
    SettingsError,
    TransformationError,
)
from purpleifypdf.logging import configure_logging, get_logger
from purpleifypdf.settings import Settings, get_settings

__version__ = "0.1.0"

# Initialize package logger at import time via `get_logger`.
logger = get_logger("purpleifypdf")

__all__ = [
    "DependencyError",
    "PackageError",
    "Settings",
    "SettingsError",
    "TransformationError",
    "__version__",
    "configure_logging",
    "get_logger",
    "get_settings",
    "logger",
]
