"""Core modules for EventDate.

Logging, error handling and configuration shared by the interpretation
processors. The configuration manager is exported from the package root, as it
builds processors.
"""

from .error_handler import (
    EventDateError,
    ConfigurationError,
    PatternConfigurationError,
    TemporalParseError,
    ErrorHandler,
    ErrorSeverity
)
from .logging_manager import LoggingManager

__all__ = [
    "EventDateError",
    "ConfigurationError",
    "PatternConfigurationError",
    "TemporalParseError",
    "ErrorHandler",
    "ErrorSeverity",
    "LoggingManager"
]
