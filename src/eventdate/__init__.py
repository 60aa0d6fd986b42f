"""EventDate - Event Date Interpretation

Interprets the event dates of biodiversity occurrence records, recorded as
free text, as separate year, month and day fields, as a day of year, or as a
range, into a single value with data quality issues.
"""

__version__ = "1.0.0"
__author__ = "EventDate Team"
__description__ = "Event date interpretation for occurrence records"

from .core import ConfigurationError, EventDateError, LoggingManager
from .processors.temporal import (
    EventRange,
    InterpretationResult,
    IssueFlag,
    MultiinputTemporalParser,
    TemporalRangeParser,
    TemporalValue,
    get_multiinput_parser,
    get_range_parser
)
from .core.config_manager import AppConfig, ConfigManager

__all__ = [
    "AppConfig",
    "ConfigManager",
    "ConfigurationError",
    "EventDateError",
    "LoggingManager",
    "EventRange",
    "InterpretationResult",
    "IssueFlag",
    "MultiinputTemporalParser",
    "TemporalRangeParser",
    "TemporalValue",
    "get_multiinput_parser",
    "get_range_parser"
]
