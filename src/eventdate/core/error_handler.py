"""Global Error Handling for eventdate

Exception hierarchy for configuration and catalogue construction failures,
plus a small dispatcher that logs errors by severity.
"""

import logging
import traceback
from enum import Enum
from typing import Callable, Dict, Optional, Type


class ErrorSeverity(Enum):
    """Error severity levels."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class EventDateError(Exception):
    """Base exception class for the eventdate package."""

    def __init__(self, message: str, severity: ErrorSeverity = ErrorSeverity.MEDIUM):
        self.message = message
        self.severity = severity
        super().__init__(self.message)


class ConfigurationError(EventDateError):
    """Error raised when configuration is invalid."""
    pass


class PatternConfigurationError(EventDateError):
    """Error raised when a format template or ambiguity group is malformed."""

    def __init__(self, message: str, template: Optional[str] = None):
        self.template = template
        if template is not None:
            message = f"{message} (template: {template!r})"
        super().__init__(message, ErrorSeverity.HIGH)


class TemporalParseError(EventDateError):
    """Error raised when parsing fails for a reason other than bad input."""
    pass


class ErrorHandler:
    """Error handler for applications embedding the parsers."""

    SEVERITY_LEVELS = {
        ErrorSeverity.LOW: logging.INFO,
        ErrorSeverity.MEDIUM: logging.WARNING,
        ErrorSeverity.HIGH: logging.ERROR,
        ErrorSeverity.CRITICAL: logging.CRITICAL,
    }

    def __init__(self):
        """Initialize error handler."""
        self.logger = logging.getLogger(__name__)
        self.error_callbacks: Dict[Type[Exception], Callable] = {}

    def register_error_callback(self, exception_type: Type[Exception],
                              callback: Callable[[Exception], None]):
        """Register a callback for specific exception types.

        Args:
            exception_type: The exception type to handle
            callback: Function to call when this exception occurs
        """
        self.error_callbacks[exception_type] = callback

    def handle_error(self, error: Exception, context: Optional[str] = None) -> bool:
        """Handle an error with logging and callback dispatch.

        Args:
            error: The exception that occurred
            context: Additional context about where the error occurred

        Returns:
            True if a registered callback handled the error
        """
        severity = getattr(error, 'severity', ErrorSeverity.HIGH)
        message = f"{context}: {error}" if context else str(error)
        self.logger.log(self.SEVERITY_LEVELS[severity], message)

        if severity in (ErrorSeverity.HIGH, ErrorSeverity.CRITICAL):
            self.logger.debug("".join(
                traceback.format_exception(type(error), error, error.__traceback__)
            ))

        for exception_type, callback in self.error_callbacks.items():
            if isinstance(error, exception_type):
                callback(error)
                return True
        return False
