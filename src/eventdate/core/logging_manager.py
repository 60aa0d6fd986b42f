"""Centralized Logging Management for eventdate

Handles log configuration, formatting, and output management. Importing the
library never touches the filesystem or stdout; the console handler is
attached by ``configure`` and file handlers only when it is given a log
directory.
"""

import logging
import logging.handlers
import sys
import threading
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional, Union


class ColoredFormatter(logging.Formatter):
    """Custom formatter that adds colors to console output."""

    # ANSI color codes
    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
        'RESET': '\033[0m'        # Reset
    }

    def format(self, record):
        """Format log record with colors for console output."""
        log_message = super().format(record)
        return f"{self.COLORS.get(record.levelname, '')}{log_message}{self.COLORS['RESET']}"


class LoggingManager:
    """Centralized logging configuration and management."""

    _instance: Optional['LoggingManager'] = None
    _initialized: bool = False
    _lock = threading.Lock()

    LOGGER_NAMESPACE = "eventdate"

    def __new__(cls) -> 'LoggingManager':
        """Singleton pattern implementation."""
        with cls._lock:
            if cls._instance is None:
                cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        """Initialize logging manager (only once)."""
        if self._initialized:
            return

        self.log_dir: Optional[Path] = None
        self.loggers: Dict[str, logging.Logger] = {}
        self._console_handler: Optional[logging.Handler] = None
        self._file_handlers: Dict[str, logging.Handler] = {}
        self._setup_package_logger()
        self._initialized = True

    def _setup_package_logger(self):
        """Prepare the package logger and its detached console handler."""
        package_logger = logging.getLogger(self.LOGGER_NAMESPACE)
        package_logger.setLevel(logging.DEBUG)

        # Records still reach the root logger so host applications can capture them
        package_logger.propagate = True

        self._console_handler = logging.StreamHandler(sys.stdout)
        self._console_handler.setLevel(logging.WARNING)
        self._console_handler.setFormatter(ColoredFormatter(
            '%(asctime)s | %(name)s | %(levelname)s | %(message)s',
            datefmt='%H:%M:%S'
        ))

    def configure(self, level: str = "WARNING", log_dir: Optional[Union[str, Path]] = None,
                  log_to_console: bool = True):
        """Apply logging settings, typically from the loaded configuration.

        Args:
            level: Console log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_dir: Directory for rotating log files, or None for console only
            log_to_console: Whether the console handler is attached
        """
        self.set_log_level(level)

        package_logger = logging.getLogger(self.LOGGER_NAMESPACE)
        if not log_to_console and self._console_handler in package_logger.handlers:
            package_logger.removeHandler(self._console_handler)
        elif log_to_console and self._console_handler not in package_logger.handlers:
            package_logger.addHandler(self._console_handler)

        if log_dir is not None:
            self._setup_file_handlers(Path(log_dir))

    def _setup_file_handlers(self, log_dir: Path):
        """Attach rotating file handlers for all records and for errors only."""
        if self.log_dir == log_dir and self._file_handlers:
            return

        package_logger = logging.getLogger(self.LOGGER_NAMESPACE)
        for handler in self._file_handlers.values():
            package_logger.removeHandler(handler)
            handler.close()
        self._file_handlers.clear()

        log_dir.mkdir(parents=True, exist_ok=True)
        self.log_dir = log_dir

        file_formatter = logging.Formatter(
            '%(asctime)s | %(name)s | %(levelname)s | %(funcName)s:%(lineno)d | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        # File handler for all logs
        log_file = log_dir / f"eventdate_{datetime.now().strftime('%Y%m%d')}.log"
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(file_formatter)
        package_logger.addHandler(file_handler)
        self._file_handlers['all'] = file_handler

        # Error file handler for errors only
        error_file = log_dir / f"eventdate_errors_{datetime.now().strftime('%Y%m%d')}.log"
        error_handler = logging.handlers.RotatingFileHandler(
            error_file,
            maxBytes=5 * 1024 * 1024,  # 5MB
            backupCount=10
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(file_formatter)
        package_logger.addHandler(error_handler)
        self._file_handlers['errors'] = error_handler

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        """Class method to get logger instance.

        Args:
            name: Logger name (typically __name__ of the module)

        Returns:
            Configured logger
        """
        manager = cls()
        return manager._get_logger_instance(name)

    def _get_logger_instance(self, name: str) -> logging.Logger:
        """Internal method to get logger instance."""
        if name in self.loggers:
            return self.loggers[name]

        logger = logging.getLogger(name)
        self.loggers[name] = logger
        return logger

    def set_log_level(self, level: str):
        """Set the logging level for the console handler.

        Args:
            level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        """
        numeric_level = getattr(logging, level.upper(), None)
        if not isinstance(numeric_level, int):
            raise ValueError(f'Invalid log level: {level}')

        self._console_handler.setLevel(numeric_level)

    def add_custom_handler(self, handler: logging.Handler, level: Optional[str] = None):
        """Add a custom handler to the package logger.

        Args:
            handler: The logging handler to add
            level: Optional log level for the handler
        """
        if level:
            numeric_level = getattr(logging, level.upper(), None)
            if isinstance(numeric_level, int):
                handler.setLevel(numeric_level)

        logging.getLogger(self.LOGGER_NAMESPACE).addHandler(handler)
