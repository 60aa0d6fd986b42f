"""
Unit tests for LoggingManager.
"""

import logging

import pytest

from eventdate.core.logging_manager import LoggingManager


class TestLoggingManager:
    """Test suite for LoggingManager"""

    @pytest.fixture
    def manager(self):
        """Shared manager, restored to WARNING with no handlers afterwards"""
        manager = LoggingManager()
        yield manager
        manager.configure(level="WARNING", log_to_console=False)

        package_logger = logging.getLogger(LoggingManager.LOGGER_NAMESPACE)
        for handler in manager._file_handlers.values():
            package_logger.removeHandler(handler)
            handler.close()
        manager._file_handlers.clear()
        manager.log_dir = None

    @pytest.mark.unit
    def test_singleton(self, manager):
        """Test one manager per process"""
        assert LoggingManager() is manager

    @pytest.mark.unit
    def test_get_logger(self):
        """Test loggers are cached by name"""
        logger = LoggingManager.get_logger("eventdate.test")
        assert logger is LoggingManager.get_logger("eventdate.test")
        assert logger.name == "eventdate.test"

    @pytest.mark.unit
    def test_console_attached_by_configure(self, monkeypatch):
        """Test getting loggers leaves output to the host until configure is called"""
        monkeypatch.setattr(LoggingManager, "_instance", None)
        monkeypatch.setattr(LoggingManager, "_initialized", False)
        package_logger = logging.getLogger(LoggingManager.LOGGER_NAMESPACE)

        LoggingManager.get_logger("eventdate.test")
        fresh = LoggingManager()
        try:
            assert fresh._console_handler not in package_logger.handlers
            assert package_logger.propagate

            fresh.configure(level="INFO")
            fresh.configure(level="INFO", log_to_console=True)
            assert package_logger.handlers.count(fresh._console_handler) == 1
            assert fresh._console_handler.level == logging.INFO
        finally:
            package_logger.removeHandler(fresh._console_handler)

    @pytest.mark.unit
    def test_set_log_level(self, manager):
        """Test console level changes and invalid names are rejected"""
        manager.set_log_level("debug")
        assert manager._console_handler.level == logging.DEBUG

        with pytest.raises(ValueError):
            manager.set_log_level("VERBOSE")

    @pytest.mark.unit
    def test_file_handlers(self, manager, tmp_path):
        """Test file logging writes under the configured directory"""
        manager.configure(level="INFO", log_dir=tmp_path, log_to_console=False)
        LoggingManager.get_logger("eventdate.test").error("written to file")

        for handler in manager._file_handlers.values():
            handler.flush()

        log_files = sorted(path.name for path in tmp_path.iterdir())
        assert any(name.startswith("eventdate_errors_") for name in log_files)
        assert any("written to file" in path.read_text() for path in tmp_path.iterdir())

        package_logger = logging.getLogger(LoggingManager.LOGGER_NAMESPACE)
        assert manager._console_handler not in package_logger.handlers

    @pytest.mark.unit
    def test_add_custom_handler(self, manager):
        """Test custom handlers attach to the package logger"""
        handler = logging.NullHandler()
        manager.add_custom_handler(handler, "ERROR")
        package_logger = logging.getLogger(LoggingManager.LOGGER_NAMESPACE)
        try:
            assert handler in package_logger.handlers
            assert handler.level == logging.ERROR
        finally:
            package_logger.removeHandler(handler)
