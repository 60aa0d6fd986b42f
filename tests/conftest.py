"""
Pytest configuration and shared fixtures for EventDate testing.

Provides temporary configuration directories and parser fixtures for unit,
integration, and performance testing.
"""

import tempfile
from dataclasses import dataclass
from pathlib import Path

import pytest
import yaml

from eventdate.processors.temporal import parsers
from eventdate.processors.temporal.multiinput_parser import MultiinputTemporalParser
from eventdate.processors.temporal.numerical_parser import NumericalDateParser
from eventdate.processors.temporal.range_parser import TemporalRangeParser
from eventdate.processors.temporal.text_parser import TextDateParser

from .fixtures.sample_data import SAMPLE_CONFIGURATIONS


@dataclass
class TestConfig:
    """Test configuration settings"""
    base_year: int = 2000
    thread_count: int = 8
    iterations_per_thread: int = 50


@pytest.fixture(scope="session")
def test_config():
    """Global test configuration"""
    return TestConfig()


# Configuration Fixtures
@pytest.fixture
def temp_config_dir():
    """Temporary directory for test configuration files"""
    with tempfile.TemporaryDirectory() as temp_dir:
        config_dir = Path(temp_dir) / "config"
        config_dir.mkdir()

        with open(config_dir / "default_config.yaml", "w") as f:
            yaml.safe_dump(SAMPLE_CONFIGURATIONS["default"], f)

        yield config_dir


@pytest.fixture
def clean_environment(monkeypatch):
    """Remove EventDate environment overrides inherited from the shell"""
    import os
    for key in list(os.environ):
        if key.startswith("EVENTDATE_"):
            monkeypatch.delenv(key)
    return monkeypatch


@pytest.fixture
def reset_parser_cache():
    """Start and finish with no shared parsers"""
    parsers.clear_cache()
    yield
    parsers.clear_cache()


# Parser Fixtures
@pytest.fixture(scope="session")
def numerical_parser():
    """Numeric engine with four digit years only"""
    return NumericalDateParser()


@pytest.fixture(scope="session")
def two_digit_numerical_parser(test_config):
    """Numeric engine also accepting two digit years"""
    return NumericalDateParser.with_base_year(test_config.base_year)


@pytest.fixture(scope="session")
def text_parser(numerical_parser):
    """Text date parser without preferred orderings"""
    return TextDateParser(numerical_parser)


@pytest.fixture(scope="session")
def multiinput_parser(text_parser):
    """Multi-input reconciler with default validity window"""
    return MultiinputTemporalParser(text_parser)


@pytest.fixture(scope="session")
def range_parser(multiinput_parser):
    """Range reconciler backed by the default multi-input reconciler"""
    return TemporalRangeParser(multiinput_parser)
