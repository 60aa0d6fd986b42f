"""Configuration Management for EventDate

Handles loading and validation of the interpretation settings. Supports
hierarchical YAML configuration with environment variable overrides.
"""

import os
import threading
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..processors.temporal.multiinput_parser import MultiinputTemporalParser
from ..processors.temporal.ordering import DateComponentOrdering
from ..processors.temporal.parsers import get_text_date_parser
from ..processors.temporal.range_parser import TemporalRangeParser
from .error_handler import ConfigurationError
from .logging_manager import LoggingManager


class TemporalConfig(BaseModel):
    """Configuration for event date interpretation."""
    base_year: Optional[int] = Field(default=None, ge=1000)
    preferred_orderings: List[DateComponentOrdering] = Field(default_factory=list)
    min_date: date = Field(default=date(1500, 1, 1))
    future_tolerance_days: int = Field(default=1, ge=0, le=366)

    @field_validator('base_year')
    @classmethod
    def validate_base_year(cls, v):
        """Two digit years can only be expanded against a past or current year"""
        if v is not None and v > date.today().year:
            raise ValueError(f"Base year {v} is in the future")
        return v

    @field_validator('preferred_orderings', mode='before')
    @classmethod
    def parse_orderings(cls, v):
        if isinstance(v, str):
            v = [v]
        return [DateComponentOrdering.from_name(item) if isinstance(item, str) else item for item in v]


class LoggingConfig(BaseModel):
    """Configuration for logging."""
    level: str = Field(default="WARNING", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    log_dir: str = Field(default="logs")
    log_to_console: bool = Field(default=True)
    log_to_file: bool = Field(default=False)


class AppConfig(BaseModel):
    """Main application configuration."""
    model_config = ConfigDict(validate_assignment=True)

    app_name: str = Field(default="EventDate")
    version: str = Field(default="1.0.0")
    environment: str = Field(default="development", pattern="^(development|staging|production)$")
    debug_mode: bool = Field(default=False)

    temporal: TemporalConfig = Field(default_factory=TemporalConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


class ConfigManager:
    """Manages configuration loading and validation."""

    ENV_PREFIX = "EVENTDATE_"
    ENV_SEPARATOR = "__"

    def __init__(self, config_path: Optional[Path] = None, environment: Optional[str] = None):
        """Initialize configuration manager.

        Args:
            config_path: Optional path to the configuration directory
            environment: Environment name (development, staging, production)
        """
        self.config_base_path = Path(config_path) if config_path else self._get_default_config_path()
        self.environment = environment or os.getenv('EVENTDATE_ENV', 'development')
        self._config: Optional[AppConfig] = None
        self._lock = threading.RLock()
        self.logger = LoggingManager.get_logger(__name__)

        self.config_files = self._get_config_files()

    def _get_default_config_path(self) -> Path:
        """Get the default configuration directory."""
        config_locations = [
            Path("config"),
            Path.home() / ".eventdate",
            Path("/etc/eventdate"),
        ]

        for location in config_locations:
            if location.exists() and location.is_dir():
                return location

        return Path("config")

    def _get_config_files(self) -> Dict[str, Path]:
        """Get configuration file paths in order of precedence."""
        base_dir = self.config_base_path

        return {
            'default': base_dir / 'default_config.yaml',
            'environment': base_dir / f'{self.environment}.yaml',
            'local': base_dir / 'local.yaml',
        }

    def load_config(self) -> AppConfig:
        """Load and validate configuration with hierarchical overrides.

        Returns:
            Validated application configuration

        Raises:
            ConfigurationError: If a file cannot be parsed or validation fails
        """
        with self._lock:
            if self._config is not None:
                return self._config

            config_data: Dict[str, Any] = {}

            for config_type, config_file in self.config_files.items():
                if config_file.exists():
                    self.logger.info(f"Loading {config_type} config from {config_file}")
                    self._deep_merge(config_data, self._load_yaml_file(config_file))

            env_overrides = self._get_env_overrides()
            if env_overrides:
                self.logger.info(f"Applying environment overrides: {list(env_overrides.keys())}")
                self._deep_merge(config_data, env_overrides)

            try:
                self._config = AppConfig(**config_data)
            except ValidationError as e:
                self.logger.error(f"Configuration validation failed: {e}")
                raise ConfigurationError(f"Invalid configuration: {e}") from e

            self._apply_logging(self._config)
            self.logger.info(
                f"Loaded {self._config.app_name} {self._config.version} configuration "
                f"for {self._config.environment}"
            )
            return self._config

    def _apply_logging(self, config: AppConfig):
        logging_config = config.logging
        # Debug mode overrides the configured level
        LoggingManager().configure(
            level="DEBUG" if config.debug_mode else logging_config.level,
            log_dir=logging_config.log_dir if logging_config.log_to_file else None,
            log_to_console=logging_config.log_to_console,
        )

    def _load_yaml_file(self, file_path: Path) -> Dict[str, Any]:
        """Load YAML configuration file.

        Returns:
            Configuration dictionary
        """
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            self.logger.error(f"Failed to parse YAML file {file_path}: {e}")
            raise ConfigurationError(f"Invalid YAML in {file_path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration file {file_path} must contain a mapping")
        return data

    def _get_env_overrides(self) -> Dict[str, Any]:
        """Get configuration overrides from environment variables.

        Environment variables follow pattern: EVENTDATE_<SECTION>__<KEY>
        Example: EVENTDATE_TEMPORAL__BASE_YEAR -> temporal.base_year
        """
        overrides: Dict[str, Any] = {}

        for key, value in os.environ.items():
            if not key.startswith(self.ENV_PREFIX) or self.ENV_SEPARATOR not in key:
                continue

            config_path = key[len(self.ENV_PREFIX):].lower().split(self.ENV_SEPARATOR)

            current = overrides
            for part in config_path[:-1]:
                current = current.setdefault(part, {})

            current[config_path[-1]] = self._convert_env_value(value)

        return overrides

    def _convert_env_value(self, value: str) -> Union[str, int, float, bool, List[str]]:
        """Convert environment variable string to appropriate type."""
        if value.lower() in ('true', 'false'):
            return value.lower() == 'true'

        try:
            if '.' in value:
                return float(value)
            return int(value)
        except ValueError:
            pass

        if ',' in value:
            return [v.strip() for v in value.split(',')]

        return value

    def _deep_merge(self, base_dict: Dict[str, Any], update_dict: Dict[str, Any]):
        """Recursively merge nested dictionaries."""
        for key, value in update_dict.items():
            if isinstance(value, dict) and key in base_dict and isinstance(base_dict[key], dict):
                self._deep_merge(base_dict[key], value)
            else:
                base_dict[key] = value

    def reload_config(self) -> AppConfig:
        """Reload configuration from files, keeping the previous one on failure."""
        self.logger.info("Reloading configuration...")

        with self._lock:
            old_config = self._config
            self._config = None

            try:
                config = self.load_config()
            except ConfigurationError:
                self.logger.error("Failed to reload configuration, keeping previous settings")
                self._config = old_config
                raise

            self.logger.info("Configuration reloaded successfully")
            return config

    def export_config(self, file_path: Path) -> bool:
        """Export current configuration to a YAML file.

        Returns:
            True if export successful
        """
        config = self.load_config()
        try:
            with open(file_path, 'w', encoding='utf-8') as f:
                yaml.safe_dump(config.model_dump(mode='json'), f, default_flow_style=False, sort_keys=False)
        except OSError as e:
            self.logger.error(f"Failed to export configuration: {e}")
            return False

        self.logger.info(f"Configuration exported to {file_path}")
        return True

    def build_parsers(self) -> Tuple[MultiinputTemporalParser, TemporalRangeParser]:
        """Build the reconcilers described by the temporal configuration.

        Returns:
            Multi-input and range parsers sharing one text parser
        """
        temporal = self.load_config().temporal
        text_parser = get_text_date_parser(temporal.preferred_orderings, temporal.base_year)
        multiinput_parser = MultiinputTemporalParser(
            text_parser,
            min_date=temporal.min_date,
            future_tolerance_days=temporal.future_tolerance_days,
        )
        return multiinput_parser, TemporalRangeParser(multiinput_parser)
