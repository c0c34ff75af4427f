"""
Configuration loader for ldif-drift

Resolves comparison thresholds and reader options from built-in defaults,
an optional YAML file validated against a JSON schema, and environment
variables (in increasing order of precedence). Command-line flags are applied
on top by the caller through Settings.resolve_thresholds().
"""

import codecs
import logging
import os
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional

import jsonschema
import yaml

from ldif_drift.exceptions import LdifDriftError

logger = logging.getLogger(__name__)


class ConfigurationError(LdifDriftError):
    """Exception raised for configuration-related errors."""

    pass


CONFIG_FILE_ENV = "LDIF_DRIFT_CONFIG_FILE"
ENTITY_THRESHOLD_ENV = "LDIF_DRIFT_ENTITY_THRESHOLD"
ATTRIBUTE_THRESHOLD_ENV = "LDIF_DRIFT_ATTRIBUTE_THRESHOLD"
AVG_ATTRIBUTES_THRESHOLD_ENV = "LDIF_DRIFT_AVG_ATTRIBUTES_THRESHOLD"
ENCODING_ENV = "LDIF_DRIFT_ENCODING"
SKIP_INVALID_ENV = "LDIF_DRIFT_SKIP_INVALID"
LOG_LEVEL_ENV = "LDIF_DRIFT_LOG_LEVEL"

DEFAULT_ENCODING = "utf-8"
DEFAULT_LOG_LEVEL = "INFO"
LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

THRESHOLDS_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "ldif-drift configuration",
    "type": "object",
    "properties": {
        "thresholds": {
            "type": "object",
            "properties": {
                "entity_percent": {"type": "number"},
                "attribute_percent": {"type": "number"},
                "avg_attributes_percent": {"type": "number"},
            },
            "additionalProperties": False,
        },
        "encoding": {"type": "string", "minLength": 1},
        "skip_invalid_records": {"type": "boolean"},
        "log_level": {"type": "string", "enum": LOG_LEVELS},
    },
    "additionalProperties": False,
}


@dataclass(frozen=True)
class Thresholds:
    """Percent tolerances for the three verdict checks."""

    entity_percent: float = 10.0
    attribute_percent: float = 10.0
    avg_attributes_percent: float = 15.0


def _read_float(env_name: str) -> Optional[float]:
    raw = os.getenv(env_name)
    if raw is None or raw.strip() == "":
        return None
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigurationError(f"{env_name} must be a number, got {raw!r}") from e


def _check_encoding(encoding: str) -> str:
    try:
        codecs.lookup(encoding)
    except LookupError as e:
        raise ConfigurationError(f"Unknown encoding: {encoding}") from e
    return encoding


class Settings:
    """
    Runtime configuration for analysis and comparison.

    Attributes:
        thresholds: Entity / attribute / average thresholds in percent
        encoding: Text encoding used to read LDIF files
        skip_invalid_records: Skip malformed records instead of aborting
        log_level: Level name for the structured loggers
        config_path: YAML file the settings were loaded from, if any
    """

    def __init__(self, config_path: Optional[str] = None):
        """
        Build settings from defaults, YAML file and environment.

        Args:
            config_path: Optional YAML file; falls back to LDIF_DRIFT_CONFIG_FILE

        Raises:
            ConfigurationError: If the file or an environment value is invalid
        """
        self.thresholds = Thresholds()
        self.encoding = DEFAULT_ENCODING
        self.skip_invalid_records = False
        self.log_level = DEFAULT_LOG_LEVEL
        self.config_path = config_path or os.getenv(CONFIG_FILE_ENV)

        if self.config_path:
            self.load_config(self.config_path)
        self._apply_environment()

    def load_config(self, config_path: str) -> None:
        """
        Load settings from a YAML file and validate them against THRESHOLDS_SCHEMA.

        Args:
            config_path: Path to the YAML configuration file

        Raises:
            ConfigurationError: If the file is missing, not YAML, or fails validation
        """
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                config = yaml.safe_load(f)
        except FileNotFoundError as e:
            logger.error(f"Configuration file not found: {config_path}")
            raise ConfigurationError(f"Configuration file not found: {config_path}") from e
        except yaml.YAMLError as e:
            logger.error(f"Invalid YAML in configuration: {e}")
            raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

        if not config:
            logger.warning(f"Empty configuration: {config_path}")
            return

        try:
            jsonschema.validate(instance=config, schema=THRESHOLDS_SCHEMA)
        except jsonschema.ValidationError as e:
            logger.error(f"Configuration failed schema validation: {e.message}")
            raise ConfigurationError(f"Configuration validation failed: {e.message}") from e

        thresholds = config.get("thresholds") or {}
        self.thresholds = replace(
            self.thresholds,
            **{key: float(value) for key, value in thresholds.items()},
        )
        if "encoding" in config:
            self.encoding = _check_encoding(config["encoding"])
        if "skip_invalid_records" in config:
            self.skip_invalid_records = config["skip_invalid_records"]
        if "log_level" in config:
            self.log_level = config["log_level"]

        logger.info(f"Loaded configuration from {config_path}")

    def _apply_environment(self) -> None:
        overrides = {
            "entity_percent": _read_float(ENTITY_THRESHOLD_ENV),
            "attribute_percent": _read_float(ATTRIBUTE_THRESHOLD_ENV),
            "avg_attributes_percent": _read_float(AVG_ATTRIBUTES_THRESHOLD_ENV),
        }
        self.thresholds = replace(
            self.thresholds, **{k: v for k, v in overrides.items() if v is not None}
        )

        encoding = os.getenv(ENCODING_ENV)
        if encoding:
            self.encoding = _check_encoding(encoding)

        skip_invalid = os.getenv(SKIP_INVALID_ENV)
        if skip_invalid is not None:
            self.skip_invalid_records = skip_invalid.lower() == "true"

        log_level = os.getenv(LOG_LEVEL_ENV)
        if log_level:
            if log_level.upper() not in LOG_LEVELS:
                raise ConfigurationError(f"{LOG_LEVEL_ENV} must be one of {LOG_LEVELS}")
            self.log_level = log_level.upper()

    def resolve_thresholds(
        self,
        entity_percent: Optional[float] = None,
        attribute_percent: Optional[float] = None,
        avg_attributes_percent: Optional[float] = None,
    ) -> Thresholds:
        """Apply explicit (e.g. command-line) overrides on top of the loaded thresholds."""
        overrides = {
            "entity_percent": entity_percent,
            "attribute_percent": attribute_percent,
            "avg_attributes_percent": avg_attributes_percent,
        }
        return replace(self.thresholds, **{k: v for k, v in overrides.items() if v is not None})
