"""Configuration file support for vep-json."""

import logging
import tomllib
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

FREQUENCY_FLAGS = ("af_1kg", "af_esp", "af_exac", "af_gnomad")


class ConfigValidationError(Exception):
    """Raised when configuration validation fails."""

    pass


@dataclass
class OutputConfig:
    """Configuration for JSON record assembly."""

    delimiter: str = " "
    assembly: str | None = None
    cache_assembly: str | None = None
    af_1kg: bool = True
    af_esp: bool = True
    af_exac: bool = True
    af_gnomad: bool = True
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        # "+" stands in for a space on command lines
        if "+" in self.delimiter:
            self.delimiter = " "

    @property
    def assembly_name(self) -> str | None:
        return self.assembly or self.cache_assembly


def validate_config(config_dict: dict[str, Any]) -> None:
    """Validate configuration values.

    Raises:
        ConfigValidationError: If any configuration value is invalid.
    """
    if "delimiter" in config_dict:
        delimiter = config_dict["delimiter"]
        if not isinstance(delimiter, str) or not delimiter:
            raise ConfigValidationError(
                f"delimiter must be a non-empty string, got {delimiter!r}"
            )

    for key in ("assembly", "cache_assembly"):
        if key in config_dict and not isinstance(config_dict[key], str):
            raise ConfigValidationError(
                f"{key} must be a string, got {type(config_dict[key]).__name__}"
            )

    for flag in FREQUENCY_FLAGS:
        if flag in config_dict and not isinstance(config_dict[flag], bool):
            raise ConfigValidationError(
                f"{flag} must be a boolean, got {type(config_dict[flag]).__name__}"
            )

    if "log_level" in config_dict:
        log_level = config_dict["log_level"]
        if not isinstance(log_level, str):
            raise ConfigValidationError(
                f"log_level must be a string, got {type(log_level).__name__}"
            )
        if log_level.upper() not in VALID_LOG_LEVELS:
            raise ConfigValidationError(
                f"log_level must be one of {VALID_LOG_LEVELS}, got '{log_level}'"
            )


def load_config(config_path: Path, overrides: dict[str, Any] | None = None) -> OutputConfig:
    """Load configuration from a TOML file.

    Args:
        config_path: Path to the TOML configuration file.
        overrides: Optional dict of values to override loaded config.

    Returns:
        OutputConfig instance with loaded values.

    Raises:
        FileNotFoundError: If the config file doesn't exist.
        ConfigValidationError: If any configuration value is invalid.
    """
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "rb") as f:
        toml_data = tomllib.load(f)

    config_dict = toml_data.get("vep_json", {})

    if overrides:
        config_dict.update({k: v for k, v in overrides.items() if v is not None})

    validate_config(config_dict)

    valid_fields = {f.name for f in fields(OutputConfig)}
    unknown = sorted(set(config_dict) - valid_fields)
    if unknown:
        logger.warning("Ignoring unknown configuration keys: %s", ", ".join(unknown))

    filtered_config = {k: v for k, v in config_dict.items() if k in valid_fields}

    return OutputConfig(**filtered_config)
