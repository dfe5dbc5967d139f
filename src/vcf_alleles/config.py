"""Configuration file support for vcf-alleles."""

import logging
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .models import Convention

logger = logging.getLogger(__name__)

CONFIG_SECTION = "vcf_alleles"

DEFAULT_CANONICAL_FORMAT = ["GT", "AD", "DP", "GQ", "PL"]

VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class ConfigValidationError(Exception):
    """Raised when configuration validation fails."""

    pass


@dataclass
class ToolConfig:
    """Settings shared by the vcf-alleles commands."""

    canonical_format: list[str] = field(default_factory=lambda: list(DEFAULT_CANONICAL_FORMAT))
    convention: str = Convention.ANNOVAR.value
    reference: Path | None = None
    fasta_cache_size: int = 100
    log_level: str = "INFO"

    @property
    def convention_enum(self) -> Convention:
        return Convention.from_string(self.convention)


def validate_config(config_dict: dict[str, Any]) -> None:
    """Validate configuration values.

    Raises:
        ConfigValidationError: If any configuration value is invalid.
    """
    if "canonical_format" in config_dict:
        order = config_dict["canonical_format"]
        if not isinstance(order, list) or not all(isinstance(k, str) and k for k in order):
            raise ConfigValidationError("canonical_format must be a list of non-empty strings")
        if len(set(order)) != len(order):
            raise ConfigValidationError(f"canonical_format contains duplicate keys: {order}")

    if "convention" in config_dict:
        convention = config_dict["convention"]
        if not isinstance(convention, str):
            raise ConfigValidationError(
                f"convention must be a string, got {type(convention).__name__}"
            )
        try:
            Convention.from_string(convention)
        except ValueError as e:
            raise ConfigValidationError(str(e)) from e

    if "reference" in config_dict and not isinstance(config_dict["reference"], str):
        raise ConfigValidationError(
            f"reference must be a path string, got {type(config_dict['reference']).__name__}"
        )

    if "fasta_cache_size" in config_dict:
        cache_size = config_dict["fasta_cache_size"]
        if not isinstance(cache_size, int) or isinstance(cache_size, bool):
            raise ConfigValidationError(
                f"fasta_cache_size must be an integer, got {type(cache_size).__name__}"
            )
        if cache_size <= 0:
            raise ConfigValidationError(f"fasta_cache_size must be positive, got {cache_size}")

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


def load_config(config_path: Path, overrides: dict[str, Any] | None = None) -> ToolConfig:
    """Load configuration from a TOML file.

    Args:
        config_path: Path to the TOML configuration file.
        overrides: Optional dict of values to override loaded config.

    Returns:
        ToolConfig instance with loaded values.

    Raises:
        FileNotFoundError: If the config file doesn't exist.
        ConfigValidationError: If any configuration value is invalid.
    """
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "rb") as f:
        toml_data = tomllib.load(f)

    config_dict = toml_data.get(CONFIG_SECTION, {})

    if overrides:
        config_dict.update(overrides)

    validate_config(config_dict)

    valid_fields = {"canonical_format", "convention", "reference", "fasta_cache_size", "log_level"}
    unknown = sorted(set(config_dict) - valid_fields)
    if unknown:
        logger.debug("Ignoring unknown configuration keys: %s", ", ".join(unknown))

    filtered_config = {k: v for k, v in config_dict.items() if k in valid_fields}
    if "reference" in filtered_config:
        reference = filtered_config["reference"]
        filtered_config["reference"] = Path(reference) if reference else None
    if "log_level" in filtered_config:
        filtered_config["log_level"] = filtered_config["log_level"].upper()

    return ToolConfig(**filtered_config)
