"""
Environment Variable Configuration with Validation

Provides centralized environment variable management with:
- Type validation (str, float, bool, path)
- Default values
- Validation rules (min/max, choices)
- Startup validation with clear error messages

Usage:
    from automigrate.config.env_config import Config, validate_config

    # Access validated config
    debug = Config.AUTOMIGRATE_DEBUG
    timeout = Config.AUTOMIGRATE_TIMEOUT

    # Validate all at startup (raises ConfigError if invalid)
    validate_config()
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised when configuration validation fails."""

    pass


@dataclass
class EnvVar:
    """Environment variable definition with validation."""

    name: str
    default: Any = None
    var_type: str = "str"  # str, float, bool, path
    required: bool = False
    description: str = ""
    min_value: Optional[Union[int, float]] = None
    max_value: Optional[Union[int, float]] = None
    choices: Optional[List[Any]] = None

    def parse(self, value: str) -> Any:
        """Parse string value to target type."""
        if value is None:
            return None

        if self.var_type == "str":
            # Choices are matched case-insensitively
            return value.strip().lower() if self.choices is not None else value
        elif self.var_type == "float":
            try:
                return float(value)
            except ValueError:
                raise ConfigError(f"{self.name}: '{value}' is not a valid number")
        elif self.var_type == "bool":
            return value.lower() in ("true", "1", "yes", "on")
        elif self.var_type == "path":
            return Path(value).expanduser()
        else:
            return value

    def validate(self, value: Any) -> tuple[bool, str]:
        """Validate parsed value. Returns (is_valid, error_message)."""
        if value is None:
            if self.required:
                return False, f"{self.name} is required but not set"
            return True, ""

        if self.var_type == "float":
            if self.min_value is not None and value < self.min_value:
                return False, f"{self.name}: value {value} is below minimum {self.min_value}"
            if self.max_value is not None and value > self.max_value:
                return False, f"{self.name}: value {value} exceeds maximum {self.max_value}"

        if self.choices is not None and value not in self.choices:
            return (
                False,
                f"{self.name}: '{value}' is not a valid choice. Must be one of: {self.choices}",
            )

        return True, ""

    def get_value(self) -> Any:
        """Get validated value from environment."""
        raw_value = os.environ.get(self.name)

        if raw_value is None or raw_value == "":
            if self.required:
                raise ConfigError(f"Required environment variable {self.name} is not set")
            return self.default

        parsed = self.parse(raw_value)
        is_valid, error = self.validate(parsed)

        if not is_valid:
            raise ConfigError(error)

        return parsed


ENV_VARS: Dict[str, EnvVar] = {
    "AUTOMIGRATE_DATA_DIR": EnvVar(
        name="AUTOMIGRATE_DATA_DIR",
        default=None,
        var_type="path",
        description="Directory that relative database names are resolved against",
    ),
    "AUTOMIGRATE_DEBUG": EnvVar(
        name="AUTOMIGRATE_DEBUG",
        default=False,
        var_type="bool",
        description="Trace executed SQL statements",
    ),
    "AUTOMIGRATE_TIMEOUT": EnvVar(
        name="AUTOMIGRATE_TIMEOUT",
        default=30.0,
        var_type="float",
        min_value=0.1,
        max_value=600,
        description="Seconds to wait on a locked database",
    ),
    "AUTOMIGRATE_LOG_LEVEL": EnvVar(
        name="AUTOMIGRATE_LOG_LEVEL",
        default="info",
        choices=["debug", "info", "warning", "error"],
        description="Log level used by the command line",
    ),
    "AUTOMIGRATE_MODELS": EnvVar(
        name="AUTOMIGRATE_MODELS",
        default=None,
        var_type="path",
        description="YAML file with model definitions",
    ),
}


class ConfigMeta(type):
    """Metaclass to provide attribute access to config values."""

    _cache: Dict[str, Any] = {}

    def __getattr__(cls, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)

        if name in cls._cache:
            return cls._cache[name]

        if name in ENV_VARS:
            value = ENV_VARS[name].get_value()
            cls._cache[name] = value
            return value

        raise AttributeError(f"Unknown config variable: {name}")


class Config(metaclass=ConfigMeta):
    """
    Configuration class with environment variable access.

    Access config values as class attributes:
        Config.AUTOMIGRATE_DEBUG  # Returns bool
        Config.AUTOMIGRATE_TIMEOUT  # Returns float
    """

    @classmethod
    def get(cls, name: str, default: Any = None) -> Any:
        """Get config value with optional default."""
        try:
            return getattr(cls, name)
        except AttributeError:
            return default

    @classmethod
    def to_dict(cls) -> Dict[str, Any]:
        """Get all config values as dictionary."""
        result = {}
        for name, env_var in ENV_VARS.items():
            try:
                result[name] = env_var.get_value()
            except ConfigError:
                result[name] = None
        return result

    @classmethod
    def clear_cache(cls) -> None:
        """Clear the config cache (useful for testing)."""
        cls._cache.clear()


def validate_config() -> Dict[str, Any]:
    """
    Validate all environment variables.

    Returns:
        Dict of validated config values

    Raises:
        ConfigError: If any variable is invalid
    """
    errors = []
    validated = {}

    for name, env_var in ENV_VARS.items():
        try:
            value = env_var.get_value()
            validated[name] = value
            logger.debug(f"Config: {name} = {value}")
        except ConfigError as e:
            errors.append(str(e))

    if errors:
        error_msg = "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
        logger.error(error_msg)
        raise ConfigError(error_msg)

    return validated


def get_env_var_docs() -> str:
    """Generate documentation for all environment variables."""
    lines = ["# Environment Variables\n"]
    lines.append("| Variable | Type | Default | Description |")
    lines.append("|----------|------|---------|-------------|")

    for name, ev in ENV_VARS.items():
        default = "-" if ev.default is None else ev.default
        required = " (required)" if ev.required else ""
        lines.append(f"| `{name}` | {ev.var_type} | {default} | {ev.description}{required} |")

    return "\n".join(lines)
