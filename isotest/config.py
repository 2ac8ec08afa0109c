"""
Configuration loading and validation for test runs.

Settings are merged from (lowest to highest precedence): built-in defaults,
a YAML file, ISOTEST_* environment variables, and explicit overrides such as
command-line flags. Report options change output only, never engine
behavior.
"""

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

ENV_PREFIX = "ISOTEST_"

# Diagnostic channel size in bytes; messages keep at most capacity - 1
DEFAULT_CAPACITY = 1024
MIN_CAPACITY = 64

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
_TRUTHY = frozenset({"1", "true", "yes", "on"})
_FALSY = frozenset({"0", "false", "no", "off", ""})


class ConfigError(ValueError):
    """Raised when configuration input cannot be parsed or validated."""


class RunnerConfig(BaseModel):
    """Validated settings for one test run."""

    model_config = {"extra": "forbid"}

    # Report options
    monochrome: bool = Field(default=False, description="Disable decorative styling")
    omit_runtime: bool = Field(default=False, description="Suppress timing fields")
    omit_successes: bool = Field(default=False, description="Suppress PASS lines")

    # Engine options
    timeout_seconds: float | None = Field(
        default=None, description="Per-test time limit; None waits indefinitely"
    )
    diagnostic_capacity: int = Field(
        default=DEFAULT_CAPACITY,
        ge=MIN_CAPACITY,
        description="Diagnostic channel size in bytes",
    )

    log_level: str = Field(default="WARNING", description="Logging level name")

    @field_validator("timeout_seconds")
    @classmethod
    def timeout_positive(cls, v: float | None) -> float | None:
        """Validate that timeout is positive if provided."""
        if v is not None and v <= 0:
            raise ValueError("Timeout must be positive")
        return v

    @field_validator("log_level")
    @classmethod
    def known_log_level(cls, v: str) -> str:
        """Normalize and validate the log level name."""
        level = v.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"Unknown log level: {v}. Available: {', '.join(_LOG_LEVELS)}")
        return level


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    raise ConfigError(f"{name} must be a boolean, got {raw!r}")


class ConfigLoader:
    """Load and merge RunnerConfig from YAML, environment and overrides."""

    # Environment variable suffix -> field name
    ENV_FIELDS: dict[str, str] = {
        "MONOCHROME": "monochrome",
        "OMIT_RUNTIME": "omit_runtime",
        "OMIT_SUCCESSES": "omit_successes",
        "TIMEOUT": "timeout_seconds",
        "DIAGNOSTIC_CAPACITY": "diagnostic_capacity",
        "LOG_LEVEL": "log_level",
    }

    _BOOL_FIELDS = frozenset({"monochrome", "omit_runtime", "omit_successes"})

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> RunnerConfig:
        """
        Create configuration from a dictionary.

        Raises:
            ConfigError: If a key is unknown or a value is invalid.
        """
        try:
            return RunnerConfig.model_validate(dict(data))
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration: {e}") from e

    @classmethod
    def from_yaml(cls, path: str | Path) -> RunnerConfig:
        """
        Load configuration from a YAML file.

        Args:
            path: Path to YAML configuration file

        Returns:
            RunnerConfig loaded from file
        """
        return cls.from_dict(cls._read_yaml(path))

    @classmethod
    def env_values(cls, environ: Mapping[str, str] | None = None) -> dict[str, Any]:
        """
        Extract configuration values from environment variables.

        ``NO_COLOR`` (any non-empty value) implies monochrome output.
        """
        environ = os.environ if environ is None else environ
        values: dict[str, Any] = {}

        if environ.get("NO_COLOR"):
            values["monochrome"] = True

        for suffix, field_name in cls.ENV_FIELDS.items():
            name = f"{ENV_PREFIX}{suffix}"
            if name not in environ:
                continue
            raw = environ[name]
            if field_name in cls._BOOL_FIELDS:
                values[field_name] = _parse_bool(name, raw)
            elif field_name == "timeout_seconds":
                values[field_name] = raw.strip() or None
            else:
                values[field_name] = raw.strip()
        return values

    @classmethod
    def load(
        cls,
        path: str | Path | None = None,
        environ: Mapping[str, str] | None = None,
        **overrides: Any,
    ) -> RunnerConfig:
        """
        Merge defaults, YAML file, environment and explicit overrides.

        Overrides whose value is None are ignored, so unset CLI flags do not
        mask lower-precedence sources.
        """
        merged: dict[str, Any] = {}
        if path is not None:
            merged.update(cls._read_yaml(path))
        merged.update(cls.env_values(environ))
        merged.update({key: value for key, value in overrides.items() if value is not None})
        return cls.from_dict(merged)

    @classmethod
    def _read_yaml(cls, path: str | Path) -> dict[str, Any]:
        path = Path(path)
        if not path.exists():
            msg = f"Configuration file not found: {path}"
            raise FileNotFoundError(msg)

        with path.open() as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML in {path}: {e}") from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(f"Configuration in {path} must be a mapping")
        return data

    @classmethod
    def generate_sample_config(cls) -> str:
        """
        Generate a sample YAML configuration file.

        Returns:
            YAML string for sample configuration
        """
        sample = {
            "monochrome": False,
            "omit_runtime": False,
            "omit_successes": False,
            "timeout_seconds": 30.0,
            "diagnostic_capacity": DEFAULT_CAPACITY,
            "log_level": "WARNING",
        }
        return yaml.dump(sample, default_flow_style=False, sort_keys=False)
