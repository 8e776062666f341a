"""
MutexPromise Configuration

This module provides configuration management for promise contexts.
Includes default configuration, environment-based settings, file loading,
and validation.
"""

import json
import os
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Union

import yaml

from .exceptions import ConfigError


DEFAULT_UNCAUGHT_GRACE_MS = 25.0


@dataclass
class MutexConfig:
    """Configuration for a promise context"""

    # Delay before an unhandled rejection is reported as uncaught
    uncaught_grace_ms: float = DEFAULT_UNCAUGHT_GRACE_MS

    # Record formatted stacks on creation and settlement
    capture_stacks: bool = False

    debug: bool = False
    log_level: str = "INFO"

    custom: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to a dictionary"""
        return asdict(self)


def get_default_config() -> MutexConfig:
    """Get default configuration"""
    return MutexConfig()


def _parse_bool(value: str) -> bool:
    return value.lower() in ["true", "1", "yes"]


def load_config_from_env() -> MutexConfig:
    """
    Load configuration from environment variables

    Environment variables should be prefixed with MUTEXPROMISE_
    For example: MUTEXPROMISE_UNCAUGHT_GRACE_MS=50, MUTEXPROMISE_DEBUG=true

    Returns:
        MutexConfig instance
    """
    config = MutexConfig()

    env_mappings = {
        "MUTEXPROMISE_UNCAUGHT_GRACE_MS": ("uncaught_grace_ms", float),
        "MUTEXPROMISE_CAPTURE_STACKS": ("capture_stacks", _parse_bool),
        "MUTEXPROMISE_DEBUG": ("debug", _parse_bool),
        "MUTEXPROMISE_LOG_LEVEL": ("log_level", str),
    }

    for env_var, (attr_name, converter) in env_mappings.items():
        value = os.getenv(env_var)
        if value is not None:
            try:
                setattr(config, attr_name, converter(value))
            except ValueError as e:
                raise ConfigError(
                    f"Invalid value for {env_var}: {value}",
                    {"variable": env_var, "value": value},
                ) from e

    validate_config(config)
    return config


def load_config_from_file(config_path: Union[str, Path]) -> MutexConfig:
    """
    Load configuration from a JSON or YAML file

    Args:
        config_path: Path to configuration file

    Returns:
        MutexConfig instance
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        if config_path.suffix.lower() in [".yaml", ".yml"]:
            data = yaml.safe_load(f)
        elif config_path.suffix.lower() == ".json":
            data = json.load(f)
        else:
            raise ValueError(f"Unsupported config file format: {config_path.suffix}")

    return config_from_dict(data or {})


def config_from_dict(data: Dict[str, Any]) -> MutexConfig:
    """
    Build configuration from a dictionary

    Unknown keys are collected under ``custom``.

    Args:
        data: Configuration values

    Returns:
        MutexConfig instance
    """
    known = {f.name for f in fields(MutexConfig)}
    kwargs = {k: v for k, v in data.items() if k in known and k != "custom"}
    custom = dict(data.get("custom") or {})
    custom.update({k: v for k, v in data.items() if k not in known})

    config = MutexConfig(custom=custom, **kwargs)
    validate_config(config)
    return config


def validate_config(config: MutexConfig) -> None:
    """
    Validate configuration values

    Raises:
        ConfigError: If a value is out of range
    """
    if config.uncaught_grace_ms < 0:
        raise ConfigError(
            "uncaught_grace_ms must be non-negative",
            {"uncaught_grace_ms": config.uncaught_grace_ms},
        )

    valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    if config.log_level.upper() not in valid_levels:
        raise ConfigError(
            f"Invalid log level: {config.log_level}",
            {"valid_levels": valid_levels},
        )
