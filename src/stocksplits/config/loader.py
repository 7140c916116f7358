"""
Configuration loading utilities.

Supports environment variable interpolation and config inheritance from a
``base.yaml`` next to the main config file.
"""

import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from stocksplits.config.settings import StockSplitsConfig
from stocksplits.errors import ConfigError


def _interpolate_env_vars(value: str) -> str:
    """
    Interpolate environment variables in string values.

    Supports ${VAR} and ${VAR:default} syntax.
    """
    pattern = r"\$\{([^}:]+)(?::([^}]*))?\}"

    def replacer(match: re.Match[str]) -> str:
        var_name = match.group(1)
        default = match.group(2)
        return os.environ.get(var_name, default if default is not None else "")

    return re.sub(pattern, replacer, value)


def _process_config_values(obj: Any) -> Any:
    """Recursively process config values for env var interpolation."""
    if isinstance(obj, str):
        return _interpolate_env_vars(obj)
    if isinstance(obj, dict):
        return {k: _process_config_values(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_process_config_values(item) for item in obj]
    return obj


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries, with override taking precedence."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_yaml(path: Path) -> dict[str, Any]:
    """Load a YAML file and process environment variables."""
    try:
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        msg = f"Invalid YAML in {path}: {e}"
        raise ConfigError(msg) from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        msg = f"Config file {path} must contain a mapping, got {type(data).__name__}"
        raise ConfigError(msg)
    return _process_config_values(data)


def load_config(
    config_path: Path | None = None,
    base_path: Path | None = None,
) -> StockSplitsConfig:
    """
    Load configuration from YAML file(s).

    Every key is optional; a missing file path yields the defaults.

    Args:
        config_path: Path to the main configuration file.
        base_path: Optional path to base configuration for inheritance.

    Returns:
        Fully validated StockSplitsConfig instance.

    Raises:
        ConfigError: If a file is unreadable or values fail validation.
    """
    if config_path is None:
        return StockSplitsConfig()

    if not config_path.exists():
        msg = f"Config file not found: {config_path}"
        raise ConfigError(msg)

    if base_path is not None:
        base_data = load_yaml(base_path)
    else:
        potential_base = config_path.parent / "base.yaml"
        if potential_base.exists() and potential_base.resolve() != config_path.resolve():
            base_data = load_yaml(potential_base)
        else:
            base_data = {}

    merged = _deep_merge(base_data, load_yaml(config_path))

    # Relative data paths are anchored at the config file's directory
    data_section = merged.get("data")
    if isinstance(data_section, dict):
        for key in ("data_dir", "schema_dir"):
            raw = data_section.get(key)
            if raw and not Path(raw).is_absolute():
                data_section[key] = config_path.parent / raw

    try:
        return StockSplitsConfig.model_validate(merged)
    except ValidationError as e:
        msg = f"Invalid configuration in {config_path}:\n{e}"
        raise ConfigError(msg) from e
