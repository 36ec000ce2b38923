"""
Configuration loading utilities.

Supports environment variable interpolation and config inheritance from a
``base.yaml`` next to the main file.
"""

import os
import re
from pathlib import Path
from typing import Any

import yaml

from featuretoggle.config.settings import ToggleConfig
from featuretoggle.errors import ValidationError
from featuretoggle.registry import FeatureRegistry
from featuretoggle.utils.logging import get_logger

log = get_logger(__name__)


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
    """
    Load a YAML file and process environment variables.

    Raises:
        ValidationError: If the document is not a mapping.
    """
    with path.open(encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if not data:
        return {}
    if not isinstance(data, dict):
        msg = f"Config file {path} must contain a mapping, got {type(data).__name__}"
        raise ValidationError(msg)
    return _process_config_values(data)


def load_config(
    config_path: Path,
    base_path: Path | None = None,
) -> ToggleConfig:
    """
    Load toggle configuration from YAML file(s).

    Args:
        config_path: Path to the main configuration file.
        base_path: Optional base configuration. Defaults to ``base.yaml``
            in the same directory when present.

    Returns:
        Fully validated ToggleConfig instance.

    Raises:
        ValidationError: If the file or its ``features`` section is not a
            mapping.
        pydantic.ValidationError: If an entry fails model validation.
    """
    if base_path is not None:
        base_data = load_yaml(base_path)
    else:
        potential_base = config_path.parent / "base.yaml"
        if potential_base.exists() and potential_base.resolve() != config_path.resolve():
            base_data = load_yaml(potential_base)
        else:
            base_data = {}

    main_data = load_yaml(config_path)
    merged = _deep_merge(base_data, main_data)

    features = merged.get("features")
    if features is not None and not isinstance(features, dict):
        msg = f"Config 'features' must be a mapping, got {type(features).__name__}"
        raise ValidationError(msg)

    config = ToggleConfig.model_validate(merged)
    log.info(
        "Loaded toggle configuration",
        path=str(config_path),
        project=config.project,
        n_features=len(config.features),
    )
    return config


def build_registry(
    config_path: Path,
    base_path: Path | None = None,
) -> FeatureRegistry:
    """Load a configuration file and build its registry."""
    return load_config(config_path, base_path).to_registry()
