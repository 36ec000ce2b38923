"""
Configuration management with typed Pydantic models.

Loads YAML toggle definitions and turns them into a FeatureRegistry.
"""

from featuretoggle.config.loader import build_registry, load_config
from featuretoggle.config.settings import (
    FeatureEntryConfig,
    LoggingConfig,
    RegistryConfig,
    ToggleConfig,
)

__all__ = [
    "FeatureEntryConfig",
    "LoggingConfig",
    "RegistryConfig",
    "ToggleConfig",
    "build_registry",
    "load_config",
]
