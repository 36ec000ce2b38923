"""
Typed configuration models using Pydantic.

A toggle configuration file declares registry-wide flags, logging and the
feature entries themselves. Processors are referenced by import path.
"""

from typing import Any

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ImportString,
    TypeAdapter,
    field_validator,
)

from featuretoggle.registry import FeatureRegistry
from featuretoggle.utils.logging import LOG_LEVELS

_import_string = TypeAdapter(ImportString)


class FeatureEntryConfig(BaseModel):
    """Configuration of a single feature."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    processor: Any = Field(
        default=None,
        description="Import path ('module:attr'), bool, callable or None (off)",
    )
    params: dict[str, Any] = Field(
        default_factory=dict, description="Payload passed to the processor"
    )
    static_result: bool | None = Field(
        default=None,
        validation_alias=AliasChoices("static_result", "staticResult"),
        description="Fixed result overriding the processor",
    )

    @field_validator("processor", mode="before")
    @classmethod
    def resolve_processor(cls, v: Any) -> Any:
        """Import string references and reject non-callable objects."""
        if v is None or isinstance(v, bool):
            return v
        if isinstance(v, str):
            v = _import_string.validate_python(v)
        if not callable(v):
            msg = f"processor must resolve to a callable, got {type(v).__name__}"
            raise ValueError(msg)
        return v

    @field_validator("params", mode="before")
    @classmethod
    def default_params(cls, v: Any) -> Any:
        """Treat an empty YAML value as no params."""
        return {} if v is None else v

    @field_validator("static_result", mode="before")
    @classmethod
    def only_real_bools(cls, v: Any) -> bool | None:
        """Drop anything that is not an actual bool."""
        return v if isinstance(v, bool) else None


class RegistryConfig(BaseModel):
    """Registry-wide evaluation flags."""

    model_config = ConfigDict(frozen=True)

    preserve: bool = Field(default=True, description="Memoize processor results")
    strict: bool = Field(
        default=False, description="Raise on evaluation of unknown features"
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    model_config = ConfigDict(frozen=True)

    level: str = Field(default="INFO", description="Log level name")
    json_output: bool = Field(default=False, description="Render logs as JSON")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Ensure the level is a known log level name."""
        level = v.upper()
        if level not in LOG_LEVELS:
            msg = f"level must be one of {', '.join(LOG_LEVELS)}, got: {v!r}"
            raise ValueError(msg)
        return level


class ToggleConfig(BaseModel):
    """Complete toggle configuration."""

    model_config = ConfigDict(frozen=True)

    project: str | None = Field(default=None, description="Project identifier")
    registry: RegistryConfig = Field(default_factory=RegistryConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    features: dict[str, FeatureEntryConfig] = Field(default_factory=dict)

    @field_validator("features", mode="before")
    @classmethod
    def fill_empty_entries(cls, v: Any) -> Any:
        """Allow bare ``name:`` entries, which declare an always-off feature."""
        if v is None:
            return {}
        if isinstance(v, dict):
            return {name: {} if entry is None else entry for name, entry in v.items()}
        return v

    @property
    def feature_names(self) -> list[str]:
        """Configured feature names in file order."""
        return list(self.features)

    def to_registry(self) -> FeatureRegistry:
        """Build a registry holding every configured feature."""
        return FeatureRegistry.create_from_mapping(
            {
                name: {
                    "processor": entry.processor,
                    "params": entry.params,
                    "static_result": entry.static_result,
                }
                for name, entry in self.features.items()
            },
            preserve=self.registry.preserve,
            strict=self.registry.strict,
        )
