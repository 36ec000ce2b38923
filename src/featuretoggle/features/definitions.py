"""
Feature definitions.

A feature is an immutable record of a processor, its parameters and an
optional hard-wired result. The registry swaps whole records when an
attribute changes.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

from featuretoggle.errors import ValidationError

FEATURE_ATTRIBUTES = ("processor", "params", "static_result")


class Processor(Protocol):
    """Decision function computing a feature's state from context and params."""

    def __call__(self, context: Mapping[str, Any], params: Mapping[str, Any]) -> bool: ...


def constant_processor(value: bool) -> Processor:
    """Build a processor that ignores its inputs and always returns ``value``."""

    def processor(context: Mapping[str, Any], params: Mapping[str, Any]) -> bool:
        return value

    processor.__name__ = "always_on" if value else "always_off"
    processor.__qualname__ = processor.__name__
    return processor


def coerce_processor(processor: Any) -> Any:
    """Turn the ``None``/``bool`` shorthand into a constant processor."""
    if processor is None:
        return constant_processor(False)
    if isinstance(processor, bool):
        return constant_processor(processor)
    return processor


@dataclass(frozen=True)
class Feature:
    """
    Definition of a feature toggle.

    Attributes:
        name: Unique feature name.
        processor: Callable ``(context, params) -> bool``.
        params: Opaque payload passed to the processor and to callbacks.
        static_result: Fixed result overriding the processor when not None.
    """

    name: str
    processor: Processor
    params: dict[str, Any] = field(default_factory=dict)
    static_result: bool | None = None

    def validate(self) -> None:
        """
        Check the definition is usable.

        Raises:
            ValidationError: On an empty or non-string name, a non-callable
                processor, non-mapping params or a non-bool static result.
        """
        if not isinstance(self.name, str):
            msg = f"Feature name must be a string, got {type(self.name).__name__}"
            raise ValidationError(msg)
        if not self.name:
            msg = "Feature name must not be empty"
            raise ValidationError(msg)
        if not callable(self.processor):
            msg = f"Feature '{self.name}' processor must be callable"
            raise ValidationError(msg)
        if not isinstance(self.params, Mapping):
            msg = f"Feature '{self.name}' params must be a mapping"
            raise ValidationError(msg)
        if self.static_result is not None and not isinstance(self.static_result, bool):
            msg = f"Feature '{self.name}' static_result must be a bool or None"
            raise ValidationError(msg)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], name: str | None = None) -> "Feature":
        """
        Build a feature from a raw definition mapping.

        The processor must already be callable; ``name`` overrides any
        ``name`` key in ``data``.

        Raises:
            ValidationError: If the name or processor key is missing, or the
                resulting definition is invalid.
        """
        if not isinstance(data, Mapping):
            msg = f"Feature definition must be a mapping, got {type(data).__name__}"
            raise ValidationError(msg)
        if name is None:
            if "name" not in data:
                msg = "Feature key 'name' is not found"
                raise ValidationError(msg)
            name = data["name"]
        if "processor" not in data:
            msg = f"Feature '{name}' key 'processor' is not found"
            raise ValidationError(msg)

        params = data.get("params")
        if params is None:
            params = {}
        elif not isinstance(params, Mapping):
            msg = f"Feature '{name}' params must be a mapping"
            raise ValidationError(msg)

        feature = cls(
            name=name,
            processor=data["processor"],
            params=dict(params),
            static_result=_static_result_of(data),
        )
        feature.validate()
        return feature


def _static_result_of(data: Mapping[str, Any]) -> Any:
    if "static_result" in data:
        return data["static_result"]
    return data.get("staticResult")


def normalize_entry(entry: Mapping[str, Any] | None) -> dict[str, Any]:
    """
    Apply defaults to a raw configuration entry.

    Missing processor becomes None, missing params an empty dict, and any
    static result that is not a real bool is dropped.
    """
    if entry is None:
        entry = {}
    if not isinstance(entry, Mapping):
        msg = f"Feature config entry must be a mapping, got {type(entry).__name__}"
        raise ValidationError(msg)

    params = entry.get("params")
    static_result = _static_result_of(entry)
    return {
        "processor": entry.get("processor"),
        "params": {} if params is None else params,
        "static_result": static_result if isinstance(static_result, bool) else None,
    }
