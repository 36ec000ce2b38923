"""
Feature registry.

Maps feature names to definitions and answers whether a feature is active
for a given context. Processor results are memoized per name unless
preservation is turned off.
"""

import dataclasses
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from featuretoggle.errors import ConflictError, NotFoundError, ValidationError
from featuretoggle.features.definitions import (
    FEATURE_ATTRIBUTES,
    Feature,
    coerce_processor,
    normalize_entry,
)
from featuretoggle.utils.logging import get_logger

log = get_logger(__name__)

Callback = Callable[[Mapping[str, Any], Mapping[str, Any]], Any]

_UNSET: Any = object()


class FeatureRegistry:
    """
    Registry of feature toggles.

    Mutating methods return the registry so calls can be chained. The
    registry does no locking; share an instance across threads only behind
    an external lock.
    """

    def __init__(self, *, preserve: bool = True, strict: bool = False) -> None:
        self._features: dict[str, Feature] = {}
        self._preserved: dict[str, bool] = {}
        self._preserve = preserve
        self._strict = strict

    def __repr__(self) -> str:
        return (
            f"FeatureRegistry(features={len(self._features)}, "
            f"preserve={self._preserve}, strict={self._strict})"
        )

    def __len__(self) -> int:
        return len(self._features)

    def __contains__(self, name: object) -> bool:
        return self.has(name)

    @classmethod
    def create_from_mapping(
        cls,
        config: Mapping[str, Mapping[str, Any] | None],
        *,
        preserve: bool = True,
        strict: bool = False,
    ) -> "FeatureRegistry":
        """
        Build a registry from a ``name -> entry`` mapping.

        Each entry may hold ``processor`` (callable, bool or None),
        ``params`` and ``static_result``. A missing processor means the
        feature is off.

        Raises:
            ValidationError: If an entry is malformed.
        """
        registry = cls(preserve=preserve, strict=strict)
        for name, entry in config.items():
            item = normalize_entry(entry)
            registry.create(
                name,
                item["processor"],
                item["params"],
                item["static_result"],
            )
        return registry

    # Registration

    def add(
        self,
        feature: Feature | Mapping[str, Any] | str,
        definition: Feature | Mapping[str, Any] | None = None,
    ) -> "FeatureRegistry":
        """
        Register a new feature.

        Accepts a ``Feature``, a raw mapping carrying a ``name`` key, or a
        name followed by its definition.

        Raises:
            ValidationError: If the definition is malformed.
            ConflictError: If the name is already registered.
        """
        new = _as_feature(feature, definition)
        if new.name in self._features:
            msg = f"Feature '{new.name}' already exists"
            raise ConflictError(msg)

        self._features[new.name] = new
        log.debug("Feature added", feature=new.name)
        return self

    def append(
        self, features: Iterable[Feature | Mapping[str, Any]]
    ) -> "FeatureRegistry":
        """Register features in order, stopping at the first failure."""
        for feature in features:
            self.add(feature)
        return self

    def create(
        self,
        name: str,
        processor: Any = None,
        params: Mapping[str, Any] | None = None,
        static_result: bool | None = None,
    ) -> "FeatureRegistry":
        """
        Register a feature from its parts.

        ``processor`` may be omitted (always off), a bool (constant) or a
        callable.
        """
        return self.add(
            Feature(
                name=name,
                processor=coerce_processor(processor),
                params={} if params is None else _copy_params(params),
                static_result=static_result,
            )
        )

    def set(
        self, name: str, feature: Feature | Mapping[str, Any]
    ) -> "FeatureRegistry":
        """
        Insert or overwrite a single feature, dropping its cached result.

        Unlike ``add`` this never raises ``ConflictError``.
        """
        new = _as_feature(name, feature)
        self._features[new.name] = new
        self._preserved.pop(new.name, None)
        log.debug("Feature set", feature=new.name)
        return self

    def replace(
        self, features: Iterable[Feature | Mapping[str, Any]]
    ) -> "FeatureRegistry":
        """Flush the registry and register ``features`` in its place."""
        self.flush()
        return self.append(features)

    # Inspection

    def all(self) -> dict[str, Feature]:
        """Return the live ``name -> Feature`` mapping. Do not mutate it."""
        return self._features

    def names(self) -> list[str]:
        """Registered names in insertion order."""
        return list(self._features)

    def has(self, name: object) -> bool:
        """Check registration. Non-string names are never registered."""
        return isinstance(name, str) and name in self._features

    def feature(self, name: str) -> Feature:
        """
        Get a feature definition.

        Raises:
            NotFoundError: If the feature is not registered.
        """
        if name not in self._features:
            msg = f"Feature '{name}' is not found"
            raise NotFoundError(msg)
        return self._features[name]

    def attribute(
        self, name: str, key: str, value: Any = _UNSET, default: Any = None
    ) -> Any:
        """
        Get or set one attribute of a feature.

        Without ``value`` the current attribute is returned, or ``default``
        when the feature does not exist. With ``value`` the feature is
        rebuilt, stored via ``set`` and the registry is returned.

        Raises:
            ValidationError: If ``key`` is not a feature attribute or the new
                value makes the definition invalid.
            NotFoundError: When setting on an unknown feature.
        """
        if key not in FEATURE_ATTRIBUTES:
            allowed = ", ".join(FEATURE_ATTRIBUTES)
            msg = f"Unknown feature attribute '{key}'. Allowed: {allowed}"
            raise ValidationError(msg)

        if value is _UNSET:
            if name not in self._features:
                return default
            return getattr(self._features[name], key)

        current = self.feature(name)
        if key == "params":
            if not isinstance(value, Mapping):
                msg = f"Feature '{name}' params must be a mapping"
                raise ValidationError(msg)
            value = dict(value)
        return self.set(name, dataclasses.replace(current, **{key: value}))

    def params(self, name: str, key: Any = None) -> Any:
        """
        Get or update feature params.

        ``params(name)`` returns the whole mapping, ``params(name, key)`` one
        entry, and ``params(name, {...})`` merges the mapping into the
        existing params and returns the registry.
        """
        current = self.attribute(name, "params", default={})
        if key is None:
            return current
        if isinstance(key, Mapping):
            return self.attribute(name, "params", {**current, **key})
        return current.get(key)

    def processor(self, name: str, processor: Any = _UNSET) -> Any:
        """Get the processor, or replace it (bool/None become constants)."""
        if processor is _UNSET:
            return self.attribute(name, "processor")
        return self.attribute(name, "processor", coerce_processor(processor))

    # Evaluation

    def is_active(self, name: str, context: Mapping[str, Any] | None = None) -> bool:
        """
        Evaluate a feature.

        Order: unknown name, static result, cached result, processor.

        Raises:
            NotFoundError: If the feature is unknown and strict mode is on.
            ValidationError: If the processor does not return a bool.
        """
        if not self.has(name):
            if self._strict:
                msg = f"Feature '{name}' is not found"
                raise NotFoundError(msg)
            return False

        feature = self._features[name]
        if feature.static_result is not None:
            return feature.static_result

        if name in self._preserved:
            return self._preserved[name]

        result = feature.processor({} if context is None else context, feature.params)
        if not isinstance(result, bool):
            msg = (
                f"Feature '{name}' processor returned {type(result).__name__}, "
                "expected bool"
            )
            raise ValidationError(msg)

        if self._preserve:
            self._preserved[name] = result
        return result

    def is_inactive(self, name: str, context: Mapping[str, Any] | None = None) -> bool:
        return not self.is_active(name, context)

    def when(
        self,
        name: str,
        callback: Callback,
        default: Callback | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> Any:
        """
        Run ``callback(context, params)`` if the feature is active.

        Otherwise run ``default`` when given. Returns the value of whichever
        callable ran, or the registry when none did.
        """
        context = {} if context is None else context
        active = self.is_active(name, context)
        return self._dispatch(name, active, callback, default, context)

    def unless(
        self,
        name: str,
        callback: Callback,
        default: Callback | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> Any:
        """Run ``callback(context, params)`` if the feature is inactive."""
        context = {} if context is None else context
        inactive = self.is_inactive(name, context)
        return self._dispatch(name, inactive, callback, default, context)

    def _dispatch(
        self,
        name: str,
        triggered: bool,
        callback: Callback,
        default: Callback | None,
        context: Mapping[str, Any],
    ) -> Any:
        params = self.params(name)
        if triggered:
            return callback(context, params)
        if default is not None:
            return default(context, params)
        return self

    # Removal

    def remove(self, name: str) -> "FeatureRegistry":
        """Remove a feature and its cached result. Unknown names are ignored."""
        if not self.has(name):
            return self
        del self._features[name]
        self._preserved.pop(name, None)
        log.debug("Feature removed", feature=name)
        return self

    def flush(self) -> "FeatureRegistry":
        """Remove every feature and cached result."""
        self._features.clear()
        self._preserved.clear()
        log.debug("Registry flushed")
        return self

    # Bulk results

    def result(
        self,
        result: Mapping[str, bool] | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> Any:
        """
        Export or import evaluation results.

        Without ``result``, returns ``{name: is_active(name, context)}`` for
        every registered feature. With a mapping, writes it into the result
        cache, bypassing processors, and returns the registry. Nothing is
        written unless every entry is valid.

        Raises:
            NotFoundError: If an imported name is not registered.
            ValidationError: If an imported value is not a bool.
        """
        if result is None:
            return {name: self.is_active(name, context) for name in self._features}

        unknown = [name for name in result if name not in self._features]
        if unknown:
            names = ", ".join(map(str, unknown))
            msg = f"Cannot import results for unknown features: {names}"
            raise NotFoundError(msg)
        invalid = [
            str(name) for name, value in result.items() if not isinstance(value, bool)
        ]
        if invalid:
            msg = f"Imported results must be bool: {', '.join(invalid)}"
            raise ValidationError(msg)

        self._preserved.update(result)
        log.debug("Results imported", n_features=len(result))
        return self

    # Configuration toggles

    @property
    def preserve(self) -> bool:
        return self._preserve

    @property
    def strict(self) -> bool:
        return self._strict

    def set_preserve(self, preserve: bool) -> "FeatureRegistry":
        self._preserve = preserve
        return self

    def set_strict(self, strict: bool) -> "FeatureRegistry":
        self._strict = strict
        return self


def _as_feature(
    feature: Feature | Mapping[str, Any] | str,
    definition: Feature | Mapping[str, Any] | None,
) -> Feature:
    """Resolve the accepted ``add``/``set`` argument shapes to a valid Feature."""
    name: str | None = None
    if isinstance(feature, str):
        if definition is None:
            msg = f"Feature '{feature}' has no definition"
            raise ValidationError(msg)
        name, feature = feature, definition

    if isinstance(feature, Feature):
        if name is not None and feature.name != name:
            feature = dataclasses.replace(feature, name=name)
        feature.validate()
        return feature
    return Feature.from_mapping(feature, name=name)


def _copy_params(params: Any) -> Any:
    """Copy mapping params; anything else is left for validation to reject."""
    return dict(params) if isinstance(params, Mapping) else params
