"""
Reusable context processors.

Configuration files reference these by import path, for example
``featuretoggle.features.processors:context_in``.
"""

from collections.abc import Mapping
from typing import Any

from featuretoggle.errors import ValidationError


def _context_key(params: Mapping[str, Any], processor: str) -> str:
    key = params.get("key")
    if not isinstance(key, str) or not key:
        msg = f"{processor} requires a non-empty string 'key' param"
        raise ValidationError(msg)
    return key


def always_on(context: Mapping[str, Any], params: Mapping[str, Any]) -> bool:
    return True


def always_off(context: Mapping[str, Any], params: Mapping[str, Any]) -> bool:
    return False


def context_flag(context: Mapping[str, Any], params: Mapping[str, Any]) -> bool:
    """Active when ``context[params["key"]]`` is truthy."""
    key = _context_key(params, "context_flag")
    return bool(context.get(key, False))


def context_in(context: Mapping[str, Any], params: Mapping[str, Any]) -> bool:
    """
    Active when ``context[params["key"]]`` is one of ``params["values"]``.

    Covers user and group allow-lists. A list-valued context entry is active
    when any of its items is allowed.
    """
    key = _context_key(params, "context_in")
    values = params.get("values")
    if values is None or isinstance(values, (str, bytes)):
        msg = "context_in requires a 'values' collection param"
        raise ValidationError(msg)

    if key not in context:
        return False
    current = context[key]
    if isinstance(current, (list, tuple, set, frozenset)):
        return any(item in values for item in current)
    return current in values


def context_equals(context: Mapping[str, Any], params: Mapping[str, Any]) -> bool:
    """Active when ``context[params["key"]] == params["value"]``."""
    key = _context_key(params, "context_equals")
    if "value" not in params:
        msg = "context_equals requires a 'value' param"
        raise ValidationError(msg)
    return key in context and bool(context[key] == params["value"])
