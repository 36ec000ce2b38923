"""
Feature definitions and reusable processors.
"""

from featuretoggle.features.definitions import (
    Feature,
    Processor,
    constant_processor,
    normalize_entry,
)
from featuretoggle.features.processors import (
    always_off,
    always_on,
    context_equals,
    context_flag,
    context_in,
)

__all__ = [
    "Feature",
    "Processor",
    "always_off",
    "always_on",
    "constant_processor",
    "context_equals",
    "context_flag",
    "context_in",
    "normalize_entry",
]
