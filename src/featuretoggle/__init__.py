"""
featuretoggle: an embeddable feature-toggle registry.

Maps named features to processors and answers whether a feature is active
for a runtime context, with per-feature result memoization.
"""

from importlib.metadata import version

from featuretoggle.errors import (
    ConflictError,
    NotFoundError,
    ToggleError,
    ValidationError,
)
from featuretoggle.features.definitions import Feature, constant_processor
from featuretoggle.registry import FeatureRegistry

__version__ = version("featuretoggle")

__all__ = [
    "ConflictError",
    "Feature",
    "FeatureRegistry",
    "NotFoundError",
    "ToggleError",
    "ValidationError",
    "__version__",
    "constant_processor",
]
