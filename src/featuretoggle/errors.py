"""Exceptions raised by the feature registry."""


class ToggleError(Exception):
    """Base class for all feature registry errors."""


class ValidationError(ToggleError, ValueError):
    """Raised for malformed feature definitions and processor results."""


class ConflictError(ToggleError):
    """Raised when a feature name is already registered."""


class NotFoundError(ToggleError, LookupError):
    """Raised when a feature name is not registered."""
