from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from canonical_attributes.core.validation.models import ValidationResult


class CanonicalAttributesError(Exception):
    """
    Base exception for all canonical attribute failures.
    """

    pass


class ConfigurationError(CanonicalAttributesError):
    """
    Raised when a declaration (transform, restricted attribute, pack) is invalid.
    """

    pass


class TransformConfigurationError(ConfigurationError):
    """
    Raised when a transform name or chain cannot be resolved.
    """

    pass


class RestrictedConfigurationError(ConfigurationError):
    """
    Raised when a restricted attribute declaration is invalid.
    """

    pass


class MissingAttributeError(CanonicalAttributesError, AttributeError):
    """
    Raised when reading or assigning a field that is not declared or not loaded.
    """

    pass


class RecordNotFound(CanonicalAttributesError, KeyError):
    """
    Raised when a record store lookup finds no row.
    """

    pass


class RecordInvalid(CanonicalAttributesError):
    """
    Raised by strict saves when validation fails.

    Carries the full ValidationResult so callers can render field errors.
    """

    def __init__(self, result: "ValidationResult") -> None:
        super().__init__("Validation failed: " + "; ".join(result.full_messages()))
        self.result = result
