"""Minimal validation contract: declarative descriptors, rules and structured field errors.

Failures are returned as FieldError values in a ValidationResult; nothing is raised.
"""

from .models import ErrorKind, FieldError, ValidationDescriptor, ValidationMode, ValidationResult
from .rules import InclusionRule, PresenceRule, ValidationRule, rules_for_descriptor
from .engine import ValidationEngine
from .registry import ValidationRegistry

__all__ = [
    "ErrorKind",
    "FieldError",
    "ValidationDescriptor",
    "ValidationMode",
    "ValidationResult",
    "InclusionRule",
    "PresenceRule",
    "ValidationRule",
    "rules_for_descriptor",
    "ValidationEngine",
    "ValidationRegistry",
]
