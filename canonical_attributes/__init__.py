"""Concerns that help model classes keep canonical attribute values.

- Normalization: default-fill plus a library of field transforms
  (force_string, force_symbol_or_nil, force_json_string, ...).
- Restricted values: enumeration-like attributes with generated scopes,
  predicates, assignment actions, defaults and validations.

Both work against any object providing the Record capability; Model is a
small reference host backed by SQLiteRecordStore.
"""

from canonical_attributes.core.normalization import NormalizeMixin, Symbol, TransformKind, apply_transform
from canonical_attributes.core.record import Record
from canonical_attributes.core.restricted import RestrictedAttribute, immutable_values, mutable_copy, register
from canonical_attributes.core.runtime.model import Model
from canonical_attributes.core.runtime.storage.sqlite_store import SQLiteRecordStore
from canonical_attributes.core.validation import FieldError, ValidationDescriptor, ValidationMode, ValidationResult
from canonical_attributes.errors import (
    CanonicalAttributesError,
    ConfigurationError,
    MissingAttributeError,
    RecordInvalid,
    RecordNotFound,
    RestrictedConfigurationError,
    TransformConfigurationError,
)

VERSION = "0.1.0"

__all__ = [
    "NormalizeMixin",
    "Symbol",
    "TransformKind",
    "apply_transform",
    "Record",
    "RestrictedAttribute",
    "immutable_values",
    "mutable_copy",
    "register",
    "Model",
    "SQLiteRecordStore",
    "FieldError",
    "ValidationDescriptor",
    "ValidationMode",
    "ValidationResult",
    "CanonicalAttributesError",
    "ConfigurationError",
    "MissingAttributeError",
    "RecordInvalid",
    "RecordNotFound",
    "RestrictedConfigurationError",
    "TransformConfigurationError",
    "VERSION",
]
