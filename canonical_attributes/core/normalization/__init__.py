"""Attribute default-fill and normalization.

Normalization rewrites messy attribute values into the canonical form a model
expects before it is validated: strings instead of numbers, lowercase codes,
None instead of empty strings, JSON text instead of structures.

Failure policy:
- A named transform that does not support a value leaves the value unchanged.
- Fields that are not loaded on a record are skipped, never created.
- Callable transforms own their error handling; their exceptions propagate.
"""

from .symbol import Symbol
from .transforms import TransformKind, apply_chain, compile_transform, resolve_chain, resolve_kind
from .normalizer import (
    apply_transform,
    default_attribute,
    flatten_fields,
    force_json_string,
    force_lowercase,
    force_nil_if_empty,
    force_string,
    force_string_or_nil,
    force_strip,
    force_symbol,
    force_symbol_or_nil,
    force_uppercase,
    initialize_defaults,
    json_string,
    nil_if_empty,
    normalize,
    normalize_with_defaults,
)
from .mixin import NormalizeMixin

__all__ = [
    "Symbol",
    "TransformKind",
    "apply_chain",
    "compile_transform",
    "resolve_chain",
    "resolve_kind",
    "apply_transform",
    "default_attribute",
    "flatten_fields",
    "force_json_string",
    "force_lowercase",
    "force_nil_if_empty",
    "force_string",
    "force_string_or_nil",
    "force_strip",
    "force_symbol",
    "force_symbol_or_nil",
    "force_uppercase",
    "initialize_defaults",
    "json_string",
    "nil_if_empty",
    "normalize",
    "normalize_with_defaults",
    "NormalizeMixin",
]
