"""Restricted value attributes: a lightweight enumeration over a closed list of values.

register() turns (attribute, values, options) into a RestrictedAttribute
bundle of scope queries, predicates, assignment actions, a default rule, an
optional setter transform and a validation descriptor. Hosts decide how to
expose them; canonical_attributes.core.runtime.model.Model installs them as
methods.
"""

from .options import MISSING, PrefixGroup, PrefixKind, resolve_prefix, resolve_validation
from .descriptor import (
    RestrictedAttribute,
    RestrictedConfig,
    ScopeQuery,
    immutable_values,
    mutable_copy,
    name_suffix,
    register,
)

__all__ = [
    "MISSING",
    "PrefixGroup",
    "PrefixKind",
    "resolve_prefix",
    "resolve_validation",
    "RestrictedAttribute",
    "RestrictedConfig",
    "ScopeQuery",
    "immutable_values",
    "mutable_copy",
    "name_suffix",
    "register",
]
