"""Restricted-attribute declarations loaded from YAML or JSON packs."""

from .pack import (
    PackDocument,
    RestrictedEntry,
    RestrictedPack,
    ValidateOptions,
    load_restricted_pack,
    parse_restricted_pack,
    resolve_pack_path,
)

__all__ = [
    "PackDocument",
    "RestrictedEntry",
    "RestrictedPack",
    "ValidateOptions",
    "load_restricted_pack",
    "parse_restricted_pack",
    "resolve_pack_path",
]
