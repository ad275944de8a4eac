from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

from canonical_attributes.constants import DEFAULT_SEPARATOR
from canonical_attributes.core.validation.models import ValidationMode
from canonical_attributes.errors import RestrictedConfigurationError


class _Missing:
    """Marker for an option that was not passed at all (distinct from None)."""

    _instance = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


class PrefixKind(str, Enum):
    DISABLED = "disabled"
    NONE = "none"
    CUSTOM = "custom"
    DEFAULT = "default"


@dataclass(frozen=True)
class PrefixGroup:
    """Resolved naming rule for one group of generated helpers (query, scope or assign)."""

    kind: PrefixKind
    prefix: str = ""

    @property
    def enabled(self) -> bool:
        return self.kind is not PrefixKind.DISABLED

    def name_for(self, suffix: str) -> str:
        if not self.enabled:
            raise RestrictedConfigurationError("cannot name a helper in a disabled group")
        return f"{self.prefix}{suffix}"


DISABLED = PrefixGroup(PrefixKind.DISABLED)


def _literal_prefix(value: Any, separator: str) -> str:
    if isinstance(value, Enum):
        value = value.value
    text = str(value)
    return f"{text}{separator}" if text else ""


def resolve_prefix(option: Any, default_prefix: Any, *, separator: str = DEFAULT_SEPARATOR) -> PrefixGroup:
    """Resolve one group option.

    - True:  use default_prefix (itself resolved: False disables, None means no prefix)
    - False: disable the group
    - None:  no prefix
    - other: that literal, followed by the separator
    """

    if option is False:
        return DISABLED
    if option is True:
        if default_prefix is False:
            return DISABLED
        if default_prefix is None or default_prefix is True:
            return PrefixGroup(PrefixKind.NONE, "")
        prefix = _literal_prefix(default_prefix, separator)
        return PrefixGroup(PrefixKind.DEFAULT if prefix else PrefixKind.NONE, prefix)
    if option is None:
        return PrefixGroup(PrefixKind.NONE, "")

    prefix = _literal_prefix(option, separator)
    return PrefixGroup(PrefixKind.CUSTOM if prefix else PrefixKind.NONE, prefix)


def resolve_validation(option: Any) -> ValidationMode:
    """Resolve the ``validate`` option.

    True or {"presence": True} -> presence required; {"presence": False} ->
    blanks allowed; False or None -> no validation.
    """

    if isinstance(option, ValidationMode):
        return option
    if option is None or option is False:
        return ValidationMode.DISABLED
    if option is True:
        return ValidationMode.PRESENCE_REQUIRED
    if isinstance(option, Mapping):
        unknown = set(option) - {"presence"}
        if unknown:
            raise RestrictedConfigurationError(f"unknown validate options: {sorted(unknown)}")
        if option.get("presence", True) is False:
            return ValidationMode.PRESENCE_OPTIONAL
        return ValidationMode.PRESENCE_REQUIRED
    if isinstance(option, str):
        try:
            return ValidationMode(option)
        except ValueError:
            pass
    raise RestrictedConfigurationError(f"invalid validate option: {option!r}")
