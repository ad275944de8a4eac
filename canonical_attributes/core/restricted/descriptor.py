from __future__ import annotations

import copy
import keyword
import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from canonical_attributes.core.normalization.transforms import TransformSpecLike, compile_transform
from canonical_attributes.core.record import Record
from canonical_attributes.core.validation.models import ValidationDescriptor, ValidationMode
from canonical_attributes.errors import ConfigurationError, RestrictedConfigurationError

from .options import MISSING, PrefixGroup, resolve_prefix, resolve_validation

log = logging.getLogger("canonical_attributes.restricted")

_NON_WORD = re.compile(r"\W")


def immutable_values(values: Iterable[Any]) -> Tuple[Any, ...]:
    """Freeze a list of permitted values.

    Each value is deep-copied, then the list becomes a tuple, so the caller
    cannot change it afterwards. Frozen lists can be concatenated to build
    larger sets (ACTIVE + INACTIVE).
    """

    return tuple(copy.deepcopy(v) for v in values)


def mutable_copy(values: Iterable[Any]) -> List[Any]:
    """Return an independent, mutable copy of a value list."""

    return [copy.deepcopy(v) for v in values]


def name_suffix(value: Any) -> str:
    """Name fragment generated for a permitted value."""

    if isinstance(value, Enum):
        value = value.value
    return _NON_WORD.sub("_", str(value))


@dataclass(frozen=True)
class ScopeQuery:
    """Named equality query: records whose ``attribute`` equals ``value``."""

    name: str
    attribute: str
    value: Any

    def matches(self, record: Record) -> bool:
        return record.has_field(self.attribute) and record.get(self.attribute) == self.value

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "where": {self.attribute: self.value}}


@dataclass(frozen=True)
class RestrictedConfig:
    """
    Immutable restricted-attribute declaration.

    Invariants
    - values is a tuple of distinct, registration-time copies
    - prefixes, transform and validation mode are resolved once
    - shared read-only by every record of the registering type
    """

    attribute: str
    values: Tuple[Any, ...]
    query: PrefixGroup
    scope: PrefixGroup
    assign: PrefixGroup
    transform: Optional[Callable[[Any], Any]] = None
    default: Any = None
    has_default: bool = False
    validate: ValidationMode = ValidationMode.PRESENCE_REQUIRED
    message: Optional[str] = None

    def coerce(self, value: Any) -> Any:
        return self.transform(value) if self.transform is not None else value

    def default_value(self) -> Any:
        if not self.has_default:
            return None
        return self.default() if callable(self.default) else self.default


@dataclass(frozen=True)
class RestrictedAttribute:
    """
    Everything generated for one restricted attribute.

    The host exposes these under its own naming convention; the mappings are
    keyed by the generated base name (``{prefix}{value}``).
    """

    config: RestrictedConfig
    scopes: Mapping[str, ScopeQuery] = field(default_factory=lambda: MappingProxyType({}))
    predicates: Mapping[str, Callable[[Record], bool]] = field(default_factory=lambda: MappingProxyType({}))
    assigners: Mapping[str, Callable[[Record], Any]] = field(default_factory=lambda: MappingProxyType({}))
    validation: Optional[ValidationDescriptor] = None

    @property
    def attribute(self) -> str:
        return self.config.attribute

    @property
    def values(self) -> Tuple[Any, ...]:
        return self.config.values

    @property
    def has_default(self) -> bool:
        return self.config.has_default

    @property
    def has_writer(self) -> bool:
        return self.config.transform is not None

    def apply_default(self, record: Record) -> bool:
        """Fill the attribute with transform(default) when it is loaded and None."""

        if not self.config.has_default:
            return False
        attribute = self.config.attribute
        if not record.has_field(attribute) or record.get(attribute) is not None:
            return False
        record.set(attribute, self.config.coerce(self.config.default_value()))
        return True

    def write(self, record: Record, value: Any) -> None:
        """Setter override: store transform(value, or the default when value is None)."""

        if value is None:
            value = self.config.default_value()
        record.set(self.config.attribute, self.config.coerce(value))

    def names(self) -> Dict[str, Tuple[str, ...]]:
        return {
            "scope": tuple(self.scopes),
            "query": tuple(self.predicates),
            "assign": tuple(self.assigners),
        }


def _make_predicate(config: RestrictedConfig, value: Any) -> Callable[[Record], bool]:
    attribute = config.attribute

    def predicate(record: Record) -> bool:
        raw = record.get(attribute) if record.has_field(attribute) else None
        return config.coerce(raw) == value

    return predicate


def _make_assigner(config: RestrictedConfig, value: Any) -> Callable[[Record], Any]:
    attribute = config.attribute

    def assign(record: Record) -> Any:
        target = config.coerce(value)
        if not record.has_field(attribute):
            log.debug("assignment to unloaded attribute %s skipped", attribute)
            return False
        if record.is_new_record():
            record.set(attribute, target)
            return True
        return record.persisted_update(attribute, target)

    return assign


def _check_values(attribute: str, values: Tuple[Any, ...]) -> None:
    if not values:
        raise RestrictedConfigurationError(f"{attribute}: at least one permitted value is required")

    seen: List[Any] = []
    for v in values:
        if v is None:
            raise RestrictedConfigurationError(f"{attribute}: None is not a permitted value")
        if v in seen:
            raise RestrictedConfigurationError(f"{attribute}: duplicate permitted value {v!r}")
        seen.append(v)


def _check_names(attribute: str, group: str, names: List[str]) -> None:
    seen = set()
    for n in names:
        if not n.isidentifier() or keyword.iskeyword(n):
            raise RestrictedConfigurationError(f"{attribute}: generated {group} name {n!r} is not a valid identifier")
        if n in seen:
            raise RestrictedConfigurationError(f"{attribute}: generated {group} name {n!r} collides")
        seen.add(n)


def register(
    attribute: str,
    values: Iterable[Any],
    *,
    prefix: Any = MISSING,
    query: Any = True,
    scope: Any = True,
    assign: Any = True,
    transform: Optional[TransformSpecLike] = None,
    default: Any = MISSING,
    validate: Any = True,
    message: Optional[str] = None,
) -> RestrictedAttribute:
    """Declare ``attribute`` as restricted to ``values`` and generate its helpers.

    ``prefix`` defaults to the attribute name and is used by every group set
    to True. Each of ``query``, ``scope`` and ``assign`` accepts True (default
    prefix), False (no helpers), None (no prefix) or a custom prefix.

    ``transform`` (callable, transform name, or list of names) is applied to
    assigned values and to predicate comparisons, never to scopes. ``default``
    (value or zero-argument factory) fills the attribute when it is None.
    ``validate`` is True, False/None, or {"presence": bool}.

    Duplicate values and colliding generated names raise
    RestrictedConfigurationError.
    """

    if not isinstance(attribute, str) or not attribute.isidentifier():
        raise RestrictedConfigurationError(f"attribute must be an identifier, got {attribute!r}")

    frozen = immutable_values(values)
    _check_values(attribute, frozen)

    default_prefix = attribute if prefix is MISSING else prefix
    try:
        query_group = resolve_prefix(query, default_prefix)
        scope_group = resolve_prefix(scope, default_prefix)
        assign_group = resolve_prefix(assign, default_prefix)
        xform = compile_transform(transform)
    except ConfigurationError as e:
        raise RestrictedConfigurationError(f"{attribute}: {e}") from e

    config = RestrictedConfig(
        attribute=attribute,
        values=frozen,
        query=query_group,
        scope=scope_group,
        assign=assign_group,
        transform=xform,
        default=None if default is MISSING else default,
        has_default=default is not MISSING,
        validate=resolve_validation(validate),
        message=message,
    )

    suffixes = [name_suffix(v) for v in frozen]
    for group_name, group in (("scope", scope_group), ("query", query_group), ("assign", assign_group)):
        if group.enabled:
            _check_names(attribute, group_name, [group.name_for(s) for s in suffixes])

    scopes: Dict[str, ScopeQuery] = {}
    predicates: Dict[str, Callable[[Record], bool]] = {}
    assigners: Dict[str, Callable[[Record], Any]] = {}

    for value, suffix in zip(frozen, suffixes):
        if scope_group.enabled:
            name = scope_group.name_for(suffix)
            scopes[name] = ScopeQuery(name=name, attribute=attribute, value=value)
        if query_group.enabled:
            predicates[query_group.name_for(suffix)] = _make_predicate(config, value)
        if assign_group.enabled:
            assigners[assign_group.name_for(suffix)] = _make_assigner(config, value)

    bundle = RestrictedAttribute(
        config=config,
        scopes=MappingProxyType(scopes),
        predicates=MappingProxyType(predicates),
        assigners=MappingProxyType(assigners),
        validation=ValidationDescriptor.for_values(attribute, frozen, config.validate, message=message),
    )

    log.debug(
        "restricted %s to %d values (scope=%r query=%r assign=%r)",
        attribute,
        len(frozen),
        scope_group.prefix if scope_group.enabled else False,
        query_group.prefix if query_group.enabled else False,
        assign_group.prefix if assign_group.enabled else False,
    )
    return bundle
