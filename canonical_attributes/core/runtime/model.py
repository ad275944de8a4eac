from __future__ import annotations

import logging
from copy import deepcopy
from typing import Any, Callable, ClassVar, Dict, Iterable, List, Mapping, Optional, Tuple

from canonical_attributes.constants import ASSIGNER_NAME_TEMPLATE, PREDICATE_NAME_TEMPLATE
from canonical_attributes.core.normalization.mixin import NormalizeMixin
from canonical_attributes.core.restricted.descriptor import RestrictedAttribute, ScopeQuery, register
from canonical_attributes.core.validation.models import ValidationDescriptor, ValidationResult
from canonical_attributes.core.validation.registry import ValidationRegistry
from canonical_attributes.core.validation.rules import ValidationRule
from canonical_attributes.errors import (
    CanonicalAttributesError,
    MissingAttributeError,
    RecordInvalid,
)

from .lifecycle import Hook, HookEvent, LifecycleHooks
from .storage.sqlite_store import PRIMARY_KEY, SQLiteRecordStore

log = logging.getLogger("canonical_attributes.model")

_INTERNAL = frozenset({"_attributes", "_new_record", "_store", "store", "id", "errors"})


class Model:
    """
    Minimal mutable record host.

    Responsibilities
    - Hold declared ``fields`` (partial loads hold only the loaded subset)
    - Provide the Record capability (has_field / has_value / get / set /
      is_new_record / persisted_update)
    - Run lifecycle hooks explicitly: after_initialize on construction and
      load, before_validation at the start of validate()
    - Collect validation rules and descriptors; report FieldErrors
    - Install restricted-attribute helpers as methods

    Public attribute access (``lamp.power = "ON"``) goes through any setter
    override registered for the field; ``lamp["power"] = ...`` and set() are
    raw writes.
    """

    fields: ClassVar[Tuple[str, ...]] = ()
    table: ClassVar[Optional[str]] = None

    _hooks: ClassVar[LifecycleHooks] = LifecycleHooks()
    _validations: ClassVar[ValidationRegistry] = ValidationRegistry()
    _writers: ClassVar[Dict[str, Callable[[Any, Any], None]]] = {}
    _scopes: ClassVar[Dict[str, ScopeQuery]] = {}
    _restricted: ClassVar[Dict[str, RestrictedAttribute]] = {}

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        cls.fields = tuple(cls.fields)
        for f in cls.fields:
            if not f.isidentifier() or f == PRIMARY_KEY or f in _INTERNAL or hasattr(Model, f):
                raise CanonicalAttributesError(f"invalid field name: {f!r}")

        cls._hooks = cls._hooks.copy()
        cls._validations = ValidationRegistry(parent=cls._validations)
        cls._writers = dict(cls._writers)
        cls._scopes = dict(cls._scopes)
        cls._restricted = dict(cls._restricted)

        # Normalizing models get their two entry points wired explicitly.
        if issubclass(cls, NormalizeMixin):
            if not cls._hooks.has(HookEvent.AFTER_INITIALIZE, "initialize_default_attribute_values"):
                cls._hooks.add(HookEvent.AFTER_INITIALIZE, "initialize_default_attribute_values")
            if not cls._hooks.has(HookEvent.BEFORE_VALIDATION, "normalize_attributes_with_defaults"):
                cls._hooks.add(HookEvent.BEFORE_VALIDATION, "normalize_attributes_with_defaults")

    # ------------------------------------------------------------------ construction

    def __init__(self, store: Optional[SQLiteRecordStore] = None, **attrs: Any) -> None:
        object.__setattr__(self, "_attributes", {f: None for f in type(self).fields})
        object.__setattr__(self, "_new_record", True)
        object.__setattr__(self, "_store", store)
        object.__setattr__(self, "id", None)
        object.__setattr__(self, "errors", ValidationResult())

        for name, value in attrs.items():
            self.assign_attribute(name, value)

        type(self)._hooks.run(HookEvent.AFTER_INITIALIZE, self)

    @classmethod
    def load(
        cls,
        row: Mapping[str, Any],
        *,
        store: Optional[SQLiteRecordStore] = None,
        fields: Optional[Iterable[str]] = None,
    ) -> "Model":
        """Build a persisted instance from a stored row.

        When ``fields`` is given only those fields are loaded; the others are
        absent from the record (not None), like a partial select.
        """

        wanted = tuple(cls.fields) if fields is None else tuple(fields)
        unknown = [f for f in wanted if f not in cls.fields]
        if unknown:
            raise MissingAttributeError(f"{cls.__name__} has no fields {unknown}")

        obj = cls.__new__(cls)
        object.__setattr__(obj, "_attributes", {f: deepcopy(row.get(f)) for f in wanted})
        object.__setattr__(obj, "_new_record", False)
        object.__setattr__(obj, "_store", store)
        object.__setattr__(obj, "id", row.get(PRIMARY_KEY))
        object.__setattr__(obj, "errors", ValidationResult())

        cls._hooks.run(HookEvent.AFTER_INITIALIZE, obj)
        return obj

    # ------------------------------------------------------------------ Record capability

    def has_field(self, name: str) -> bool:
        return name in self._attributes

    def has_value(self, name: str) -> bool:
        return self._attributes.get(name) is not None

    def get(self, name: str) -> Any:
        if name not in self._attributes:
            raise MissingAttributeError(f"missing attribute: {name}")
        return self._attributes[name]

    def set(self, name: str, value: Any) -> None:
        if name not in self._attributes:
            # Undeclared or not loaded: nothing to write to.
            log.debug("%s: write to missing attribute %s ignored", type(self).__name__, name)
            return
        self._attributes[name] = value

    def is_new_record(self) -> bool:
        return self._new_record

    def persisted_update(self, name: str, value: Any) -> bool:
        """Set one attribute and write it through to the store, skipping validation."""

        if self._store is None or self.id is None:
            raise CanonicalAttributesError(f"{type(self).__name__} is not attached to a persisted row")
        self.set(name, value)
        return self._store.update_attribute(type(self).table_name(), self.id, name, value)

    # ------------------------------------------------------------------ attribute access

    def __getattr__(self, name: str) -> Any:
        attributes = self.__dict__.get("_attributes")
        if attributes is not None and name in type(self).fields:
            return self.get(name)
        raise AttributeError(f"{type(self).__name__!s} has no attribute {name!r}")

    def __setattr__(self, name: str, value: Any) -> None:
        if name in type(self).fields:
            self.assign_attribute(name, value)
            return
        object.__setattr__(self, name, value)

    def __getitem__(self, name: str) -> Any:
        return self.get(name)

    def __setitem__(self, name: str, value: Any) -> None:
        self.set(name, value)

    def assign_attribute(self, name: str, value: Any) -> None:
        """Public setter: routes through a registered setter override, if any."""

        if name not in type(self).fields:
            raise MissingAttributeError(f"{type(self).__name__} has no field {name!r}")
        if name not in self._attributes:
            raise MissingAttributeError(f"attribute {name!r} was not loaded")

        writer = type(self)._writers.get(name)
        if writer is not None:
            writer(self, value)
        else:
            self.set(name, value)

    @property
    def attributes(self) -> Dict[str, Any]:
        return deepcopy(self._attributes)

    def snapshot(self) -> Dict[str, Any]:
        return {
            "model": type(self).__name__,
            "id": self.id,
            "new_record": self._new_record,
            "attributes": deepcopy(self._attributes),
        }

    def __repr__(self) -> str:
        shown = ", ".join(f"{k}={v!r}" for k, v in self._attributes.items())
        return f"{type(self).__name__}(id={self.id!r}, {shown})"

    # ------------------------------------------------------------------ validation / persistence

    def validate(self) -> ValidationResult:
        cls = type(self)
        cls._hooks.run(HookEvent.BEFORE_VALIDATION, self)
        result = cls._validations.engine().evaluate(self)
        object.__setattr__(self, "errors", result)
        return result

    def is_valid(self) -> bool:
        return self.validate().ok

    def save(self, store: Optional[SQLiteRecordStore] = None) -> bool:
        """Validate, then insert or update. Returns False (errors set) when invalid."""

        if store is not None:
            object.__setattr__(self, "_store", store)
        if self._store is None:
            raise CanonicalAttributesError(f"{type(self).__name__} has no store to save to")

        if not self.is_valid():
            return False

        cls = type(self)
        self._store.init_schema(cls.table_name(), cls.fields)
        if self._new_record:
            object.__setattr__(self, "id", self._store.insert(cls.table_name(), self._attributes))
            object.__setattr__(self, "_new_record", False)
            return True
        return self._store.update(cls.table_name(), self.id, self._attributes)

    def save_or_raise(self, store: Optional[SQLiteRecordStore] = None) -> None:
        if not self.save(store):
            raise RecordInvalid(self.errors)

    # ------------------------------------------------------------------ class-level registration

    @classmethod
    def table_name(cls) -> str:
        return cls.table or cls.__name__.lower() + "s"

    @classmethod
    def after_initialize(cls, hook: Hook) -> None:
        cls._hooks.add(HookEvent.AFTER_INITIALIZE, hook)

    @classmethod
    def before_validation(cls, hook: Hook) -> None:
        cls._hooks.add(HookEvent.BEFORE_VALIDATION, hook)

    @classmethod
    def validates(cls, rule: ValidationRule | ValidationDescriptor) -> None:
        if isinstance(rule, ValidationDescriptor):
            cls._validations.register_descriptor(rule)
        else:
            cls._validations.register(rule)

    @classmethod
    def validation_rules(cls) -> List[ValidationRule]:
        return cls._validations.get_rules()

    @classmethod
    def find(cls, store: SQLiteRecordStore, record_id: int, *, fields: Optional[Iterable[str]] = None) -> "Model":
        store.init_schema(cls.table_name(), cls.fields)
        return cls.load(store.find(cls.table_name(), record_id, fields=fields), store=store, fields=fields)

    @classmethod
    def where(cls, store: SQLiteRecordStore, **criteria: Any) -> List["Model"]:
        store.init_schema(cls.table_name(), cls.fields)
        return [cls.load(row, store=store) for row in store.where(cls.table_name(), criteria)]

    @classmethod
    def scope(cls, name: str, attribute: str, value: Any) -> ScopeQuery:
        """Register a named equality query and expose it as ``Model.<name>(store)``."""

        query = ScopeQuery(name=name, attribute=attribute, value=value)
        cls._install_scope(query)
        return query

    @classmethod
    def scopes(cls) -> Dict[str, ScopeQuery]:
        return dict(cls._scopes)

    @classmethod
    def restricted(cls, attribute: str, values: Iterable[Any], **options: Any) -> RestrictedAttribute:
        """Restrict ``attribute`` to ``values`` and install the generated helpers.

        Installs, per value: scope ``Model.<name>(store)``, predicate
        ``record.is_<name>()`` and assignment ``record.set_<name>()``; plus
        the default hook, the setter override and the validation descriptor.
        See canonical_attributes.core.restricted.register for the options.

        Restricting the same attribute again replaces the earlier
        registration: its hooks, setter override, validation descriptor and
        helpers that are not generated again are removed.
        """

        if attribute not in cls.fields:
            log.warning("%s.restricted: %s is not a declared field", cls.__name__, attribute)

        bundle = register(attribute, values, **options)

        members: Dict[str, Any] = {}

        def add(name: str, member: Any) -> None:
            if name in members:
                raise CanonicalAttributesError(f"{cls.__name__}: helper {name!r} is generated twice")
            cls._check_member_name(name)
            members[name] = member

        for query in bundle.scopes.values():
            add(query.name, _scope_method(query))
        for name, predicate in bundle.predicates.items():
            method_name = PREDICATE_NAME_TEMPLATE.format(name=name)
            add(method_name, _as_method(predicate, method_name))
        for name, assigner in bundle.assigners.items():
            method_name = ASSIGNER_NAME_TEMPLATE.format(name=name)
            add(method_name, _as_method(assigner, method_name))

        previous = cls._restricted.get(attribute)
        if previous is not None:
            cls._retire(previous, keep=members)

        for query in bundle.scopes.values():
            cls._scopes[query.name] = query
        for name, member in members.items():
            cls._install(name, member)

        if bundle.has_default:
            cls.after_initialize(bundle.apply_default)
            cls.before_validation(bundle.apply_default)

        if bundle.has_writer:
            cls._writers[attribute] = bundle.write

        if bundle.validation is not None:
            cls._validations.register_descriptor(bundle.validation)

        cls._restricted[attribute] = bundle
        return bundle

    @classmethod
    def restricted_attribute(cls, attribute: str) -> RestrictedAttribute:
        return cls._restricted[attribute]

    @classmethod
    def _retire(cls, previous: RestrictedAttribute, *, keep: Mapping[str, Any]) -> None:
        """Undo what an earlier restricted() call installed for the same attribute."""

        for event in HookEvent:
            cls._hooks.remove(event, previous.apply_default)
        cls._writers.pop(previous.attribute, None)
        cls._validations.remove_descriptor(previous.attribute)

        stale = list(previous.scopes)
        stale += [PREDICATE_NAME_TEMPLATE.format(name=n) for n in previous.predicates]
        stale += [ASSIGNER_NAME_TEMPLATE.format(name=n) for n in previous.assigners]
        for name in stale:
            if name in keep:
                continue
            cls._scopes.pop(name, None)
            # Helpers inherited from a base class stay on the base.
            if name in cls.__dict__:
                delattr(cls, name)

        log.debug("%s: replaced restricted attribute %s", cls.__name__, previous.attribute)

    @classmethod
    def _install_scope(cls, query: ScopeQuery) -> None:
        cls._check_member_name(query.name)
        cls._scopes[query.name] = query
        cls._install(query.name, _scope_method(query))

    @classmethod
    def _check_member_name(cls, name: str) -> None:
        if name in cls.fields:
            raise CanonicalAttributesError(f"{cls.__name__}: generated helper {name!r} would hide a field")
        if hasattr(Model, name):
            raise CanonicalAttributesError(f"{cls.__name__}: generated helper {name!r} would replace Model.{name}")

    @classmethod
    def _install(cls, name: str, member: Any) -> None:
        if hasattr(cls, name):
            # Last registration wins.
            log.warning("%s: generated helper %s replaces an existing member", cls.__name__, name)
        setattr(cls, name, member)


def _scope_method(query: ScopeQuery) -> classmethod:
    def run(klass, store: SQLiteRecordStore) -> List["Model"]:
        return klass.where(store, **{query.attribute: query.value})

    run.__name__ = query.name
    return classmethod(run)


def _as_method(fn: Callable[[Any], Any], name: str) -> Callable[[Any], Any]:
    def method(self):
        return fn(self)

    method.__name__ = name
    return method
