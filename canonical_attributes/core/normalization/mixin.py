from __future__ import annotations

from types import MappingProxyType
from typing import Any, Callable, ClassVar, Dict, List, Mapping, Optional

from . import normalizer
from .normalizer import FieldNames
from .transforms import TransformSpecLike


class NormalizeMixin:
    """
    Default-fill and normalization hooks for a host model.

    The host must satisfy the Record capability and call, explicitly:
    - initialize_default_attribute_values() after construction or load
    - normalize_attributes_with_defaults() before validation

    Defaults are declared on the class as ``attribute_defaults`` (values or
    zero-argument factories) and merge with those of base classes. Override
    initialize_default_attribute_values() for defaults that need code, and
    define normalize_attributes() to declare transforms:

        class Account(Model, NormalizeMixin):
            fields = ("email", "tags")
            attribute_defaults = {"tags": list}

            def normalize_attributes(self):
                self.force_lowercase("email")
                self.force_json_string("tags")
    """

    attribute_defaults: ClassVar[Mapping[str, Any]] = MappingProxyType({})

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        merged: Dict[str, Any] = {}
        for base in reversed(cls.__mro__[1:]):
            merged.update(base.__dict__.get("attribute_defaults", {}))
        merged.update(cls.__dict__.get("attribute_defaults", {}))
        cls.attribute_defaults = MappingProxyType(merged)

    def initialize_default_attribute_values(self) -> None:
        normalizer.initialize_defaults(self, self.attribute_defaults)  # type: ignore[arg-type]

    def normalize_attributes_with_defaults(self) -> None:
        self.initialize_default_attribute_values()
        normalizer.normalize(self)

    # --- helpers for use inside initialize_default_attribute_values / normalize_attributes

    def default_attribute(
        self, field: str, value: Any = None, *, factory: Optional[Callable[[], Any]] = None
    ) -> bool:
        return normalizer.default_attribute(self, field, value, factory=factory)  # type: ignore[arg-type]

    def force_transform(self, transform: TransformSpecLike, *fields: FieldNames) -> List[str]:
        return normalizer.apply_transform(self, transform, *fields)  # type: ignore[arg-type]

    def force_string(self, *fields: FieldNames) -> List[str]:
        return normalizer.force_string(self, *fields)  # type: ignore[arg-type]

    def force_symbol(self, *fields: FieldNames) -> List[str]:
        return normalizer.force_symbol(self, *fields)  # type: ignore[arg-type]

    def force_lowercase(self, *fields: FieldNames) -> List[str]:
        return normalizer.force_lowercase(self, *fields)  # type: ignore[arg-type]

    def force_uppercase(self, *fields: FieldNames) -> List[str]:
        return normalizer.force_uppercase(self, *fields)  # type: ignore[arg-type]

    def force_strip(self, *fields: FieldNames) -> List[str]:
        return normalizer.force_strip(self, *fields)  # type: ignore[arg-type]

    def force_string_or_nil(self, *fields: FieldNames) -> List[str]:
        return normalizer.force_string_or_nil(self, *fields)  # type: ignore[arg-type]

    def force_symbol_or_nil(self, *fields: FieldNames) -> List[str]:
        return normalizer.force_symbol_or_nil(self, *fields)  # type: ignore[arg-type]

    def force_nil_if_empty(self, *fields: FieldNames) -> List[str]:
        return normalizer.force_nil_if_empty(self, *fields)  # type: ignore[arg-type]

    def force_json_string(self, *fields: FieldNames) -> List[str]:
        return normalizer.force_json_string(self, *fields)  # type: ignore[arg-type]
