from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, List, Mapping, Optional, Union

from canonical_attributes.core.record import Record, is_empty
from canonical_attributes.utils.json_safe import dumps_compact

from .transforms import TransformKind, TransformSpecLike, apply_chain, resolve_chain

log = logging.getLogger("canonical_attributes.normalization")

FieldNames = Union[str, Iterable[Any]]


def flatten_fields(fields: Iterable[Any]) -> List[str]:
    """Flatten field names given as strings or (nested) lists/tuples of strings."""

    out: List[str] = []
    for f in fields:
        if isinstance(f, str):
            out.append(f)
        elif isinstance(f, (list, tuple, set, frozenset)):
            out.extend(flatten_fields(f))
        else:
            raise TypeError(f"field names must be strings, got {type(f).__name__}")
    return out


def _evaluate_default(value: Any) -> Any:
    return value() if callable(value) else value


def default_attribute(
    record: Record,
    field: str,
    value: Any = None,
    *,
    factory: Optional[Callable[[], Any]] = None,
) -> bool:
    """Fill one field with a default when it is loaded and currently None.

    Fields that are not loaded on the record (partial loads) are skipped;
    a default never creates a field. Returns True when a value was written.
    """

    if not record.has_field(field) or record.get(field) is not None:
        return False

    record.set(field, factory() if factory is not None else value)
    return True


def initialize_defaults(record: Record, defaults: Mapping[str, Any]) -> Record:
    """Apply (field -> value or zero-argument factory) defaults.

    Idempotent: only fields that are still None are written.
    """

    for field, value in defaults.items():
        if record.has_field(field) and record.get(field) is None:
            record.set(field, _evaluate_default(value))
    return record


def apply_transform(record: Record, transform: TransformSpecLike, *fields: FieldNames) -> List[str]:
    """Apply a transform to the listed fields of a record.

    - callable: every loaded field is rewritten with transform(current),
      None included. Exceptions raised by the callable propagate.
    - TransformKind / name / list of names: only loaded, non-None fields
      are touched, and only when every step of the chain supports the
      value; otherwise the field is left unchanged.

    Returns the names of the fields that were written.
    """

    names = flatten_fields(fields)
    written: List[str] = []

    if callable(transform):
        for name in names:
            if record.has_field(name):
                record.set(name, transform(record.get(name)))
                written.append(name)
        return written

    chain = resolve_chain(transform)
    for name in names:
        if not record.has_value(name):
            continue
        applied, result = apply_chain(chain, record.get(name))
        if applied:
            record.set(name, result)
            written.append(name)
        else:
            log.debug("transform %s not supported for field %s; left unchanged", [k.value for k in chain], name)
    return written


def nil_if_empty(value: Any) -> Any:
    if value is None or is_empty(value):
        return None
    return value


def json_string(value: Any) -> Any:
    if value is None or is_empty(value):
        return None
    if isinstance(value, str):
        return value
    return dumps_compact(value)


def force_string(record: Record, *fields: FieldNames) -> List[str]:
    return apply_transform(record, TransformKind.STRING, *fields)


def force_symbol(record: Record, *fields: FieldNames) -> List[str]:
    return apply_transform(record, TransformKind.SYMBOL, *fields)


def force_lowercase(record: Record, *fields: FieldNames) -> List[str]:
    return apply_transform(record, TransformKind.LOWERCASE, *fields)


def force_uppercase(record: Record, *fields: FieldNames) -> List[str]:
    return apply_transform(record, TransformKind.UPPERCASE, *fields)


def force_strip(record: Record, *fields: FieldNames) -> List[str]:
    return apply_transform(record, TransformKind.STRIP, *fields)


def force_nil_if_empty(record: Record, *fields: FieldNames) -> List[str]:
    return apply_transform(record, nil_if_empty, *fields)


def force_string_or_nil(record: Record, *fields: FieldNames) -> List[str]:
    """String-convert, then collapse the empty string to None."""

    force_string(record, *fields)
    return force_nil_if_empty(record, *fields)


def force_symbol_or_nil(record: Record, *fields: FieldNames) -> List[str]:
    """Collapse empty values to None before symbolizing, so no empty name is produced."""

    force_string_or_nil(record, *fields)
    return force_symbol(record, *fields)


def force_json_string(record: Record, *fields: FieldNames) -> List[str]:
    """None when None or empty; strings unchanged; anything else JSON-encoded."""

    return apply_transform(record, json_string, *fields)


def normalize(record: Any) -> None:
    """Run the record's normalize_attributes step, if its type defines one."""

    step = getattr(record, "normalize_attributes", None)
    if callable(step):
        step()


def normalize_with_defaults(record: Record, defaults: Optional[Mapping[str, Any]] = None) -> None:
    """Fill defaults, then normalize. This is the before-validation entry point."""

    initialize_defaults(record, defaults or {})
    normalize(record)
