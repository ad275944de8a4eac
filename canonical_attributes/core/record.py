from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


# ------------------------------
# Record capability / Protocol
# ------------------------------

@runtime_checkable
class Record(Protocol):
    """
    Capability every host record must provide to the normalization pipeline
    and the restricted value helpers.

    get / set are raw field access: they must bypass any public setter
    overrides installed on the host.
    """

    def has_field(self, name: str) -> bool:
        """
        True when the field is loaded on this record (even if its value is None).
        """
        ...

    def has_value(self, name: str) -> bool:
        """
        True when the field is loaded and its value is not None.
        """
        ...

    def get(self, name: str) -> Any:
        ...

    def set(self, name: str, value: Any) -> None:
        ...

    def is_new_record(self) -> bool:
        ...

    def persisted_update(self, name: str, value: Any) -> bool:
        """
        Write one attribute through to persistent storage.
        """
        ...


def is_empty(value: Any) -> bool:
    """True for values with a length of zero. Values without a length are never empty."""

    try:
        return len(value) == 0
    except TypeError:
        return False


def is_blank(value: Any) -> bool:
    """Blank means None, False, an empty container or a whitespace-only string."""

    if value is None or value is False:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    return is_empty(value)
