from __future__ import annotations

from threading import Lock
from typing import Dict


class Symbol(str):
    """
    Interned name type.

    Invariants
    - Symbol(x) is Symbol(x) for equal names
    - Equal (and hash-equal) to the plain str of the same name
    - The empty name is rejected
    """

    __slots__ = ()

    _table: Dict[str, "Symbol"] = {}
    _lock = Lock()

    def __new__(cls, name: str) -> "Symbol":
        if not isinstance(name, str):
            raise TypeError("Symbol name must be a string")
        if name == "":
            raise ValueError("Symbol name must be non-empty")

        key = str(name)
        with cls._lock:
            existing = cls._table.get(key)
            if existing is None:
                existing = super().__new__(cls, key)
                cls._table[key] = existing
        return existing

    def __repr__(self) -> str:
        return f"Symbol({str.__repr__(self)})"

    def __copy__(self) -> "Symbol":
        return self

    def __deepcopy__(self, memo) -> "Symbol":
        return self

    def __reduce__(self):
        return (Symbol, (str(self),))
