from __future__ import annotations

import base64
import json
from dataclasses import asdict, is_dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Any, Mapping
from uuid import UUID


def to_jsonable(obj: Any) -> Any:
    """
    Convert attribute values to JSON-serializable equivalents.

    - Enum members serialize as their value; Symbols as their name.
    - bytes are base64-encoded to avoid encoding issues.
    - Unknown objects fall back to their string representation.
    """
    if obj is None or isinstance(obj, (str, int, float, bool)):
        return obj

    if isinstance(obj, Enum):
        return to_jsonable(obj.value)

    # datetime/date -> ISO 8601
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()

    if isinstance(obj, (Decimal, UUID, Path)):
        return str(obj)

    if isinstance(obj, (bytes, bytearray)):
        return {"__bytes_b64__": base64.b64encode(bytes(obj)).decode("ascii")}

    if is_dataclass(obj) and not isinstance(obj, type):
        return to_jsonable(asdict(obj))

    if isinstance(obj, Mapping):
        return {str(k): to_jsonable(v) for k, v in obj.items()}

    if isinstance(obj, (list, tuple)):
        return [to_jsonable(x) for x in obj]

    # Sets have no order; sort for a deterministic encoding.
    if isinstance(obj, (set, frozenset)):
        return sorted((to_jsonable(x) for x in obj), key=lambda x: json.dumps(x, sort_keys=True))

    return str(obj)


def dumps_compact(obj: Any) -> str:
    """Compact JSON encoding of an attribute value."""

    return json.dumps(to_jsonable(obj), separators=(",", ":"), ensure_ascii=False)
