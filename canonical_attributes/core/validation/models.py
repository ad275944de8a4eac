from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from canonical_attributes.constants import INCLUSION_MESSAGE_TEMPLATE, PRESENCE_MESSAGE
from canonical_attributes.utils.json_safe import to_jsonable


class ErrorKind(str, Enum):
    """
    Enumerated validation failure kind.

    Using str Enum ensures stable serialization and safe comparisons.
    """

    PRESENCE = "presence"
    INCLUSION = "inclusion"


class ValidationMode(str, Enum):
    DISABLED = "disabled"
    PRESENCE_REQUIRED = "presence_required"
    PRESENCE_OPTIONAL = "presence_optional"


def humanize(attribute: str) -> str:
    return attribute.replace("_", " ").strip().capitalize()


@dataclass(frozen=True)
class FieldError:
    """
    Immutable field-level validation error.

    Invariants
    - kind is an ErrorKind enum (not free-form text)
    - to_dict returns JSON-safe primitives
    """

    attribute: str
    kind: ErrorKind
    message: str
    value: Any = None

    def full_message(self) -> str:
        return f"{humanize(self.attribute)} {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "attribute": self.attribute,
            "kind": self.kind.value,
            "message": self.message,
            "value": to_jsonable(self.value),
        }


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating one record: every error found, in rule order."""

    errors: Tuple[FieldError, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.errors

    def __bool__(self) -> bool:
        return self.ok

    def for_attribute(self, attribute: str) -> List[FieldError]:
        return [e for e in self.errors if e.attribute == attribute]

    def messages(self) -> Dict[str, List[str]]:
        out: Dict[str, List[str]] = {}
        for e in self.errors:
            out.setdefault(e.attribute, []).append(e.message)
        return out

    def full_messages(self) -> List[str]:
        return [e.full_message() for e in self.errors]

    def to_dict(self) -> Dict[str, Any]:
        return {"ok": self.ok, "errors": [e.to_dict() for e in self.errors]}


@dataclass(frozen=True)
class ValidationDescriptor:
    """
    Declarative validation handed to the host's validation registration point.

    presence=True requires a non-blank value; inclusion lists the permitted
    values (blank entries included when blanks are allowed). message is a
    str.format template receiving ``value`` and ``attribute``.
    """

    attribute: str
    inclusion: Tuple[Any, ...]
    presence: bool = True
    message: str = INCLUSION_MESSAGE_TEMPLATE
    presence_message: str = PRESENCE_MESSAGE

    @classmethod
    def for_values(
        cls,
        attribute: str,
        values: Tuple[Any, ...],
        mode: ValidationMode,
        *,
        message: Optional[str] = None,
    ) -> Optional["ValidationDescriptor"]:
        """Build the descriptor for a validation mode (None when disabled)."""

        if mode is ValidationMode.DISABLED:
            return None
        if mode is ValidationMode.PRESENCE_OPTIONAL:
            return cls(
                attribute=attribute,
                inclusion=(None, "") + tuple(values),
                presence=False,
                message=message or INCLUSION_MESSAGE_TEMPLATE,
            )
        return cls(
            attribute=attribute,
            inclusion=tuple(values),
            presence=True,
            message=message or INCLUSION_MESSAGE_TEMPLATE,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "attribute": self.attribute,
            "presence": self.presence,
            "inclusion": [to_jsonable(v) for v in self.inclusion],
            "message": self.message,
        }

