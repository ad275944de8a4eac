from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

from canonical_attributes.constants import INCLUSION_MESSAGE_TEMPLATE, PRESENCE_MESSAGE
from canonical_attributes.core.record import Record, is_blank

from .models import ErrorKind, FieldError, ValidationDescriptor


def _read(record: Record, attribute: str) -> Any:
    # Unloaded fields validate as None.
    return record.get(attribute) if record.has_field(attribute) else None


class ValidationRule:
    rule_id: str = "validation-rule"

    def evaluate(self, record: Record) -> Optional[FieldError]:
        raise NotImplementedError


@dataclass(frozen=True)
class PresenceRule(ValidationRule):
    attribute: str
    message: str = PRESENCE_MESSAGE
    rule_id: str = "presence"

    def evaluate(self, record: Record) -> Optional[FieldError]:
        value = _read(record, self.attribute)
        if not is_blank(value):
            return None
        return FieldError(
            attribute=self.attribute,
            kind=ErrorKind.PRESENCE,
            message=self.message,
            value=value,
        )


@dataclass(frozen=True)
class InclusionRule(ValidationRule):
    attribute: str
    allowed: Tuple[Any, ...]
    message: str = INCLUSION_MESSAGE_TEMPLATE
    rule_id: str = "inclusion"

    def evaluate(self, record: Record) -> Optional[FieldError]:
        value = _read(record, self.attribute)
        if value in self.allowed:
            return None

        shown = "" if value is None else value
        return FieldError(
            attribute=self.attribute,
            kind=ErrorKind.INCLUSION,
            message=self.message.format(value=shown, attribute=self.attribute),
            value=value,
        )


def rules_for_descriptor(descriptor: ValidationDescriptor) -> List[ValidationRule]:
    """Expand a declarative descriptor into ordered rules (presence first)."""

    rules: List[ValidationRule] = []
    if descriptor.presence:
        rules.append(PresenceRule(attribute=descriptor.attribute, message=descriptor.presence_message))
    rules.append(
        InclusionRule(
            attribute=descriptor.attribute,
            allowed=tuple(descriptor.inclusion),
            message=descriptor.message,
        )
    )
    return rules
