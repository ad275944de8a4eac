from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List

from canonical_attributes.core.record import Record

from .models import FieldError, ValidationResult
from .rules import ValidationRule

log = logging.getLogger("canonical_attributes.validation")


@dataclass(frozen=True)
class ValidationEngine:
    """
    Evaluates ValidationRule objects against a record, in order.

    Invariants
    - Deterministic evaluation order (as provided)
    - Every failing rule is reported; evaluation does not stop at the first
    - No mutation of the record
    - Exceptions raised by a rule propagate to the caller
    """

    rules: List[ValidationRule] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not isinstance(self.rules, list):
            raise TypeError("rules must be a list of ValidationRule instances")

        for r in self.rules:
            if not isinstance(r, ValidationRule):
                raise TypeError("rules must contain only ValidationRule instances")

    def evaluate(self, record: Record) -> ValidationResult:
        errors: List[FieldError] = []
        for rule in self.rules:
            error = rule.evaluate(record)
            if error is not None:
                errors.append(error)

        if errors:
            log.debug(
                "validation failed for %s: %s",
                type(record).__name__,
                sorted({e.attribute for e in errors}),
            )
        return ValidationResult(errors=tuple(errors))
