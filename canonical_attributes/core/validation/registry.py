from __future__ import annotations

from typing import Dict, List, Optional

from canonical_attributes.errors import ConfigurationError

from .engine import ValidationEngine
from .models import ValidationDescriptor
from .rules import ValidationRule, rules_for_descriptor


class ValidationRegistry:
    """
    Validation registration point for one model class.

    Stores free-standing rules and per-attribute descriptors. A descriptor
    registered again for the same attribute replaces the earlier one.
    """

    def __init__(self, parent: Optional["ValidationRegistry"] = None):
        self._rules: List[ValidationRule] = list(parent._rules) if parent else []
        self._descriptors: Dict[str, ValidationDescriptor] = dict(parent._descriptors) if parent else {}

    def register(self, rule: ValidationRule) -> None:
        if not hasattr(rule, "evaluate"):
            raise ConfigurationError("Validation rule must implement evaluate(record)")
        self._rules.append(rule)

    def register_descriptor(self, descriptor: ValidationDescriptor) -> None:
        if not isinstance(descriptor, ValidationDescriptor):
            raise ConfigurationError("expected a ValidationDescriptor")
        self._descriptors[descriptor.attribute] = descriptor

    def remove_descriptor(self, attribute: str) -> Optional[ValidationDescriptor]:
        return self._descriptors.pop(attribute, None)

    def descriptor_for(self, attribute: str) -> Optional[ValidationDescriptor]:
        return self._descriptors.get(attribute)

    def get_rules(self) -> List[ValidationRule]:
        # Return a copy to prevent external mutation
        rules = list(self._rules)
        for descriptor in self._descriptors.values():
            rules.extend(rules_for_descriptor(descriptor))
        return rules

    def engine(self) -> ValidationEngine:
        return ValidationEngine(rules=self.get_rules())
