from __future__ import annotations

from typing import Final

# Separator placed between a non-empty prefix and the value suffix.
DEFAULT_SEPARATOR: Final[str] = "_"

# Predicate and assignment method names installed on a host model.
PREDICATE_NAME_TEMPLATE: Final[str] = "is_{name}"
ASSIGNER_NAME_TEMPLATE: Final[str] = "set_{name}"

INCLUSION_MESSAGE_TEMPLATE: Final[str] = "'{value}' is not a valid {attribute}"
PRESENCE_MESSAGE: Final[str] = "can't be blank"

PACK_SUFFIXES: Final[tuple[str, ...]] = (".yaml", ".yml", ".json")
