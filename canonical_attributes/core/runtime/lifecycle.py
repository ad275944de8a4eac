from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Union

Hook = Union[str, Callable[[Any], Any]]


class HookEvent(str, Enum):
    AFTER_INITIALIZE = "after_initialize"
    BEFORE_VALIDATION = "before_validation"


@dataclass
class LifecycleHooks:
    """
    Ordered lifecycle callbacks for one model class.

    A hook is either a callable receiving the record, or the name of a method
    looked up on the record when the hook runs (so subclass overrides apply).
    Subclasses start from a copy of their parent's hooks.
    """

    _hooks: Dict[HookEvent, List[Hook]] = field(
        default_factory=lambda: {event: [] for event in HookEvent}, repr=False
    )

    def copy(self) -> "LifecycleHooks":
        return LifecycleHooks(_hooks={event: list(hooks) for event, hooks in self._hooks.items()})

    def add(self, event: HookEvent, hook: Hook) -> None:
        if not (isinstance(hook, str) or callable(hook)):
            raise TypeError("hook must be a method name or a callable")
        self._hooks[HookEvent(event)].append(hook)

    def remove(self, event: HookEvent, hook: Hook) -> bool:
        hooks = self._hooks[HookEvent(event)]
        if hook not in hooks:
            return False
        hooks.remove(hook)
        return True

    def has(self, event: HookEvent, hook: Hook) -> bool:
        return hook in self._hooks[HookEvent(event)]

    def get(self, event: HookEvent) -> List[Hook]:
        return list(self._hooks[HookEvent(event)])

    def run(self, event: HookEvent, record: Any) -> None:
        for hook in self._hooks[HookEvent(event)]:
            if isinstance(hook, str):
                getattr(record, hook)()
            else:
                hook(record)
