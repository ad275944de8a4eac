from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Dict, Iterable, Optional, Tuple, Union

from canonical_attributes.errors import TransformConfigurationError

from .symbol import Symbol


class TransformKind(str, Enum):
    """
    Closed set of named value conversions.

    Each kind carries a capability check; a kind only applies to values it
    supports. Using a str Enum keeps names stable in configuration files.
    """

    STRING = "string"
    SYMBOL = "symbol"
    LOWERCASE = "lowercase"
    UPPERCASE = "uppercase"
    STRIP = "strip"

    def supports(self, value: Any) -> bool:
        if value is None:
            return False
        return _OPERATIONS[self][0](value)

    def apply(self, value: Any) -> Any:
        return _OPERATIONS[self][1](value)


def _keep_symbol(original: Any, result: str) -> Any:
    # Case folding a Symbol yields a Symbol, as long as the name survives.
    if isinstance(original, Symbol) and result:
        return Symbol(result)
    return result


def _is_str(value: Any) -> bool:
    return isinstance(value, str)


_OPERATIONS: Dict[TransformKind, Tuple[Callable[[Any], bool], Callable[[Any], Any]]] = {
    TransformKind.STRING: (lambda v: True, lambda v: str(v)),
    TransformKind.SYMBOL: (lambda v: isinstance(v, str) and v != "", lambda v: Symbol(v)),
    TransformKind.LOWERCASE: (_is_str, lambda v: _keep_symbol(v, v.lower())),
    TransformKind.UPPERCASE: (_is_str, lambda v: _keep_symbol(v, v.upper())),
    TransformKind.STRIP: (_is_str, lambda v: _keep_symbol(v, v.strip())),
}


TransformName = Union[TransformKind, str]
TransformSpecLike = Union[Callable[[Any], Any], TransformName, Iterable[TransformName]]


def resolve_kind(name: TransformName) -> TransformKind:
    """Resolve one transform name (or kind) to a TransformKind."""

    if isinstance(name, TransformKind):
        return name
    if not isinstance(name, str):
        raise TransformConfigurationError(f"transform name must be a string, got {type(name).__name__}")
    try:
        return TransformKind(name.strip().lower())
    except ValueError:
        known = ", ".join(k.value for k in TransformKind)
        raise TransformConfigurationError(f"unknown transform {name!r} (known: {known})") from None


def resolve_chain(spec: Union[TransformName, Iterable[TransformName]]) -> Tuple[TransformKind, ...]:
    """Resolve a name or an ordered sequence of names into a chain of kinds."""

    if isinstance(spec, (TransformKind, str)):
        return (resolve_kind(spec),)

    try:
        names = list(spec)
    except TypeError:
        raise TransformConfigurationError(
            f"transform must be callable, a name, or a list of names; got {type(spec).__name__}"
        ) from None

    if not names:
        raise TransformConfigurationError("transform chain must not be empty")
    return tuple(resolve_kind(n) for n in names)


def apply_chain(chain: Tuple[TransformKind, ...], value: Any) -> Tuple[bool, Any]:
    """Run a chain against a value.

    Returns (applied, result). When the value is None or any step does not
    support the intermediate value, returns (False, value) with the original
    value untouched.
    """

    if value is None:
        return False, value

    current = value
    for kind in chain:
        if not kind.supports(current):
            return False, value
        current = kind.apply(current)
    return True, current


def compile_transform(spec: Optional[TransformSpecLike]) -> Optional[Callable[[Any], Any]]:
    """Turn a transform declaration into a single-argument callable.

    - None: no transform
    - callable: used as-is (it owns its None handling)
    - name or list of names: applies each kind in order, short-circuiting to
      None once the current value is None; steps that do not support the
      current value are passed over
    """

    if spec is None:
        return None
    if callable(spec):
        return spec

    chain = resolve_chain(spec)

    def _chained(value: Any) -> Any:
        current = value
        for kind in chain:
            if current is None:
                return None
            if kind.supports(current):
                current = kind.apply(current)
        return current

    _chained.__name__ = "chain_" + "_".join(k.value for k in chain)
    _chained.chain = chain  # type: ignore[attr-defined]
    return _chained
