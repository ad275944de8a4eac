from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Tuple, Type, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from canonical_attributes.constants import PACK_SUFFIXES
from canonical_attributes.core.restricted.descriptor import RestrictedAttribute, register
from canonical_attributes.errors import ConfigurationError

if TYPE_CHECKING:
    from canonical_attributes.core.runtime.model import Model

log = logging.getLogger("canonical_attributes.config")

Scalar = Union[str, int, float]
GroupOption = Union[bool, str, None]


class ValidateOptions(BaseModel):
    """``validate: {presence: bool}``"""

    model_config = ConfigDict(extra="forbid")

    presence: bool = True


class RestrictedEntry(BaseModel):
    """One restricted attribute declared in a pack."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    attribute: str
    values: List[Scalar]
    prefix: GroupOption = None
    scope: GroupOption = True
    query: GroupOption = True
    assign: GroupOption = True
    transform: Union[str, List[str], None] = None
    default: Any = None
    validation: Union[bool, ValidateOptions, None] = Field(default=True, alias="validate")
    message: Optional[str] = None

    @field_validator("values", mode="before")
    @classmethod
    def _reject_yaml_booleans(cls, v: Any) -> Any:
        # YAML 1.1 reads unquoted on/off/yes/no as booleans.
        if isinstance(v, list) and any(isinstance(x, bool) for x in v):
            raise ValueError("boolean in values; quote YAML words such as on/off/yes/no")
        return v

    def register_options(self) -> Dict[str, Any]:
        """Keyword arguments for register(); options left out of the pack stay unset."""

        opts: Dict[str, Any] = {}
        for name in ("prefix", "scope", "query", "assign", "transform", "default", "message"):
            if name in self.model_fields_set:
                opts[name] = getattr(self, name)

        if "validation" in self.model_fields_set:
            v = self.validation
            opts["validate"] = {"presence": v.presence} if isinstance(v, ValidateOptions) else v
        return opts


class PackDocument(BaseModel):
    model_config = ConfigDict(extra="forbid")

    restricted: List[RestrictedEntry] = Field(default_factory=list)


@dataclass(frozen=True, slots=True)
class RestrictedPack:
    """Loaded restricted-attribute declarations.

    Supported schema (YAML/JSON)

    restricted:
      - attribute: power
        values: ["on", "off"]
        prefix: hydro
        scope: false
        transform: [string, lowercase]
        default: "off"
        validate: {presence: false}

    Treat pack files as trusted configuration: they choose method names
    installed on models.
    """

    pack_id: str
    entries: Tuple[RestrictedEntry, ...]

    def attributes(self) -> List[str]:
        return [e.attribute for e in self.entries]

    def register_all(self) -> Dict[str, RestrictedAttribute]:
        """Build a bundle for every entry without installing anything."""

        return {e.attribute: register(e.attribute, e.values, **e.register_options()) for e in self.entries}

    def apply(self, model_cls: Type["Model"]) -> Dict[str, RestrictedAttribute]:
        """Install every entry on a Model subclass (in pack order)."""

        out: Dict[str, RestrictedAttribute] = {}
        for e in self.entries:
            out[e.attribute] = model_cls.restricted(e.attribute, e.values, **e.register_options())
        log.debug("applied pack %s to %s: %s", self.pack_id, model_cls.__name__, list(out))
        return out


def parse_restricted_pack(data: Any, *, pack_id: str = "inline") -> RestrictedPack:
    """Validate already-decoded pack data."""

    if not isinstance(data, Mapping):
        raise ConfigurationError("restricted pack must be a mapping with a 'restricted' list")
    try:
        doc = PackDocument.model_validate(dict(data))
    except ValidationError as e:
        raise ConfigurationError(f"invalid restricted pack {pack_id}: {e}") from e

    seen = set()
    for entry in doc.restricted:
        if entry.attribute in seen:
            raise ConfigurationError(f"restricted pack {pack_id} declares {entry.attribute!r} twice")
        seen.add(entry.attribute)

    return RestrictedPack(pack_id=pack_id, entries=tuple(doc.restricted))


def load_restricted_pack(path: Union[str, Path]) -> RestrictedPack:
    """Load a restricted pack from YAML or JSON (chosen by suffix; YAML otherwise)."""

    p = Path(path)
    text = p.read_text(encoding="utf-8")

    try:
        if p.suffix.lower() == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigurationError(f"cannot parse restricted pack {p}: {e}") from e

    return parse_restricted_pack(data if data is not None else {}, pack_id=p.stem)


def resolve_pack_path(
    pack: str,
    *,
    base_dir: Union[str, Path],
    allow_arbitrary_paths: bool = False,
) -> Path:
    """Resolve a pack reference to a path.

    - If pack is an existing path and allow_arbitrary_paths is True, return it.
    - Otherwise, treat pack as a name within base_dir; the suffix may be
      omitted (``lamps`` finds ``lamps.yaml``).

    Path traversal outside base_dir is blocked.
    """

    p = Path(pack)
    if allow_arbitrary_paths and p.exists():
        return p

    base = Path(base_dir).resolve()
    candidate = (base / pack).resolve()
    if base not in candidate.parents and candidate != base:
        raise ConfigurationError("restricted pack path traversal blocked")

    if not candidate.exists() and candidate.suffix == "":
        for ext in PACK_SUFFIXES:
            c2 = Path(str(candidate) + ext).resolve()
            if base not in c2.parents:
                raise ConfigurationError("restricted pack path traversal blocked")
            if c2.exists():
                candidate = c2
                break
    if not candidate.is_file():
        raise FileNotFoundError(str(candidate))
    return candidate
