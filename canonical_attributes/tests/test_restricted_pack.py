import json

import pytest

from canonical_attributes.config import load_restricted_pack, parse_restricted_pack, resolve_pack_path
from canonical_attributes.core.runtime.model import Model
from canonical_attributes.errors import ConfigurationError, RestrictedConfigurationError

_LAMP_PACK = """
restricted:
  - attribute: power
    values: ["on", "off"]
    prefix: hydro
    scope: false
    transform: [string, lowercase]
    default: "off"
    validate: {presence: false}
  - attribute: mode
    values: [eco, boost]
"""


def _write(tmp_path, name, text):
    p = tmp_path / name
    p.write_text(text, encoding="utf-8")
    return p


def test_yaml_pack_installs_helpers_on_a_model(tmp_path):
    pack = load_restricted_pack(_write(tmp_path, "lamps.yaml", _LAMP_PACK))

    class PackLamp(Model):
        fields = ("power", "mode")

    bundles = pack.apply(PackLamp)

    assert pack.pack_id == "lamps"
    assert pack.attributes() == ["power", "mode"]
    assert set(bundles) == {"power", "mode"}

    lamp = PackLamp(power="ON")
    assert lamp.power == "on"
    assert lamp.is_hydro_on()
    assert not hasattr(PackLamp, "hydro_on")
    assert hasattr(PackLamp, "mode_eco")

    assert PackLamp().power == "off"


def test_options_left_out_keep_register_defaults(tmp_path):
    pack = load_restricted_pack(_write(tmp_path, "lamps.yaml", _LAMP_PACK))

    mode = pack.register_all()["mode"]

    assert set(mode.predicates) == {"mode_eco", "mode_boost"}
    assert mode.has_default is False
    assert mode.validation.presence is True


def test_json_pack(tmp_path):
    doc = {"restricted": [{"attribute": "state", "values": ["open", "closed"], "validate": False}]}
    pack = load_restricted_pack(_write(tmp_path, "doors.json", json.dumps(doc)))

    bundle = pack.register_all()["state"]

    assert bundle.values == ("open", "closed")
    assert bundle.validation is None


def test_unquoted_yaml_booleans_are_rejected(tmp_path):
    text = "restricted:\n  - attribute: power\n    values: [on, off]\n"

    with pytest.raises(ConfigurationError):
        load_restricted_pack(_write(tmp_path, "bad.yaml", text))


def test_unknown_keys_and_duplicates_are_rejected():
    with pytest.raises(ConfigurationError):
        parse_restricted_pack({"restricted": [{"attribute": "a", "values": ["x"], "colour": 1}]})

    with pytest.raises(ConfigurationError):
        parse_restricted_pack(
            {
                "restricted": [
                    {"attribute": "a", "values": ["x"]},
                    {"attribute": "a", "values": ["y"]},
                ]
            }
        )

    with pytest.raises(ConfigurationError):
        parse_restricted_pack(["not", "a", "mapping"])


def test_unparseable_pack_is_a_configuration_error(tmp_path):
    with pytest.raises(ConfigurationError):
        load_restricted_pack(_write(tmp_path, "broken.json", "{not json"))


def test_empty_pack_is_allowed(tmp_path):
    assert load_restricted_pack(_write(tmp_path, "empty.yaml", "")).entries == ()


def test_bad_declarations_fail_at_registration():
    pack = parse_restricted_pack({"restricted": [{"attribute": "a", "values": ["x"], "transform": "reverse"}]})

    with pytest.raises(RestrictedConfigurationError):
        pack.register_all()


def test_resolve_pack_path_finds_names_without_suffix(tmp_path):
    target = _write(tmp_path, "lamps.yml", _LAMP_PACK)

    assert resolve_pack_path("lamps", base_dir=tmp_path) == target.resolve()


def test_resolve_pack_path_blocks_traversal(tmp_path):
    base = tmp_path / "packs"
    base.mkdir()
    _write(tmp_path, "outside.yaml", _LAMP_PACK)

    with pytest.raises(ConfigurationError):
        resolve_pack_path("../outside.yaml", base_dir=base)

    with pytest.raises(FileNotFoundError):
        resolve_pack_path("missing", base_dir=base)


def test_resolve_pack_path_blocks_suffix_lookup_through_an_outside_symlink(tmp_path):
    base = tmp_path / "packs"
    base.mkdir()
    secret = _write(tmp_path, "secret.yaml", _LAMP_PACK)
    (base / "lamps.yaml").symlink_to(secret)

    with pytest.raises(ConfigurationError):
        resolve_pack_path("lamps.yaml", base_dir=base)

    with pytest.raises(ConfigurationError):
        resolve_pack_path("lamps", base_dir=base)


def test_resolve_pack_path_allows_explicit_paths_when_enabled(tmp_path):
    outside = _write(tmp_path, "outside.yaml", _LAMP_PACK)

    assert resolve_pack_path(str(outside), base_dir=tmp_path / "packs", allow_arbitrary_paths=True) == outside
