import pytest

from canonical_attributes.core.normalization.symbol import Symbol
from canonical_attributes.core.restricted import (
    PrefixKind,
    immutable_values,
    mutable_copy,
    name_suffix,
    register,
    resolve_prefix,
    resolve_validation,
)
from canonical_attributes.core.validation.models import ValidationMode
from canonical_attributes.errors import RestrictedConfigurationError


def _make_power(**options):
    return register("power", ["on", "off"], **options)


def test_assigner_then_predicate_on_a_new_record(make_row):
    bundle = _make_power()
    r = make_row(power=None)

    assert bundle.predicates["power_on"](r) is False
    assert bundle.predicates["power_off"](r) is False

    assert bundle.assigners["power_on"](r) is True
    assert r.values["power"] == "on"
    assert bundle.predicates["power_on"](r) is True
    assert bundle.predicates["power_off"](r) is False
    assert r.updates == []


def test_assigner_on_persisted_record_writes_through(make_row):
    bundle = _make_power()
    r = make_row(new=False, power="on")

    assert bundle.assigners["power_off"](r) is True
    assert r.updates == [("power", "off")]


def test_assigner_on_unloaded_field_is_a_no_op(make_row):
    bundle = _make_power()
    r = make_row(other=1)

    assert bundle.assigners["power_on"](r) is False
    assert bundle.predicates["power_on"](r) is False
    assert r.values == {"other": 1}


def test_default_names_use_the_attribute_prefix():
    bundle = _make_power()

    assert set(bundle.scopes) == {"power_on", "power_off"}
    assert set(bundle.predicates) == {"power_on", "power_off"}
    assert set(bundle.assigners) == {"power_on", "power_off"}


def test_custom_prefix_replaces_the_attribute_name():
    bundle = _make_power(prefix="hydro")

    for group in bundle.names().values():
        assert set(group) == {"hydro_on", "hydro_off"}


def test_scope_false_disables_only_scopes():
    bundle = _make_power(scope=False)

    assert dict(bundle.scopes) == {}
    assert len(bundle.predicates) == 2
    assert len(bundle.assigners) == 2


def test_prefix_none_generates_bare_value_names():
    bundle = _make_power(prefix=None)

    assert set(bundle.predicates) == {"on", "off"}


def test_group_literal_prefix_survives_a_disabled_default_prefix():
    bundle = _make_power(prefix=False, query="check")

    assert dict(bundle.scopes) == {}
    assert dict(bundle.assigners) == {}
    assert set(bundle.predicates) == {"check_on", "check_off"}


def test_scope_query_matches_on_the_raw_value(make_row):
    bundle = _make_power()

    assert bundle.scopes["power_on"].matches(make_row(power="on"))
    assert not bundle.scopes["power_on"].matches(make_row(power="off"))
    assert bundle.scopes["power_off"].to_dict() == {"name": "power_off", "where": {"power": "off"}}


def test_transform_applies_to_predicates_and_writes(make_row):
    bundle = _make_power(transform=["string", "lowercase"])
    r = make_row(power="ON")

    assert bundle.predicates["power_on"](r) is True
    assert bundle.has_writer

    bundle.write(r, "OFF")
    assert r.values["power"] == "off"


def test_symbol_values_with_symbol_transform(make_row):
    bundle = register("state", [Symbol("open"), Symbol("closed")], transform="symbol")
    r = make_row(state="open")

    assert bundle.predicates["state_open"](r) is True

    bundle.assigners["state_closed"](r)
    assert r.values["state"] is Symbol("closed")


def test_writer_falls_back_to_the_default_for_none(make_row):
    bundle = _make_power(transform="lowercase", default="OFF")
    r = make_row(power="on")

    bundle.write(r, None)

    assert r.values["power"] == "off"


def test_apply_default_is_transformed_idempotent_and_never_creates_fields(make_row):
    bundle = _make_power(default="OFF", transform="lowercase")
    r = make_row(power=None)

    assert bundle.apply_default(r) is True
    assert r.values["power"] == "off"
    assert bundle.apply_default(r) is False

    missing = make_row(other=1)
    assert bundle.apply_default(missing) is False
    assert missing.values == {"other": 1}


def test_default_factory(make_row):
    bundle = _make_power(default=lambda: "on")
    r = make_row(power=None)

    bundle.apply_default(r)

    assert r.values["power"] == "on"


def test_no_default_means_no_fill(make_row):
    bundle = _make_power()
    r = make_row(power=None)

    assert bundle.has_default is False
    assert bundle.apply_default(r) is False
    assert r.values["power"] is None


def test_values_are_copied_at_registration():
    values = ["on", "off"]
    bundle = register("power", values)

    values.append("standby")

    assert bundle.values == ("on", "off")
    assert "power_standby" not in bundle.predicates


@pytest.mark.parametrize(
    "values",
    [[], ["on", None], ["on", "on"]],
)
def test_bad_value_lists_are_rejected(values):
    with pytest.raises(RestrictedConfigurationError):
        register("power", values)


def test_generated_names_must_be_identifiers():
    assert "status_in_progress" in register("status", ["in progress"]).predicates

    with pytest.raises(RestrictedConfigurationError):
        register("rank", ["1st"], prefix=None)

    with pytest.raises(RestrictedConfigurationError):
        register("kind", ["class"], prefix=None)


def test_values_mapping_to_the_same_name_collide():
    with pytest.raises(RestrictedConfigurationError):
        register("mode", ["a-b", "a_b"])


def test_invalid_attribute_and_transform_are_configuration_errors():
    with pytest.raises(RestrictedConfigurationError):
        register("not an identifier", ["a"])

    with pytest.raises(RestrictedConfigurationError):
        register("power", ["on"], transform="downcase")


def test_validation_descriptor_modes():
    required = _make_power().validation
    assert required.presence is True
    assert required.inclusion == ("on", "off")

    optional = _make_power(validate={"presence": False}).validation
    assert optional.presence is False
    assert optional.inclusion == (None, "", "on", "off")

    assert _make_power(validate=False).validation is None
    assert _make_power(validate=None).validation is None

    with pytest.raises(RestrictedConfigurationError):
        _make_power(validate="sometimes")


def test_resolve_prefix_table():
    assert resolve_prefix(False, "power").enabled is False
    assert resolve_prefix(True, "power").prefix == "power_"
    assert resolve_prefix(True, "power").kind is PrefixKind.DEFAULT
    assert resolve_prefix(True, None).kind is PrefixKind.NONE
    assert resolve_prefix(True, False).enabled is False
    assert resolve_prefix(None, "power").prefix == ""
    assert resolve_prefix("hydro", "power").prefix == "hydro_"
    assert resolve_prefix("hydro", "power").kind is PrefixKind.CUSTOM


def test_resolve_validation_table():
    assert resolve_validation(True) is ValidationMode.PRESENCE_REQUIRED
    assert resolve_validation({"presence": True}) is ValidationMode.PRESENCE_REQUIRED
    assert resolve_validation({"presence": False}) is ValidationMode.PRESENCE_OPTIONAL
    assert resolve_validation("presence_optional") is ValidationMode.PRESENCE_OPTIONAL
    assert resolve_validation(False) is ValidationMode.DISABLED

    with pytest.raises(RestrictedConfigurationError):
        resolve_validation({"allow_blank": True})


def test_name_suffix():
    assert name_suffix("in progress") == "in_progress"
    assert name_suffix(3) == "3"


def test_immutable_values_concatenate_and_mutable_copy_is_independent():
    active = immutable_values(["on", "standby"])
    inactive = immutable_values(["off"])
    everything = active + inactive

    assert everything == ("on", "standby", "off")
    assert isinstance(everything, tuple)

    nested = immutable_values([["a"]])
    copy = mutable_copy(nested)
    copy.append(["b"])
    copy[0].append("z")

    assert nested == (["a"],)
    assert isinstance(copy, list)
