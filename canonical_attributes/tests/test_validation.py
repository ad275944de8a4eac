import pytest

from canonical_attributes.core.restricted import register
from canonical_attributes.core.validation import (
    ErrorKind,
    FieldError,
    InclusionRule,
    PresenceRule,
    ValidationDescriptor,
    ValidationEngine,
    ValidationMode,
    ValidationRegistry,
    ValidationResult,
    ValidationRule,
    rules_for_descriptor,
)


def _make_engine(**options):
    descriptor = register("power", ["on", "off"], **options).validation
    return ValidationEngine(rules=rules_for_descriptor(descriptor))


def test_required_presence_rejects_none_with_errors_on_the_attribute(make_row):
    result = _make_engine().evaluate(make_row(power=None))

    assert not result.ok
    assert {e.attribute for e in result.errors} == {"power"}
    assert [e.kind for e in result.errors] == [ErrorKind.PRESENCE, ErrorKind.INCLUSION]


def test_required_presence_rejects_whitespace(make_row):
    result = _make_engine().evaluate(make_row(power="  "))

    assert result.for_attribute("power")[0].kind is ErrorKind.PRESENCE


def test_permitted_value_passes(make_row):
    assert _make_engine().evaluate(make_row(power="on")).ok


@pytest.mark.parametrize("blank", [None, ""])
def test_optional_presence_accepts_blanks(blank, make_row):
    assert _make_engine(validate={"presence": False}).evaluate(make_row(power=blank)).ok


def test_optional_presence_still_rejects_unlisted_values(make_row):
    result = _make_engine(validate={"presence": False}).evaluate(make_row(power="invalid"))

    assert result.messages() == {"power": ["'invalid' is not a valid power"]}
    assert result.full_messages() == ["Power 'invalid' is not a valid power"]


def test_custom_inclusion_message(make_row):
    result = _make_engine(message="{value} is not a {attribute} setting").evaluate(make_row(power="dim"))

    assert result.errors[0].message == "dim is not a power setting"


def test_unloaded_field_validates_as_none(make_row):
    result = _make_engine().evaluate(make_row())

    assert len(result.errors) == 2
    assert result.errors[1].message == "'' is not a valid power"


def test_engine_rejects_non_rules():
    with pytest.raises(TypeError):
        ValidationEngine(rules="presence")

    with pytest.raises(TypeError):
        ValidationEngine(rules=[object()])


def test_rule_errors_propagate(make_row):
    class _Exploding(ValidationRule):
        def evaluate(self, record):
            raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        ValidationEngine(rules=[_Exploding()]).evaluate(make_row())


def test_field_error_serialization():
    err = FieldError(attribute="power_mode", kind=ErrorKind.PRESENCE, message="can't be blank", value=None)

    assert err.full_message() == "Power mode can't be blank"
    assert err.to_dict() == {
        "attribute": "power_mode",
        "kind": "presence",
        "message": "can't be blank",
        "value": None,
    }


def test_validation_result_truthiness_and_dict():
    empty = ValidationResult()
    assert empty
    assert empty.to_dict() == {"ok": True, "errors": []}

    failed = ValidationResult(errors=(FieldError("a", ErrorKind.INCLUSION, "bad", 1),))
    assert not failed
    assert failed.to_dict()["errors"][0]["kind"] == "inclusion"


def test_descriptor_for_disabled_mode_is_none():
    assert ValidationDescriptor.for_values("power", ("on",), ValidationMode.DISABLED) is None


def test_rules_for_descriptor_orders_presence_first():
    descriptor = ValidationDescriptor(attribute="power", inclusion=("on",))

    rules = rules_for_descriptor(descriptor)

    assert isinstance(rules[0], PresenceRule)
    assert isinstance(rules[1], InclusionRule)
    assert len(rules_for_descriptor(ValidationDescriptor("power", ("on",), presence=False))) == 1


def test_registry_replaces_descriptor_per_attribute_and_inherits_from_parent(make_row):
    parent = ValidationRegistry()
    parent.register_descriptor(ValidationDescriptor(attribute="power", inclusion=("on", "off")))
    parent.register(PresenceRule(attribute="name"))

    child = ValidationRegistry(parent)
    child.register_descriptor(ValidationDescriptor(attribute="power", inclusion=("on",), presence=False))

    assert parent.descriptor_for("power").inclusion == ("on", "off")
    assert child.descriptor_for("power").inclusion == ("on",)
    assert len(parent.get_rules()) == 3
    assert len(child.get_rules()) == 2

    result = child.engine().evaluate(make_row(name="lamp", power="off"))
    assert [e.attribute for e in result.errors] == ["power"]
