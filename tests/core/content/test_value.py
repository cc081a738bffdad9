"""Tests for the content tree value types."""

import pytest
from pydantic import TypeAdapter, ValidationError

from tbridge.core.content.value import (
    ArrayValue,
    BoolValue,
    NullValue,
    NumberValue,
    StringValue,
    StructureValue,
    Value,
    from_python,
    is_value,
    structure,
    to_json,
)


class TestFromPython:
    def test_null(self) -> None:
        assert from_python(None) == NullValue()

    def test_bool_is_not_number(self) -> None:
        assert from_python(True) == BoolValue(value=True)
        assert from_python(False) == BoolValue(value=False)

    def test_int_becomes_number(self) -> None:
        assert from_python(3) == NumberValue(value=3.0)

    def test_float(self) -> None:
        assert from_python(2.5) == NumberValue(value=2.5)

    def test_string(self) -> None:
        assert from_python("hi") == StringValue(value="hi")

    def test_list(self) -> None:
        result = from_python([1, "a", None])
        assert isinstance(result, ArrayValue)
        assert result.elements == [NumberValue(value=1), StringValue(value="a"), NullValue()]

    def test_dict_keys_sorted(self) -> None:
        result = from_python({"b": 1, "a": 2, "c": 3})
        assert isinstance(result, StructureValue)
        assert result.ordered_keys == ["a", "b", "c"]

    def test_nested(self) -> None:
        result = from_python({"outer": {"z": [True], "y": None}})
        assert isinstance(result, StructureValue)
        inner = result["outer"]
        assert isinstance(inner, StructureValue)
        assert inner.ordered_keys == ["y", "z"]
        assert inner["z"] == ArrayValue(elements=[BoolValue(value=True)])

    def test_value_passes_through(self) -> None:
        value = StringValue(value="x")
        assert from_python(value) is value

    def test_huge_int_does_not_raise(self) -> None:
        result = from_python(10**400)
        assert isinstance(result, StringValue)

    def test_unknown_type_becomes_string(self) -> None:
        assert from_python(object) == StringValue(value=str(object))


class TestToPython:
    def test_integral_number_is_int(self) -> None:
        assert NumberValue(value=4.0).to_python() == 4
        assert isinstance(NumberValue(value=4.0).to_python(), int)

    def test_fractional_number_stays_float(self) -> None:
        assert NumberValue(value=0.5).to_python() == 0.5

    def test_structure_uses_ordered_keys(self) -> None:
        value = StructureValue(
            properties={"a": NumberValue(value=1), "b": NumberValue(value=2)},
            ordered_keys=["b", "a"],
        )
        assert list(value.to_python()) == ["b", "a"]

    def test_structure_skips_missing_ordered_keys(self) -> None:
        value = StructureValue(
            properties={"a": NullValue()},
            ordered_keys=["missing", "a"],
        )
        assert value.to_python() == {"a": None}

    def test_structure_appends_unordered_keys_sorted(self) -> None:
        value = StructureValue(
            properties={"z": NullValue(), "y": NullValue(), "a": NullValue()},
            ordered_keys=["z"],
        )
        assert list(value.to_python()) == ["z", "a", "y"]


class TestToJson:
    def test_compact(self) -> None:
        assert to_json(from_python({"a": [1, 2], "b": None})) == '{"a":[1,2],"b":null}'

    def test_non_ascii_kept(self) -> None:
        assert to_json(StringValue(value="東京")) == '"東京"'

    def test_key_order_follows_structure(self) -> None:
        assert to_json(structure(name="x", age=3)) == '{"name":"x","age":3}'


class TestStructureAccess:
    def test_get_and_contains(self) -> None:
        value = structure(city="Tokyo")
        assert "city" in value
        assert "country" not in value
        assert value.get("city") == StringValue(value="Tokyo")
        assert value.get("country") is None

    def test_getitem_missing_raises(self) -> None:
        with pytest.raises(KeyError):
            structure()["nope"]


class TestDiscriminatedUnion:
    def test_validate_from_dict(self) -> None:
        adapter: TypeAdapter[Value] = TypeAdapter(Value)
        parsed = adapter.validate_python(
            {"kind": "array", "elements": [{"kind": "number", "value": 1}]}
        )
        assert parsed == ArrayValue(elements=[NumberValue(value=1)])

    def test_frozen(self) -> None:
        value = StringValue(value="a")
        with pytest.raises(ValidationError):
            value.value = "b"  # type: ignore[misc]

    def test_is_value(self) -> None:
        assert is_value(NullValue())
        assert not is_value(None)
        assert not is_value({"kind": "null"})
