"""Tests for schema-guided normalization."""

import pytest

from tbridge.core.content.normalizer import (
    is_array_schema,
    is_object_schema,
    normalize,
    normalize_primitive,
    parse_with_schema,
)
from tbridge.core.content.value import (
    ArrayValue,
    BoolValue,
    NullValue,
    NumberValue,
    StringValue,
    StructureValue,
)

_PERSON = {
    "type": "object",
    "properties": {
        "name": {"type": "string"},
        "age": {"type": "integer"},
        "tags": {"type": "array", "items": {"type": "string"}},
    },
    "required": ["name", "age"],
}


class TestArrayRule:
    @pytest.mark.parametrize(
        "items",
        [{"type": "string"}, {"type": "object", "properties": {"a": {}}}, {}],
    )
    def test_empty_object_is_empty_array(self, items: dict) -> None:
        assert normalize({}, {"type": "array", "items": items}) == ArrayValue()

    def test_elements_use_items_schema(self) -> None:
        schema = {"type": "array", "items": {"type": "array", "items": {"type": "string"}}}
        result = normalize([{}, ["a"]], schema)
        assert result == ArrayValue(
            elements=[ArrayValue(), ArrayValue(elements=[StringValue(value="a")])]
        )

    def test_null_stays_null(self) -> None:
        assert normalize(None, {"type": "array"}) == NullValue()

    def test_other_values_become_empty_array(self) -> None:
        assert normalize("oops", {"type": "array"}) == ArrayValue()
        assert normalize({"a": 1}, {"type": "array"}) == ArrayValue()

    def test_type_list(self) -> None:
        assert normalize({}, {"type": ["array", "null"]}) == ArrayValue()


class TestObjectRule:
    def test_keys_are_lexical(self) -> None:
        result = normalize({"name": "Ann", "age": 30, "tags": []}, _PERSON)
        assert isinstance(result, StructureValue)
        assert result.ordered_keys == ["age", "name", "tags"]
        assert result["age"] == NumberValue(value=30)
        assert result["tags"] == ArrayValue()

    def test_missing_optional_is_null(self) -> None:
        result = normalize({"name": "Ann", "age": 30}, _PERSON)
        assert isinstance(result, StructureValue)
        assert result["tags"] == NullValue()

    def test_missing_required_is_omitted(self) -> None:
        result = normalize({"age": 30}, _PERSON)
        assert isinstance(result, StructureValue)
        assert "name" not in result
        assert result.ordered_keys == ["age", "name", "tags"]
        assert result.to_python() == {"age": 30, "tags": None}

    def test_exactly_required_properties(self) -> None:
        result = normalize({"name": "Ann", "age": 1}, _PERSON)
        assert isinstance(result, StructureValue)
        assert result.ordered_keys == sorted(_PERSON["properties"])

    def test_undeclared_raw_keys_dropped(self) -> None:
        result = normalize({"name": "Ann", "age": 1, "extra": True}, _PERSON)
        assert isinstance(result, StructureValue)
        assert "extra" not in result

    def test_non_object_becomes_empty_structure(self) -> None:
        assert normalize("text", _PERSON) == StructureValue()
        assert normalize([1], _PERSON) == StructureValue()

    def test_null_stays_null(self) -> None:
        assert normalize(None, _PERSON) == NullValue()

    def test_nested_empty_array_quirk(self) -> None:
        result = normalize({"name": "Ann", "age": 2, "tags": {}}, _PERSON)
        assert isinstance(result, StructureValue)
        assert result["tags"] == ArrayValue()

    def test_malformed_required_ignored(self) -> None:
        schema = {"type": "object", "properties": {"a": {}}, "required": "a"}
        assert normalize({}, schema) == StructureValue(
            properties={"a": NullValue()}, ordered_keys=["a"]
        )


class TestUnionRule:
    def test_array_branch_catches_empty_object(self) -> None:
        schema = {
            "anyOf": [
                {"type": "object", "properties": {"x": {"type": "string"}}},
                {"type": "array", "items": {"type": "string"}},
            ]
        }
        assert normalize({}, schema) == ArrayValue()

    def test_first_non_null_branch_wins(self) -> None:
        schema = {"anyOf": [{"type": "null"}, {"type": "string"}]}
        assert normalize("x", schema) == StringValue(value="x")

    def test_object_branch(self) -> None:
        schema = {
            "anyOf": [
                {"type": "object", "properties": {"x": {"type": "string"}}},
                {"type": "null"},
            ]
        }
        result = normalize({"x": "1"}, schema)
        assert result == StructureValue(
            properties={"x": StringValue(value="1")}, ordered_keys=["x"]
        )

    def test_all_null_falls_back_to_primitive(self) -> None:
        schema = {"anyOf": [{"type": "object", "properties": {}}]}
        assert normalize(None, schema) == NullValue()


class TestPrimitiveFallback:
    def test_bool_before_number(self) -> None:
        assert normalize(True, {}) == BoolValue(value=True)
        assert normalize(1, {}) == NumberValue(value=1)

    def test_nested_sorted(self) -> None:
        result = normalize_primitive({"b": {"d": 1, "c": 2}, "a": 0})
        assert isinstance(result, StructureValue)
        assert result.ordered_keys == ["a", "b"]
        inner = result["b"]
        assert isinstance(inner, StructureValue)
        assert inner.ordered_keys == ["c", "d"]

    def test_non_dict_schema(self) -> None:
        assert normalize("x", "not-a-schema") == StringValue(value="x")


class TestIdempotence:
    @pytest.mark.parametrize(
        ("raw", "schema"),
        [
            ({"name": "Ann", "age": 3, "tags": {}}, _PERSON),
            ({"age": 3}, _PERSON),
            ({}, {"type": "array", "items": {"type": "string"}}),
            ({"z": [1, {"b": 2}]}, {}),
        ],
    )
    def test_normalizing_twice_is_stable(self, raw: object, schema: dict) -> None:
        once = normalize(raw, schema)
        assert normalize(once, schema) == once


class TestParseWithSchema:
    def test_valid_json(self) -> None:
        result = parse_with_schema('{"name":"Ann","age":5}', _PERSON)
        assert isinstance(result, StructureValue)
        assert result["name"] == StringValue(value="Ann")

    def test_invalid_json_returns_none(self) -> None:
        assert parse_with_schema("not json", _PERSON) is None

    def test_empty_text_returns_none(self) -> None:
        assert parse_with_schema("", _PERSON) is None


class TestSchemaChecks:
    def test_array_schema(self) -> None:
        assert is_array_schema({"type": "array"})
        assert is_array_schema({"type": ["null", "array"]})
        assert not is_array_schema({"type": "object"})
        assert not is_array_schema({})

    def test_object_schema(self) -> None:
        assert is_object_schema({"type": "object"})
        assert not is_object_schema({"properties": {}})
