"""Content tree — the provider-agnostic structured value.

A ``Value`` is a tagged union used both for tool-call arguments and for
structured-output payloads. Structures carry an explicit ``ordered_keys``
list because key order is part of the value's identity: it comes from the
governing schema when there is one, otherwise from sorted keys.
"""

from __future__ import annotations

import json
import math
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Variants
# ---------------------------------------------------------------------------


class NullValue(BaseModel):
    """JSON ``null``."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["null"] = "null"

    def to_python(self) -> Any:
        return None


class BoolValue(BaseModel):
    """JSON ``true`` / ``false``."""

    model_config = ConfigDict(frozen=True, strict=True)

    kind: Literal["bool"] = "bool"
    value: bool

    def to_python(self) -> Any:
        return self.value


class NumberValue(BaseModel):
    """A JSON number, held at float64 precision."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["number"] = "number"
    value: float

    def to_python(self) -> Any:
        number = float(self.value)
        if math.isfinite(number) and number.is_integer():
            return int(number)
        return number


class StringValue(BaseModel):
    """A JSON string."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["string"] = "string"
    value: str

    def to_python(self) -> Any:
        return self.value


class ArrayValue(BaseModel):
    """An ordered list of values."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["array"] = "array"
    elements: list[Value] = Field(default_factory=list)

    def to_python(self) -> Any:
        return [element.to_python() for element in self.elements]


class StructureValue(BaseModel):
    """A keyed structure with an explicit key order.

    ``ordered_keys`` may name keys that have no entry in ``properties``
    (a required property the model left out); those are skipped when the
    structure is serialized.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["structure"] = "structure"
    properties: dict[str, Value] = Field(default_factory=dict)
    ordered_keys: list[str] = Field(default_factory=list)

    def get(self, key: str) -> Value | None:
        return self.properties.get(key)

    def __getitem__(self, key: str) -> Value:
        return self.properties[key]

    def __contains__(self, key: object) -> bool:
        return key in self.properties

    def to_python(self) -> Any:
        result: dict[str, Any] = {}
        for key in self.ordered_keys:
            if key in self.properties:
                result[key] = self.properties[key].to_python()
        # Keys outside ordered_keys still belong to the value; append sorted.
        for key in sorted(self.properties):
            if key not in result:
                result[key] = self.properties[key].to_python()
        return result


Value = Annotated[
    Union[NullValue, BoolValue, NumberValue, StringValue, ArrayValue, StructureValue],
    Field(discriminator="kind"),
]

ArrayValue.model_rebuild()
StructureValue.model_rebuild()

VALUE_TYPES = (NullValue, BoolValue, NumberValue, StringValue, ArrayValue, StructureValue)


# ---------------------------------------------------------------------------
# Conversion helpers
# ---------------------------------------------------------------------------


def is_value(obj: object) -> bool:
    """Return True if *obj* is one of the content-tree variants."""
    return isinstance(obj, VALUE_TYPES)


def from_python(obj: Any) -> Value:
    """Build a ``Value`` from decoded JSON without a schema.

    ``bool`` is tested before numbers because Python booleans are ints.
    Object keys are ordered lexically.
    """
    if is_value(obj):
        return obj
    if obj is None:
        return NullValue()
    if isinstance(obj, bool):
        return BoolValue(value=obj)
    if isinstance(obj, (int, float)):
        try:
            return NumberValue(value=float(obj))
        except OverflowError:
            return StringValue(value=str(obj))
    if isinstance(obj, str):
        return StringValue(value=obj)
    if isinstance(obj, (list, tuple)):
        return ArrayValue(elements=[from_python(item) for item in obj])
    if isinstance(obj, dict):
        keys = sorted(str(k) for k in obj)
        return StructureValue(
            properties={str(k): from_python(v) for k, v in obj.items()},
            ordered_keys=keys,
        )
    return StringValue(value=str(obj))


def to_json(value: Value) -> str:
    """Serialize a value as canonical compact JSON."""
    return json.dumps(value.to_python(), separators=(",", ":"), ensure_ascii=False)


def structure(**properties: Any) -> StructureValue:
    """Convenience constructor: keyword order becomes the key order."""
    return StructureValue(
        properties={key: from_python(val) for key, val in properties.items()},
        ordered_keys=list(properties),
    )
