"""Content trees and schema-guided normalization."""

from tbridge.core.content.normalizer import normalize, normalize_primitive, parse_with_schema
from tbridge.core.content.value import (
    ArrayValue,
    BoolValue,
    NullValue,
    NumberValue,
    StringValue,
    StructureValue,
    Value,
    from_python,
    structure,
    to_json,
)

__all__ = [
    "ArrayValue",
    "BoolValue",
    "NullValue",
    "NumberValue",
    "StringValue",
    "StructureValue",
    "Value",
    "from_python",
    "normalize",
    "normalize_primitive",
    "parse_with_schema",
    "structure",
    "to_json",
]
