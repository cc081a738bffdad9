"""Schema-guided normalization of raw JSON into content trees.

The model's structured output is loosely typed JSON. ``normalize`` walks it
alongside the JSON Schema that requested it and produces a ``Value`` with
the schema's shape. Known provider quirks are corrected on the way:

- an empty array is sometimes serialized as ``{}``;
- optional values arrive as union (``anyOf``) schemas, so the first branch
  that yields something non-null wins.

Normalization is total: malformed input degrades to the most conservative
structurally valid value and never raises.
"""

from __future__ import annotations

import json
from typing import Any

from tbridge.core.content.value import (
    ArrayValue,
    NullValue,
    StructureValue,
    Value,
    from_python,
    is_value,
)


def normalize(raw: Any, schema: Any) -> Value:
    """Convert *raw* decoded JSON into a ``Value`` guided by *schema*.

    *raw* may also be an already-normalized ``Value``; it is flattened with
    ``to_python()`` first, so normalizing twice gives the same result.
    """
    if is_value(raw):
        raw = raw.to_python()
    guide = schema if isinstance(schema, dict) else {}

    if is_array_schema(guide):
        return _normalize_array(raw, guide)

    if is_object_schema(guide):
        return _normalize_object(raw, guide)

    branches = guide.get("anyOf")
    if isinstance(branches, list):
        return _normalize_union(raw, [b for b in branches if isinstance(b, dict)])

    return normalize_primitive(raw)


def parse_with_schema(text: str, schema: Any) -> Value | None:
    """Parse *text* as JSON and normalize it against *schema*.

    Returns ``None`` when *text* is not valid JSON.
    """
    try:
        raw = json.loads(text)
    except (json.JSONDecodeError, TypeError, ValueError):
        return None
    return normalize(raw, schema)


# ---------------------------------------------------------------------------
# Schema type checks
# ---------------------------------------------------------------------------


def _declares_type(schema: dict[str, Any], name: str) -> bool:
    declared = schema.get("type")
    if isinstance(declared, str):
        return declared == name
    if isinstance(declared, list):
        return name in declared
    return False


def is_array_schema(schema: dict[str, Any]) -> bool:
    """True if the schema's ``type`` is (or includes) ``array``."""
    return _declares_type(schema, "array")


def is_object_schema(schema: dict[str, Any]) -> bool:
    """True if the schema's ``type`` is (or includes) ``object``."""
    return _declares_type(schema, "object")


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------


def _items_schema(schema: dict[str, Any]) -> dict[str, Any]:
    items = schema.get("items")
    return items if isinstance(items, dict) else {}


def _recover_array(raw: Any, schema: dict[str, Any]) -> ArrayValue | None:
    """Array recovery shared by the array rule and union resolution."""
    if isinstance(raw, dict) and not raw:
        return ArrayValue()
    if isinstance(raw, list):
        items = _items_schema(schema)
        return ArrayValue(elements=[normalize(element, items) for element in raw])
    return None


def _normalize_array(raw: Any, schema: dict[str, Any]) -> Value:
    recovered = _recover_array(raw, schema)
    if recovered is not None:
        return recovered
    if raw is None:
        return NullValue()
    return ArrayValue()


def _normalize_object(raw: Any, schema: dict[str, Any]) -> Value:
    if raw is None:
        return NullValue()
    if not isinstance(raw, dict):
        return StructureValue()

    declared = schema.get("properties")
    properties_schema: dict[str, Any] = declared if isinstance(declared, dict) else {}
    required_raw = schema.get("required")
    required = (
        {r for r in required_raw if isinstance(r, str)} if isinstance(required_raw, list) else set()
    )

    converted: dict[str, Value] = {}
    ordered_keys: list[str] = []
    for name in sorted(properties_schema):
        ordered_keys.append(name)
        if name in raw:
            converted[name] = normalize(raw[name], properties_schema[name])
        elif name not in required:
            converted[name] = NullValue()
    return StructureValue(properties=converted, ordered_keys=ordered_keys)


def _normalize_union(raw: Any, branches: list[dict[str, Any]]) -> Value:
    # {} -> [] must be caught before generic branch matching, or an object
    # branch would claim the empty object first.
    for branch in branches:
        if is_array_schema(branch):
            recovered = _recover_array(raw, branch)
            if recovered is not None:
                return recovered

    for branch in branches:
        result = normalize(raw, branch)
        if not isinstance(result, NullValue):
            return result

    return normalize_primitive(raw)


def normalize_primitive(raw: Any) -> Value:
    """Structural conversion with no schema to guide it.

    Booleans are recognised by type before numbers. Nested objects get
    lexically sorted keys.
    """
    if is_value(raw):
        raw = raw.to_python()
    return from_python(raw)
