"""JSON Schema adjustments required by the provider's wire format.

Strict structured outputs require ``additionalProperties: false`` on every
object that declares properties; tool input schemas get the same treatment.
"""

from __future__ import annotations

import copy
from typing import Any


def set_additional_properties_false(schema: Any) -> Any:
    """Return a copy of *schema* with ``additionalProperties: false`` on objects.

    Only object schemas that declare ``properties`` are touched. The walk
    descends into ``properties``, ``items`` and ``anyOf``.
    """
    result = copy.deepcopy(schema)
    _close_objects(result)
    return result


def _close_objects(schema: Any) -> None:
    if not isinstance(schema, dict):
        return

    properties = schema.get("properties")
    if schema.get("type") == "object" and isinstance(properties, dict):
        schema["additionalProperties"] = False

    if isinstance(properties, dict):
        for sub in properties.values():
            _close_objects(sub)

    items = schema.get("items")
    if isinstance(items, dict):
        _close_objects(items)

    branches = schema.get("anyOf")
    if isinstance(branches, list):
        for branch in branches:
            _close_objects(branch)


def is_object_rooted(schema: dict[str, Any]) -> bool:
    """True if the schema root describes an object.

    An untyped root counts when it declares ``properties``.
    """
    declared = schema.get("type")
    if declared is None:
        return isinstance(schema.get("properties"), dict)
    if isinstance(declared, list):
        return "object" in declared
    return declared == "object"
