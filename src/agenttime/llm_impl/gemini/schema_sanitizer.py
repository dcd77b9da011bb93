"""
Adapts tool input schemas to what the Gemini function-declaration API accepts.

Gemini rejects ``additionalProperties`` and ``required`` entries that name undefined
properties, so both are cleaned recursively.
"""

from functools import singledispatch
from typing import Any, Dict, cast

_UNSUPPORTED_KEYS = frozenset({"additionalProperties", "$schema", "examples"})


def sanitize(schema: Dict[str, Any]) -> Dict[str, Any]:
    """Return a sanitized copy of a tool input schema. The input is not modified."""
    return cast(Dict[str, Any], _sanitize(schema))


@singledispatch
def _sanitize(node: Any) -> Any:
    return node


@_sanitize.register(dict)
def _(node: dict) -> dict:
    cleaned = {key: _sanitize(value) for key, value in node.items() if key not in _UNSUPPORTED_KEYS}

    properties = cleaned.get("properties")
    if "required" in cleaned and isinstance(properties, dict):
        required = [name for name in cleaned["required"] if name in properties]
        if required:
            cleaned["required"] = required
        else:
            del cleaned["required"]
    return cleaned


@_sanitize.register(list)
def _(node: list) -> list:
    return [_sanitize(item) for item in node]
