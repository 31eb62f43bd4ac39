"""
Output schema derivation.

``derive_schema`` turns a Python type (pydantic model, dataclass, TypedDict,
builtin container...) into a JSON Schema through ``pydantic.TypeAdapter``
and drops the ``title``/``$schema`` annotations, which only add prompt
tokens. A ready JSON Schema mapping is accepted as-is.

JSON mode on most vendors only produces objects, so non-object outputs
(``str``, ``list[int]``...) are sent wrapped as ``{"data": <schema>}`` and
unwrapped by the validator.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from jsonschema import Draft202012Validator
from jsonschema.exceptions import SchemaError
from pydantic import PydanticUserError, TypeAdapter

from ..base.errors import ErrorCode, ProviderError

WRAPPER_KEY = "data"

_SCHEMA_MAPS = ("properties", "$defs", "definitions", "patternProperties")
_SCHEMA_LISTS = ("anyOf", "allOf", "oneOf", "prefixItems")
_SCHEMA_VALUES = ("items", "additionalProperties", "not", "contains")
_DROPPED = ("title", "$schema")


def _strip(node: Any) -> Any:
    if not isinstance(node, Mapping):
        return node
    out: Dict[str, Any] = {}
    for key, value in node.items():
        if key in _DROPPED:
            continue
        if key in _SCHEMA_MAPS and isinstance(value, Mapping):
            out[key] = {name: _strip(sub) for name, sub in value.items()}
        elif key in _SCHEMA_LISTS and isinstance(value, list):
            out[key] = [_strip(sub) for sub in value]
        elif key in _SCHEMA_VALUES:
            out[key] = _strip(value)
        else:
            out[key] = value
    return out


def derive_schema(output_type: Any) -> Dict[str, Any]:
    """Return the JSON Schema for ``output_type`` (or a copy of a schema mapping)."""
    if isinstance(output_type, Mapping):
        return dict(output_type)
    return _strip(TypeAdapter(output_type).json_schema())


def _is_object_schema(schema: Mapping[str, Any]) -> bool:
    if schema.get("type") == "object":
        return True
    ref = schema.get("$ref")
    if isinstance(ref, str) and ref.startswith("#/$defs/"):
        target = schema.get("$defs", {}).get(ref.split("/")[-1], {})
        return isinstance(target, Mapping) and target.get("type") == "object"
    return False


@dataclass(frozen=True)
class OutputSchema:
    """Everything the validator needs for one output type.

    Attributes:
        schema: JSON Schema describing the value itself.
        wire_schema: Schema sent to the model (``schema`` or its
            ``{"data": ...}`` wrapper).
        wrapped: Whether ``wire_schema`` is the wrapper.
        adapter: ``TypeAdapter`` for coercion; ``None`` for raw schemas.
    """

    schema: Dict[str, Any]
    wire_schema: Dict[str, Any]
    wrapped: bool
    adapter: Optional[TypeAdapter] = None


def build_output_schema(output_type: Any) -> OutputSchema:
    """Derive and check the schema for ``output_type``.

    Raises ``ProviderError`` with code ``VALIDATION`` for an invalid schema
    mapping or a type pydantic cannot describe.
    """
    try:
        schema = derive_schema(output_type)
        Draft202012Validator.check_schema(schema)
        adapter = None if isinstance(output_type, Mapping) else TypeAdapter(output_type)
    except (SchemaError, PydanticUserError) as exc:
        raise ProviderError(
            f"unusable output type {output_type!r}: {exc}",
            code=ErrorCode.VALIDATION,
            raw=exc,
        ) from exc
    if _is_object_schema(schema):
        return OutputSchema(schema=schema, wire_schema=schema, wrapped=False, adapter=adapter)
    defs = schema.pop("$defs", None)
    wire: Dict[str, Any] = {
        "type": "object",
        "properties": {WRAPPER_KEY: schema},
        "required": [WRAPPER_KEY],
    }
    if defs:
        wire["$defs"] = defs
        schema = {**schema, "$defs": defs}
    return OutputSchema(schema=schema, wire_schema=wire, wrapped=True, adapter=adapter)


__all__ = ["WRAPPER_KEY", "derive_schema", "OutputSchema", "build_output_schema"]
