"""
Output validation and coercion.

``validate_text`` runs a model answer through:

1. cleanup: markdown fences and surrounding prose are removed, keeping the
   first balanced JSON value;
2. ``json.loads``;
3. ``jsonschema`` (Draft 2020-12); ``best_match`` picks the error reported
   back to the model, with its JSON path;
4. ``pydantic.TypeAdapter.validate_python`` coercion into the output type.

A ``{"data": <value>}`` wrapper is removed once: always for wrapped
(non-object) schemas, and for object schemas only when the raw value fails.
The result is a ``ValidationOutcome``; this module never raises for bad
model output.
"""

from __future__ import annotations

import json
from typing import Any, Iterable, Mapping, Optional, Tuple

from jsonschema import Draft202012Validator
from jsonschema.exceptions import best_match
from pydantic import ValidationError

from ..base.models_parts.outcome import ValidationOutcome
from ..base.utils.json_text import extract_json_text, remove_code_fences
from .schema import WRAPPER_KEY, OutputSchema

_FRAGMENT_CHARS = 500


def json_path(parts: Iterable[Any]) -> str:
    """Render a location as ``$.a[0].b``."""
    out = "$"
    for part in parts:
        out += f"[{part}]" if isinstance(part, int) else f".{part}"
    return out


def _decode(text: str) -> Tuple[bool, Any]:
    candidate = extract_json_text(remove_code_fences(text))
    try:
        return True, json.loads(candidate)
    except json.JSONDecodeError as exc:
        return False, exc


def _schema_error(value: Any, schema: Mapping[str, Any]) -> Optional[ValidationOutcome]:
    error = best_match(Draft202012Validator(schema).iter_errors(value))
    if error is None:
        return None
    return ValidationOutcome.failed(
        error.message,
        path=json_path(error.absolute_path),
        fragment=error.instance,
        data=value,
    )


def _coerce(value: Any, output: OutputSchema) -> ValidationOutcome:
    if output.adapter is None:
        return ValidationOutcome.succeeded(value, value)
    try:
        coerced = output.adapter.validate_python(value)
    except ValidationError as exc:
        first = exc.errors()[0]
        return ValidationOutcome.failed(
            str(first.get("msg")),
            path=json_path(first.get("loc", ())),
            fragment=first.get("input"),
            data=value,
        )
    return ValidationOutcome.succeeded(coerced, value)


def _check(value: Any, output: OutputSchema) -> ValidationOutcome:
    failure = _schema_error(value, output.schema)
    if failure is not None:
        return failure
    return _coerce(value, output)


def _unwrapped(data: Any) -> Tuple[bool, Any]:
    if isinstance(data, Mapping) and len(data) == 1 and WRAPPER_KEY in data:
        return True, data[WRAPPER_KEY]
    return False, data


def validate_text(text: str, output: OutputSchema) -> ValidationOutcome:
    """Validate and coerce one model answer against ``output``."""
    ok, data = _decode(text)
    if not ok:
        return ValidationOutcome.failed(
            f"answer is not valid JSON: {data.msg}",
            path="$",
            fragment=text[:_FRAGMENT_CHARS],
        )
    if output.wrapped:
        _, value = _unwrapped(data)
        return _check(value, output)
    outcome = _check(data, output)
    if outcome.ok:
        return outcome
    was_wrapped, inner = _unwrapped(data)
    if was_wrapped:
        retry = _check(inner, output)
        if retry.ok:
            return retry
    return outcome


__all__ = ["json_path", "validate_text"]
