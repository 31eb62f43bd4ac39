"""Cleanup of model text before it is parsed as JSON.

Models often wrap JSON in markdown fences, prepend prose, emit ``<think>``
reasoning blocks (Perplexity sonar-reasoning, DeepSeek reasoner) or echo the
schema structure back (``{"properties": {...}}``, ``{"items": [...]}``), which
is common with Azure deployments. These helpers undo that.

All functions are pure and never raise on malformed input; they return the
best cleaned text they can.
"""
from __future__ import annotations

import json
import re
from typing import Any

_FENCE_RE = re.compile(r"```(?:json|JSON)?\s*(.*?)\s*```", re.DOTALL)
_THINK_RE = re.compile(r"<think>.*?</think>", re.DOTALL)


def remove_code_fences(text: str) -> str:
    """Return the content of the first fenced block, or ``text`` stripped."""
    match = _FENCE_RE.search(text)
    if match:
        return match.group(1).strip()
    stripped = text.strip()
    # unterminated fence at the start of a truncated answer
    if stripped.startswith("```"):
        stripped = stripped[3:]
        if stripped[:4].lower() == "json":
            stripped = stripped[4:]
    return stripped.strip()


def remove_think_blocks(text: str) -> str:
    """Drop ``<think>...</think>`` reasoning sections."""
    return _THINK_RE.sub("", text).strip()


def extract_json_text(text: str) -> str:
    """Return the first balanced JSON object/array embedded in ``text``.

    Falls back to ``text`` when nothing balanced is found, so the JSON
    decoder can report a precise error.
    """
    candidate = text.strip()
    if not candidate or candidate[0] in "{[":
        return candidate
    decoder = json.JSONDecoder()
    for idx, ch in enumerate(candidate):
        if ch not in "{[":
            continue
        try:
            _, end = decoder.raw_decode(candidate[idx:])
        except json.JSONDecodeError:
            continue
        return candidate[idx: idx + end]
    return candidate


def _unwrap_properties(value: Any) -> Any:
    if isinstance(value, dict):
        if len(value) == 1 and isinstance(value.get("properties"), dict):
            return _unwrap_properties(value["properties"])
        return {k: _unwrap_properties(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_unwrap_properties(v) for v in value]
    return value


def _unwrap_items(value: Any) -> Any:
    if isinstance(value, dict):
        out = {}
        for k, v in value.items():
            v = _unwrap_items(v)
            if isinstance(v, dict) and len(v) == 1 and isinstance(v.get("items"), list):
                v = v["items"]
            out[k] = v
        return out
    if isinstance(value, list):
        return [_unwrap_items(v) for v in value]
    return value


def remove_schema_wrappers(text: str) -> str:
    """Remove ``properties``/``items`` wrapper objects echoed from the schema.

    Non-JSON input is returned unchanged.
    """
    try:
        value = json.loads(text)
    except json.JSONDecodeError:
        return text
    cleaned = _unwrap_items(_unwrap_properties(value))
    if cleaned == value:
        return text
    return json.dumps(cleaned, ensure_ascii=False)


def sanitize_model_output(text: str, *, think_blocks: bool = False, schema_wrappers: bool = False) -> str:
    """Apply the cleanup steps a provider needs, in a fixed order."""
    out = remove_think_blocks(text) if think_blocks else text
    out = remove_code_fences(out)
    if schema_wrappers:
        out = remove_schema_wrappers(out)
    return out


__all__ = [
    "remove_code_fences",
    "remove_think_blocks",
    "extract_json_text",
    "remove_schema_wrappers",
    "sanitize_model_output",
]
