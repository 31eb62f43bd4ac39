"""Corrective retry feedback.

A failed validation becomes a ``Correction`` on a new ``CompletionRequest``:
the original request is kept and only the last rejected output is attached,
together with the validation error and its JSON path.
"""

from __future__ import annotations

import json

from ..base.models_parts.outcome import ValidationOutcome
from ..base.models_parts.request import CompletionRequest

_FRAGMENT_CHARS = 200


def describe_failure(outcome: ValidationOutcome) -> str:
    """One-line description of a validation failure, quoting the offending value."""
    reason = outcome.reason or "answer does not match the output json schema"
    if outcome.fragment is None:
        return reason
    if isinstance(outcome.fragment, str):
        shown = outcome.fragment
    else:
        shown = json.dumps(outcome.fragment, ensure_ascii=False, default=str)
    if len(shown) > _FRAGMENT_CHARS:
        shown = shown[:_FRAGMENT_CHARS] + "..."
    return f"{reason} (offending value: {shown})"


def build_correction(request: CompletionRequest, previous_output: str, outcome: ValidationOutcome) -> CompletionRequest:
    """Return the request for the next attempt after ``outcome`` failed."""
    return request.with_correction(previous_output, describe_failure(outcome), outcome.path)


__all__ = ["describe_failure", "build_correction"]
