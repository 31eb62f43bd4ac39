"""Token usage extraction from vendor response envelopes.

Converts vendor specific usage keys into the canonical ``TokenUsage``:

    OpenAI chat / Azure / Mistral / DeepSeek / Perplexity / xAI
        ``usage.prompt_tokens``, ``usage.completion_tokens``, ``usage.total_tokens``
    OpenAI responses
        ``usage.input_tokens``, ``usage.output_tokens``, ``usage.total_tokens``
    Anthropic
        ``usage.input_tokens``, ``usage.output_tokens``
    Google
        ``usageMetadata.promptTokenCount``, ``candidatesTokenCount``, ``totalTokenCount``
    Bedrock
        ``usage.inputTokens``, ``usage.outputTokens``, ``usage.totalTokens``

Design:
1. Non-intrusive: absent usage yields zeros rather than an error.
2. Coercion: values are coerced with ``int``; invalid or negative values
   count as absent.
3. Derived total: a missing total is derived from the two components.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from ..models_parts.answer import TokenUsage


def _coerce_int(value: Any) -> Optional[int]:
    """Coerce ``value`` to a non-negative ``int`` or ``None``."""
    if value is None or isinstance(value, bool):
        return None
    try:
        iv = int(value)
    except (TypeError, ValueError):
        return None
    return iv if iv >= 0 else None


def _finalize_usage(prompt: Optional[int], completion: Optional[int], total: Optional[int]) -> TokenUsage:
    """Build ``TokenUsage`` deriving ``total`` when only the parts are known."""
    p = prompt or 0
    c = completion or 0
    if total is None:
        total = p + c
    return TokenUsage(prompt=p, completion=c, total=total)


def usage_from_mapping(
    usage: Any,
    *,
    prompt_key: str,
    completion_key: str,
    total_key: Optional[str] = None,
) -> TokenUsage:
    """Extract a ``TokenUsage`` from a usage sub-object of a response body."""
    if not isinstance(usage, Mapping):
        return TokenUsage()
    return _finalize_usage(
        _coerce_int(usage.get(prompt_key)),
        _coerce_int(usage.get(completion_key)),
        _coerce_int(usage.get(total_key)) if total_key else None,
    )


__all__ = ["usage_from_mapping"]
