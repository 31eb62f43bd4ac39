"""Anthropic model table.

``max_tokens`` is the largest response the vendor accepts for the model;
it doubles as the prompt budget ceiling.
Server-side web search and code execution are served from Claude 3.5 Haiku
and 3.7 Sonnet on.
"""

from __future__ import annotations

from typing import FrozenSet, Tuple

from ..base.models_parts.provider import Provider
from ..base.models_parts.provider_model import ProviderModel, RateLimit
from ..base.models_parts.tools import TOOL_CODE_EXECUTION, TOOL_WEB_SEARCH

_TOOLS = frozenset({TOOL_WEB_SEARCH, TOOL_CODE_EXECUTION})


def _claude(
    name: str,
    max_tokens: int,
    aliases: Tuple[str, ...] = (),
    *,
    tools: FrozenSet[str] = _TOOLS,
) -> ProviderModel:
    return ProviderModel(
        provider=Provider.ANTHROPIC,
        name=name,
        max_tokens=max_tokens,
        supports_function_calling=True,
        tools=tools,
        temperature_range=(0.0, 1.0),
        rate_limit=RateLimit(tpm=400_000, rpm=4_000),
        api="messages",
        aliases=aliases,
    )


ANTHROPIC_MODELS: Tuple[ProviderModel, ...] = (
    _claude("claude-sonnet-4-5", 64_000, ("claude-sonnet-4-5-20250929",)),
    _claude("claude-haiku-4-5", 64_000, ("claude-haiku-4-5-20251001",)),
    _claude("claude-opus-4-1-20250805", 32_000, ("claude-opus-4-1",)),
    _claude("claude-sonnet-4-20250514", 64_000, ("claude-sonnet-4-0",)),
    _claude("claude-opus-4-20250514", 32_000, ("claude-opus-4-0",)),
    _claude("claude-3-7-sonnet-latest", 64_000),
    _claude("claude-3-5-sonnet-latest", 8_192, ("claude-3-5-sonnet-20240620",), tools=frozenset()),
    _claude("claude-3-5-haiku-latest", 8_192),
    _claude("claude-3-opus-latest", 4_096, ("claude-3-opus-20240229",), tools=frozenset()),
    _claude("claude-3-sonnet-20240229", 4_096, tools=frozenset()),
    _claude("claude-3-haiku-20240307", 4_096, tools=frozenset()),
)

__all__ = ["ANTHROPIC_MODELS"]
