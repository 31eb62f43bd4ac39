"""Model tables for OpenAI-compatible chat vendors.

Mistral, DeepSeek, Perplexity and xAI expose chat completions endpoints;
only limits, temperature ranges and JSON mode support differ.
Hosted tools leave chat completions: Mistral web search runs on the
Conversations API and xAI search tools on the Responses API.
"""

from __future__ import annotations

from typing import FrozenSet, Tuple

from ..base.models_parts.provider import Provider
from ..base.models_parts.provider_model import ProviderModel, RateLimit
from ..base.models_parts.tools import TOOL_WEB_SEARCH, TOOL_X_SEARCH

_MISTRAL_LIMIT = RateLimit(tpm=2_000_000, rpm=120)


def _mistral(name: str, max_tokens: int, *, web_search: bool = False) -> ProviderModel:
    return ProviderModel(
        provider=Provider.MISTRAL,
        name=name,
        max_tokens=max_tokens,
        supports_json_mode=True,
        supports_function_calling=False,
        tools=frozenset({TOOL_WEB_SEARCH}) if web_search else frozenset(),
        temperature_range=(0.0, 1.0),
        rate_limit=_MISTRAL_LIMIT,
    )


MISTRAL_MODELS: Tuple[ProviderModel, ...] = (
    _mistral("mistral-large-latest", 128_000, web_search=True),
    _mistral("open-mistral-nemo", 128_000),
    _mistral("open-mistral-7b", 32_000),
    _mistral("open-mixtral-8x7b", 32_000),
    _mistral("open-mixtral-8x22b", 64_000),
    _mistral("mistral-tiny", 32_000),
    _mistral("mistral-small", 32_000),
    _mistral("mistral-medium", 32_000, web_search=True),
)

# DeepSeek does not publish rate limits.
_DEEPSEEK_LIMIT = RateLimit(tpm=100_000_000, rpm=100_000_000)

DEEPSEEK_MODELS: Tuple[ProviderModel, ...] = (
    ProviderModel(
        provider=Provider.DEEPSEEK,
        name="deepseek-chat",
        max_tokens=8_192,
        supports_json_mode=True,
        temperature_range=(0.0, 1.5),
        rate_limit=_DEEPSEEK_LIMIT,
    ),
    ProviderModel(
        provider=Provider.DEEPSEEK,
        name="deepseek-reasoner",
        max_tokens=8_192,
        supports_temperature=False,
        temperature_range=(0.0, 1.5),
        rate_limit=_DEEPSEEK_LIMIT,
    ),
)


def _sonar(name: str, max_tokens: int) -> ProviderModel:
    return ProviderModel(
        provider=Provider.PERPLEXITY,
        name=name,
        max_tokens=max_tokens,
        # upper bound is exclusive on the vendor side
        temperature_range=(0.0, 1.99999),
        rate_limit=RateLimit(tpm=50 * 127_072, rpm=50),
    )


PERPLEXITY_MODELS: Tuple[ProviderModel, ...] = (
    _sonar("sonar-pro", 200_000),
    _sonar("sonar", 127_072),
    _sonar("sonar-reasoning", 127_072),
)


_XAI_TOOLS = frozenset({TOOL_WEB_SEARCH, TOOL_X_SEARCH})


def _grok(
    name: str,
    max_tokens: int,
    tpm: int,
    rpm: int,
    aliases: Tuple[str, ...] = (),
    *,
    tools: FrozenSet[str] = frozenset(),
) -> ProviderModel:
    return ProviderModel(
        provider=Provider.XAI,
        name=name,
        max_tokens=max_tokens,
        supports_json_mode=True,
        supports_function_calling=True,
        tools=tools,
        temperature_range=(0.0, 2.0),
        rate_limit=RateLimit(tpm=tpm, rpm=rpm),
        aliases=aliases,
    )


XAI_MODELS: Tuple[ProviderModel, ...] = (
    _grok(
        "grok-4-1-fast-reasoning",
        2_097_152,
        4_000_000,
        480,
        ("grok-4-1-fast", "grok-4-1-fast-reasoning-latest"),
        tools=_XAI_TOOLS,
    ),
    _grok(
        "grok-4-1-fast-non-reasoning",
        2_097_152,
        4_000_000,
        480,
        ("grok-4-1-fast-non-reasoning-latest",),
        tools=_XAI_TOOLS,
    ),
    _grok(
        "grok-4-fast-reasoning",
        2_097_152,
        4_000_000,
        480,
        ("grok-4-fast", "grok-4-fast-reasoning-latest"),
        tools=_XAI_TOOLS,
    ),
    _grok(
        "grok-4-fast-non-reasoning",
        2_097_152,
        4_000_000,
        480,
        ("grok-4-fast-non-reasoning-latest",),
        tools=_XAI_TOOLS,
    ),
    _grok("grok-4", 256_000, 2_000_000, 480, ("grok-4-latest", "grok-4-0709"), tools=_XAI_TOOLS),
    _grok("grok-code-fast-1", 256_000, 2_000_000, 480, ("grok-code-fast", "grok-code-fast-1-0825")),
    _grok("grok-3", 131_072, 2_000_000, 600, ("grok-3-latest", "grok-3-beta")),
    _grok("grok-3-mini", 131_072, 2_000_000, 480, ("grok-3-mini-latest", "grok-3-mini-beta")),
    _grok("grok-3-fast", 131_072, 2_000_000, 480, ("grok-3-fast-latest", "grok-3-fast-beta")),
    _grok("grok-3-mini-fast", 131_072, 2_000_000, 480, ("grok-3-mini-fast-latest", "grok-3-mini-fast-beta")),
)

__all__ = ["MISTRAL_MODELS", "DEEPSEEK_MODELS", "PERPLEXITY_MODELS", "XAI_MODELS"]
