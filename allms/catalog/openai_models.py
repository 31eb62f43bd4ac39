"""OpenAI model table (also the template for Azure deployments).

Context windows and per-tier rate limits follow the vendor's model pages.
GPT-5 and o-series reasoning models reject ``temperature``; the early
o-series also rejects the ``system`` role. Answers are capped well below
the context window (16k for GPT-4o), so each entry carries its output limit.
"""

from __future__ import annotations

from dataclasses import replace
from typing import FrozenSet, Tuple

from ..base.models_parts.provider import Provider
from ..base.models_parts.provider_model import ProviderModel, RateLimit
from ..base.models_parts.tools import TOOL_CODE_EXECUTION, TOOL_FILE_SEARCH, TOOL_WEB_SEARCH

_TEMPERATURE_RANGE = (0.0, 2.0)

# Hosted tools go through the Responses API.
_ALL_TOOLS = frozenset({TOOL_WEB_SEARCH, TOOL_FILE_SEARCH, TOOL_CODE_EXECUTION})
_REASONING_TOOLS = frozenset({TOOL_FILE_SEARCH, TOOL_CODE_EXECUTION})


def _gpt(
    name: str,
    max_tokens: int,
    max_output: int,
    tpm: int,
    rpm: int,
    *,
    json_mode: bool = True,
    aliases: Tuple[str, ...] = (),
) -> ProviderModel:
    return ProviderModel(
        provider=Provider.OPENAI,
        name=name,
        max_tokens=max_tokens,
        max_output_tokens=max_output,
        supports_function_calling=True,
        supports_json_mode=json_mode,
        tools=_ALL_TOOLS,
        temperature_range=_TEMPERATURE_RANGE,
        rate_limit=RateLimit(tpm=tpm, rpm=rpm),
        aliases=aliases,
    )


def _reasoning(
    name: str,
    max_tokens: int,
    max_output: int,
    tpm: int,
    rpm: int,
    *,
    system_role: bool = True,
    api: str = "chat",
    function_calling: bool = False,
    tools: FrozenSet[str] = _REASONING_TOOLS,
) -> ProviderModel:
    return ProviderModel(
        provider=Provider.OPENAI,
        name=name,
        max_tokens=max_tokens,
        max_output_tokens=max_output,
        supports_function_calling=function_calling,
        supports_json_mode=system_role,
        supports_temperature=False,
        supports_system_role=system_role,
        tools=tools,
        temperature_range=_TEMPERATURE_RANGE,
        rate_limit=RateLimit(tpm=tpm, rpm=rpm),
        api=api,
    )


OPENAI_MODELS: Tuple[ProviderModel, ...] = (
    _reasoning("gpt-5.2", 400_000, 128_000, 40_000_000, 15_000, function_calling=True, tools=_ALL_TOOLS),
    _reasoning(
        "gpt-5.2-pro",
        400_000,
        128_000,
        30_000_000,
        10_000,
        api="responses",
        tools=frozenset({TOOL_WEB_SEARCH, TOOL_FILE_SEARCH}),
    ),
    _reasoning("gpt-5.1", 400_000, 128_000, 40_000_000, 15_000, function_calling=True, tools=_ALL_TOOLS),
    _reasoning("gpt-5", 400_000, 128_000, 40_000_000, 15_000, function_calling=True, tools=_ALL_TOOLS),
    _reasoning("gpt-5-mini", 400_000, 128_000, 180_000_000, 30_000, function_calling=True, tools=_ALL_TOOLS),
    _reasoning("gpt-5-nano", 400_000, 128_000, 180_000_000, 30_000, function_calling=True, tools=_ALL_TOOLS),
    _gpt("gpt-3.5-turbo", 4_096, 4_096, 50_000_000, 10_000),
    _gpt("gpt-3.5-turbo-16k", 16_384, 4_096, 2_000_000, 10_000, json_mode=False),
    _gpt("gpt-4", 8_192, 8_192, 1_000_000, 10_000, json_mode=False),
    _gpt("gpt-4-32k", 32_768, 8_192, 300_000, 10_000, json_mode=False),
    _gpt("gpt-4-turbo", 128_000, 4_096, 2_000_000, 10_000),
    _gpt("gpt-4-turbo-preview", 128_000, 4_096, 2_000_000, 10_000),
    _gpt("gpt-4o", 128_000, 16_384, 150_000_000, 50_000),
    _gpt("gpt-4o-2024-08-06", 128_000, 16_384, 150_000_000, 50_000),
    _gpt("gpt-4o-mini", 128_000, 16_384, 150_000_000, 30_000),
    _gpt("gpt-4.1", 1_047_576, 32_768, 30_000_000, 10_000),
    _gpt("gpt-4.1-mini", 1_047_576, 32_768, 150_000_000, 30_000),
    _gpt("gpt-4.1-nano", 1_047_576, 32_768, 150_000_000, 30_000),
    _gpt("gpt-4.5-preview", 128_000, 16_384, 2_000_000, 10_000),
    _reasoning("o1-preview", 128_000, 32_768, 30_000_000, 10_000, system_role=False),
    _reasoning("o1-mini", 128_000, 65_536, 150_000_000, 30_000, system_role=False),
    _reasoning("o1", 200_000, 100_000, 30_000_000, 10_000),
    _reasoning("o1-pro", 200_000, 100_000, 30_000_000, 10_000, api="responses"),
    _reasoning("o3", 200_000, 100_000, 30_000_000, 10_000),
    _reasoning("o3-mini", 200_000, 100_000, 150_000_000, 30_000),
    _reasoning("o4-mini", 200_000, 100_000, 150_000_000, 30_000),
)

# Template for caller-named OpenAI models and Azure deployments.
CUSTOM_TEMPLATE = _gpt("custom", 128_000, 16_384, 150_000_000, 50_000)

# Azure deployments only expose Chat Completions, so no hosted tools.
AZURE_MODELS: Tuple[ProviderModel, ...] = tuple(
    replace(model, provider=Provider.AZURE, api="chat", tools=frozenset())
    for model in OPENAI_MODELS
    if model.api == "chat"
)
AZURE_CUSTOM_TEMPLATE = replace(CUSTOM_TEMPLATE, provider=Provider.AZURE, tools=frozenset())

__all__ = ["OPENAI_MODELS", "AZURE_MODELS", "CUSTOM_TEMPLATE", "AZURE_CUSTOM_TEMPLATE"]
