"""Google Gemini model table (AI Studio and Vertex AI share it).

``maxOutputTokens`` is capped at 8k for 1.5 and 2.0 models and 64k for 2.5.
Search grounding and code execution are served from 2.0 Flash on.
"""

from __future__ import annotations

from typing import FrozenSet, Tuple

from ..base.models_parts.provider import Provider
from ..base.models_parts.provider_model import ProviderModel, RateLimit
from ..base.models_parts.tools import TOOL_CODE_EXECUTION, TOOL_WEB_SEARCH

_TOOLS = frozenset({TOOL_WEB_SEARCH, TOOL_CODE_EXECUTION})


def _gemini(
    name: str,
    max_tokens: int,
    max_output: int,
    tpm: int,
    rpm: int,
    aliases: Tuple[str, ...] = (),
    *,
    tools: FrozenSet[str] = frozenset(),
) -> ProviderModel:
    return ProviderModel(
        provider=Provider.GOOGLE,
        name=name,
        max_tokens=max_tokens,
        max_output_tokens=max_output,
        supports_function_calling=True,
        supports_json_mode=True,
        tools=tools,
        temperature_range=(0.0, 2.0),
        rate_limit=RateLimit(tpm=tpm, rpm=rpm),
        api="generate_content",
        aliases=aliases,
    )


GOOGLE_MODELS: Tuple[ProviderModel, ...] = (
    _gemini("gemini-1.5-pro", 2_097_152, 8_192, 4_000_000, 1_000, ("gemini-pro",)),
    _gemini("gemini-1.5-flash", 1_048_576, 8_192, 4_000_000, 2_000),
    _gemini("gemini-1.5-flash-8b", 1_048_576, 8_192, 4_000_000, 4_000),
    _gemini("gemini-2.0-flash", 1_048_576, 8_192, 30_000_000, 30_000, tools=_TOOLS),
    _gemini("gemini-2.0-flash-lite", 1_048_576, 8_192, 30_000_000, 30_000),
    _gemini("gemini-2.5-pro", 1_048_576, 65_536, 8_000_000, 2_000, tools=_TOOLS),
    _gemini("gemini-2.5-flash", 1_048_576, 65_536, 8_000_000, 10_000, tools=_TOOLS),
    _gemini("gemini-2.5-flash-lite", 1_048_576, 65_536, 30_000_000, 30_000, tools=_TOOLS),
)

# Template for Vertex fine-tuned endpoints addressed by endpoint id.
FINE_TUNED_TEMPLATE = _gemini("endpoint", 1_048_576, 8_192, 30_000_000, 30_000)

# Models served only on the beta AI Studio API.
BETA_MODEL_PREFIXES = ("gemini-2.5",)

__all__ = ["GOOGLE_MODELS", "FINE_TUNED_TEMPLATE", "BETA_MODEL_PREFIXES"]
