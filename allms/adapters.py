"""Closed dispatch table from ``Provider`` to its adapter functions.

Each vendor module exposes plain functions with the same signatures:

* ``build_request(request, model, credential, settings) -> RequestDescriptor``
* ``parse_response(raw, model) -> NormalizedAnswer``
* ``parse_stream_event(payload, model) -> StreamChunk | None``
* ``clean_output(text) -> str`` (vendor-specific cleanup before validation)

The facade looks the adapter up by ``model.provider``; there is no provider
class hierarchy.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Mapping, NamedTuple, Optional

from . import anthropic, azure, bedrock, deepseek, google, mistral, openai, perplexity, xai
from .base.models_parts.answer import NormalizedAnswer
from .base.models_parts.provider import Provider
from .base.models_parts.provider_model import ProviderModel
from .base.models_parts.request import CompletionRequest
from .base.models_parts.wire import RawProviderResponse, RequestDescriptor
from .base.streaming.streaming import StreamChunk


class ProviderAdapter(NamedTuple):
    build: Callable[[CompletionRequest, ProviderModel, Optional[str], Mapping[str, Any]], RequestDescriptor]
    parse: Callable[[RawProviderResponse, ProviderModel], NormalizedAnswer]
    parse_stream_event: Callable[[str, ProviderModel], Optional[StreamChunk]]
    clean: Callable[[str], str]


def _adapter(module: Any) -> ProviderAdapter:
    return ProviderAdapter(
        build=module.build_request,
        parse=module.parse_response,
        parse_stream_event=module.parse_stream_event,
        clean=module.clean_output,
    )


ADAPTERS: Dict[Provider, ProviderAdapter] = {
    Provider.OPENAI: _adapter(openai),
    Provider.AZURE: _adapter(azure),
    Provider.ANTHROPIC: _adapter(anthropic),
    Provider.MISTRAL: _adapter(mistral),
    Provider.GOOGLE: _adapter(google),
    Provider.BEDROCK: _adapter(bedrock),
    Provider.DEEPSEEK: _adapter(deepseek),
    Provider.PERPLEXITY: _adapter(perplexity),
    Provider.XAI: _adapter(xai),
}


def adapter_for(model: ProviderModel) -> ProviderAdapter:
    return ADAPTERS[model.provider]


def build_request(
    request: CompletionRequest,
    model: ProviderModel,
    credential: Optional[str],
    settings: Optional[Mapping[str, Any]] = None,
) -> RequestDescriptor:
    """Build the HTTP request for ``request`` on ``model``."""
    return adapter_for(model).build(request, model, credential, settings or {})


def parse_response(raw: RawProviderResponse, model: ProviderModel) -> NormalizedAnswer:
    """Normalize a vendor response, raising the typed error for failures."""
    return adapter_for(model).parse(raw, model)


__all__ = ["ProviderAdapter", "ADAPTERS", "adapter_for", "build_request", "parse_response"]
