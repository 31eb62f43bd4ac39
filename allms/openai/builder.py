"""
OpenAI request builder.

Two API families are supported:

- Chat Completions (``/chat/completions``), the default;
- Responses (``/responses``), selected with ``api_version="responses"``
  (``openai_responses`` is accepted too), forced for models that only
  exist there (``o1-pro``, ``gpt-5.2-pro``) and for any request carrying
  hosted tools.

Reasoning models (no ``temperature`` support) take the response budget as
``max_completion_tokens`` on Chat Completions.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from ..base.auth import bearer_headers, require_credential
from ..base.models_parts.provider_model import ProviderModel
from ..base.models_parts.request import CompletionRequest
from ..base.models_parts.wire import RequestDescriptor, canonical_json
from ..base.openai_style_parts import ChatBodyOptions, build_chat_body, build_responses_body
from ..config.defaults import OPENAI_DEFAULT_BASE_URL

API_CHAT = "chat"
API_RESPONSES = "responses"

_API_ALIASES = {
    "chat": API_CHAT,
    "completions": API_CHAT,
    "openai": API_CHAT,
    "openai_completions": API_CHAT,
    "responses": API_RESPONSES,
    "openai_responses": API_RESPONSES,
}


def resolve_api(model: ProviderModel, api_version: Optional[str], *, hosted_tools: bool = False) -> str:
    """Return the API family for ``model`` and the requested version."""
    if model.api == API_RESPONSES or hosted_tools:
        return API_RESPONSES
    if not api_version:
        return API_CHAT
    return _API_ALIASES.get(api_version.strip().lower(), API_CHAT)


def build_request(
    request: CompletionRequest,
    model: ProviderModel,
    credential: Optional[str],
    settings: Mapping[str, Any],
) -> RequestDescriptor:
    """Build the OpenAI HTTP request for ``request``."""
    key = require_credential(credential, model)
    base = str(settings.get("base_url") or OPENAI_DEFAULT_BASE_URL).rstrip("/")
    if resolve_api(model, request.api_version, hosted_tools=bool(request.tools)) == API_RESPONSES:
        url = f"{base}/responses"
        body = build_responses_body(request, model)
    else:
        url = f"{base}/chat/completions"
        options = ChatBodyOptions(
            max_tokens_key="max_tokens" if model.supports_temperature else "max_completion_tokens",
            stream_usage=True,
        )
        body = build_chat_body(request, model, options)
    headers = bearer_headers(key)
    if settings.get("organization"):
        headers["OpenAI-Organization"] = str(settings["organization"])
    return RequestDescriptor(
        method="POST",
        url=url,
        headers=headers,
        body=canonical_json(body),
        stream=request.stream,
        provider=model.provider.value,
        model=model.name,
    )


__all__ = ["API_CHAT", "API_RESPONSES", "resolve_api", "build_request"]
