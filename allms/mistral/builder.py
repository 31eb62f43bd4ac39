"""Mistral request builder.

Chat completions with Bearer auth. The user turn puts the schema first
(``Output Json schema:``) followed by context and instructions, and JSON mode
is requested through ``response_format``. Requests carrying web search go
to the Conversations endpoint next to the chat URL.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from ..base.auth import bearer_headers, require_credential
from ..base.models_parts.provider_model import ProviderModel
from ..base.models_parts.request import CompletionRequest
from ..base.models_parts.wire import RequestDescriptor, canonical_json
from ..base.openai_style_parts import ChatBodyOptions, build_chat_body
from ..base.prompt import PROMPT_STYLE_PLAIN
from ..config.defaults import MISTRAL_CONVERSATIONS_PATH, MISTRAL_DEFAULT_BASE_URL, sibling_url
from .conversations import build_conversation_body

_OPTIONS = ChatBodyOptions(prompt_style=PROMPT_STYLE_PLAIN)


def build_request(
    request: CompletionRequest,
    model: ProviderModel,
    credential: Optional[str],
    settings: Mapping[str, Any],
) -> RequestDescriptor:
    key = require_credential(credential, model)
    url = str(settings.get("base_url") or MISTRAL_DEFAULT_BASE_URL)
    if request.tools:
        url = sibling_url(url, MISTRAL_CONVERSATIONS_PATH)
        body = build_conversation_body(request, model)
    else:
        body = build_chat_body(request, model, _OPTIONS)
    return RequestDescriptor(
        method="POST",
        url=url,
        headers=bearer_headers(key),
        body=canonical_json(body),
        stream=request.stream,
        provider=model.provider.value,
        model=model.name,
    )


__all__ = ["build_request"]
