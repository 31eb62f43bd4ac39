"""xAI request builder.

Chat completions with Bearer auth; the response budget is sent as
``max_completion_tokens``. Requests carrying search tools go to the
Responses endpoint next to the chat URL, with the base instructions as a
``system`` input turn.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from ..base.auth import bearer_headers, require_credential
from ..base.models_parts.provider_model import ProviderModel
from ..base.models_parts.request import CompletionRequest
from ..base.models_parts.wire import RequestDescriptor, canonical_json
from ..base.openai_style_parts import ChatBodyOptions, build_chat_body, build_responses_body
from ..config.defaults import XAI_DEFAULT_BASE_URL, XAI_RESPONSES_PATH, sibling_url

_OPTIONS = ChatBodyOptions(max_tokens_key="max_completion_tokens", stream_usage=True)


def build_request(
    request: CompletionRequest,
    model: ProviderModel,
    credential: Optional[str],
    settings: Mapping[str, Any],
) -> RequestDescriptor:
    key = require_credential(credential, model)
    url = str(settings.get("base_url") or XAI_DEFAULT_BASE_URL)
    if request.tools:
        url = sibling_url(url, XAI_RESPONSES_PATH)
        body = build_responses_body(request, model, system_in_input=True)
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
