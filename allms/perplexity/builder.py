"""Perplexity request builder.

Chat completions with Bearer auth and the schema-first user prompt. No
``max_tokens`` is sent: the vendor counts search results against the window
and truncates answers when a budget is set.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from ..base.auth import bearer_headers, require_credential
from ..base.models_parts.provider_model import ProviderModel
from ..base.models_parts.request import CompletionRequest
from ..base.models_parts.wire import RequestDescriptor, canonical_json
from ..base.openai_style_parts import ChatBodyOptions, build_chat_body
from ..base.prompt import PROMPT_STYLE_PLAIN
from ..config.defaults import PERPLEXITY_DEFAULT_BASE_URL

_OPTIONS = ChatBodyOptions(max_tokens_key=None, json_mode=False, prompt_style=PROMPT_STYLE_PLAIN)


def build_request(
    request: CompletionRequest,
    model: ProviderModel,
    credential: Optional[str],
    settings: Mapping[str, Any],
) -> RequestDescriptor:
    key = require_credential(credential, model)
    return RequestDescriptor(
        method="POST",
        url=str(settings.get("base_url") or PERPLEXITY_DEFAULT_BASE_URL),
        headers=bearer_headers(key),
        body=canonical_json(build_chat_body(request, model, _OPTIONS)),
        stream=request.stream,
        provider=model.provider.value,
        model=model.name,
    )


__all__ = ["build_request"]
