"""DeepSeek request builder.

Chat completions with Bearer auth. ``deepseek-chat`` supports JSON mode;
``deepseek-reasoner`` ignores sampling parameters, so none are sent.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from ..base.auth import bearer_headers, require_credential
from ..base.models_parts.provider_model import ProviderModel
from ..base.models_parts.request import CompletionRequest
from ..base.models_parts.wire import RequestDescriptor, canonical_json
from ..base.openai_style_parts import ChatBodyOptions, build_chat_body
from ..config.defaults import DEEPSEEK_DEFAULT_BASE_URL

_OPTIONS = ChatBodyOptions(stream_usage=True)


def build_request(
    request: CompletionRequest,
    model: ProviderModel,
    credential: Optional[str],
    settings: Mapping[str, Any],
) -> RequestDescriptor:
    key = require_credential(credential, model)
    return RequestDescriptor(
        method="POST",
        url=str(settings.get("base_url") or DEEPSEEK_DEFAULT_BASE_URL),
        headers=bearer_headers(key),
        body=canonical_json(build_chat_body(request, model, _OPTIONS)),
        stream=request.stream,
        provider=model.provider.value,
        model=model.name,
    )


__all__ = ["build_request"]
