"""
Azure OpenAI request builder.

``{endpoint}/openai/deployments/{deployment}/chat/completions?api-version=V``
with the ``api-key`` header. The body is the OpenAI chat body without
``model``; the deployment in the URL selects it. ``api_version`` accepts a
bare REST version or the ``azure:<version>`` spelling.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional
from urllib.parse import quote

from ..base.auth import require_credential
from ..base.errors import ErrorCode, ProviderError
from ..base.models_parts.provider_model import ProviderModel
from ..base.models_parts.request import CompletionRequest
from ..base.models_parts.wire import RequestDescriptor, canonical_json
from ..base.openai_style_parts import ChatBodyOptions, build_chat_body
from ..config.defaults import AZURE_DEFAULT_API_VERSION

_VERSION_PREFIXES = ("azure_completions:", "azure:")


def resolve_api_version(requested: Optional[str], settings: Mapping[str, Any]) -> str:
    value = (requested or "").strip()
    for prefix in _VERSION_PREFIXES:
        if value.lower().startswith(prefix):
            value = value[len(prefix):]
            break
    return value or str(settings.get("api_version") or AZURE_DEFAULT_API_VERSION)


def build_request(
    request: CompletionRequest,
    model: ProviderModel,
    credential: Optional[str],
    settings: Mapping[str, Any],
) -> RequestDescriptor:
    key = require_credential(credential, model)
    endpoint = str(settings.get("base_url") or "").rstrip("/")
    if not endpoint:
        raise ProviderError(
            message="Azure endpoint is not configured (set AZURE_OPENAI_ENDPOINT)",
            code=ErrorCode.VALIDATION,
            provider=model.provider.value,
            model=model.name,
        )
    version = resolve_api_version(request.api_version, settings)
    url = (
        f"{endpoint}/openai/deployments/{quote(model.name, safe='')}/chat/completions"
        f"?api-version={quote(version, safe='')}"
    )
    options = ChatBodyOptions(
        include_model=False,
        max_tokens_key="max_tokens" if model.supports_temperature else "max_completion_tokens",
    )
    body = build_chat_body(request, model, options)
    return RequestDescriptor(
        method="POST",
        url=url,
        headers={"api-key": key, "Content-Type": "application/json"},
        body=canonical_json(body),
        stream=request.stream,
        provider=model.provider.value,
        model=model.name,
    )


__all__ = ["resolve_api_version", "build_request"]
