"""
Anthropic Messages request builder.

Headers: ``x-api-key`` and ``anthropic-version`` (``api_version`` overrides
the configured default). The base instructions go in the top-level
``system`` field together with any ``system`` turns from the history; the
user turn carries the ``<instructions>`` and ``<output json schema>`` tags.
``max_tokens`` is mandatory on this API and defaults to the model limit.
Function calling is expressed as a single forced tool whose
``input_schema`` is the output schema. Server tools (web search, code
execution) join the ``tools`` array; next to them the output tool is offered
with ``tool_choice: auto``, and any beta
flag they need is sent in ``anthropic-beta``.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from ..base.auth import require_credential
from ..base.capabilities import CAP_FUNCTION_CALLING, CAP_STREAMING, require_capability
from ..base.constants import OUTPUT_FUNCTION_DESCRIPTION, OUTPUT_FUNCTION_NAME
from ..base.models_parts.provider_model import ProviderModel
from ..base.models_parts.request import CompletionRequest
from ..base.models_parts.tools import tool_blocks, tool_headers
from ..base.models_parts.wire import RequestDescriptor, canonical_json
from ..base.prompt import conversation, system_prompt
from ..config.defaults import ANTHROPIC_DEFAULT_API_VERSION, ANTHROPIC_DEFAULT_BASE_URL


def _body(request: CompletionRequest, model: ProviderModel) -> Dict[str, Any]:
    system_parts: List[str] = [system_prompt(request)]
    messages: List[Dict[str, str]] = []
    for turn in conversation(request):
        if turn.role == "system":
            system_parts.append(turn.content)
        else:
            messages.append({"role": turn.role, "content": turn.content})
    body: Dict[str, Any] = {
        "model": model.name,
        "max_tokens": request.max_tokens or model.max_tokens,
        "system": "\n\n".join(system_parts),
        "messages": messages,
    }
    if model.supports_temperature and request.temperature is not None:
        body["temperature"] = request.temperature
    tools: List[Dict[str, Any]] = []
    if request.function_calling and request.schema is not None:
        tools.append(
            {
                "name": OUTPUT_FUNCTION_NAME,
                "description": OUTPUT_FUNCTION_DESCRIPTION,
                "input_schema": dict(request.schema),
            }
        )
        if request.tools:
            body["tool_choice"] = {"type": "auto"}
        else:
            body["tool_choice"] = {"type": "tool", "name": OUTPUT_FUNCTION_NAME}
    tools.extend(tool_blocks(request.tools))
    if tools:
        body["tools"] = tools
    if request.stream:
        body["stream"] = True
    return body


def build_request(
    request: CompletionRequest,
    model: ProviderModel,
    credential: Optional[str],
    settings: Mapping[str, Any],
) -> RequestDescriptor:
    key = require_credential(credential, model)
    if request.stream:
        require_capability(model, CAP_STREAMING)
    if request.function_calling:
        require_capability(model, CAP_FUNCTION_CALLING)
    version = request.api_version or settings.get("api_version") or ANTHROPIC_DEFAULT_API_VERSION
    headers = {
        "x-api-key": key,
        "anthropic-version": str(version),
        "Content-Type": "application/json",
    }
    headers.update(tool_headers(request.tools))
    return RequestDescriptor(
        method="POST",
        url=str(settings.get("base_url") or ANTHROPIC_DEFAULT_BASE_URL),
        headers=headers,
        body=canonical_json(_body(request, model)),
        stream=request.stream,
        provider=model.provider.value,
        model=model.name,
    )


__all__ = ["build_request"]
