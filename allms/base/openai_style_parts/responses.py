"""
Responses API bodies and envelopes.

OpenAI serves reasoning-only models and every hosted tool on ``/responses``;
xAI runs its search tools there too. The body carries ``input`` turns and
a ``tools`` array mixing the output function with hosted tool blocks. The
answer comes back as typed ``output`` items (``message`` with
``output_text`` content, ``function_call`` with ``arguments``, plus tool
call records that carry no answer text); streamed events are typed
``response.*``.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from ..capabilities import CAP_FUNCTION_CALLING, CAP_STREAMING, require_capability
from ..constants import OUTPUT_FUNCTION_DESCRIPTION, OUTPUT_FUNCTION_NAME
from ..errors import ErrorCode, ParseError, ProviderError
from ..models_parts.answer import FinishReason, NormalizedAnswer, TokenUsage, ToolCall
from ..models_parts.provider_model import ProviderModel
from ..models_parts.request import CompletionRequest
from ..models_parts.tools import tool_blocks
from ..prompt import conversation, system_prompt
from ..streaming.streaming import StreamChunk
from ..tokens.extraction import usage_from_mapping


def build_responses_body(
    request: CompletionRequest,
    model: ProviderModel,
    *,
    system_in_input: bool = False,
) -> Dict[str, Any]:
    """Return the Responses body for ``request`` on ``model``.

    ``system_in_input`` sends the base instructions as a leading ``system``
    input turn instead of the ``instructions`` field.
    """
    if request.stream:
        require_capability(model, CAP_STREAMING)
    if request.function_calling:
        require_capability(model, CAP_FUNCTION_CALLING)
    turns: List[Dict[str, str]] = [{"role": turn.role, "content": turn.content} for turn in conversation(request)]
    body: Dict[str, Any] = {"model": model.name}
    if system_in_input:
        turns.insert(0, {"role": "system", "content": system_prompt(request)})
    else:
        body["instructions"] = system_prompt(request)
    body["input"] = turns
    if request.max_tokens:
        body["max_output_tokens"] = request.max_tokens
    if model.supports_temperature and request.temperature is not None:
        body["temperature"] = request.temperature
    tools: List[Dict[str, Any]] = []
    if request.function_calling and request.schema is not None:
        tools.append(
            {
                "type": "function",
                "name": OUTPUT_FUNCTION_NAME,
                "description": OUTPUT_FUNCTION_DESCRIPTION,
                "parameters": dict(request.schema),
            }
        )
        if not request.tools:
            body["tool_choice"] = {"type": "function", "name": OUTPUT_FUNCTION_NAME}
    elif request.schema is not None and model.supports_json_mode:
        body["text"] = {"format": {"type": "json_object"}}
    tools.extend(tool_blocks(request.tools))
    if tools:
        body["tools"] = tools
    if request.stream:
        body["stream"] = True
    return body


def _usage(data: Mapping[str, Any]) -> TokenUsage:
    return usage_from_mapping(
        data.get("usage"),
        prompt_key="input_tokens",
        completion_key="output_tokens",
        total_key="total_tokens",
    )


def _finish(data: Mapping[str, Any], tool_call: Optional[ToolCall]) -> FinishReason:
    status = data.get("status")
    if status == "incomplete":
        details = data.get("incomplete_details")
        reason = details.get("reason") if isinstance(details, Mapping) else None
        return FinishReason.ERROR if reason == "content_filter" else FinishReason.LENGTH
    if tool_call is not None and status == "completed":
        return FinishReason.TOOL_CALL
    return FinishReason.from_vendor(status)


def is_responses_body(data: Any) -> bool:
    return isinstance(data, Mapping) and "output" in data and "choices" not in data


def parse_responses_body(data: Mapping[str, Any], model: ProviderModel) -> NormalizedAnswer:
    output = data.get("output")
    if not isinstance(output, list):
        raise ParseError(message="response has no output", provider=model.provider.value, model=model.name, fragment=data)
    texts: List[str] = []
    tool_call: Optional[ToolCall] = None
    for item in output:
        if not isinstance(item, Mapping):
            continue
        if item.get("type") == "message":
            for content in item.get("content") or ():
                if isinstance(content, Mapping) and content.get("type") == "output_text":
                    texts.append(str(content.get("text") or ""))
        elif item.get("type") == "function_call" and tool_call is None:
            tool_call = ToolCall(name=str(item.get("name") or ""), arguments=str(item.get("arguments") or ""))
    return NormalizedAnswer(
        text="".join(texts),
        provider=model.provider.value,
        model=str(data.get("model") or model.name),
        usage=_usage(data),
        finish_reason=_finish(data, tool_call),
        tool_call=tool_call,
        response_id=data.get("id"),
    )


def is_responses_event(data: Any) -> bool:
    return isinstance(data, Mapping) and str(data.get("type", "")).startswith("response.")


def parse_responses_event(data: Mapping[str, Any], model: ProviderModel) -> Optional[StreamChunk]:
    provider = model.provider.value
    kind = str(data.get("type"))
    if kind in ("response.output_text.delta", "response.function_call_arguments.delta"):
        return StreamChunk(provider=provider, model=model.name, delta=str(data.get("delta") or ""), raw=data)
    if kind in ("response.completed", "response.incomplete"):
        response = data.get("response") if isinstance(data.get("response"), Mapping) else {}
        return StreamChunk(
            provider=provider,
            model=model.name,
            finish_reason=_finish(response, None),
            usage=_usage(response),
            raw=data,
        )
    if kind == "response.failed":
        response = data.get("response") if isinstance(data.get("response"), Mapping) else {}
        error = response.get("error") if isinstance(response.get("error"), Mapping) else {}
        raise ProviderError(
            message=str(error.get("message") or "response failed"),
            code=ErrorCode.SERVER_ERROR,
            provider=provider,
            model=model.name,
            vendor_code=error.get("code"),
        )
    return None


__all__ = [
    "build_responses_body",
    "is_responses_body",
    "parse_responses_body",
    "is_responses_event",
    "parse_responses_event",
]
