"""Mistral Conversations API.

Web search is a built-in connector that only runs on ``/v1/conversations``:
the body carries ``inputs`` turns, top-level ``instructions``, the
``tools`` array and sampling knobs under ``completion_args``. Conversations
are not stored (``store: false``); every call stands alone.

The answer comes back as ``outputs`` entries. ``message.output`` entries
hold the text, either as a plain string or as chunks mixing ``text`` with
``tool_reference`` citations; ``tool.execution`` entries record the search
and carry no answer text. Streaming emits ``message.output.delta`` events
and ends with ``conversation.response.done``; tool execution events
carry no text and are skipped.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from ..base.capabilities import CAP_STREAMING, require_capability
from ..base.errors import ErrorCode, ParseError, ProviderError
from ..base.models_parts.answer import FinishReason, NormalizedAnswer, TokenUsage
from ..base.models_parts.provider_model import ProviderModel
from ..base.models_parts.request import CompletionRequest
from ..base.models_parts.tools import tool_blocks
from ..base.prompt import PROMPT_STYLE_PLAIN, conversation, system_prompt
from ..base.streaming.streaming import StreamChunk
from ..base.tokens.extraction import usage_from_mapping


def build_conversation_body(request: CompletionRequest, model: ProviderModel) -> Dict[str, Any]:
    if request.stream:
        require_capability(model, CAP_STREAMING)
    completion_args: Dict[str, Any] = {}
    if model.supports_temperature and request.temperature is not None:
        completion_args["temperature"] = request.temperature
    if request.max_tokens:
        completion_args["max_tokens"] = request.max_tokens
    if request.schema is not None and model.supports_json_mode:
        completion_args["response_format"] = {"type": "json_object"}
    body: Dict[str, Any] = {
        "model": model.name,
        "inputs": [
            {"role": turn.role, "content": turn.content}
            for turn in conversation(request, style=PROMPT_STYLE_PLAIN)
        ],
        "instructions": system_prompt(request),
        "tools": tool_blocks(request.tools),
        "store": False,
    }
    if completion_args:
        body["completion_args"] = completion_args
    if request.stream:
        body["stream"] = True
    return body


def _usage(data: Mapping[str, Any]) -> TokenUsage:
    return usage_from_mapping(
        data.get("usage"),
        prompt_key="prompt_tokens",
        completion_key="completion_tokens",
        total_key="total_tokens",
    )


def _content_text(content: Any) -> str:
    if isinstance(content, str):
        return content
    if isinstance(content, Mapping):
        content = [content]
    if not isinstance(content, list):
        return ""
    return "".join(
        str(chunk.get("text") or "")
        for chunk in content
        if isinstance(chunk, Mapping) and chunk.get("type") == "text"
    )


def is_conversation_body(data: Any) -> bool:
    return isinstance(data, Mapping) and "outputs" in data and "choices" not in data


def parse_conversation_body(data: Mapping[str, Any], model: ProviderModel) -> NormalizedAnswer:
    outputs = data.get("outputs")
    if not isinstance(outputs, list):
        raise ParseError(message="conversation has no outputs", provider=model.provider.value, model=model.name, fragment=data)
    texts: List[str] = []
    answered_by: Optional[str] = None
    for entry in outputs:
        if isinstance(entry, Mapping) and entry.get("type") == "message.output":
            texts.append(_content_text(entry.get("content")))
            answered_by = answered_by or entry.get("model")
    if not texts:
        raise ParseError(message="conversation has no message output", provider=model.provider.value, model=model.name, fragment=data)
    return NormalizedAnswer(
        text="".join(texts),
        provider=model.provider.value,
        model=str(answered_by or model.name),
        usage=_usage(data),
        finish_reason=FinishReason.STOP,
        response_id=data.get("conversation_id"),
    )


def is_conversation_event(data: Any) -> bool:
    # chat completion chunks carry no event type
    return isinstance(data, Mapping) and isinstance(data.get("type"), str) and "choices" not in data


def parse_conversation_event(data: Mapping[str, Any], model: ProviderModel) -> Optional[StreamChunk]:
    provider = model.provider.value
    kind = str(data.get("type"))
    if kind == "message.output.delta":
        return StreamChunk(provider=provider, model=model.name, delta=_content_text(data.get("content")), raw=data)
    if kind == "conversation.response.done":
        return StreamChunk(provider=provider, model=model.name, finish_reason=FinishReason.STOP, usage=_usage(data), raw=data)
    if kind == "conversation.response.error":
        raise ProviderError(
            message=str(data.get("message") or "conversation failed"),
            code=ErrorCode.SERVER_ERROR,
            provider=provider,
            model=model.name,
            vendor_code=data.get("code"),
        )
    return None


__all__ = [
    "build_conversation_body",
    "is_conversation_body",
    "parse_conversation_body",
    "is_conversation_event",
    "parse_conversation_event",
]
