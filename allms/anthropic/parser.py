"""
Anthropic Messages response parser.

The answer is the last ``text`` item of ``content`` (earlier text items are
preamble the model wrote before the final answer); a ``tool_use`` item is
returned as the tool call with its ``input`` serialized as arguments.

Stream events: ``message_start`` reports input tokens, ``content_block_delta``
carries ``text_delta``/``input_json_delta`` fragments, ``message_delta``
carries the stop reason and output tokens, ``message_stop`` ends the stream.
"""

from __future__ import annotations

import json
from typing import Any, Mapping, Optional

from ..base.errors import ParseError
from ..base.models_parts.answer import FinishReason, NormalizedAnswer, TokenUsage, ToolCall
from ..base.models_parts.provider_model import ProviderModel
from ..base.models_parts.wire import RawProviderResponse
from ..base.parsing import decode_event, decode_response
from ..base.streaming.streaming import StreamChunk
from ..base.tokens.extraction import usage_from_mapping
from ..base.utils.json_text import sanitize_model_output


def _usage(usage: Any) -> TokenUsage:
    return usage_from_mapping(usage, prompt_key="input_tokens", completion_key="output_tokens")


def parse_response(raw: RawProviderResponse, model: ProviderModel) -> NormalizedAnswer:
    data = decode_response(raw, model)
    content = data.get("content") if isinstance(data, Mapping) else None
    if not isinstance(content, list):
        raise ParseError(message="response has no content", provider=model.provider.value, model=model.name, fragment=data)
    text = ""
    tool_call: Optional[ToolCall] = None
    for item in content:
        if not isinstance(item, Mapping):
            continue
        if item.get("type") == "text":
            text = str(item.get("text") or "")
        elif item.get("type") == "tool_use" and tool_call is None:
            arguments = json.dumps(item.get("input") or {}, ensure_ascii=False)
            tool_call = ToolCall(name=str(item.get("name") or ""), arguments=arguments)
    return NormalizedAnswer(
        text=text,
        provider=model.provider.value,
        model=str(data.get("model") or model.name),
        usage=_usage(data.get("usage")),
        finish_reason=FinishReason.from_vendor(data.get("stop_reason")),
        tool_call=tool_call,
        response_id=data.get("id"),
    )


def parse_stream_event(payload: str, model: ProviderModel) -> Optional[StreamChunk]:
    data = decode_event(payload, model)
    if not isinstance(data, Mapping):
        return None
    provider = model.provider.value
    kind = data.get("type")
    if kind == "content_block_delta":
        delta = data.get("delta") if isinstance(data.get("delta"), Mapping) else {}
        text = delta.get("text") if delta.get("type") == "text_delta" else delta.get("partial_json")
        if not isinstance(text, str) or not text:
            return None
        return StreamChunk(provider=provider, model=model.name, delta=text, raw=data)
    if kind == "message_start":
        message = data.get("message") if isinstance(data.get("message"), Mapping) else {}
        return StreamChunk(provider=provider, model=model.name, usage=_usage(message.get("usage")), raw=data)
    if kind == "message_delta":
        delta = data.get("delta") if isinstance(data.get("delta"), Mapping) else {}
        reason = delta.get("stop_reason")
        return StreamChunk(
            provider=provider,
            model=model.name,
            finish_reason=FinishReason.from_vendor(reason) if reason else None,
            usage=_usage(data.get("usage")),
            raw=data,
        )
    return None


def clean_output(text: str) -> str:
    return sanitize_model_output(text)


__all__ = ["parse_response", "parse_stream_event", "clean_output"]
