"""
AWS Bedrock Converse response parser.

``output.message.content[].text`` is concatenated; ``toolUse`` blocks become
the tool call. Errors arrive as ``{"message": ...}`` with the
``x-amzn-errortype`` header and are mapped by the shared envelope logic.
"""

from __future__ import annotations

import json
from typing import Any, List, Mapping, Optional

from ..base.capabilities import CAP_STREAMING
from ..base.errors import ParseError, UnsupportedCapabilityError
from ..base.models_parts.answer import FinishReason, NormalizedAnswer, ToolCall
from ..base.models_parts.provider_model import ProviderModel
from ..base.models_parts.wire import RawProviderResponse
from ..base.parsing import decode_response
from ..base.streaming.streaming import StreamChunk
from ..base.tokens.extraction import usage_from_mapping
from ..base.utils.json_text import sanitize_model_output


def parse_response(raw: RawProviderResponse, model: ProviderModel) -> NormalizedAnswer:
    data = decode_response(raw, model)
    output = data.get("output") if isinstance(data, Mapping) else None
    message = output.get("message") if isinstance(output, Mapping) else None
    content = message.get("content") if isinstance(message, Mapping) else None
    if not isinstance(content, list):
        raise ParseError(message="response has no output message", provider=model.provider.value, model=model.name, fragment=data)
    texts: List[str] = []
    tool_call: Optional[ToolCall] = None
    for block in content:
        if not isinstance(block, Mapping):
            continue
        if isinstance(block.get("text"), str):
            texts.append(block["text"])
        use: Any = block.get("toolUse")
        if isinstance(use, Mapping) and tool_call is None:
            tool_call = ToolCall(name=str(use.get("name") or ""), arguments=json.dumps(use.get("input") or {}, ensure_ascii=False))
    return NormalizedAnswer(
        text="".join(texts),
        provider=model.provider.value,
        model=model.name,
        usage=usage_from_mapping(
            data.get("usage"),
            prompt_key="inputTokens",
            completion_key="outputTokens",
            total_key="totalTokens",
        ),
        finish_reason=FinishReason.from_vendor(data.get("stopReason")),
        tool_call=tool_call,
        response_id=raw.headers.get("x-amzn-requestid") if raw.headers else None,
    )


def parse_stream_event(payload: str, model: ProviderModel) -> Optional[StreamChunk]:
    raise UnsupportedCapabilityError(
        message=f"{model.key} does not support {CAP_STREAMING}",
        provider=model.provider.value,
        model=model.name,
        capability=CAP_STREAMING,
    )


def clean_output(text: str) -> str:
    return sanitize_model_output(text)


__all__ = ["parse_response", "parse_stream_event", "clean_output"]
