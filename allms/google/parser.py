"""
Google Gemini response parser.

Text is the concatenation of ``parts[].text`` of candidates whose content
role is ``model``; a ``functionCall`` part becomes the tool call. A prompt
rejected by safety filters arrives as ``promptFeedback.blockReason`` with no
candidates and is raised as a ``ProviderError``. Stream events have the
same shape as complete responses, one partial candidate each.
"""

from __future__ import annotations

import json
from typing import Any, List, Mapping, Optional, Tuple

from ..base.errors import ErrorCode, ParseError, ProviderError
from ..base.models_parts.answer import FinishReason, NormalizedAnswer, TokenUsage, ToolCall
from ..base.models_parts.provider_model import ProviderModel
from ..base.models_parts.wire import RawProviderResponse
from ..base.parsing import decode_event, decode_response
from ..base.streaming.streaming import StreamChunk
from ..base.tokens.extraction import usage_from_mapping
from ..base.utils.json_text import sanitize_model_output


def _usage(data: Mapping[str, Any]) -> TokenUsage:
    return usage_from_mapping(
        data.get("usageMetadata"),
        prompt_key="promptTokenCount",
        completion_key="candidatesTokenCount",
        total_key="totalTokenCount",
    )


def _blocked(data: Mapping[str, Any], model: ProviderModel) -> ProviderError:
    feedback = data.get("promptFeedback") if isinstance(data.get("promptFeedback"), Mapping) else {}
    reason = str(feedback.get("blockReason"))
    return ProviderError(
        message=f"prompt blocked: {reason}",
        code=ErrorCode.VALIDATION,
        provider=model.provider.value,
        model=model.name,
        vendor_code=reason,
    )


def _candidates(data: Mapping[str, Any], model: ProviderModel) -> Tuple[str, Optional[ToolCall], Optional[str]]:
    texts: List[str] = []
    tool_call: Optional[ToolCall] = None
    finish: Optional[str] = None
    for candidate in data.get("candidates") or ():
        if not isinstance(candidate, Mapping):
            continue
        finish = finish or candidate.get("finishReason")
        content = candidate.get("content")
        if not isinstance(content, Mapping) or content.get("role", "model") != "model":
            continue
        for part in content.get("parts") or ():
            if not isinstance(part, Mapping):
                continue
            if isinstance(part.get("text"), str) and not part.get("thought"):
                texts.append(part["text"])
            call = part.get("functionCall")
            if isinstance(call, Mapping) and tool_call is None:
                tool_call = ToolCall(
                    name=str(call.get("name") or ""),
                    arguments=json.dumps(call.get("args") or {}, ensure_ascii=False),
                )
    return "".join(texts), tool_call, finish


def parse_response(raw: RawProviderResponse, model: ProviderModel) -> NormalizedAnswer:
    data = decode_response(raw, model)
    if not isinstance(data, Mapping):
        raise ParseError(message="expected a JSON object", provider=model.provider.value, model=model.name, fragment=data)
    if not data.get("candidates"):
        if isinstance(data.get("promptFeedback"), Mapping) and data["promptFeedback"].get("blockReason"):
            raise _blocked(data, model)
        raise ParseError(message="response has no candidates", provider=model.provider.value, model=model.name, fragment=data)
    text, tool_call, finish = _candidates(data, model)
    reason = FinishReason.from_vendor(finish)
    if tool_call is not None and reason is FinishReason.STOP:
        reason = FinishReason.TOOL_CALL
    return NormalizedAnswer(
        text=text,
        provider=model.provider.value,
        model=str(data.get("modelVersion") or model.name),
        usage=_usage(data),
        finish_reason=reason,
        tool_call=tool_call,
        response_id=data.get("responseId"),
    )


def parse_stream_event(payload: str, model: ProviderModel) -> Optional[StreamChunk]:
    data = decode_event(payload, model)
    if not isinstance(data, Mapping):
        return None
    if not data.get("candidates") and isinstance(data.get("promptFeedback"), Mapping) and data["promptFeedback"].get("blockReason"):
        raise _blocked(data, model)
    text, tool_call, finish = _candidates(data, model)
    if not text and tool_call is not None:
        text = tool_call.arguments
    usage = _usage(data) if isinstance(data.get("usageMetadata"), Mapping) else None
    if not text and finish is None and usage is None:
        return None
    return StreamChunk(
        provider=model.provider.value,
        model=model.name,
        delta=text,
        finish_reason=FinishReason.from_vendor(finish) if finish else None,
        usage=usage,
        raw=data,
    )


def clean_output(text: str) -> str:
    return sanitize_model_output(text)


__all__ = ["parse_response", "parse_stream_event", "clean_output"]
