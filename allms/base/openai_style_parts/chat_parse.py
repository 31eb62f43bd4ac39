"""
Chat Completions response parsing.

Reads ``choices[0].message`` from a decoded body:

- ``content`` text (xAI reasoning models may leave it empty and put the
  answer in ``reasoning_content``);
- legacy ``function_call`` and ``tool_calls[0].function`` as ``ToolCall``;
- ``finish_reason`` and ``usage.{prompt,completion,total}_tokens``.

Stream events carry ``choices[0].delta`` instead of ``message``; the usage
chunk requested with ``stream_options`` has an empty ``choices`` array.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from ..errors import ParseError
from ..models_parts.answer import FinishReason, NormalizedAnswer, ToolCall
from ..models_parts.provider_model import ProviderModel
from ..streaming.streaming import StreamChunk
from ..tokens.extraction import usage_from_mapping


def _usage(data: Mapping[str, Any]):
    return usage_from_mapping(
        data.get("usage"),
        prompt_key="prompt_tokens",
        completion_key="completion_tokens",
        total_key="total_tokens",
    )


def _tool_call(message: Mapping[str, Any]) -> Optional[ToolCall]:
    fn = message.get("function_call")
    if not isinstance(fn, Mapping):
        calls = message.get("tool_calls")
        if isinstance(calls, list) and calls and isinstance(calls[0], Mapping):
            fn = calls[0].get("function")
    if not isinstance(fn, Mapping):
        return None
    arguments = fn.get("arguments")
    if not isinstance(arguments, str):
        arguments = "" if arguments is None else str(arguments)
    return ToolCall(name=str(fn.get("name") or ""), arguments=arguments)


def parse_chat_completion(
    data: Any,
    model: ProviderModel,
    *,
    reasoning_fallback: bool = False,
) -> NormalizedAnswer:
    """Normalize a decoded chat completion body."""
    provider = model.provider.value
    if not isinstance(data, Mapping):
        raise ParseError(message="expected a JSON object", provider=provider, model=model.name, fragment=data)
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], Mapping):
        raise ParseError(message="response has no choices", provider=provider, model=model.name, fragment=data)
    choice = choices[0]
    message = choice.get("message")
    if not isinstance(message, Mapping):
        raise ParseError(message="choice has no message", provider=provider, model=model.name, fragment=choice)
    content = message.get("content")
    text = content if isinstance(content, str) else ""
    if not text.strip() and reasoning_fallback:
        reasoning = message.get("reasoning_content")
        text = reasoning if isinstance(reasoning, str) else ""
    return NormalizedAnswer(
        text=text,
        provider=provider,
        model=str(data.get("model") or model.name),
        usage=_usage(data),
        finish_reason=FinishReason.from_vendor(choice.get("finish_reason")),
        tool_call=_tool_call(message),
        response_id=data.get("id"),
    )


def parse_chat_stream_event(data: Any, model: ProviderModel) -> Optional[StreamChunk]:
    """Normalize one decoded stream event, or ``None`` when it carries nothing."""
    if not isinstance(data, Mapping):
        return None
    provider = model.provider.value
    usage = _usage(data) if isinstance(data.get("usage"), Mapping) else None
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices:
        if usage is None:
            return None
        return StreamChunk(provider=provider, model=model.name, usage=usage, raw=data)
    choice = choices[0] if isinstance(choices[0], Mapping) else {}
    delta = choice.get("delta") if isinstance(choice.get("delta"), Mapping) else {}
    text = delta.get("content")
    if not isinstance(text, str):
        text = ""
    fn = delta.get("function_call")
    if not text and isinstance(fn, Mapping) and isinstance(fn.get("arguments"), str):
        text = fn["arguments"]
    calls = delta.get("tool_calls")
    if not text and isinstance(calls, list) and calls and isinstance(calls[0], Mapping):
        call_fn = calls[0].get("function")
        if isinstance(call_fn, Mapping) and isinstance(call_fn.get("arguments"), str):
            text = call_fn["arguments"]
    raw_finish = choice.get("finish_reason")
    finish = FinishReason.from_vendor(raw_finish) if raw_finish else None
    if not text and finish is None and usage is None:
        return None
    return StreamChunk(provider=provider, model=model.name, delta=text, finish_reason=finish, usage=usage, raw=data)


__all__ = ["parse_chat_completion", "parse_chat_stream_event"]
