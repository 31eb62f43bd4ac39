"""Mistral response parser (chat completions or Conversations envelope)."""

from __future__ import annotations

from typing import Optional

from ..base.models_parts.answer import NormalizedAnswer
from ..base.models_parts.provider_model import ProviderModel
from ..base.models_parts.wire import RawProviderResponse
from ..base.openai_style_parts import parse_chat_completion, parse_chat_stream_event
from ..base.parsing import decode_event, decode_response
from ..base.streaming.streaming import StreamChunk
from ..base.utils.json_text import sanitize_model_output
from .conversations import (
    is_conversation_body,
    is_conversation_event,
    parse_conversation_body,
    parse_conversation_event,
)


def parse_response(raw: RawProviderResponse, model: ProviderModel) -> NormalizedAnswer:
    data = decode_response(raw, model)
    if is_conversation_body(data):
        return parse_conversation_body(data, model)
    return parse_chat_completion(data, model)


def parse_stream_event(payload: str, model: ProviderModel) -> Optional[StreamChunk]:
    data = decode_event(payload, model)
    if is_conversation_event(data):
        return parse_conversation_event(data, model)
    return parse_chat_stream_event(data, model)


def clean_output(text: str) -> str:
    return sanitize_model_output(text)


__all__ = ["parse_response", "parse_stream_event", "clean_output"]
