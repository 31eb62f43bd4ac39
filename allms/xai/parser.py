"""xAI response parser.

Reasoning models can return an empty ``content`` with the answer in
``reasoning_content``; that text is used as the fallback. Search requests
answer with the Responses envelope.
"""

from __future__ import annotations

from typing import Optional

from ..base.models_parts.answer import NormalizedAnswer
from ..base.models_parts.provider_model import ProviderModel
from ..base.models_parts.wire import RawProviderResponse
from ..base.openai_style_parts import (
    is_responses_body,
    is_responses_event,
    parse_chat_completion,
    parse_chat_stream_event,
    parse_responses_body,
    parse_responses_event,
)
from ..base.parsing import decode_event, decode_response
from ..base.streaming.streaming import StreamChunk
from ..base.utils.json_text import sanitize_model_output


def parse_response(raw: RawProviderResponse, model: ProviderModel) -> NormalizedAnswer:
    data = decode_response(raw, model)
    if is_responses_body(data):
        return parse_responses_body(data, model)
    return parse_chat_completion(data, model, reasoning_fallback=True)


def parse_stream_event(payload: str, model: ProviderModel) -> Optional[StreamChunk]:
    data = decode_event(payload, model)
    if is_responses_event(data):
        return parse_responses_event(data, model)
    return parse_chat_stream_event(data, model)


def clean_output(text: str) -> str:
    return sanitize_model_output(text)


__all__ = ["parse_response", "parse_stream_event", "clean_output"]
