"""
OpenAI response parser.

The body shape tells the API family apart: Chat Completions answers carry
``choices``; Responses answers carry ``output`` items. Streaming Responses
events are typed (``response.output_text.delta``, ``response.completed``...).
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
    """Normalize an OpenAI response (either API family)."""
    data = decode_response(raw, model)
    if is_responses_body(data):
        return parse_responses_body(data, model)
    return parse_chat_completion(data, model)


def parse_stream_event(payload: str, model: ProviderModel) -> Optional[StreamChunk]:
    """Normalize one streamed event from either API family."""
    data = decode_event(payload, model)
    if is_responses_event(data):
        return parse_responses_event(data, model)
    return parse_chat_stream_event(data, model)


def clean_output(text: str) -> str:
    """Strip fences and the ``properties``/``items`` wrappers some deployments echo."""
    return sanitize_model_output(text, schema_wrappers=True)


__all__ = ["parse_response", "parse_stream_event", "clean_output"]
