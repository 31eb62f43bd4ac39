"""Azure OpenAI response parser (Chat Completions envelope)."""

from __future__ import annotations

from typing import Optional

from ..base.models_parts.answer import NormalizedAnswer
from ..base.models_parts.provider_model import ProviderModel
from ..base.models_parts.wire import RawProviderResponse
from ..base.openai_style_parts import parse_chat_completion, parse_chat_stream_event
from ..base.parsing import decode_event, decode_response
from ..base.streaming.streaming import StreamChunk
from ..openai.parser import clean_output


def parse_response(raw: RawProviderResponse, model: ProviderModel) -> NormalizedAnswer:
    return parse_chat_completion(decode_response(raw, model), model)


def parse_stream_event(payload: str, model: ProviderModel) -> Optional[StreamChunk]:
    return parse_chat_stream_event(decode_event(payload, model), model)


__all__ = ["parse_response", "parse_stream_event", "clean_output"]
