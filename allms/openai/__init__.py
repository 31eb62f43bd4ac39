"""OpenAI adapter: Chat Completions and Responses API."""

from .builder import API_CHAT, API_RESPONSES, build_request, resolve_api
from .parser import clean_output, parse_response, parse_stream_event

__all__ = [
    "API_CHAT",
    "API_RESPONSES",
    "build_request",
    "resolve_api",
    "parse_response",
    "parse_stream_event",
    "clean_output",
]
