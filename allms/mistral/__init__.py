"""Mistral adapter (OpenAI-compatible chat completions, Conversations for web search)."""

from .builder import build_request
from .parser import clean_output, parse_response, parse_stream_event

__all__ = ["build_request", "parse_response", "parse_stream_event", "clean_output"]
