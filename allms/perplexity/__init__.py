"""Perplexity adapter (OpenAI-compatible chat completions)."""

from .builder import build_request
from .parser import clean_output, parse_response, parse_stream_event

__all__ = ["build_request", "parse_response", "parse_stream_event", "clean_output"]
