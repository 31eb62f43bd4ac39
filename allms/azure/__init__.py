"""Azure OpenAI adapter (deployment-routed Chat Completions)."""

from .builder import build_request, resolve_api_version
from .parser import clean_output, parse_response, parse_stream_event

__all__ = ["build_request", "resolve_api_version", "parse_response", "parse_stream_event", "clean_output"]
