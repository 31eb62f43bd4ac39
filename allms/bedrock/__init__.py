"""AWS Bedrock adapter (Converse API)."""

from .builder import build_request, converse_url
from .parser import clean_output, parse_response, parse_stream_event

__all__ = ["build_request", "converse_url", "parse_response", "parse_stream_event", "clean_output"]
