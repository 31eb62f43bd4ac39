"""Google Gemini adapter (AI Studio and Vertex AI ``generateContent``)."""

from .builder import build_request, endpoint_url
from .parser import clean_output, parse_response, parse_stream_event

__all__ = ["build_request", "endpoint_url", "parse_response", "parse_stream_event", "clean_output"]
