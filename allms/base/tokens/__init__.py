"""Token usage extraction and prompt token estimation."""

from .counting import count_tokens, get_encoding
from .extraction import usage_from_mapping

__all__ = ["count_tokens", "get_encoding", "usage_from_mapping"]
