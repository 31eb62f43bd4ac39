"""Streaming primitives: chunk type, accumulation and SSE decoding."""

from .streaming import StreamChunk, accumulate_chunks
from .sse import iter_sse_data

__all__ = ["StreamChunk", "accumulate_chunks", "iter_sse_data"]
