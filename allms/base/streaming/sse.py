"""Server-sent events decoding.

Vendors stream either SSE (``event:``/``data:`` lines separated by blank
lines; OpenAI, Anthropic, Google ``alt=sse``, Mistral, DeepSeek, xAI,
Perplexity) or bare JSON lines. ``iter_sse_data`` turns a line iterator into
the sequence of data payloads and stops at the ``[DONE]`` sentinel.
"""

from __future__ import annotations

from typing import Iterable, Iterator, List

DONE_SENTINEL = "[DONE]"


def iter_sse_data(lines: Iterable[str]) -> Iterator[str]:
    """Yield the data payload of each event in ``lines``.

    Multi-line ``data:`` fields are joined with ``\\n`` as the SSE format
    specifies. Comment lines (``:``) and ``event:``/``id:``/``retry:`` fields
    are ignored because every vendor repeats the event type in the payload.
    Lines that are not SSE fields are treated as complete JSON-lines payloads.
    """
    buffer: List[str] = []
    for raw_line in lines:
        line = raw_line.rstrip("\r\n")
        if not line:
            if buffer:
                payload = "\n".join(buffer)
                buffer = []
                if payload.strip() == DONE_SENTINEL:
                    return
                yield payload
            continue
        if line.startswith(":"):
            continue
        if line.startswith("data:"):
            value = line[5:]
            buffer.append(value[1:] if value.startswith(" ") else value)
            continue
        if line.startswith(("event:", "id:", "retry:")):
            continue
        if line.strip() == DONE_SENTINEL:
            return
        yield line
    if buffer:
        payload = "\n".join(buffer)
        if payload.strip() != DONE_SENTINEL:
            yield payload


__all__ = ["iter_sse_data", "DONE_SENTINEL"]
