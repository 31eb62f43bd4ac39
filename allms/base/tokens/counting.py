"""Prompt token estimation backed by ``tiktoken``.

Used by the facade to check that a prompt fits the model's window before
dispatch. Only OpenAI publishes its tokenizers; every other vendor is
estimated with ``cl100k_base``, which the facade compensates for with a
safety margin.
"""

from __future__ import annotations

import threading
from functools import lru_cache

import tiktoken

FALLBACK_ENCODING = "cl100k_base"

_LOCK = threading.Lock()


@lru_cache(maxsize=32)
def _encoding_for(model_name: str) -> "tiktoken.Encoding":
    try:
        return tiktoken.encoding_for_model(model_name)
    except KeyError:
        return tiktoken.get_encoding(FALLBACK_ENCODING)


def get_encoding(model_name: str) -> "tiktoken.Encoding":
    """Return the tokenizer for ``model_name`` (``cl100k_base`` when unknown)."""
    # encoding construction downloads and caches BPE files on first use
    with _LOCK:
        return _encoding_for(model_name)


def count_tokens(text: str, model_name: str = "") -> int:
    """Number of tokens ``text`` encodes to for ``model_name``."""
    if not text:
        return 0
    encoding = get_encoding(model_name)
    return len(encoding.encode(text, disallowed_special=()))


__all__ = ["count_tokens", "get_encoding", "FALLBACK_ENCODING"]
