"""Streaming chunk type.

A streamed call yields ``StreamChunk`` values lazily. The sequence is single
pass: it cannot be rewound, and restarting means issuing the call again.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, List, Optional

from ..models_parts.answer import FinishReason, NormalizedAnswer, TokenUsage


@dataclass(frozen=True)
class StreamChunk:
    """One incremental piece of a streamed answer.

    Fields:
      provider: canonical provider name
      model: model id/name
      delta: text delta (empty for control events such as usage reports)
      finish_reason: set on the chunk that ends the answer
      usage: token usage, when the vendor reports it mid/end stream
      raw: decoded vendor event, for debugging
    """

    provider: str
    model: str
    delta: str = ""
    finish_reason: Optional[FinishReason] = None
    usage: Optional[TokenUsage] = None
    raw: Any = None

    @property
    def is_final(self) -> bool:
        return self.finish_reason is not None


def _merge_usage(current: TokenUsage, update: TokenUsage) -> TokenUsage:
    prompt = max(current.prompt, update.prompt)
    completion = max(current.completion, update.completion)
    return TokenUsage(prompt=prompt, completion=completion, total=max(current.total, update.total, prompt + completion))


def accumulate_chunks(chunks: Iterable[StreamChunk]) -> NormalizedAnswer:
    """Fold a chunk sequence into one ``NormalizedAnswer``.

    Consumes ``chunks``. Usage reports are merged field by field (vendors
    split prompt and completion counts across events); the last finish
    reason wins.
    """
    provider = model = ""
    parts: List[str] = []
    usage = TokenUsage()
    finish = FinishReason.UNKNOWN
    for chunk in chunks:
        provider, model = chunk.provider, chunk.model
        if chunk.delta:
            parts.append(chunk.delta)
        if chunk.usage is not None:
            usage = _merge_usage(usage, chunk.usage)
        if chunk.finish_reason is not None:
            finish = chunk.finish_reason
    return NormalizedAnswer(text="".join(parts), provider=provider, model=model, usage=usage, finish_reason=finish)


__all__ = ["StreamChunk", "accumulate_chunks"]
