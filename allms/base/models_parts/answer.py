"""
Provider-agnostic answer representation.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class FinishReason(str, Enum):
    STOP = "stop"
    LENGTH = "length"
    TOOL_CALL = "tool_call"
    ERROR = "error"
    UNKNOWN = "unknown"

    @classmethod
    def from_vendor(cls, value: Any) -> "FinishReason":
        """Map vendor stop/finish reasons onto the normalized set."""
        if value is None:
            return cls.UNKNOWN
        return _VENDOR_FINISH.get(str(value).strip().lower(), cls.UNKNOWN)


_VENDOR_FINISH: Dict[str, FinishReason] = {
    "stop": FinishReason.STOP,
    "end_turn": FinishReason.STOP,
    "stop_sequence": FinishReason.STOP,
    "completed": FinishReason.STOP,
    "complete": FinishReason.STOP,
    "length": FinishReason.LENGTH,
    "max_tokens": FinishReason.LENGTH,
    "model_context_window_exceeded": FinishReason.LENGTH,
    "incomplete": FinishReason.LENGTH,
    "function_call": FinishReason.TOOL_CALL,
    "tool_calls": FinishReason.TOOL_CALL,
    "tool_use": FinishReason.TOOL_CALL,
    "content_filter": FinishReason.ERROR,
    "content_filtered": FinishReason.ERROR,
    "guardrail_intervened": FinishReason.ERROR,
    "safety": FinishReason.ERROR,
    "recitation": FinishReason.ERROR,
    "blocklist": FinishReason.ERROR,
    "prohibited_content": FinishReason.ERROR,
    "malformed_function_call": FinishReason.ERROR,
    "failed": FinishReason.ERROR,
    "error": FinishReason.ERROR,
}


@dataclass(frozen=True)
class TokenUsage:
    """Token accounting; vendors that omit a count report 0."""

    prompt: int = 0
    completion: int = 0
    total: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {"prompt": self.prompt, "completion": self.completion, "total": self.total}

    def __add__(self, other: "TokenUsage") -> "TokenUsage":
        return TokenUsage(
            prompt=self.prompt + other.prompt,
            completion=self.completion + other.completion,
            total=self.total + other.total,
        )


@dataclass(frozen=True)
class ToolCall:
    """Function/tool call emitted instead of (or next to) plain text."""

    name: str
    arguments: str


@dataclass(frozen=True)
class NormalizedAnswer:
    """What every response parser returns."""

    text: str
    provider: str
    model: str
    usage: TokenUsage = field(default_factory=TokenUsage)
    finish_reason: FinishReason = FinishReason.UNKNOWN
    tool_call: Optional[ToolCall] = None
    response_id: Optional[str] = None

    @property
    def output(self) -> str:
        """Text to validate: the message text, or the tool-call arguments."""
        if self.text.strip():
            return self.text
        return self.tool_call.arguments if self.tool_call else self.text

    def output_for(self, function_calling: bool) -> str:
        """Like ``output``, but a tool call wins over text when function calling was requested."""
        if function_calling and self.tool_call is not None:
            return self.tool_call.arguments
        return self.output


__all__ = ["FinishReason", "TokenUsage", "ToolCall", "NormalizedAnswer"]
