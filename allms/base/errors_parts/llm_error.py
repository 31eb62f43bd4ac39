"""
Root exception type for the library.

Every failure surfaced to callers is an ``LLMError`` carrying a normalized
:class:`ErrorCode`, so callers can branch on ``exc.code`` without knowing the
concrete subclass. Subclasses live in sibling modules.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .error_code import ErrorCode


@dataclass
class LLMError(Exception):
    """Structured failure with a normalized error code.

    Attributes:
        message: Human-readable error message suitable for logging.
        code: Normalized :class:`ErrorCode` classification for the failure.
        provider: Provider key where the error originated (e.g. ``"openai"``).
        model: Optional model name associated with the failure.
        retryable: Hint for caller-level retry logic (not authoritative).
        raw: Optional original exception for diagnostics.
    """

    message: str
    code: ErrorCode = ErrorCode.UNKNOWN
    provider: Optional[str] = None
    model: Optional[str] = None
    retryable: bool = False
    raw: Optional[BaseException] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"{self.provider or '-'}:{self.model or '-'} {self.code.value}: {self.message}"


__all__ = ["LLMError"]
