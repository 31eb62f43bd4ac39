"""
Local failure kinds raised before or after the vendor round trip.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .error_code import ErrorCode
from .llm_error import LLMError


@dataclass
class UnknownModelError(LLMError):
    """The (provider, model) pair is not in the catalog."""

    code: ErrorCode = ErrorCode.NOT_FOUND


@dataclass
class UnsupportedCapabilityError(LLMError):
    """The request needs a feature the model metadata declares unsupported."""

    code: ErrorCode = ErrorCode.UNSUPPORTED
    capability: Optional[str] = None


@dataclass
class NetworkFailure(LLMError):
    """Timeout, connection or protocol failure before a response was read.

    Transient by nature, so ``retryable`` defaults to ``True``; the library
    leaves the actual retry to the caller.
    """

    code: ErrorCode = ErrorCode.TRANSIENT
    retryable: bool = True


@dataclass
class ParseError(LLMError):
    """A successful response did not have the expected envelope shape."""

    code: ErrorCode = ErrorCode.PARSE
    fragment: Any = None


__all__ = [
    "UnknownModelError",
    "UnsupportedCapabilityError",
    "NetworkFailure",
    "ParseError",
]
