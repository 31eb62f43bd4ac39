"""Cancellation error type.

Defines the public ``CancelledError`` used to signal cooperative cancellation
of an in-flight call.
"""

from __future__ import annotations

from ..errors_parts.error_code import ErrorCode
from ..errors_parts.llm_error import LLMError


class CancelledError(LLMError):
    """Raised when a call is abandoned because its token was cancelled.

    Distinct from ``NetworkFailure`` so callers can tell "I gave up" from
    "the network gave up" and avoid retrying the former.
    """

    def __init__(self, message: str = "operation cancelled", **kwargs) -> None:
        super().__init__(message=message, code=ErrorCode.CANCELLED, **kwargs)


__all__ = ["CancelledError"]
