"""
Vendor-reported failures.

``ProviderError`` is raised when a vendor answered but rejected the request
(non-2xx status or an error envelope inside the body). ``RateLimitError`` is
the distinguished throttling case and carries the suggested back-off.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .error_code import ErrorCode
from .llm_error import LLMError


@dataclass
class ProviderError(LLMError):
    """The vendor rejected the request.

    Attributes:
        vendor_code: Vendor specific error code or type (``"invalid_api_key"``,
            ``"overloaded_error"``, ``"RESOURCE_EXHAUSTED"``...), when present.
        status: HTTP status of the response, when known.
        body: Raw response text, truncated for diagnostics.
    """

    vendor_code: Optional[str] = None
    status: Optional[int] = None
    body: Optional[str] = None


@dataclass
class RateLimitError(ProviderError):
    """HTTP 429 or a vendor throttle signal.

    ``retry_after`` is the provider's suggested wait in seconds, if any. The
    library never sleeps on it by itself; see ``allms.base.resilience.retry``.
    """

    code: ErrorCode = ErrorCode.RATE_LIMIT
    retryable: bool = True
    retry_after: Optional[float] = None


__all__ = ["ProviderError", "RateLimitError"]
