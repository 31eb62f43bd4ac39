"""
Error classification helpers mapping exceptions and statuses to ``ErrorCode``.

Implements HTTP status extraction, status-to-code mapping, httpx exception
mapping and message-based heuristics as a fallback for vendor error strings
that arrive without a useful status.
"""
from __future__ import annotations

import asyncio
from typing import Dict, Optional

import httpx

from .error_code import ErrorCode
from .llm_error import LLMError


def _extract_status(exc: BaseException) -> Optional[int]:
    """Attempt to extract an HTTP status code from an exception.

    Supported attribute shapes (checked in order):
    - ``exc.status_code``
    - ``exc.status``
    - ``exc.response.status_code``
    Returns ``None`` if no valid status can be found.
    """
    for attr in ("status_code", "status"):
        val = getattr(exc, attr, None)
        if isinstance(val, int) and 100 <= val < 600:
            return val
    resp = getattr(exc, "response", None)
    if resp is not None:
        sc = getattr(resp, "status_code", None)
        if isinstance(sc, int) and 100 <= sc < 600:
            return sc
    return None


_HTTP_STATUS_MAP: Dict[int, ErrorCode] = {
    400: ErrorCode.VALIDATION,
    401: ErrorCode.AUTH,
    403: ErrorCode.AUTH,
    404: ErrorCode.NOT_FOUND,
    408: ErrorCode.TIMEOUT,
    409: ErrorCode.CONFLICT,
    413: ErrorCode.VALIDATION,
    422: ErrorCode.VALIDATION,
    429: ErrorCode.RATE_LIMIT,
    500: ErrorCode.SERVER_ERROR,
    502: ErrorCode.TRANSIENT,
    503: ErrorCode.UNAVAILABLE,
    504: ErrorCode.TIMEOUT,
    # Anthropic "overloaded_error"
    529: ErrorCode.UNAVAILABLE,
}


_PATTERN_GROUPS = (
    (ErrorCode.RATE_LIMIT, ("rate_limit",)),
    (ErrorCode.RATE_LIMIT, ("resource_exhausted",)),
    (ErrorCode.RATE_LIMIT, ("throttl",)),
    (ErrorCode.RATE_LIMIT, ("too many requests",)),
    (ErrorCode.TIMEOUT, ("timeout",)),
    (ErrorCode.TIMEOUT, ("timed out",)),
    (ErrorCode.AUTH, ("api key",)),
    (ErrorCode.AUTH, ("api_key",)),
    (ErrorCode.AUTH, ("unauthorized",)),
    (ErrorCode.AUTH, ("unauthenticated",)),
    (ErrorCode.AUTH, ("permission",)),
    (ErrorCode.AUTH, ("forbidden",)),
    (ErrorCode.AUTH, ("auth",)),
    (ErrorCode.UNSUPPORTED, ("unsupported",)),
    (ErrorCode.UNSUPPORTED, ("not supported",)),
    (ErrorCode.NOT_FOUND, ("not found",)),
    (ErrorCode.NOT_FOUND, ("not_found",)),
    (ErrorCode.NOT_FOUND, ("does not exist",)),
    (ErrorCode.CONFLICT, ("conflict",)),
    (ErrorCode.UNAVAILABLE, ("overloaded",)),
    (ErrorCode.UNAVAILABLE, ("unavailable",)),
    (ErrorCode.VALIDATION, ("validation",)),
    (ErrorCode.VALIDATION, ("invalid",)),
    (ErrorCode.VALIDATION, ("malformed",)),
    (ErrorCode.SERVER_ERROR, ("server error",)),
    (ErrorCode.SERVER_ERROR, ("internal error",)),
)


def heuristic_from_message(msg: str) -> Optional[ErrorCode]:
    """Substring heuristic mapping for vendor codes and free-form messages."""
    text = msg.lower()
    if "rate" in text and "limit" in text:
        return ErrorCode.RATE_LIMIT
    for code, patterns in _PATTERN_GROUPS:
        if any(p in text for p in patterns):
            return code
    return None


def classify_status(status: Optional[int]) -> ErrorCode:
    """Map an HTTP status to an ``ErrorCode`` (class fallback for unmapped codes)."""
    if status is None:
        return ErrorCode.UNKNOWN
    if status in _HTTP_STATUS_MAP:
        return _HTTP_STATUS_MAP[status]
    if 500 <= status < 600:
        return ErrorCode.SERVER_ERROR
    if 400 <= status < 500:
        return ErrorCode.VALIDATION
    return ErrorCode.UNKNOWN


def classify_exception(exc: BaseException) -> ErrorCode:
    """Classify an exception into a normalized :class:`ErrorCode`.

    Precedence:
        1. ``LLMError`` passthrough.
        2. Timeout exceptions (stdlib, asyncio, httpx).
        3. Other httpx transport failures (connection, protocol).
        4. HTTP status mapping.
        5. Substring heuristics.
        6. ``UNKNOWN`` fallback.
    """
    if isinstance(exc, LLMError):
        return exc.code
    if isinstance(exc, (TimeoutError, asyncio.TimeoutError, httpx.TimeoutException)):
        return ErrorCode.TIMEOUT
    if isinstance(exc, httpx.TransportError):
        return ErrorCode.TRANSIENT
    status = _extract_status(exc)
    if status is not None and status in _HTTP_STATUS_MAP:
        return _HTTP_STATUS_MAP[status]
    code = heuristic_from_message(str(exc))
    return code if code is not None else ErrorCode.UNKNOWN


__all__ = [
    "classify_exception",
    "classify_status",
    "heuristic_from_message",
    "_extract_status",
    "_HTTP_STATUS_MAP",
]
