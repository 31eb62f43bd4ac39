"""
Vendor error envelope extraction.

Every vendor wraps failures differently. This module recognises the shapes in
use and turns a response (status + headers + body) into a ``ProviderError``
or ``RateLimitError``, preserving the vendor's message and code verbatim.

Recognised body shapes:
    ``{"error": {"message": ..., "type"/"code"/"status": ...}}``  OpenAI, Azure,
        xAI, DeepSeek, Google, Anthropic (``{"type": "error", "error": {...}}``)
    ``{"error": "..."}``                                 Perplexity, proxies
    ``{"object": "error", "message": ..., "type": ...}``  Mistral
    ``{"message": ...}`` + ``x-amzn-errortype`` header     Bedrock
    ``{"detail": ...}``                                   validation gateways
    ``[{"error": {...}}]``                                Google streaming

Retry-after hints are read from ``retry-after`` (seconds or HTTP date),
``retry-after-ms``, OpenAI ``x-ratelimit-reset-*`` durations and Google
``RetryInfo.retryDelay`` details.
"""
from __future__ import annotations

import json
import re
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Mapping, Optional, Tuple

from .classification import classify_status, heuristic_from_message
from .error_code import ErrorCode
from .provider_error import ProviderError, RateLimitError

_BODY_PREVIEW_CHARS = 2000

_THROTTLE_CODES = frozenset(
    {
        "rate_limit_exceeded",
        "rate_limit_error",
        "resource_exhausted",
        "throttlingexception",
        "too_many_requests",
        "insufficient_quota",
    }
)

_DURATION_RE = re.compile(r"(\d+(?:\.\d+)?)(ms|s|m|h)")
_DURATION_FACTORS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0}


def _as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, str):
        return value or None
    if isinstance(value, (int, float)):
        return str(value)
    return json.dumps(value, ensure_ascii=False, sort_keys=True)


def extract_error_envelope(data: Any) -> Optional[Tuple[str, Optional[str]]]:
    """Return ``(message, vendor_code)`` when ``data`` is a vendor error object."""
    if isinstance(data, list) and data:
        return extract_error_envelope(data[0])
    if not isinstance(data, Mapping):
        return None
    err = data.get("error")
    if isinstance(err, Mapping):
        message = _as_text(err.get("message")) or _as_text(err) or "unknown error"
        vendor = _as_text(err.get("code")) or _as_text(err.get("type")) or _as_text(err.get("status"))
        return message, vendor
    if isinstance(err, str) and err:
        return err, None
    if data.get("object") == "error" or data.get("type") == "error":
        message = _as_text(data.get("message")) or "unknown error"
        return message, _as_text(data.get("code")) or _as_text(data.get("type"))
    if "detail" in data and len(data) <= 2:
        return _as_text(data.get("detail")) or "unknown error", None
    return None


def _parse_duration(value: str) -> Optional[float]:
    """Parse ``"6m0s"``, ``"20ms"``, ``"1.5s"`` style durations into seconds."""
    matches = _DURATION_RE.findall(value.strip())
    if not matches:
        return None
    return sum(float(num) * _DURATION_FACTORS[unit] for num, unit in matches)


def _header(headers: Mapping[str, str], name: str) -> Optional[str]:
    for key, value in headers.items():
        if key.lower() == name:
            return value
    return None


def _retry_after_from_body(data: Any) -> Optional[float]:
    err = data.get("error") if isinstance(data, Mapping) else None
    details = err.get("details") if isinstance(err, Mapping) else None
    if not isinstance(details, list):
        return None
    for item in details:
        if isinstance(item, Mapping) and isinstance(item.get("retryDelay"), str):
            return _parse_duration(item["retryDelay"])
    return None


def parse_retry_after(headers: Mapping[str, str], data: Any = None) -> Optional[float]:
    """Return the suggested wait in seconds, or ``None`` when no hint exists."""
    raw_ms = _header(headers, "retry-after-ms")
    if raw_ms:
        try:
            return max(0.0, float(raw_ms) / 1000.0)
        except ValueError:
            pass
    raw = _header(headers, "retry-after")
    if raw:
        try:
            return max(0.0, float(raw))
        except ValueError:
            try:
                when = parsedate_to_datetime(raw)
            except (TypeError, ValueError):
                when = None
            if when is not None:
                if when.tzinfo is None:
                    when = when.replace(tzinfo=timezone.utc)
                return max(0.0, (when - datetime.now(timezone.utc)).total_seconds())
    for name in ("x-ratelimit-reset-requests", "x-ratelimit-reset-tokens"):
        value = _header(headers, name)
        if value:
            parsed = _parse_duration(value)
            if parsed is not None:
                return parsed
    return _retry_after_from_body(data)


def _is_throttle(status: Optional[int], vendor_code: Optional[str]) -> bool:
    if status == 429:
        return True
    return bool(vendor_code) and vendor_code.lower() in _THROTTLE_CODES


def error_from_response(
    status: int,
    headers: Mapping[str, str],
    body: bytes,
    *,
    provider: str,
    model: Optional[str] = None,
) -> Optional[ProviderError]:
    """Build the vendor error for a response, or ``None`` if it is a success.

    A 2xx response is only an error when its body carries an error envelope.
    A non-2xx response is always an error; the message falls back to the raw
    body text when no envelope is recognised.
    """
    text = body.decode("utf-8", errors="replace")
    try:
        data: Any = json.loads(text) if text.strip() else None
    except json.JSONDecodeError:
        data = None
    envelope = extract_error_envelope(data)
    amzn_type = _header(headers, "x-amzn-errortype")
    if envelope is None and amzn_type and isinstance(data, Mapping):
        envelope = (_as_text(data.get("message")) or _as_text(data.get("Message")) or amzn_type, None)
    if envelope is None and not (status >= 400 or status < 200):
        return None

    message, vendor_code = envelope or (text.strip() or f"HTTP {status}", None)
    if vendor_code is None and amzn_type:
        vendor_code = amzn_type.split(":", 1)[0]

    is_http_error = status >= 400 or status < 200
    code = classify_status(status) if is_http_error else ErrorCode.UNKNOWN
    if not is_http_error or code in (ErrorCode.VALIDATION, ErrorCode.UNKNOWN):
        code = heuristic_from_message(f"{vendor_code or ''} {message}") or code

    common = dict(
        message=message,
        provider=provider,
        model=model,
        vendor_code=vendor_code,
        status=status,
        body=text[:_BODY_PREVIEW_CHARS],
    )
    if _is_throttle(status, vendor_code) or code is ErrorCode.RATE_LIMIT:
        return RateLimitError(retry_after=parse_retry_after(headers, data), **common)
    retryable = code in (ErrorCode.TRANSIENT, ErrorCode.UNAVAILABLE, ErrorCode.TIMEOUT, ErrorCode.SERVER_ERROR)
    return ProviderError(code=code, retryable=retryable, **common)


__all__ = [
    "extract_error_envelope",
    "error_from_response",
    "parse_retry_after",
]
