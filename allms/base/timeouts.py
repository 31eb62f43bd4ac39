"""Timeout configuration for outbound calls.

Centralizes the timeout values used by the transport so no adapter carries
ad-hoc literals. Values are read from the environment on first use and
cached; the cache refreshes when the relevant variables change, which keeps
tests that adjust them via ``monkeypatch`` deterministic.

Environment variables (all optional, positive floats, seconds):
    ALLMS_TIMEOUT_CONNECT_SECONDS   connection establishment (default 10)
    ALLMS_TIMEOUT_HTTP_SECONDS      whole non-streaming request (default 120)
    ALLMS_TIMEOUT_STREAM_SECONDS    idle gap between streamed chunks (default 60)

``TimeoutConfig.to_httpx`` converts the values into an ``httpx.Timeout``;
a per-call override replaces the read/write/pool budget.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

import httpx

_ENV_NAMES = (
    "ALLMS_TIMEOUT_CONNECT_SECONDS",
    "ALLMS_TIMEOUT_HTTP_SECONDS",
    "ALLMS_TIMEOUT_STREAM_SECONDS",
)


@dataclass(frozen=True)
class TimeoutConfig:
    """Normalized timeout values (seconds).

    Attributes:
        connect_timeout_seconds: Budget for establishing the TCP/TLS connection.
        http_timeout_seconds: Budget for a non-streaming request.
        stream_timeout_seconds: Idle timeout while waiting for the next chunk.
    """

    connect_timeout_seconds: float = 10.0
    http_timeout_seconds: float = 120.0
    stream_timeout_seconds: float = 60.0

    def to_httpx(self, *, stream: bool = False, override: Optional[float] = None) -> httpx.Timeout:
        budget = override if override is not None else (
            self.stream_timeout_seconds if stream else self.http_timeout_seconds
        )
        return httpx.Timeout(budget, connect=min(self.connect_timeout_seconds, budget))


_CACHED: TimeoutConfig | None = None
_ENV_GUARD: str | None = None


def _parse_env_float(name: str, default: float) -> float:
    """Read ``name`` as a positive float, falling back to ``default``."""
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        val = float(raw)
    except ValueError:
        return default
    return val if val > 0 else default


def get_timeout_config() -> TimeoutConfig:
    """Return the process-cached ``TimeoutConfig``."""
    global _CACHED, _ENV_GUARD  # noqa: PLW0603 - documented module cache
    guard = "/".join(os.getenv(n, "") for n in _ENV_NAMES)
    if _CACHED is not None and _ENV_GUARD == guard:
        return _CACHED
    defaults = TimeoutConfig()
    _CACHED = TimeoutConfig(
        connect_timeout_seconds=_parse_env_float(_ENV_NAMES[0], defaults.connect_timeout_seconds),
        http_timeout_seconds=_parse_env_float(_ENV_NAMES[1], defaults.http_timeout_seconds),
        stream_timeout_seconds=_parse_env_float(_ENV_NAMES[2], defaults.stream_timeout_seconds),
    )
    _ENV_GUARD = guard
    return _CACHED


__all__ = ["TimeoutConfig", "get_timeout_config"]
