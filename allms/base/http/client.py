"""Shared HTTP client pool.

Purpose:
    Provide a thread-safe pool of reusable ``httpx.Client`` instances so calls
    to the same vendor share connections. Requests always pass absolute URLs
    and a per-request ``httpx.Timeout``, so one client per ``purpose`` is
    enough; the pool never needs a base URL.

External dependencies:
    - ``httpx`` for the underlying synchronous HTTP client.

Lifecycle & cleanup:
    - Clients are cached by ``purpose`` (e.g. ``"openai"``, ``"anthropic"``).
    - All clients are closed at interpreter exit via ``atexit``; tests may
      call :func:`close_all_clients` explicitly.
"""

from __future__ import annotations

import atexit
import contextlib
import threading
from typing import Dict

import httpx

from ..timeouts import get_timeout_config

_CLIENTS: Dict[str, httpx.Client] = {}
_LOCK = threading.RLock()


def get_httpx_client(purpose: str) -> httpx.Client:
    """Return the pooled ``httpx.Client`` for ``purpose``.

    The first request for a key creates a client whose default timeout comes
    from :func:`get_timeout_config`; subsequent requests reuse it.
    """
    client = _CLIENTS.get(purpose)
    if client is not None and not client.is_closed:
        return client

    with _LOCK:
        client = _CLIENTS.get(purpose)
        if client is not None and not client.is_closed:
            return client
        client = httpx.Client(timeout=get_timeout_config().to_httpx(), follow_redirects=False)
        _CLIENTS[purpose] = client
        return client


def close_all_clients() -> None:
    """Close and clear all pooled HTTP clients."""
    with _LOCK:
        for c in _CLIENTS.values():
            # teardown failures during shutdown are non-actionable
            with contextlib.suppress(Exception):
                c.close()
        _CLIENTS.clear()


atexit.register(close_all_clients)

__all__ = ["get_httpx_client", "close_all_clients"]
