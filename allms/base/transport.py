"""HTTP transport for request descriptors.

Purpose:
    Send a ``RequestDescriptor`` and hand back a ``RawProviderResponse``
    without interpreting the body; non-2xx statuses are returned as-is so the
    matching parser can map the vendor error envelope.

Streaming:
    ``Transport.stream`` is a generator. Nothing is sent until the first
    ``next()``; it yields SSE ``data`` payloads (or JSON lines) and always
    closes the response, including on early ``close()`` and cancellation. A
    non-2xx streaming status is read in full and raised as the vendor error.

Failure modes:
    - ``httpx.TimeoutException`` -> ``NetworkFailure(code=TIMEOUT)``
    - other ``httpx.TransportError`` -> ``NetworkFailure(code=TRANSIENT)``
    - cancellation -> ``CancelledError``

Logging:
    ``transport.request`` and ``transport.response`` events with method, URL,
    status and elapsed time. Headers are never logged except in redacted form
    at DEBUG level.
"""

from __future__ import annotations

import contextlib
import logging
import time
from typing import Callable, Iterator, Optional

import httpx

from .cancellation import CancellationToken, CancelledError
from .errors import NetworkFailure, classify_exception, error_from_response
from .http import get_httpx_client
from .log_support import LogContext
from .logging import get_logger, normalized_log_event
from .models_parts.wire import RawProviderResponse, RequestDescriptor
from .streaming.sse import iter_sse_data
from .timeouts import get_timeout_config

_logger = get_logger("allms.transport")


def _ctx(descriptor: RequestDescriptor) -> LogContext:
    return LogContext(provider=descriptor.provider, model=descriptor.model)


class Transport:
    """Blocking HTTP transport over a pooled (or injected) ``httpx.Client``.

    Parameters:
        client: Optional client; tests inject one built on
            ``httpx.MockTransport``. When omitted, the shared pool keyed by
            provider is used.
    """

    def __init__(self, client: Optional[httpx.Client] = None) -> None:
        self._client = client

    def _client_for(self, descriptor: RequestDescriptor) -> httpx.Client:
        if self._client is not None:
            return self._client
        return get_httpx_client(descriptor.provider or "default")

    def _build(self, client: httpx.Client, descriptor: RequestDescriptor, timeout: Optional[float]) -> httpx.Request:
        return client.build_request(
            descriptor.method,
            descriptor.url,
            headers=dict(descriptor.headers),
            content=descriptor.body,
            timeout=get_timeout_config().to_httpx(stream=descriptor.stream, override=timeout),
        )

    def _network_failure(self, exc: httpx.HTTPError, descriptor: RequestDescriptor) -> NetworkFailure:
        code = classify_exception(exc)
        return NetworkFailure(
            message=f"{type(exc).__name__}: {exc}",
            code=code,
            provider=descriptor.provider,
            model=descriptor.model,
            raw=exc,
        )

    def _open(
        self,
        descriptor: RequestDescriptor,
        timeout: Optional[float],
        cancel: Optional[CancellationToken],
    ) -> tuple[httpx.Response, Callable[[], None]]:
        """Send and return the (unread) response plus a cancel unregister hook."""
        if cancel is not None:
            cancel.raise_if_cancelled()
        client = self._client_for(descriptor)
        request = self._build(client, descriptor, timeout)
        normalized_log_event(
            _logger,
            "transport.request",
            _ctx(descriptor),
            phase="dispatch",
            method=descriptor.method,
            url=descriptor.url,
            stream=descriptor.stream,
            bytes=len(descriptor.body),
        )
        if _logger.isEnabledFor(logging.DEBUG):
            normalized_log_event(
                _logger,
                "transport.request.headers",
                _ctx(descriptor),
                phase="dispatch",
                level=logging.DEBUG,
                headers=descriptor.redacted_headers(),
            )
        try:
            response = client.send(request, stream=True)
        except httpx.HTTPError as exc:
            if cancel is not None and cancel.cancelled:
                raise CancelledError(cancel.reason or "operation cancelled") from exc
            raise self._network_failure(exc, descriptor) from exc
        unregister: Callable[[], None] = lambda: None  # noqa: E731
        if cancel is not None:
            unregister = cancel.on_cancel(response.close)
        return response, unregister

    def send(
        self,
        descriptor: RequestDescriptor,
        *,
        timeout: Optional[float] = None,
        cancel: Optional[CancellationToken] = None,
    ) -> RawProviderResponse:
        """Send ``descriptor`` and read the whole body."""
        started = time.perf_counter()
        response, unregister = self._open(descriptor, timeout, cancel)
        try:
            body = response.read()
        except (httpx.HTTPError, httpx.StreamError) as exc:
            if cancel is not None and cancel.cancelled:
                raise CancelledError(cancel.reason or "operation cancelled") from exc
            if isinstance(exc, httpx.HTTPError):
                raise self._network_failure(exc, descriptor) from exc
            raise
        finally:
            unregister()
            response.close()
        if cancel is not None:
            cancel.raise_if_cancelled()
        elapsed_ms = round((time.perf_counter() - started) * 1000.0, 2)
        normalized_log_event(
            _logger,
            "transport.response",
            _ctx(descriptor),
            phase="dispatch",
            status=response.status_code,
            bytes=len(body),
            elapsed_ms=elapsed_ms,
        )
        return RawProviderResponse(
            status=response.status_code,
            body=body,
            headers=dict(response.headers),
            elapsed_ms=elapsed_ms,
        )

    def stream(
        self,
        descriptor: RequestDescriptor,
        *,
        timeout: Optional[float] = None,
        cancel: Optional[CancellationToken] = None,
    ) -> Iterator[str]:
        """Lazily yield event payloads of a streaming response."""
        response, unregister = self._open(descriptor, timeout, cancel)
        emitted = 0
        try:
            if not (200 <= response.status_code < 300):
                body = response.read()
                error = error_from_response(
                    response.status_code,
                    dict(response.headers),
                    body,
                    provider=descriptor.provider or "unknown",
                    model=descriptor.model,
                )
                if error is not None:
                    raise error
            normalized_log_event(
                _logger,
                "stream.start",
                _ctx(descriptor),
                phase="stream",
                status=response.status_code,
            )
            try:
                for payload in iter_sse_data(response.iter_lines()):
                    emitted += 1
                    yield payload
            except (httpx.HTTPError, httpx.StreamError) as exc:
                if cancel is not None and cancel.cancelled:
                    raise CancelledError(cancel.reason or "operation cancelled") from exc
                if isinstance(exc, httpx.HTTPError):
                    raise self._network_failure(exc, descriptor) from exc
                raise
            if cancel is not None:
                cancel.raise_if_cancelled()
        finally:
            unregister()
            with contextlib.suppress(httpx.HTTPError):
                response.close()
            normalized_log_event(
                _logger,
                "stream.end",
                _ctx(descriptor),
                phase="stream",
                emitted=emitted,
            )


__all__ = ["Transport"]
