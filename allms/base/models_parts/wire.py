"""
HTTP-level request and response containers.

``RequestDescriptor`` is what a request builder produces and the transport
sends. Bodies are canonical JSON (sorted keys, compact separators) so building
twice from the same inputs gives byte-identical output.
``RawProviderResponse`` is what the transport returns; it is handed to the
matching parser and not interpreted before that.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from ..errors import ParseError, parse_retry_after


def canonical_json(payload: Any) -> bytes:
    """Serialize ``payload`` deterministically as UTF-8 JSON."""
    return json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


@dataclass(frozen=True)
class RequestDescriptor:
    """A fully-formed HTTP request."""

    method: str
    url: str
    headers: Mapping[str, str]
    body: bytes
    stream: bool = False
    provider: Optional[str] = None
    model: Optional[str] = None

    def json(self) -> Any:
        return json.loads(self.body.decode("utf-8"))

    def redacted_headers(self) -> Dict[str, str]:
        """Headers safe for logging (credentials masked)."""
        secret = {"authorization", "x-api-key", "api-key", "x-goog-api-key", "x-amz-security-token"}
        return {k: ("***" if k.lower() in secret else v) for k, v in self.headers.items()}


@dataclass(frozen=True)
class RawProviderResponse:
    """Status, headers and undecoded body of one vendor response."""

    status: int
    body: bytes
    headers: Mapping[str, str] = field(default_factory=dict)
    elapsed_ms: Optional[float] = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    def retry_after(self) -> Optional[float]:
        """Seconds the vendor asked callers to wait, if it said so."""
        try:
            data = json.loads(self.text()) if self.body else None
        except json.JSONDecodeError:
            data = None
        return parse_retry_after(self.headers, data)

    def json(self, *, provider: Optional[str] = None, model: Optional[str] = None) -> Any:
        """Decode the body or raise ``ParseError`` with the offending text."""
        try:
            return json.loads(self.text())
        except json.JSONDecodeError as exc:
            raise ParseError(
                message=f"response body is not valid JSON: {exc.msg}",
                provider=provider,
                model=model,
                fragment=self.text()[:500],
                raw=exc,
            ) from exc


__all__ = ["canonical_json", "RequestDescriptor", "RawProviderResponse"]
