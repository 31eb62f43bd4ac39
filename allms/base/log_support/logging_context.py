"""Structured logging context object.

:class:`LogContext` carries the fields shared by every event of one call
(provider, model, call id, response id, extras). ``to_dict`` merges ``extra``
and prunes ``None`` values for clean structured output.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from typing import Any, Dict, Optional


@dataclass
class LogContext:
    """Structured context for logging events."""

    provider: Optional[str] = None
    model: Optional[str] = None
    call_id: Optional[str] = None
    response_id: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        extra = data.pop("extra", {}) or {}
        data.update({k: v for k, v in extra.items() if v is not None})
        return {k: v for k, v in data.items() if v is not None}

    def with_response(self, response_id: Optional[str]) -> "LogContext":
        return replace(self, response_id=response_id, extra=dict(self.extra))


__all__ = ["LogContext"]
