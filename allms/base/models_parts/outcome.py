"""
Result of validating one model output.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class ValidationOutcome(Generic[T]):
    """Either a coerced value or the reason the output was rejected.

    ``path`` is a JSONPath-like pointer to the failing fragment (``$`` for
    the whole document) and ``fragment`` is the offending value, or the raw
    text when it was not JSON at all.
    """

    ok: bool
    value: Optional[T] = None
    data: Any = None
    reason: Optional[str] = None
    path: Optional[str] = None
    fragment: Any = None

    @classmethod
    def succeeded(cls, value: T, data: Any) -> "ValidationOutcome[T]":
        return cls(ok=True, value=value, data=data)

    @classmethod
    def failed(cls, reason: str, *, path: str = "$", fragment: Any = None, data: Any = None) -> "ValidationOutcome[T]":
        return cls(ok=False, reason=reason, path=path, fragment=fragment, data=data)


__all__ = ["ValidationOutcome"]
