"""
Per-call request data.

``CompletionRequest`` is built by the facade for every attempt and is never
mutated; a corrective retry derives a new request with ``with_correction``.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Literal, Mapping, Optional, Tuple

from .tools import HostedTool

Role = Literal["system", "user", "assistant"]


@dataclass(frozen=True)
class Message:
    """One prior conversation turn."""

    role: Role
    content: str


@dataclass(frozen=True)
class ContextDocument:
    """Named context passed alongside the instructions.

    ``content`` is either serialized data or an opaque identifier of a
    resource uploaded through a vendor's file API.
    """

    name: str
    content: str


@dataclass(frozen=True)
class Correction:
    """Feedback for a corrective retry: the rejected output and why."""

    previous_output: str
    error: str
    path: Optional[str] = None
    attempt: int = 1


@dataclass(frozen=True)
class CompletionRequest:
    """Everything a request builder needs besides the model and credential."""

    instructions: str
    schema: Optional[Mapping[str, Any]] = None
    context: Tuple[ContextDocument, ...] = ()
    history: Tuple[Message, ...] = ()
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    function_calling: bool = False
    stream: bool = False
    api_version: Optional[str] = None
    correction: Optional[Correction] = None
    tools: Tuple[HostedTool, ...] = ()

    def with_correction(self, previous_output: str, error: str, path: Optional[str] = None) -> "CompletionRequest":
        """Return a copy carrying feedback about the last rejected output."""
        attempt = self.correction.attempt + 1 if self.correction else 1
        return replace(
            self,
            correction=Correction(previous_output=previous_output, error=error, path=path, attempt=attempt),
        )


__all__ = ["Role", "Message", "ContextDocument", "Correction", "CompletionRequest"]
