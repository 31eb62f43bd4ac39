"""
Static model metadata.

``ProviderModel`` is the immutable catalog entry: which vendor serves the
model, its context window, which request shapes it accepts, its documented
rate limit and its temperature range.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from typing import FrozenSet, Optional, Tuple

from ..utils.ranges import map_to_range
from .provider import Provider


@dataclass(frozen=True)
class RateLimit:
    """Documented vendor limits: tokens and requests per minute."""

    tpm: int
    rpm: int


@dataclass(frozen=True)
class ProviderModel:
    """Catalog entry for one (provider, model) pair.

    Attributes:
        provider: Vendor serving the model.
        name: Identifier sent on the wire (deployment name for Azure).
        max_tokens: Context window used for prompt budgeting.
        max_output_tokens: Largest answer the vendor accepts, when it is
            below the context window (``None`` means the window).
        supports_streaming: Vendor streams this model.
        supports_function_calling: Native function/tool calling for output.
        supports_json_mode: Native JSON output mode.
        supports_temperature: Whether ``temperature`` may be sent.
        supports_system_role: Whether a ``system`` message is accepted.
        tools: Kinds of vendor-hosted tools the model serves (``web_search``,
            ``file_search``, ``code_execution``, ``x_search``).
        temperature_range: ``(min, max)`` the relative 0-100 scale maps onto.
        rate_limit: Documented TPM/RPM limits.
        api: Default API family (``chat``, ``responses``, ``messages``,
            ``generate_content``, ``converse``).
        aliases: Additional accepted names (lowercase).
        custom: ``True`` for caller-named deployments not in the fixed table.
    """

    provider: Provider
    name: str
    max_tokens: int
    max_output_tokens: Optional[int] = None
    supports_streaming: bool = True
    supports_function_calling: bool = False
    supports_json_mode: bool = False
    supports_temperature: bool = True
    supports_system_role: bool = True
    tools: FrozenSet[str] = frozenset()
    temperature_range: Tuple[float, float] = (0.0, 1.0)
    rate_limit: RateLimit = field(default_factory=lambda: RateLimit(tpm=1_000_000, rpm=1_000))
    api: str = "chat"
    aliases: Tuple[str, ...] = ()
    custom: bool = False

    @property
    def key(self) -> str:
        return f"{self.provider.value}:{self.name}"

    @property
    def supports_tools(self) -> bool:
        return bool(self.tools)

    @property
    def output_limit(self) -> int:
        """Upper bound for the response budget sent to the vendor."""
        if self.max_output_tokens is None:
            return self.max_tokens
        return min(self.max_output_tokens, self.max_tokens)

    def matches(self, name: str) -> bool:
        wanted = name.strip().lower()
        return wanted == self.name.lower() or wanted in self.aliases

    def normalized_temperature(self, relative: float) -> float:
        """Map a 0-100 relative temperature onto this model's range."""
        low, high = self.temperature_range
        return map_to_range(low, high, relative)

    def max_requests(self) -> int:
        """Requests per minute that fit the limits at half-window responses."""
        per_request = max(1, math.ceil(self.max_tokens * 0.5))
        return min(self.rate_limit.rpm, self.rate_limit.tpm // per_request)

    def renamed(self, name: str) -> "ProviderModel":
        return replace(self, name=name, aliases=(), custom=True)


__all__ = ["ProviderModel", "RateLimit"]
