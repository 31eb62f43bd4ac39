"""AWS Bedrock model table (Converse API)."""

from __future__ import annotations

from typing import Tuple

from ..base.models_parts.provider import Provider
from ..base.models_parts.provider_model import ProviderModel, RateLimit


def _nova(name: str, tpm: int, rpm: int, aliases: Tuple[str, ...]) -> ProviderModel:
    # Converse streaming uses the binary AWS event stream, not SSE.
    return ProviderModel(
        provider=Provider.BEDROCK,
        name=name,
        max_tokens=5_120,
        supports_streaming=False,
        temperature_range=(0.0, 1.0),
        rate_limit=RateLimit(tpm=tpm, rpm=rpm),
        api="converse",
        aliases=aliases,
    )


BEDROCK_MODELS: Tuple[ProviderModel, ...] = (
    _nova("amazon.nova-pro-v1:0", 400_000, 100, ("nova-pro",)),
    _nova("amazon.nova-lite-v1:0", 2_000_000, 1_000, ("nova-lite",)),
    _nova("amazon.nova-micro-v1:0", 2_000_000, 1_000, ("nova-micro",)),
)

__all__ = ["BEDROCK_MODELS"]
