"""Capability gating.

Capabilities are flags on ``ProviderModel``; builders call
``require_capability`` before producing a request shape the model cannot
serve, so the caller gets ``UnsupportedCapabilityError`` instead of a vendor
400.
"""

from __future__ import annotations

from typing import FrozenSet, Iterable

from .errors import UnsupportedCapabilityError
from .models_parts.provider_model import ProviderModel
from .models_parts.tools import HostedTool

CAP_STREAMING = "streaming"
CAP_FUNCTION_CALLING = "function_calling"
CAP_JSON_MODE = "json_mode"
CAP_TEMPERATURE = "temperature"
CAP_SYSTEM_ROLE = "system_role"
CAP_TOOLS = "tools"

_FLAGS = {
    CAP_STREAMING: "supports_streaming",
    CAP_FUNCTION_CALLING: "supports_function_calling",
    CAP_JSON_MODE: "supports_json_mode",
    CAP_TEMPERATURE: "supports_temperature",
    CAP_SYSTEM_ROLE: "supports_system_role",
    CAP_TOOLS: "supports_tools",
}


def capabilities_of(model: ProviderModel) -> FrozenSet[str]:
    """Return the capability names enabled for ``model``."""
    return frozenset(cap for cap, attr in _FLAGS.items() if getattr(model, attr))


def supports(model: ProviderModel, capability: str) -> bool:
    return capability in capabilities_of(model)


def require_capability(model: ProviderModel, capability: str) -> None:
    """Raise ``UnsupportedCapabilityError`` unless ``model`` has ``capability``."""
    if capability not in _FLAGS:
        raise ValueError(f"unknown capability: {capability}")
    if not supports(model, capability):
        raise UnsupportedCapabilityError(
            message=f"{model.key} does not support {capability}",
            provider=model.provider.value,
            model=model.name,
            capability=capability,
        )


def require_tools(model: ProviderModel, tools: Iterable[HostedTool]) -> None:
    """Raise ``UnsupportedCapabilityError`` for a hosted tool ``model`` does not serve.

    A tool is served when it belongs to the model's vendor and its kind is
    listed in ``model.tools``.
    """
    tools = tuple(tools)
    if not tools:
        return
    require_capability(model, CAP_TOOLS)
    for tool in tools:
        if tool.provider is not model.provider or tool.kind not in model.tools:
            raise UnsupportedCapabilityError(
                message=f"{model.key} does not support the {tool.provider.value} {tool.kind} tool",
                provider=model.provider.value,
                model=model.name,
                capability=f"{CAP_TOOLS}:{tool.kind}",
            )


__all__ = [
    "CAP_STREAMING",
    "CAP_FUNCTION_CALLING",
    "CAP_JSON_MODE",
    "CAP_TEMPERATURE",
    "CAP_SYSTEM_ROLE",
    "CAP_TOOLS",
    "capabilities_of",
    "supports",
    "require_capability",
    "require_tools",
]
