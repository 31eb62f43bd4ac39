"""Public data model surface.

Re-exports the dataclasses under ``allms.base.models_parts``:
``Provider``, ``ProviderModel``/``RateLimit`` (catalog entries),
``CompletionRequest`` and its parts, ``RequestDescriptor`` and
``RawProviderResponse`` (wire), ``NormalizedAnswer`` and its parts,
``ValidationOutcome`` and the vendor-hosted tool configs.
"""

from .models_parts.provider import Provider
from .models_parts.provider_model import ProviderModel, RateLimit
from .models_parts.request import CompletionRequest, ContextDocument, Correction, Message, Role
from .models_parts.wire import RawProviderResponse, RequestDescriptor, canonical_json
from .models_parts.answer import FinishReason, NormalizedAnswer, TokenUsage, ToolCall
from .models_parts.outcome import ValidationOutcome
from .models_parts.tools import (
    AnthropicCodeExecution,
    AnthropicUserLocation,
    AnthropicWebSearch,
    GeminiCodeExecution,
    GeminiWebSearch,
    HostedTool,
    MistralWebSearch,
    OpenAICodeInterpreter,
    OpenAIFileSearch,
    OpenAIWebSearch,
    XAIWebSearch,
    XAIXSearch,
)

__all__ = [
    "Provider",
    "ProviderModel",
    "RateLimit",
    "CompletionRequest",
    "ContextDocument",
    "Correction",
    "Message",
    "Role",
    "RawProviderResponse",
    "RequestDescriptor",
    "canonical_json",
    "FinishReason",
    "NormalizedAnswer",
    "TokenUsage",
    "ToolCall",
    "ValidationOutcome",
    "HostedTool",
    "OpenAIWebSearch",
    "OpenAIFileSearch",
    "OpenAICodeInterpreter",
    "AnthropicUserLocation",
    "AnthropicWebSearch",
    "AnthropicCodeExecution",
    "GeminiWebSearch",
    "GeminiCodeExecution",
    "XAIWebSearch",
    "XAIXSearch",
    "MistralWebSearch",
]
