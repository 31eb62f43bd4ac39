"""allms package

One client for structured answers from many LLM vendors.

Purpose:
    Ask any supported model for output shaped like a Python type and get a
    validated instance back, independent of the vendor's wire format. Answers
    that do not match the derived JSON Schema trigger a bounded number of
    corrective retries.

Public API (re-exported):
    - Version: ``__version__``
    - Facade: :class:`Completions`, :class:`CompletionResult`, :class:`CallState`,
      :class:`CompletionsConfig`
    - Catalog: :func:`get_model`, :func:`find_model`, :func:`list_models`,
      :class:`Provider`, :class:`ProviderModel`
    - Hosted tools: :class:`OpenAIWebSearch`, :class:`AnthropicWebSearch`,
      :class:`GeminiWebSearch`, :class:`XAIXSearch`... (see ``with_tools``)
    - Errors: :class:`LLMError` and its kinds, :class:`ErrorCode`
    - Runtime: :class:`CancellationToken`, :class:`RetryConfig`, :func:`retry`,
      :func:`accumulate_chunks`

Example::

    from pydantic import BaseModel
    from allms import Completions

    class Capital(BaseModel):
        capital: str

    result = Completions("openai:gpt-4o").get_answer(
        Capital, "Return the capital of France"
    )
    result.value.capital  # "Paris"
"""

from .base.cancellation import CancellationToken, CancelledError
from .base.dto import CompletionsConfig
from .base.errors import (
    ErrorCode,
    LLMError,
    NetworkFailure,
    ParseError,
    ProviderError,
    RateLimitError,
    SchemaValidationExhausted,
    UnknownModelError,
    UnsupportedCapabilityError,
)
from .base.logging import configure_logger
from .base.models import (
    AnthropicCodeExecution,
    AnthropicUserLocation,
    AnthropicWebSearch,
    GeminiCodeExecution,
    GeminiWebSearch,
    HostedTool,
    Message,
    MistralWebSearch,
    NormalizedAnswer,
    OpenAICodeInterpreter,
    OpenAIFileSearch,
    OpenAIWebSearch,
    Provider,
    ProviderModel,
    TokenUsage,
    XAIWebSearch,
    XAIXSearch,
)
from .base.resilience import RetryConfig, retry
from .base.streaming import StreamChunk, accumulate_chunks
from .catalog import find_model, get_model, list_models, resolve_model
from .completions import CallState, CompletionResult, Completions

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Facade
    "Completions",
    "CompletionResult",
    "CallState",
    "CompletionsConfig",
    # Catalog
    "Provider",
    "ProviderModel",
    "get_model",
    "find_model",
    "list_models",
    "resolve_model",
    # Data
    "Message",
    "NormalizedAnswer",
    "TokenUsage",
    "StreamChunk",
    "accumulate_chunks",
    # Hosted tools
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
    # Errors
    "ErrorCode",
    "LLMError",
    "NetworkFailure",
    "ParseError",
    "ProviderError",
    "RateLimitError",
    "SchemaValidationExhausted",
    "UnknownModelError",
    "UnsupportedCapabilityError",
    "CancelledError",
    # Runtime
    "CancellationToken",
    "RetryConfig",
    "retry",
    "configure_logger",
]
