"""
Provider-agnostic building blocks.

Everything the vendor adapters and the facade share lives here: the error
taxonomy, the immutable data model, structured logging, timeouts,
cancellation, the HTTP transport, streaming primitives, prompt rendering and
token estimation. Nothing in this package knows about a particular vendor;
vendor specifics live in the sibling ``allms.<vendor>`` packages.
"""

from .errors import (
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
from .models import (
    CompletionRequest,
    ContextDocument,
    FinishReason,
    Message,
    NormalizedAnswer,
    Provider,
    ProviderModel,
    RateLimit,
    RawProviderResponse,
    RequestDescriptor,
    TokenUsage,
    ToolCall,
    ValidationOutcome,
)
from .cancellation import CancellationToken, CancelledError
from .timeouts import TimeoutConfig, get_timeout_config
from .logging import configure_logger, get_logger
from .resilience import RetryConfig, retry
from .streaming import StreamChunk, accumulate_chunks
from .transport import Transport
from .dto import CompletionsConfig

__all__ = [
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
    # Models
    "CompletionRequest",
    "ContextDocument",
    "FinishReason",
    "Message",
    "NormalizedAnswer",
    "Provider",
    "ProviderModel",
    "RateLimit",
    "RawProviderResponse",
    "RequestDescriptor",
    "TokenUsage",
    "ToolCall",
    "ValidationOutcome",
    # Runtime
    "CancellationToken",
    "CancelledError",
    "TimeoutConfig",
    "get_timeout_config",
    "configure_logger",
    "get_logger",
    "RetryConfig",
    "retry",
    "StreamChunk",
    "accumulate_chunks",
    "Transport",
    "CompletionsConfig",
]
