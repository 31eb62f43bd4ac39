"""Errors parts package public surface.

Re-exports individual error taxonomy components for optional direct imports.
Prefer importing from `allms.base.errors` for the stable surface.
"""

from .error_code import ErrorCode, RETRYABLE_CODES
from .llm_error import LLMError
from .provider_error import ProviderError, RateLimitError
from .failures import NetworkFailure, ParseError, UnknownModelError, UnsupportedCapabilityError
from .schema_exhausted import SchemaValidationExhausted
from .classification import classify_exception, classify_status
from .envelopes import error_from_response, extract_error_envelope, parse_retry_after

__all__ = [
    "ErrorCode",
    "RETRYABLE_CODES",
    "LLMError",
    "ProviderError",
    "RateLimitError",
    "NetworkFailure",
    "ParseError",
    "UnknownModelError",
    "UnsupportedCapabilityError",
    "SchemaValidationExhausted",
    "classify_exception",
    "classify_status",
    "error_from_response",
    "extract_error_envelope",
    "parse_retry_after",
]
