"""Unified error taxonomy public surface.

This module re-exports the implementations under ``allms.base.errors_parts``
to keep a stable import path. Callers should catch ``LLMError`` for "any
library failure" and the concrete kinds for targeted handling:

* ``UnknownModelError``          catalog lookup failed
* ``UnsupportedCapabilityError`` request needs a feature the model lacks
* ``NetworkFailure``             timeout / connection error (transient)
* ``ProviderError``              vendor rejected the request
* ``RateLimitError``             vendor throttled the request (``retry_after``)
* ``ParseError``                 unexpected response shape
* ``SchemaValidationExhausted``  corrective retries ran out
"""

from .errors_parts.error_code import ErrorCode, RETRYABLE_CODES
from .errors_parts.llm_error import LLMError
from .errors_parts.provider_error import ProviderError, RateLimitError
from .errors_parts.failures import (
    NetworkFailure,
    ParseError,
    UnknownModelError,
    UnsupportedCapabilityError,
)
from .errors_parts.schema_exhausted import SchemaValidationExhausted
from .errors_parts.classification import classify_exception, classify_status
from .errors_parts.envelopes import error_from_response, extract_error_envelope, parse_retry_after

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
