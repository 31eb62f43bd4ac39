"""
Terminal failure of the schema correction loop.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .error_code import ErrorCode
from .llm_error import LLMError


@dataclass
class SchemaValidationExhausted(LLMError):
    """Raised after the configured number of corrective retries all failed.

    Attributes:
        last_output: Text of the last model answer that failed validation.
        reason: Validation error message for that answer.
        path: JSON path of the failing fragment (``"$"`` for the root).
        retries: Number of corrective retries that were issued.
    """

    code: ErrorCode = ErrorCode.VALIDATION
    last_output: Optional[str] = None
    reason: Optional[str] = None
    path: Optional[str] = None
    retries: int = 0


__all__ = ["SchemaValidationExhausted"]
