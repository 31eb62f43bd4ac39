"""Typed configuration for a ``Completions`` facade.

Purpose
-------
Replace loose option bags with one validated object so invalid combinations
fail at construction time, before anything is sent to a vendor.

External dependencies
---------------------
- Pydantic v2 ``BaseModel`` for validation, immutability and ``model_copy``.

Failure modes
-------------
- ``pydantic.ValidationError`` for out-of-range values (negative retries,
  temperature outside 0-100, non-positive token budgets, delay cap below
  base...).
"""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..resilience.retry import RetryConfig

MAX_CORRECTIVE_RETRIES = 10


class CompletionsConfig(BaseModel):
    """Per-facade settings.

    Attributes
    ----------
    temperature:
        Relative temperature, 0-100 percent of the model's range.
    temperature_unchecked:
        Absolute temperature sent as-is, bypassing normalization. Exclusive
        with a non-default ``temperature``.
    max_tokens:
        Total token budget (prompt + answer). ``None`` means the model window.
    max_retries:
        Corrective retries after a schema validation failure.
    retry_delay_base / retry_delay_cap:
        Exponential backoff (seconds) between corrective retries; base 0
        disables pausing.
    function_calling:
        Ask for native function calling where the model supports it.
    api_version:
        API variant selector: ``openai_completions``/``openai_responses`` for
        OpenAI, an ``api-version`` for Azure (``azure:2024-06-01`` or the bare version),
        an ``anthropic-version`` header value for Anthropic. Google selects
        Vertex AI through the ``project_id`` setting instead.
    timeout_seconds:
        Per-request timeout override; defaults to ``get_timeout_config()``.
    debug:
        Log request bodies and answer text (sizes and status only otherwise).
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    temperature: float = Field(default=0.0, ge=0.0, le=100.0)
    temperature_unchecked: Optional[float] = Field(default=None, ge=0.0)
    max_tokens: Optional[int] = Field(default=None, gt=0)
    max_retries: int = Field(default=2, ge=0, le=MAX_CORRECTIVE_RETRIES)
    retry_delay_base: float = Field(default=0.0, ge=0.0)
    retry_delay_cap: float = Field(default=30.0, gt=0.0)
    function_calling: Optional[bool] = None
    api_version: Optional[str] = None
    timeout_seconds: Optional[float] = Field(default=None, gt=0.0)
    debug: bool = False

    @model_validator(mode="after")
    def _check_combinations(self) -> "CompletionsConfig":
        if self.temperature_unchecked is not None and self.temperature != 0.0:
            raise ValueError("temperature and temperature_unchecked are mutually exclusive")
        if self.retry_delay_base > self.retry_delay_cap:
            raise ValueError("retry_delay_base must not exceed retry_delay_cap")
        return self

    def retry_config(self) -> RetryConfig:
        """Backoff schedule for the correction loop (``max_retries + 1`` attempts)."""
        return RetryConfig(
            max_attempts=self.max_retries + 1,
            delay_base=self.retry_delay_base,
            delay_cap=self.retry_delay_cap,
        )


__all__ = ["CompletionsConfig", "MAX_CORRECTIVE_RETRIES"]
