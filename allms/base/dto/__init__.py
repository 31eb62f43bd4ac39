"""Pydantic DTOs validated at the public boundary."""

from .completions_config import CompletionsConfig

__all__ = ["CompletionsConfig"]
