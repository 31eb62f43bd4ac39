"""
Closed set of supported vendors.

Every behavioural difference between vendors is dispatched on this tag
(see ``allms.adapters``); adding a vendor means adding a member here and an
entry in the adapter table.
"""
from __future__ import annotations

from enum import Enum


class Provider(str, Enum):
    """Vendor tag; values are the lowercase names used in config and logs."""

    OPENAI = "openai"
    AZURE = "azure"
    ANTHROPIC = "anthropic"
    MISTRAL = "mistral"
    GOOGLE = "google"
    BEDROCK = "bedrock"
    DEEPSEEK = "deepseek"
    PERPLEXITY = "perplexity"
    XAI = "xai"

    @classmethod
    def parse(cls, value: "Provider | str") -> "Provider":
        """Return the member for ``value`` (member or case-insensitive name).

        Raises ``ValueError`` for unknown names.
        """
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        aliases = {"gemini": cls.GOOGLE, "vertex": cls.GOOGLE, "aws": cls.BEDROCK, "grok": cls.XAI}
        if key in aliases:
            return aliases[key]
        return cls(key)


__all__ = ["Provider"]
