"""allms.config.env
================

Environment variable mapping for provider credentials and settings.

Design Notes
------------
- Canonical credential variables are defined in ``ENV_MAP``. Providers that
  accept several names list them in ``ENV_ALIASES`` with the canonical name
  first to establish precedence.
- ``SETTING_ENV_ALIASES`` lists vendor-conventional names for settings
  (``OPENAI_API_URL``, ``AZURE_OPENAI_ENDPOINT``, ``AWS_REGION``...) which are
  read in addition to the generic ``<PROVIDER>_<FIELD>`` names.

Failure Modes
-------------
Helpers never raise on unknown providers or unset variables; they return
``None`` and callers decide how to proceed.
"""

from __future__ import annotations

import os
from typing import Dict, Iterable, Optional, Tuple

# Canonical provider -> credential env var
ENV_MAP: Dict[str, str] = {
    "openai": "OPENAI_API_KEY",
    "azure": "AZURE_OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
    "mistral": "MISTRAL_API_KEY",
    # Gemini keys have been published under both names.
    "google": "GEMINI_API_KEY",
    "bedrock": "AWS_BEARER_TOKEN_BEDROCK",
    "deepseek": "DEEPSEEK_API_KEY",
    "perplexity": "PERPLEXITY_API_KEY",
    "xai": "XAI_API_KEY",
}

# Provider -> ordered tuple of acceptable env var names (canonical first)
ENV_ALIASES: Dict[str, Tuple[str, ...]] = {
    "google": ("GEMINI_API_KEY", "GOOGLE_API_KEY"),
    "azure": ("AZURE_OPENAI_API_KEY", "AZURE_API_KEY"),
}

# Vertex AI takes an OAuth access token instead of an API key.
VERTEX_TOKEN_ENV = "GOOGLE_VERTEX_TOKEN"

# (provider, field) -> vendor-conventional env var names, checked before the
# generic <PROVIDER>_<FIELD> variable.
SETTING_ENV_ALIASES: Dict[Tuple[str, str], Tuple[str, ...]] = {
    ("openai", "base_url"): ("OPENAI_API_URL",),
    ("azure", "base_url"): ("AZURE_OPENAI_ENDPOINT",),
    ("azure", "api_version"): ("AZURE_OPENAI_API_VERSION",),
    ("anthropic", "base_url"): ("ANTHROPIC_MESSAGES_API_URL",),
    ("mistral", "base_url"): ("MISTRAL_API_URL",),
    ("google", "base_url"): ("GOOGLE_GEMINI_API_URL",),
    ("google", "beta_base_url"): ("GOOGLE_GEMINI_BETA_API_URL",),
    ("google", "region"): ("GOOGLE_REGION",),
    ("google", "project_id"): ("GOOGLE_PROJECT_ID",),
    ("bedrock", "region"): ("AWS_REGION", "AWS_DEFAULT_REGION"),
    ("deepseek", "base_url"): ("DEEPSEEK_API_URL",),
    ("perplexity", "base_url"): ("PERPLEXITY_API_URL",),
    ("xai", "base_url"): ("XAI_API_URL",),
}


def is_placeholder(val: Optional[str]) -> bool:
    """Return True if the provided string looks like a placeholder/test value.

    Heuristics: contains 'placeholder', 'changeme', 'example', ``your_``,
    or starts with 'test_'. Case-insensitive, surrounding spaces ignored.
    """
    if val is None:
        return False
    v = str(val).strip().lower()
    return (
        "placeholder" in v
        or "changeme" in v
        or "example" in v
        or v.startswith("your_")
        or v.startswith("test_")
    )


def get_env_var_name(provider: str) -> Optional[str]:
    """Return the canonical credential variable for ``provider`` (or None)."""
    return ENV_MAP.get(provider.lower()) if provider else None


def get_env_var_candidates(provider: str) -> Iterable[str]:
    """Yield acceptable credential variable names, canonical first."""
    p = (provider or "").lower()
    canonical = ENV_MAP.get(p)
    if canonical:
        yield canonical
    for alias in ENV_ALIASES.get(p, ()):  # pragma: no branch - small tuples
        if alias != canonical:
            yield alias


def resolve_provider_key(provider: str) -> Tuple[Optional[str], Optional[str]]:
    """Return ``(value, env_var_used)`` for the first non-placeholder credential.

    ``(None, None)`` when nothing usable is set.
    """
    for name in get_env_var_candidates(provider):
        val = os.environ.get(name)
        if val and not is_placeholder(val):
            return val, name
    return None, None


def get_api_key(provider: str) -> Optional[str]:
    return resolve_provider_key(provider)[0]


def setting_env_candidates(provider: str, field_suffix: str, field_name: str) -> Iterable[str]:
    """Yield env var names for one setting: vendor aliases, then generic."""
    p = (provider or "").lower()
    yield from SETTING_ENV_ALIASES.get((p, field_name), ())
    yield f"{p.upper()}_{field_suffix}"


__all__ = [
    "ENV_MAP",
    "ENV_ALIASES",
    "VERTEX_TOKEN_ENV",
    "SETTING_ENV_ALIASES",
    "is_placeholder",
    "get_env_var_name",
    "get_env_var_candidates",
    "resolve_provider_key",
    "get_api_key",
    "setting_env_candidates",
]
