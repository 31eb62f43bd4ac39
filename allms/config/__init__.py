"""Unified configuration layer for providers.

Goals
-----
* Centralize endpoint defaults (``allms.config.defaults``).
* Merge sources in a predictable order (later wins):
    1. Built-in defaults
    2. Optional external config file (JSON or YAML) pointed to by
       ``ALLMS_CONFIG_FILE``
    3. Environment variables (``<PROVIDER>_API_KEY``, ``<PROVIDER>_BASE_URL``,
       ``<PROVIDER>_API_VERSION``, ``<PROVIDER>_REGION``,
       ``<PROVIDER>_PROJECT_ID`` and the vendor-conventional names in
       ``allms.config.env.SETTING_ENV_ALIASES``)
    4. In-code overrides passed to the helper
* Provide a single call site: ``get_provider_config(provider)``.

External Config File
--------------------
JSON is tried first, then YAML. ``${VAR}`` references in string values are
expanded from the environment. Structure example:

```
openai:
  api_key: ${OPENAI_API_KEY}
  base_url: https://proxy.internal/openai/v1
azure:
  base_url: https://my-resource.openai.azure.com
  api_version: 2025-01-01-preview
```

``.env``
--------
A ``.env`` file (path from ``DOTENV_FILE``, default ``.env``) is loaded once
before the first lookup. It only fills variables that are unset or hold
placeholder values.

Public API
----------
* get_provider_config(provider, overrides=None) -> dict
* reset_config_cache() (tests)
"""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml

from ..base.logging import get_logger, log_event
from ..base.models_parts.provider import Provider
from .defaults import (
    ANTHROPIC_DEFAULT_API_VERSION,
    ANTHROPIC_DEFAULT_BASE_URL,
    AZURE_DEFAULT_API_VERSION,
    BEDROCK_DEFAULT_REGION,
    DEEPSEEK_DEFAULT_BASE_URL,
    GOOGLE_DEFAULT_BASE_URL,
    GOOGLE_DEFAULT_BETA_BASE_URL,
    GOOGLE_DEFAULT_REGION,
    MISTRAL_DEFAULT_BASE_URL,
    OPENAI_DEFAULT_BASE_URL,
    PERPLEXITY_DEFAULT_BASE_URL,
    XAI_DEFAULT_BASE_URL,
)
from .env import VERTEX_TOKEN_ENV, is_placeholder, resolve_provider_key, setting_env_candidates

CONFIG_FILE_ENV = "ALLMS_CONFIG_FILE"

_logger = get_logger("allms.config")

# -------------------- Defaults --------------------

DEFAULTS: Dict[str, Dict[str, Any]] = {
    "openai": {"base_url": OPENAI_DEFAULT_BASE_URL},
    "azure": {"api_version": AZURE_DEFAULT_API_VERSION},
    "anthropic": {"base_url": ANTHROPIC_DEFAULT_BASE_URL, "api_version": ANTHROPIC_DEFAULT_API_VERSION},
    "mistral": {"base_url": MISTRAL_DEFAULT_BASE_URL},
    "google": {
        "base_url": GOOGLE_DEFAULT_BASE_URL,
        "beta_base_url": GOOGLE_DEFAULT_BETA_BASE_URL,
        "region": GOOGLE_DEFAULT_REGION,
    },
    "bedrock": {"region": BEDROCK_DEFAULT_REGION},
    "deepseek": {"base_url": DEEPSEEK_DEFAULT_BASE_URL},
    "perplexity": {"base_url": PERPLEXITY_DEFAULT_BASE_URL},
    "xai": {"base_url": XAI_DEFAULT_BASE_URL},
}


ENV_FIELD_MAP = {
    "api_key": "API_KEY",  # pragma: allowlist secret - env suffix name, not a secret
    "base_url": "BASE_URL",
    "beta_base_url": "BETA_BASE_URL",
    "api_version": "API_VERSION",
    "region": "REGION",
    "project_id": "PROJECT_ID",
}


_FILE_CACHE: Optional[Dict[str, Any]] = None
_DOTENV_LOADED = False


def _load_dotenv_once() -> None:
    """Parse KEY=VALUE lines of the ``.env`` file into ``os.environ`` once.

    Comments and blank lines are ignored. Existing variables are only
    replaced when their current value looks like a placeholder.
    """
    global _DOTENV_LOADED
    if _DOTENV_LOADED:
        return
    path = os.getenv("DOTENV_FILE", ".env")
    if not os.path.isfile(path):
        _DOTENV_LOADED = True
        return
    try:
        with open(path, "r", encoding="utf-8") as fh:
            for line in fh:
                line = line.strip()
                if not line or line.startswith("#"):
                    continue
                if line.startswith("export "):
                    line = line[len("export "):]
                if "=" not in line:
                    continue
                k, v = line.split("=", 1)
                k = k.strip()
                v = v.strip().strip('"').strip("'")
                if k and (k not in os.environ or is_placeholder(os.environ.get(k))):
                    os.environ[k] = v
    finally:
        _DOTENV_LOADED = True


def _expand(value: Any) -> Any:
    if isinstance(value, str):
        return os.path.expandvars(value)
    if isinstance(value, Mapping):
        return {k: _expand(v) for k, v in value.items()}
    return value


def _load_external_config() -> Dict[str, Any]:
    global _FILE_CACHE
    if _FILE_CACHE is not None:
        return _FILE_CACHE
    path = os.getenv(CONFIG_FILE_ENV)
    if not path or not Path(path).exists():
        _FILE_CACHE = {}
        return _FILE_CACHE
    text = Path(path).read_text(encoding="utf-8")
    data: Any
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        try:
            data = yaml.safe_load(text) or {}
        except yaml.YAMLError as exc:
            log_event(_logger, "config.file.invalid", path=path, error=str(exc))
            data = {}
    if not isinstance(data, dict):
        data = {}
    _FILE_CACHE = data
    return data


def _env_overrides(provider: str) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for field, suffix in ENV_FIELD_MAP.items():
        if field == "api_key":
            continue
        for name in setting_env_candidates(provider, suffix, field):
            val = os.getenv(name)
            if val:
                out[field] = val
                break
    return out


def _env_api_key(provider: str, cfg: Mapping[str, Any]) -> Optional[str]:
    if provider == Provider.GOOGLE.value and cfg.get("project_id"):
        token = os.getenv(VERTEX_TOKEN_ENV)
        return token if token and not is_placeholder(token) else None
    generic = os.getenv(f"{provider.upper()}_API_KEY")
    if generic and not is_placeholder(generic):
        return generic
    return resolve_provider_key(provider)[0]


def get_provider_config(
    provider: Union[Provider, str],
    overrides: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    """Return merged configuration for a provider.

    Merge order (later wins): defaults -> external config -> env vars -> overrides.
    ``api_key`` is only looked up in the environment when neither the file
    nor the overrides provide one.
    """
    _load_dotenv_once()
    name = Provider.parse(provider).value
    cfg: Dict[str, Any] = {}

    # 1. Defaults
    cfg |= DEFAULTS.get(name, {})

    # 2. External config file section
    file_cfg = _load_external_config().get(name)
    if isinstance(file_cfg, Mapping):
        cfg |= _expand(file_cfg)

    # 3. Env overrides
    cfg |= _env_overrides(name)

    # 4. Explicit overrides arg
    if overrides:
        cfg |= {k: v for k, v in overrides.items() if v is not None}

    # 5. Credential from the environment
    if not cfg.get("api_key") or is_placeholder(cfg.get("api_key")):
        key = _env_api_key(name, cfg)
        if key:
            cfg["api_key"] = key
        else:
            cfg.pop("api_key", None)
    return cfg


def reset_config_cache() -> None:
    """Forget the cached config file and ``.env`` state."""
    global _FILE_CACHE, _DOTENV_LOADED
    _FILE_CACHE = None
    _DOTENV_LOADED = False


__all__ = [
    "CONFIG_FILE_ENV",
    "DEFAULTS",
    "ENV_FIELD_MAP",
    "get_provider_config",
    "reset_config_cache",
]
