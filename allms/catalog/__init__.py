"""Model catalog.

Read-only registry of ``ProviderModel`` entries built once at import from the
fixed per-vendor tables. Lookups are case-insensitive and accept aliases
(``grok-4-latest`` -> ``grok-4``, ``gemini-pro`` -> ``gemini-1.5-pro``).

Public API
----------
* ``get_model(provider, name, *, allow_custom=False)`` -> ``ProviderModel``
* ``find_model(name)`` search every provider in ``Provider`` order
* ``resolve_model(spec, *, allow_custom=False)`` accept a ``ProviderModel``,
  ``"provider:name"`` or a ``(provider, name)`` pair
* ``list_models(provider=None)``

Unknown names raise ``UnknownModelError``. OpenAI and Azure accept arbitrary
names as custom deployments, and Google accepts Vertex endpoint ids, only
when ``allow_custom=True``.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple, Union

from ..base.errors import UnknownModelError
from ..base.models_parts.provider import Provider
from ..base.models_parts.provider_model import ProviderModel
from .anthropic_models import ANTHROPIC_MODELS
from .bedrock_models import BEDROCK_MODELS
from .chat_vendor_models import DEEPSEEK_MODELS, MISTRAL_MODELS, PERPLEXITY_MODELS, XAI_MODELS
from .google_models import FINE_TUNED_TEMPLATE, GOOGLE_MODELS
from .openai_models import AZURE_CUSTOM_TEMPLATE, AZURE_MODELS, CUSTOM_TEMPLATE, OPENAI_MODELS

ModelSpec = Union[ProviderModel, str, Tuple[Union[Provider, str], str]]

_CATALOG: Dict[Provider, Tuple[ProviderModel, ...]] = {
    Provider.OPENAI: OPENAI_MODELS,
    Provider.AZURE: AZURE_MODELS,
    Provider.ANTHROPIC: ANTHROPIC_MODELS,
    Provider.MISTRAL: MISTRAL_MODELS,
    Provider.GOOGLE: GOOGLE_MODELS,
    Provider.BEDROCK: BEDROCK_MODELS,
    Provider.DEEPSEEK: DEEPSEEK_MODELS,
    Provider.PERPLEXITY: PERPLEXITY_MODELS,
    Provider.XAI: XAI_MODELS,
}

_CUSTOM_TEMPLATES: Dict[Provider, ProviderModel] = {
    Provider.OPENAI: CUSTOM_TEMPLATE,
    Provider.AZURE: AZURE_CUSTOM_TEMPLATE,
    Provider.GOOGLE: FINE_TUNED_TEMPLATE,
}


def _index() -> Dict[Tuple[Provider, str], ProviderModel]:
    out: Dict[Tuple[Provider, str], ProviderModel] = {}
    for provider, models in _CATALOG.items():
        for model in models:
            out[(provider, model.name.lower())] = model
            for alias in model.aliases:
                out.setdefault((provider, alias.lower()), model)
    return out


_INDEX = _index()


def _unknown(provider: Optional[Provider], name: str) -> UnknownModelError:
    where = provider.value if provider else "any provider"
    return UnknownModelError(
        message=f"unknown model {name!r} for {where}",
        provider=provider.value if provider else None,
        model=name,
    )


def get_model(provider: Union[Provider, str], name: str, *, allow_custom: bool = False) -> ProviderModel:
    """Return the catalog entry for ``(provider, name)``.

    Raises ``UnknownModelError`` for unknown providers or names.
    """
    try:
        member = Provider.parse(provider)
    except ValueError as exc:
        raise UnknownModelError(message=f"unknown provider {provider!r}", model=name) from exc
    key = (name or "").strip().lower()
    found = _INDEX.get((member, key))
    if found is not None:
        return found
    if allow_custom and key and member in _CUSTOM_TEMPLATES:
        return _CUSTOM_TEMPLATES[member].renamed(name.strip())
    raise _unknown(member, name)


def find_model(name: str) -> ProviderModel:
    """Return the first provider's entry matching ``name``."""
    key = (name or "").strip().lower()
    for provider in Provider:
        found = _INDEX.get((provider, key))
        if found is not None:
            return found
    raise _unknown(None, name)


def resolve_model(spec: ModelSpec, *, allow_custom: bool = False) -> ProviderModel:
    """Normalize the accepted model spellings to a ``ProviderModel``."""
    if isinstance(spec, ProviderModel):
        return spec
    if isinstance(spec, tuple):
        provider, name = spec
        return get_model(provider, name, allow_custom=allow_custom)
    text = str(spec).strip()
    if ":" in text:
        prefix, rest = text.split(":", 1)
        try:
            provider = Provider.parse(prefix)
        except ValueError:
            return find_model(text)
        return get_model(provider, rest, allow_custom=allow_custom)
    return find_model(text)


def list_models(provider: Optional[Union[Provider, str]] = None) -> List[ProviderModel]:
    if provider is None:
        return [model for models in _CATALOG.values() for model in models]
    return list(_CATALOG[Provider.parse(provider)])


__all__ = ["ModelSpec", "get_model", "find_model", "resolve_model", "list_models"]
