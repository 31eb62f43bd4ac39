"""Shared steps of every response parser.

``decode_response`` turns the vendor error envelope (or a non-2xx status)
into the typed error and otherwise returns the decoded body;
``decode_event`` does the same for one streaming payload.
"""

from __future__ import annotations

import json
from typing import Any

from .errors import ParseError, error_from_response
from .models_parts.provider_model import ProviderModel
from .models_parts.wire import RawProviderResponse


def decode_response(raw: RawProviderResponse, model: ProviderModel) -> Any:
    """Return the decoded body of a successful response.

    Raises ``ProviderError``/``RateLimitError`` when the response is an error
    and ``ParseError`` when a success body is not JSON.
    """
    error = error_from_response(raw.status, raw.headers, raw.body, provider=model.provider.value, model=model.name)
    if error is not None:
        raise error
    return raw.json(provider=model.provider.value, model=model.name)


def decode_event(payload: str, model: ProviderModel) -> Any:
    """Decode one stream payload; in-band error events raise ``ProviderError``."""
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as exc:
        raise ParseError(
            message=f"stream event is not valid JSON: {exc.msg}",
            provider=model.provider.value,
            model=model.name,
            fragment=payload[:500],
            raw=exc,
        ) from exc
    error = error_from_response(200, {}, payload.encode("utf-8"), provider=model.provider.value, model=model.name)
    if error is not None:
        raise error
    return data


__all__ = ["decode_response", "decode_event"]
