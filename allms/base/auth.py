"""Credential checks and auth header helpers shared by request builders."""

from __future__ import annotations

from typing import Dict, Optional

from .constants import MISSING_API_KEY_ERROR
from .errors import ErrorCode, ProviderError
from .models_parts.provider_model import ProviderModel


def require_credential(credential: Optional[str], model: ProviderModel) -> str:
    """Return the stripped credential or raise ``ProviderError(AUTH)``.

    Raised before any I/O so a missing key never reaches the vendor.
    """
    value = (credential or "").strip()
    if not value:
        raise ProviderError(
            message=MISSING_API_KEY_ERROR,
            code=ErrorCode.AUTH,
            provider=model.provider.value,
            model=model.name,
        )
    return value


def bearer_headers(credential: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {credential}", "Content-Type": "application/json"}


__all__ = ["require_credential", "bearer_headers"]
