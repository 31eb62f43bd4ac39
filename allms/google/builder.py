"""
Google Gemini request builder.

Routing:
    - AI Studio (default): ``{base_url}/{model}:generateContent`` with the
      ``x-goog-api-key`` header; the 2.5 family is only served on the beta
      collection (``beta_base_url``).
    - Vertex AI (when ``project_id`` is configured):
      ``https://{region}-aiplatform.googleapis.com/v1/projects/{project}/
      locations/{region}/publishers/google/models/{model}:generateContent``
      with a Bearer OAuth access token. Custom entries address fine-tuned
      ``endpoints/{id}`` instead of publisher models.

Streaming uses ``:streamGenerateContent?alt=sse``.

Body: ``contents`` where the first user turn carries the base instructions
followed by the ``<output json schema>`` and ``<instructions>`` blocks, and
``generationConfig`` with ``temperature``, ``maxOutputTokens`` and
``responseMimeType: application/json`` for JSON mode. Hosted tools
(search grounding, URL context, code execution) are appended to ``tools``
and served from the beta collection; they cannot be combined with JSON mode,
and URLs to read are listed in a ``<url_context>`` block of the prompt.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional
from urllib.parse import quote

from ..base.auth import require_credential
from ..base.capabilities import CAP_FUNCTION_CALLING, CAP_STREAMING, require_capability
from ..base.constants import OUTPUT_FUNCTION_DESCRIPTION, OUTPUT_FUNCTION_NAME
from ..base.errors import ErrorCode, ProviderError
from ..base.models_parts.provider_model import ProviderModel
from ..base.models_parts.request import CompletionRequest
from ..base.models_parts.tools import GeminiWebSearch, tool_blocks
from ..base.models_parts.wire import RequestDescriptor, canonical_json
from ..base.prompt import correction_message, render_context, render_schema, system_prompt, tagged
from ..catalog.google_models import BETA_MODEL_PREFIXES
from ..config.defaults import GOOGLE_DEFAULT_BASE_URL, GOOGLE_DEFAULT_BETA_BASE_URL, GOOGLE_DEFAULT_REGION

_ROLE_MAP = {"user": "user", "assistant": "model"}


def _method(stream: bool) -> str:
    return "streamGenerateContent?alt=sse" if stream else "generateContent"


def endpoint_url(
    model: ProviderModel,
    settings: Mapping[str, Any],
    *,
    stream: bool = False,
    beta: bool = False,
) -> str:
    """Return the generate URL for ``model`` under ``settings``."""
    project = settings.get("project_id")
    name = quote(model.name, safe="")
    if project:
        region = str(settings.get("region") or GOOGLE_DEFAULT_REGION)
        root = f"https://{region}-aiplatform.googleapis.com/v1/projects/{quote(str(project), safe='')}/locations/{region}"
        if model.custom:
            return f"{root}/endpoints/{name}:{_method(stream)}"
        return f"{root}/publishers/google/models/{name}:{_method(stream)}"
    if model.custom:
        raise ProviderError(
            message="fine-tuned endpoints require Vertex AI (set GOOGLE_PROJECT_ID)",
            code=ErrorCode.VALIDATION,
            provider=model.provider.value,
            model=model.name,
        )
    if beta or model.name.startswith(BETA_MODEL_PREFIXES):
        base = str(settings.get("beta_base_url") or GOOGLE_DEFAULT_BETA_BASE_URL)
    else:
        base = str(settings.get("base_url") or GOOGLE_DEFAULT_BASE_URL)
    return f"{base.rstrip('/')}/{name}:{_method(stream)}"


def _parts(*texts: str) -> List[Dict[str, str]]:
    return [{"text": t} for t in texts if t]


def _url_context(request: CompletionRequest) -> str:
    urls = [url for tool in request.tools if isinstance(tool, GeminiWebSearch) for url in tool.context_urls]
    return tagged("url_context", "\n".join(urls)) if urls else ""


def _contents(request: CompletionRequest) -> List[Dict[str, Any]]:
    system = [system_prompt(request)]
    contents: List[Dict[str, Any]] = []
    for turn in request.history:
        if turn.role == "system":
            system.append(turn.content)
        else:
            contents.append({"role": _ROLE_MAP[turn.role], "parts": _parts(turn.content)})
    schema_block = ""
    if request.schema is not None and not request.function_calling:
        schema_block = tagged("output json schema", render_schema(request.schema))
    prompt_parts = _parts(
        "\n\n".join(system),
        schema_block,
        render_context(request.context),
        _url_context(request),
        tagged("instructions", request.instructions),
    )
    contents.append({"role": "user", "parts": prompt_parts})
    if request.correction is not None:
        contents.append({"role": "model", "parts": _parts(request.correction.previous_output)})
        contents.append({"role": "user", "parts": _parts(correction_message(request.correction))})
    return contents


def _body(request: CompletionRequest, model: ProviderModel) -> Dict[str, Any]:
    generation: Dict[str, Any] = {}
    if model.supports_temperature and request.temperature is not None:
        generation["temperature"] = request.temperature
    if request.max_tokens:
        generation["maxOutputTokens"] = request.max_tokens
    body: Dict[str, Any] = {"contents": _contents(request)}
    if request.function_calling and request.schema is not None:
        body["tools"] = [
            {
                "functionDeclarations": [
                    {
                        "name": OUTPUT_FUNCTION_NAME,
                        "description": OUTPUT_FUNCTION_DESCRIPTION,
                        "parameters": dict(request.schema),
                    }
                ]
            }
        ]
        # a forced call would never let the hosted tools run
        if request.tools:
            body["toolConfig"] = {"functionCallingConfig": {"mode": "AUTO"}}
        else:
            body["toolConfig"] = {
                "functionCallingConfig": {"mode": "ANY", "allowedFunctionNames": [OUTPUT_FUNCTION_NAME]}
            }
    elif request.schema is not None and model.supports_json_mode and not request.tools:
        generation["responseMimeType"] = "application/json"
    if request.tools:
        body.setdefault("tools", []).extend(tool_blocks(request.tools))
    if generation:
        body["generationConfig"] = generation
    return body


def build_request(
    request: CompletionRequest,
    model: ProviderModel,
    credential: Optional[str],
    settings: Mapping[str, Any],
) -> RequestDescriptor:
    key = require_credential(credential, model)
    if request.stream:
        require_capability(model, CAP_STREAMING)
    if request.function_calling:
        require_capability(model, CAP_FUNCTION_CALLING)
    url = endpoint_url(model, settings, stream=request.stream, beta=bool(request.tools))
    if settings.get("project_id"):
        headers = {"Authorization": f"Bearer {key}", "Content-Type": "application/json"}
    else:
        headers = {"x-goog-api-key": key, "Content-Type": "application/json"}
    return RequestDescriptor(
        method="POST",
        url=url,
        headers=headers,
        body=canonical_json(_body(request, model)),
        stream=request.stream,
        provider=model.provider.value,
        model=model.name,
    )


__all__ = ["endpoint_url", "build_request"]
