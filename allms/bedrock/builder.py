"""
AWS Bedrock Converse request builder.

``POST https://bedrock-runtime.{region}.amazonaws.com/model/{model_id}/converse``

Auth:
    - with an explicit credential (``AWS_BEARER_TOKEN_BEDROCK`` or the
      ``api_key`` argument): ``Authorization: Bearer <key>``;
    - otherwise the request is signed with SigV4 using the botocore
      credential chain (env vars, shared config, instance profile).

Body: ``system`` text blocks, ``messages`` with ``content[].text`` and
``inferenceConfig`` (``maxTokens``, ``temperature``).
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional
from urllib.parse import quote

from botocore.auth import SigV4Auth
from botocore.awsrequest import AWSRequest
from botocore.session import get_session

from ..base.capabilities import CAP_FUNCTION_CALLING, CAP_STREAMING, require_capability
from ..base.constants import MISSING_API_KEY_ERROR
from ..base.errors import ErrorCode, ProviderError
from ..base.models_parts.provider_model import ProviderModel
from ..base.models_parts.request import CompletionRequest
from ..base.models_parts.wire import RequestDescriptor, canonical_json
from ..base.prompt import conversation, system_prompt
from ..config.defaults import BEDROCK_DEFAULT_REGION

SIGNING_SERVICE = "bedrock"


def converse_url(model: ProviderModel, settings: Mapping[str, Any]) -> str:
    region = str(settings.get("region") or BEDROCK_DEFAULT_REGION)
    base = str(settings.get("base_url") or f"https://bedrock-runtime.{region}.amazonaws.com").rstrip("/")
    return f"{base}/model/{quote(model.name, safe='')}/converse"


def _body(request: CompletionRequest, model: ProviderModel) -> Dict[str, Any]:
    system: List[Dict[str, str]] = [{"text": system_prompt(request)}]
    messages: List[Dict[str, Any]] = []
    for turn in conversation(request):
        if turn.role == "system":
            system.append({"text": turn.content})
        else:
            messages.append({"role": turn.role, "content": [{"text": turn.content}]})
    inference: Dict[str, Any] = {"maxTokens": request.max_tokens or model.max_tokens}
    if model.supports_temperature and request.temperature is not None:
        inference["temperature"] = request.temperature
    return {"system": system, "messages": messages, "inferenceConfig": inference}


def _sigv4_headers(url: str, body: bytes, region: str, model: ProviderModel) -> Dict[str, str]:
    credentials = get_session().get_credentials()
    if credentials is None:
        raise ProviderError(
            message=MISSING_API_KEY_ERROR,
            code=ErrorCode.AUTH,
            provider=model.provider.value,
            model=model.name,
        )
    aws_request = AWSRequest(method="POST", url=url, data=body, headers={"Content-Type": "application/json"})
    SigV4Auth(credentials.get_frozen_credentials(), SIGNING_SERVICE, region).add_auth(aws_request)
    return dict(aws_request.headers.items())


def build_request(
    request: CompletionRequest,
    model: ProviderModel,
    credential: Optional[str],
    settings: Mapping[str, Any],
) -> RequestDescriptor:
    if request.stream:
        require_capability(model, CAP_STREAMING)
    if request.function_calling:
        require_capability(model, CAP_FUNCTION_CALLING)
    url = converse_url(model, settings)
    body = canonical_json(_body(request, model))
    token = (credential or "").strip()
    if token:
        headers = {"Authorization": f"Bearer {token}", "Content-Type": "application/json"}
    else:
        region = str(settings.get("region") or BEDROCK_DEFAULT_REGION)
        headers = _sigv4_headers(url, body, region, model)
    return RequestDescriptor(
        method="POST",
        url=url,
        headers=headers,
        body=body,
        stream=request.stream,
        provider=model.provider.value,
        model=model.name,
    )


__all__ = ["SIGNING_SERVICE", "converse_url", "build_request"]
