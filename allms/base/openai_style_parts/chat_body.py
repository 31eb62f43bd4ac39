"""
Chat Completions request bodies.

Purpose:
- Translate a ``CompletionRequest`` into the ``messages``-based body shared
  by OpenAI-compatible vendors.
- Keep vendor differences (token budget key, JSON mode, stream usage
  reporting, whether ``model`` is in the body) as ``ChatBodyOptions`` flags
  instead of subclasses.

No I/O; bodies are plain dicts serialized later with ``canonical_json``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ..capabilities import CAP_FUNCTION_CALLING, CAP_STREAMING, require_capability
from ..constants import OUTPUT_FUNCTION_DESCRIPTION, OUTPUT_FUNCTION_NAME
from ..models_parts.provider_model import ProviderModel
from ..models_parts.request import CompletionRequest
from ..prompt import PROMPT_STYLE_TAGGED, conversation, system_prompt


@dataclass(frozen=True)
class ChatBodyOptions:
    """Vendor knobs for ``build_chat_body``.

    Attributes:
        include_model: Put ``model`` in the body (Azure routes by URL instead).
        max_tokens_key: Key for the response budget, or ``None`` to omit it.
        json_mode: Send ``response_format: json_object`` when the model
            supports it and a schema is requested.
        stream_usage: Ask for a final usage chunk when streaming.
        prompt_style: ``tagged`` or ``plain`` user prompt rendering.
    """

    include_model: bool = True
    max_tokens_key: Optional[str] = "max_tokens"
    json_mode: bool = True
    stream_usage: bool = False
    prompt_style: str = PROMPT_STYLE_TAGGED


def chat_messages(request: CompletionRequest, model: ProviderModel, *, style: str = PROMPT_STYLE_TAGGED) -> List[Dict[str, str]]:
    """Build the ``messages`` array.

    Models without a system role (OpenAI o-series) get the base instructions
    prepended to the first user turn.
    """
    system = system_prompt(request)
    turns = conversation(request, style=style)
    messages: List[Dict[str, str]] = []
    if model.supports_system_role:
        messages.append({"role": "system", "content": system})
    else:
        for i, turn in enumerate(turns):
            if turn.role == "user":
                turns[i] = type(turn)(role="user", content=f"{system}\n\n{turn.content}")
                break
    messages.extend({"role": turn.role, "content": turn.content} for turn in turns)
    return messages


def output_function(request: CompletionRequest) -> Dict[str, Any]:
    """Function definition carrying the output schema."""
    return {
        "name": OUTPUT_FUNCTION_NAME,
        "description": OUTPUT_FUNCTION_DESCRIPTION,
        "parameters": dict(request.schema or {"type": "object"}),
    }


def build_chat_body(request: CompletionRequest, model: ProviderModel, options: ChatBodyOptions = ChatBodyOptions()) -> Dict[str, Any]:
    """Return the chat completions body for ``request`` on ``model``."""
    if request.stream:
        require_capability(model, CAP_STREAMING)
    if request.function_calling:
        require_capability(model, CAP_FUNCTION_CALLING)

    body: Dict[str, Any] = {"messages": chat_messages(request, model, style=options.prompt_style)}
    if options.include_model:
        body["model"] = model.name
    if model.supports_temperature and request.temperature is not None:
        body["temperature"] = request.temperature
    if options.max_tokens_key and request.max_tokens:
        body[options.max_tokens_key] = request.max_tokens
    if request.function_calling and request.schema is not None:
        body["functions"] = [output_function(request)]
        body["function_call"] = {"name": OUTPUT_FUNCTION_NAME}
    elif options.json_mode and model.supports_json_mode and request.schema is not None:
        body["response_format"] = {"type": "json_object"}
    if request.stream:
        body["stream"] = True
        if options.stream_usage:
            body["stream_options"] = {"include_usage": True}
    return body


__all__ = ["ChatBodyOptions", "chat_messages", "output_function", "build_chat_body"]
