"""Provider-neutral prompt rendering.

Every builder starts from the same pieces:

* ``system_prompt``: the base instructions telling the model to answer with
  JSON matching the ``output json schema`` (or the function definition when
  function calling carries the output);
* ``render_user_prompt``: context documents as ``<name>...</name>`` blocks,
  the caller's ``<instructions>`` and the ``<output json schema>``;
* ``conversation``: prior history, the user prompt and, on a corrective
  retry, the rejected output followed by a correction message.

Corrective retries resend the original prompt and history plus only the last
rejected output. Earlier failed attempts are not accumulated.
"""

from __future__ import annotations

import json
from typing import Any, Iterable, List, Mapping, Optional

from .constants import BASE_INSTRUCTIONS, FUNCTION_INSTRUCTIONS, PLAIN_INSTRUCTIONS
from .models_parts.request import CompletionRequest, ContextDocument, Correction, Message

PROMPT_STYLE_TAGGED = "tagged"
PROMPT_STYLE_PLAIN = "plain"


def tagged(tag: str, content: str) -> str:
    return f"<{tag}>\n{content}\n</{tag}>"


def render_schema(schema: Optional[Mapping[str, Any]]) -> str:
    """Serialize ``schema`` deterministically for inclusion in a prompt."""
    if schema is None:
        return ""
    return json.dumps(schema, sort_keys=True, ensure_ascii=False)


def render_context(context: Iterable[ContextDocument]) -> str:
    """Render context documents as ``<name>content</name>`` blocks."""
    return "\n\n".join(f"<{doc.name}>{doc.content}</{doc.name}>" for doc in context)


def system_prompt(request: CompletionRequest) -> str:
    if request.schema is None:
        return PLAIN_INSTRUCTIONS
    return FUNCTION_INSTRUCTIONS if request.function_calling else BASE_INSTRUCTIONS


def render_user_prompt(request: CompletionRequest, *, style: str = PROMPT_STYLE_TAGGED) -> str:
    """Render the user turn for ``request``.

    ``tagged`` wraps instructions and schema in XML-like tags; ``plain``
    prefixes the schema with ``Output Json schema:``. The schema is left out
    when function calling already carries it in the function definition.
    """
    include_schema = request.schema is not None and not request.function_calling
    sections: List[str] = []
    if style == PROMPT_STYLE_PLAIN:
        if include_schema:
            sections.append(f"Output Json schema:\n{render_schema(request.schema)}")
        if request.context:
            sections.append(render_context(request.context))
        sections.append(request.instructions)
        return "\n\n".join(sections)
    if request.context:
        sections.append(render_context(request.context))
    sections.append(tagged("instructions", request.instructions))
    if include_schema:
        sections.append(tagged("output json schema", render_schema(request.schema)))
    return "\n\n".join(sections)


def correction_message(correction: Correction) -> str:
    """Instruction sent after a rejected output."""
    location = correction.path or "$"
    return (
        "Your previous answer did not match the `output json schema`.\n"
        f"Error: {correction.error}\n"
        f"Location: {location}\n"
        "Respond again with ONLY a corrected Json object that matches the `output json schema`. "
        "No other words or text."
    )


def conversation(request: CompletionRequest, *, style: str = PROMPT_STYLE_TAGGED) -> List[Message]:
    """Return the non-system turns for ``request`` in order."""
    turns = list(request.history)
    turns.append(Message(role="user", content=render_user_prompt(request, style=style)))
    if request.correction is not None:
        turns.append(Message(role="assistant", content=request.correction.previous_output))
        turns.append(Message(role="user", content=correction_message(request.correction)))
    return turns


def prompt_text(request: CompletionRequest, *, style: str = PROMPT_STYLE_TAGGED) -> str:
    """Everything sent as prompt text, for token estimation."""
    parts = [system_prompt(request)]
    parts.extend(turn.content for turn in conversation(request, style=style))
    if request.function_calling and request.schema is not None:
        parts.append(render_schema(request.schema))
    return "\n".join(parts)


__all__ = [
    "PROMPT_STYLE_TAGGED",
    "PROMPT_STYLE_PLAIN",
    "tagged",
    "render_schema",
    "render_context",
    "system_prompt",
    "render_user_prompt",
    "correction_message",
    "conversation",
    "prompt_text",
]
