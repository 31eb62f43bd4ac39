"""Shared pieces for OpenAI-compatible vendors.

OpenAI chat, Azure, Mistral, DeepSeek, Perplexity and xAI accept the same
``messages`` body and return the same ``choices`` envelope; their builders and
parsers are thin configurations of the helpers re-exported here. OpenAI and
xAI also share the Responses API body and envelope.
"""

from .chat_body import ChatBodyOptions, build_chat_body, chat_messages, output_function
from .chat_parse import parse_chat_completion, parse_chat_stream_event
from .responses import (
    build_responses_body,
    is_responses_body,
    is_responses_event,
    parse_responses_body,
    parse_responses_event,
)

__all__ = [
    "ChatBodyOptions",
    "build_chat_body",
    "chat_messages",
    "output_function",
    "parse_chat_completion",
    "parse_chat_stream_event",
    "build_responses_body",
    "is_responses_body",
    "is_responses_event",
    "parse_responses_body",
    "parse_responses_event",
]
