"""allms.config.defaults
=====================

Central place for endpoint and version defaults. Every value can be
overridden through the environment or the external config file (see
``allms.config``); this module only holds plain constants (no I/O).

URL conventions
---------------
- ``OPENAI_DEFAULT_BASE_URL`` is a prefix; the builder appends
  ``/chat/completions`` or ``/responses``.
- Google URLs are model collections; the builder appends
  ``/{model}:generateContent``.
- Other vendors use the complete chat endpoint.
- Hosted-tool endpoints (Mistral Conversations, xAI Responses) sit next to
  the chat endpoint; ``sibling_url`` swaps the trailing ``/chat/completions``.
"""

from __future__ import annotations

# ---- OpenAI ----
OPENAI_DEFAULT_BASE_URL = "https://api.openai.com/v1"

# ---- Azure OpenAI ----
# No default endpoint: every Azure resource has its own host.
AZURE_DEFAULT_API_VERSION = "2024-06-01"

# ---- Anthropic ----
ANTHROPIC_DEFAULT_BASE_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_DEFAULT_API_VERSION = "2023-06-01"

# ---- Mistral ----
MISTRAL_DEFAULT_BASE_URL = "https://api.mistral.ai/v1/chat/completions"
MISTRAL_CONVERSATIONS_PATH = "conversations"

# ---- DeepSeek ----
DEEPSEEK_DEFAULT_BASE_URL = "https://api.deepseek.com/chat/completions"

# ---- Perplexity ----
PERPLEXITY_DEFAULT_BASE_URL = "https://api.perplexity.ai/chat/completions"

# ---- xAI (Grok) ----
XAI_DEFAULT_BASE_URL = "https://api.x.ai/v1/chat/completions"
XAI_RESPONSES_PATH = "responses"

# ---- Google ----
GOOGLE_DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1/models"
GOOGLE_DEFAULT_BETA_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"
# Vertex AI is used when a project id is configured.
GOOGLE_DEFAULT_REGION = "us-central1"

# ---- AWS Bedrock ----
BEDROCK_DEFAULT_REGION = "us-east-1"


def sibling_url(chat_url: str, path: str) -> str:
    """Return ``path`` under the API root of a complete chat endpoint URL."""
    root = chat_url.rstrip("/")
    if root.endswith("/chat/completions"):
        root = root[: -len("/chat/completions")]
    return f"{root}/{path}"


__all__ = [
    "OPENAI_DEFAULT_BASE_URL",
    "AZURE_DEFAULT_API_VERSION",
    "ANTHROPIC_DEFAULT_BASE_URL",
    "ANTHROPIC_DEFAULT_API_VERSION",
    "MISTRAL_DEFAULT_BASE_URL",
    "MISTRAL_CONVERSATIONS_PATH",
    "DEEPSEEK_DEFAULT_BASE_URL",
    "PERPLEXITY_DEFAULT_BASE_URL",
    "XAI_DEFAULT_BASE_URL",
    "XAI_RESPONSES_PATH",
    "GOOGLE_DEFAULT_BASE_URL",
    "GOOGLE_DEFAULT_BETA_BASE_URL",
    "GOOGLE_DEFAULT_REGION",
    "BEDROCK_DEFAULT_REGION",
    "sibling_url",
]
