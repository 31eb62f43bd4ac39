"""Request builders: routing, auth, body shape and determinism."""

from __future__ import annotations

import json

import pytest
from botocore.credentials import Credentials

from allms import (
    AnthropicCodeExecution,
    AnthropicWebSearch,
    GeminiCodeExecution,
    GeminiWebSearch,
    MistralWebSearch,
    OpenAICodeInterpreter,
    OpenAIFileSearch,
    OpenAIWebSearch,
    XAIWebSearch,
    XAIXSearch,
    bedrock,
    google,
    openai,
)
from allms.adapters import build_request
from allms.base.errors import ErrorCode, ProviderError, UnsupportedCapabilityError
from allms.base.models_parts.request import CompletionRequest, ContextDocument, Message
from allms.catalog import get_model
from allms.config import get_provider_config

SCHEMA = {"type": "object", "properties": {"capital": {"type": "string"}}, "required": ["capital"]}


def _request(**changes) -> CompletionRequest:
    base = dict(
        instructions="What is the capital of France?",
        schema=SCHEMA,
        context=(ContextDocument(name="country", content='{"name": "France"}'),),
        history=(Message(role="user", content="Hi"), Message(role="assistant", content="Hello")),
        temperature=0.5,
        max_tokens=256,
    )
    base.update(changes)
    return CompletionRequest(**base)


def _body(descriptor) -> dict:
    return json.loads(descriptor.body.decode("utf-8"))


@pytest.mark.parametrize(
    "provider,name",
    [
        ("openai", "gpt-4o"),
        ("anthropic", "claude-sonnet-4-5"),
        ("mistral", "mistral-large-latest"),
        ("google", "gemini-2.0-flash"),
        ("bedrock", "nova-pro"),
        ("deepseek", "deepseek-chat"),
        ("perplexity", "sonar"),
        ("xai", "grok-4"),
    ],
)
def test_builders_are_deterministic(provider, name):
    model = get_model(provider, name)
    settings = get_provider_config(provider)

    first = build_request(_request(), model, "credential-123", settings)
    second = build_request(_request(), model, "credential-123", settings)

    assert first == second  # nosec B101
    assert first.body == second.body  # nosec B101
    assert first.provider == provider  # nosec B101


@pytest.mark.parametrize("provider,name", [("openai", "gpt-4o"), ("anthropic", "claude-haiku-4-5"), ("google", "gemini-2.0-flash")])
def test_missing_credential_is_auth_error(provider, name):
    with pytest.raises(ProviderError) as ei:
        build_request(_request(), get_model(provider, name), "  ", get_provider_config(provider))
    assert ei.value.code is ErrorCode.AUTH  # nosec B101


def test_openai_chat_body():
    descriptor = build_request(_request(), get_model("openai", "gpt-4o"), "sk-1", get_provider_config("openai"))
    body = _body(descriptor)

    assert descriptor.url == "https://api.openai.com/v1/chat/completions"  # nosec B101
    assert descriptor.headers["Authorization"] == "Bearer sk-1"  # nosec B101
    assert [m["role"] for m in body["messages"]] == ["system", "user", "assistant", "user"]  # nosec B101
    assert body["response_format"] == {"type": "json_object"}  # nosec B101
    assert body["max_tokens"] == 256  # nosec B101
    prompt = body["messages"][-1]["content"]
    assert prompt.index("<country>") < prompt.index("<instructions>") < prompt.index("<output json schema>")  # nosec B101


def test_openai_reasoning_model_folds_system_prompt():
    model = get_model("openai", "o1-mini")
    body = _body(build_request(_request(history=()), model, "sk-1", get_provider_config("openai")))

    assert [m["role"] for m in body["messages"]] == ["user"]  # nosec B101
    assert "temperature" not in body  # nosec B101
    assert body["max_completion_tokens"] == 256  # nosec B101


def test_openai_responses_api():
    model = get_model("openai", "gpt-4o")
    descriptor = openai.build_request(_request(api_version="responses"), model, "sk-1", get_provider_config("openai"))
    body = _body(descriptor)

    assert descriptor.url.endswith("/responses")  # nosec B101
    assert body["max_output_tokens"] == 256  # nosec B101
    assert body["text"] == {"format": {"type": "json_object"}}  # nosec B101
    assert body["input"][-1]["role"] == "user"  # nosec B101
    assert openai.resolve_api(get_model("openai", "o1-pro"), None) == openai.API_RESPONSES  # nosec B101


def test_openai_function_calling_body():
    body = _body(build_request(_request(function_calling=True), get_model("openai", "gpt-4o"), "sk-1", {}))

    assert body["function_call"] == {"name": body["functions"][0]["name"]}  # nosec B101
    assert body["functions"][0]["parameters"] == SCHEMA  # nosec B101
    assert "response_format" not in body  # nosec B101
    assert "<output json schema>" not in body["messages"][-1]["content"]  # nosec B101


def test_function_calling_gated_by_capability():
    with pytest.raises(UnsupportedCapabilityError) as ei:
        build_request(_request(function_calling=True), get_model("deepseek", "deepseek-chat"), "k", {})
    assert ei.value.capability == "function_calling"  # nosec B101


def test_anthropic_body_and_headers():
    model = get_model("anthropic", "claude-sonnet-4-5")
    history = (Message(role="system", content="Be brief."), Message(role="user", content="Hi"))
    descriptor = build_request(_request(history=history, function_calling=True), model, "sk-ant", {"api_version": "2023-06-01"})
    body = _body(descriptor)

    assert descriptor.headers["x-api-key"] == "sk-ant"  # nosec B101
    assert descriptor.headers["anthropic-version"] == "2023-06-01"  # nosec B101
    assert body["system"].endswith("Be brief.")  # nosec B101
    assert [m["role"] for m in body["messages"]] == ["user", "user"]  # nosec B101
    assert body["tools"][0]["input_schema"] == SCHEMA  # nosec B101
    assert body["tool_choice"]["type"] == "tool"  # nosec B101


def test_anthropic_max_tokens_defaults_to_model_limit():
    model = get_model("anthropic", "claude-3-haiku-20240307")
    body = _body(build_request(_request(max_tokens=None), model, "sk-ant", {}))
    assert body["max_tokens"] == model.max_tokens  # nosec B101


def test_mistral_and_perplexity_use_schema_first_prompt():
    mistral = _body(build_request(_request(history=()), get_model("mistral", "mistral-small"), "k", {}))
    sonar = _body(build_request(_request(history=()), get_model("perplexity", "sonar-pro"), "k", {}))

    for body in (mistral, sonar):
        assert body["messages"][-1]["content"].startswith("Output Json schema:")  # nosec B101
    assert mistral["response_format"] == {"type": "json_object"}  # nosec B101
    assert "response_format" not in sonar  # nosec B101
    assert "max_tokens" not in sonar  # nosec B101


def test_xai_uses_max_completion_tokens():
    descriptor = build_request(_request(), get_model("xai", "grok-3"), "xai-k", get_provider_config("xai"))
    body = _body(descriptor)

    assert descriptor.url == "https://api.x.ai/v1/chat/completions"  # nosec B101
    assert body["max_completion_tokens"] == 256  # nosec B101
    assert "max_tokens" not in body  # nosec B101


def test_google_studio_and_vertex_routing():
    flash = get_model("google", "gemini-2.0-flash")
    pro = get_model("google", "gemini-2.5-pro")
    settings = get_provider_config("google")

    assert google.endpoint_url(flash, settings) == (  # nosec B101
        "https://generativelanguage.googleapis.com/v1/models/gemini-2.0-flash:generateContent"
    )
    assert "/v1beta/models/gemini-2.5-pro:" in google.endpoint_url(pro, settings)  # nosec B101

    vertex = {**settings, "project_id": "acme-prod", "region": "europe-west4"}
    descriptor = build_request(_request(), flash, "ya29.token", vertex)
    assert descriptor.url == (  # nosec B101
        "https://europe-west4-aiplatform.googleapis.com/v1/projects/acme-prod/locations/europe-west4"
        "/publishers/google/models/gemini-2.0-flash:generateContent"
    )
    assert descriptor.headers["Authorization"] == "Bearer ya29.token"  # nosec B101

    endpoint = get_model("google", "1234567890", allow_custom=True)
    assert google.endpoint_url(endpoint, vertex).endswith("/endpoints/1234567890:generateContent")  # nosec B101
    with pytest.raises(ProviderError):
        google.endpoint_url(endpoint, settings)


def test_google_body_shape():
    body = _body(build_request(_request(), get_model("google", "gemini-2.0-flash"), "g", {}))

    assert [c["role"] for c in body["contents"]] == ["user", "model", "user"]  # nosec B101
    assert body["generationConfig"] == {"temperature": 0.5, "maxOutputTokens": 256, "responseMimeType": "application/json"}  # nosec B101


def test_azure_requires_endpoint():
    model = get_model("azure", "gpt-4o")
    with pytest.raises(ProviderError) as ei:
        build_request(_request(), model, "az-key", get_provider_config("azure"))
    assert ei.value.code is ErrorCode.VALIDATION  # nosec B101


def test_bedrock_bearer_token():
    model = get_model("bedrock", "nova-lite")
    descriptor = build_request(_request(), model, "aws-bearer", get_provider_config("bedrock"))
    body = _body(descriptor)

    assert descriptor.url == "https://bedrock-runtime.us-east-1.amazonaws.com/model/amazon.nova-lite-v1%3A0/converse"  # nosec B101
    assert descriptor.headers["Authorization"] == "Bearer aws-bearer"  # nosec B101
    assert body["inferenceConfig"] == {"maxTokens": 256, "temperature": 0.5}  # nosec B101
    assert body["messages"][0] == {"role": "user", "content": [{"text": "Hi"}]}  # nosec B101


class _Session:
    def __init__(self, credentials):
        self._credentials = credentials

    def get_credentials(self):
        return self._credentials


def test_bedrock_sigv4_signing(monkeypatch):
    monkeypatch.setattr(bedrock.builder, "get_session", lambda: _Session(Credentials("AKIDEXAMPLE", "secret")))
    descriptor = build_request(_request(), get_model("bedrock", "nova-pro"), None, {"region": "eu-central-1"})

    auth = descriptor.headers["Authorization"]
    assert auth.startswith("AWS4-HMAC-SHA256 Credential=AKIDEXAMPLE/")  # nosec B101
    assert "/eu-central-1/bedrock/aws4_request" in auth  # nosec B101
    assert "X-Amz-Date" in descriptor.headers  # nosec B101
    assert descriptor.url.startswith("https://bedrock-runtime.eu-central-1.amazonaws.com/")  # nosec B101


def test_bedrock_without_any_credentials(monkeypatch):
    monkeypatch.setattr(bedrock.builder, "get_session", lambda: _Session(None))

    with pytest.raises(ProviderError) as ei:
        build_request(_request(), get_model("bedrock", "nova-pro"), None, {})
    assert ei.value.code is ErrorCode.AUTH  # nosec B101


def test_corrective_turns_follow_the_prompt():
    request = _request(history=()).with_correction('{"capital": 42}', "42 is not of type 'string'", "$.capital")
    body = _body(build_request(request, get_model("openai", "gpt-4o"), "sk-1", {}))

    roles = [m["role"] for m in body["messages"]]
    assert roles == ["system", "user", "assistant", "user"]  # nosec B101
    assert body["messages"][2]["content"] == '{"capital": 42}'  # nosec B101
    assert "$.capital" in body["messages"][3]["content"]  # nosec B101


# hosted tools ------------------------------------------------------------------
def test_openai_hosted_tools_force_the_responses_api():
    tools = (
        OpenAIWebSearch(search_context_size="low"),
        OpenAIFileSearch(vector_store_ids=("vs_1",), max_num_results=4),
        OpenAICodeInterpreter(),
    )
    descriptor = build_request(_request(tools=tools), get_model("openai", "gpt-4o"), "sk-1", {})
    body = _body(descriptor)

    assert descriptor.url == "https://api.openai.com/v1/responses"  # nosec B101
    assert body["tools"] == [  # nosec B101
        {"type": "web_search_preview", "search_context_size": "low"},
        {"type": "file_search", "vector_store_ids": ["vs_1"], "max_num_results": 4},
        {"type": "code_interpreter", "container": {"type": "auto", "file_ids": []}},
    ]
    assert body["text"] == {"format": {"type": "json_object"}}  # nosec B101


def test_openai_output_function_sits_next_to_hosted_tools():
    request = _request(function_calling=True, tools=(OpenAIWebSearch(),))
    body = _body(build_request(request, get_model("openai", "gpt-4o"), "sk-1", {}))

    assert [tool["type"] for tool in body["tools"]] == ["function", "web_search_preview"]  # nosec B101
    assert body["tools"][0]["parameters"] == SCHEMA  # nosec B101
    assert "tool_choice" not in body  # nosec B101


def test_anthropic_server_tools_and_beta_header():
    tools = (AnthropicWebSearch(allowed_domains=("example.com",), max_uses=3), AnthropicCodeExecution(cache_ttl="5m"))
    descriptor = build_request(_request(function_calling=True, tools=tools), get_model("anthropic", "claude-sonnet-4-5"), "sk-ant", {})
    body = _body(descriptor)

    assert [tool.get("type") for tool in body["tools"]] == [None, "web_search_20250305", "code_execution_20250825"]  # nosec B101
    assert body["tools"][1] == {  # nosec B101
        "type": "web_search_20250305",
        "name": "web_search",
        "allowed_domains": ["example.com"],
        "max_uses": 3,
    }
    assert body["tools"][2]["cache_control"] == {"type": "ephemeral", "ttl": "5m"}  # nosec B101
    assert body["tool_choice"] == {"type": "auto"}  # nosec B101
    assert descriptor.headers["anthropic-beta"] == "code-execution-2025-08-25"  # nosec B101


def test_anthropic_web_search_alone_needs_no_beta_header():
    descriptor = build_request(_request(tools=(AnthropicWebSearch(),)), get_model("anthropic", "claude-haiku-4-5"), "sk-ant", {})
    body = _body(descriptor)

    assert "anthropic-beta" not in descriptor.headers  # nosec B101
    assert body["tools"] == [{"type": "web_search_20250305", "name": "web_search"}]  # nosec B101
    assert "tool_choice" not in body  # nosec B101


def test_google_hosted_tools_use_beta_and_drop_json_mode():
    tools = (GeminiWebSearch(context_urls=("https://example.com/a",), include_web=True), GeminiCodeExecution())
    descriptor = build_request(_request(tools=tools), get_model("google", "gemini-2.0-flash"), "g", {})
    body = _body(descriptor)

    assert "/v1beta/models/gemini-2.0-flash:generateContent" in descriptor.url  # nosec B101
    assert body["tools"] == [{"url_context": {}}, {"google_search": {}}, {"code_execution": {}}]  # nosec B101
    assert "responseMimeType" not in body["generationConfig"]  # nosec B101
    prompt = [part["text"] for part in body["contents"][-1]["parts"]]
    assert "<url_context>https://example.com/a</url_context>" in prompt  # nosec B101


def test_google_function_declaration_is_not_forced_next_to_search():
    request = _request(function_calling=True, tools=(GeminiWebSearch(),))
    body = _body(build_request(request, get_model("google", "gemini-2.5-flash"), "g", {}))

    assert body["tools"][0]["functionDeclarations"][0]["parameters"] == SCHEMA  # nosec B101
    assert body["tools"][1] == {"google_search": {}}  # nosec B101
    assert body["toolConfig"] == {"functionCallingConfig": {"mode": "AUTO"}}  # nosec B101


def test_xai_search_tools_go_to_responses():
    tools = (XAIWebSearch(excluded_domains=("example.org",)), XAIXSearch(allowed_x_handles=("xai",), from_date="2025-01-01"))
    descriptor = build_request(_request(history=()), get_model("xai", "grok-4"), "xai-k", get_provider_config("xai"))
    assert descriptor.url == "https://api.x.ai/v1/chat/completions"  # nosec B101

    descriptor = build_request(_request(history=(), tools=tools), get_model("xai", "grok-4"), "xai-k", get_provider_config("xai"))
    body = _body(descriptor)

    assert descriptor.url == "https://api.x.ai/v1/responses"  # nosec B101
    assert [turn["role"] for turn in body["input"]] == ["system", "user"]  # nosec B101
    assert "instructions" not in body  # nosec B101
    assert body["max_output_tokens"] == 256  # nosec B101
    assert body["tools"] == [  # nosec B101
        {"type": "web_search", "filters": {"excluded_domains": ["example.org"]}},
        {"type": "x_search", "allowed_x_handles": ["xai"], "from_date": "2025-01-01"},
    ]


def test_mistral_web_search_uses_conversations():
    model = get_model("mistral", "mistral-large-latest")
    descriptor = build_request(_request(tools=(MistralWebSearch(premium=True),)), model, "k", get_provider_config("mistral"))
    body = _body(descriptor)

    assert descriptor.url == "https://api.mistral.ai/v1/conversations"  # nosec B101
    assert body["tools"] == [{"type": "web_search_premium"}]  # nosec B101
    assert body["store"] is False  # nosec B101
    assert [turn["role"] for turn in body["inputs"]] == ["user", "assistant", "user"]  # nosec B101
    assert body["inputs"][-1]["content"].startswith("Output Json schema:")  # nosec B101
    assert body["completion_args"] == {  # nosec B101
        "temperature": 0.5,
        "max_tokens": 256,
        "response_format": {"type": "json_object"},
    }
    assert "messages" not in body  # nosec B101


def test_tool_configs_reject_conflicting_filters():
    with pytest.raises(ValueError):
        AnthropicWebSearch(allowed_domains=("a.com",), blocked_domains=("b.com",))
    with pytest.raises(ValueError):
        XAIXSearch(allowed_x_handles=("a",), excluded_x_handles=("b",))
    with pytest.raises(ValueError):
        OpenAICodeInterpreter(container_id="cntr_1", file_ids=("file_1",))
    with pytest.raises(ValueError):
        OpenAIFileSearch()

    assert OpenAICodeInterpreter(container_id="cntr_1").blocks() == [  # nosec B101
        {"type": "code_interpreter", "container": "cntr_1"}
    ]
    assert XAIWebSearch(allowed_domains=["a.com"]).allowed_domains == ("a.com",)  # nosec B101


def test_gemini_web_search_modes():
    assert GeminiWebSearch().blocks() == [{"google_search": {}}]  # nosec B101
    assert GeminiWebSearch(context_urls=("https://a.com",)).blocks() == [{"url_context": {}}]  # nosec B101
    assert GeminiWebSearch(context_urls=("https://a.com",), include_web=True).blocks() == [  # nosec B101
        {"url_context": {}},
        {"google_search": {}},
    ]
