"""End-to-end tests for the ``Completions`` facade against scripted vendors.

Covers:
- first valid answer -> zero retries, exact state path
- wrong type then valid answer -> exactly one corrective retry whose request
  carries the rejected output and the JSON path of the error
- unsatisfiable schema -> ``SchemaValidationExhausted`` after max_retries
- in-band and HTTP vendor errors, rate-limit hints
- prompt token budget enforcement
- function calling, vendor output cleanup, context documents, credentials
  from the environment, cancellation
- hosted tools: vendor gating before dispatch, Mistral Conversations and xAI
  Responses round trips
"""

from __future__ import annotations

import json
from typing import List

import pytest
from pydantic import BaseModel

import allms.completions as completions_module
from allms import (
    CallState,
    CancellationToken,
    CancelledError,
    Completions,
    CompletionsConfig,
    ErrorCode,
    MistralWebSearch,
    OpenAIWebSearch,
    ProviderError,
    RateLimitError,
    SchemaValidationExhausted,
    UnsupportedCapabilityError,
    XAIWebSearch,
    XAIXSearch,
)


FRANCE = 'Return the capital of France as {"capital": string}'


class Capital(BaseModel):
    capital: str


@pytest.fixture(autouse=True)
def word_token_counter(monkeypatch: pytest.MonkeyPatch) -> None:
    """Count whitespace-separated words instead of loading BPE files."""

    monkeypatch.setattr(completions_module, "count_tokens", lambda text, model_name="": len(text.split()))


def test_valid_first_answer_returns_value_without_retry(scripted_vendor, chat_reply):
    vendor = scripted_vendor([(200, chat_reply('{"capital": "Paris"}'))])
    result = Completions("openai:gpt-4o", api_key="sk-live", transport=vendor.transport).get_answer(Capital, FRANCE)

    assert result.value == Capital(capital="Paris")  # nosec B101
    assert result.retries == 0  # nosec B101
    assert len(vendor.requests) == 1  # nosec B101
    assert result.states == (  # nosec B101
        CallState.BUILDING,
        CallState.DISPATCHING,
        CallState.PARSING,
        CallState.VALIDATING,
        CallState.SUCCEEDED,
    )
    assert result.usage.total == 27  # nosec B101
    assert result.answer.response_id == "chatcmpl-123"  # nosec B101


def test_wrong_type_triggers_exactly_one_corrective_retry(scripted_vendor, chat_reply):
    vendor = scripted_vendor(
        [
            (200, chat_reply('{"capital": 42}')),
            (200, chat_reply('{"capital": "Paris"}')),
        ]
    )
    result = Completions("openai:gpt-4o", api_key="sk-live", transport=vendor.transport).get_answer(Capital, FRANCE)

    assert result.value.capital == "Paris"  # nosec B101
    assert result.retries == 1  # nosec B101
    assert len(vendor.requests) == 2  # nosec B101
    assert len(result.attempts) == 2  # nosec B101
    assert CallState.RETRYING in result.states  # nosec B101

    first = vendor.sent_json(0)["messages"]
    second = vendor.sent_json(1)["messages"]
    # the original turns are resent unchanged, followed by the rejected output
    assert second[: len(first)] == first  # nosec B101
    assert second[-2] == {"role": "assistant", "content": '{"capital": 42}'}  # nosec B101
    assert second[-1]["role"] == "user"  # nosec B101
    assert "$.capital" in second[-1]["content"]  # nosec B101
    assert "42" in second[-1]["content"]  # nosec B101


def test_corrections_do_not_accumulate_rejected_outputs(scripted_vendor, chat_reply):
    vendor = scripted_vendor(
        [
            (200, chat_reply('{"capital": 1}')),
            (200, chat_reply('{"capital": 2}')),
            (200, chat_reply('{"capital": "Paris"}')),
        ]
    )
    result = Completions("openai:gpt-4o", api_key="sk-live", transport=vendor.transport).get_answer(Capital, FRANCE)

    assert result.retries == 2  # nosec B101
    third = vendor.sent_json(2)["messages"]
    assistant_turns = [m for m in third if m["role"] == "assistant"]
    assert assistant_turns == [{"role": "assistant", "content": '{"capital": 2}'}]  # nosec B101


def test_unsatisfiable_schema_exhausts_after_max_retries(scripted_vendor, chat_reply):
    impossible = {
        "type": "object",
        "properties": {"n": {"type": "integer", "minimum": 10, "maximum": 5}},
        "required": ["n"],
    }
    vendor = scripted_vendor([(200, chat_reply('{"n": 7}'))])
    facade = Completions(
        "openai:gpt-4o",
        api_key="sk-live",
        config=CompletionsConfig(max_retries=3),
        transport=vendor.transport,
    )

    with pytest.raises(SchemaValidationExhausted) as ei:
        facade.get_answer(impossible, "Return a number")

    assert ei.value.retries == 3  # nosec B101
    assert len(vendor.requests) == 4  # nosec B101
    assert ei.value.last_output == '{"n": 7}'  # nosec B101
    assert ei.value.path == "$.n"  # nosec B101
    assert ei.value.code is ErrorCode.VALIDATION  # nosec B101


def test_zero_retry_budget_fails_on_first_invalid_answer(scripted_vendor, chat_reply):
    vendor = scripted_vendor([(200, chat_reply("Paris, obviously"))])
    facade = Completions("openai:gpt-4o", api_key="sk-live", transport=vendor.transport).with_max_retries(0)

    with pytest.raises(SchemaValidationExhausted) as ei:
        facade.get_answer(Capital, FRANCE)

    assert ei.value.retries == 0  # nosec B101
    assert "not valid JSON" in (ei.value.reason or "")  # nosec B101
    assert len(vendor.requests) == 1  # nosec B101


def test_in_band_error_envelope_becomes_provider_error(scripted_vendor):
    vendor = scripted_vendor([(200, {"error": {"message": "invalid_api_key"}})])
    facade = Completions("openai:gpt-4o", api_key="sk-live", transport=vendor.transport)

    with pytest.raises(ProviderError) as ei:
        facade.get_answer(Capital, FRANCE)

    assert ei.value.message == "invalid_api_key"  # nosec B101
    assert ei.value.code is ErrorCode.AUTH  # nosec B101
    assert not isinstance(ei.value, SchemaValidationExhausted)  # nosec B101
    assert len(vendor.requests) == 1  # nosec B101


def test_http_rate_limit_exposes_retry_after(scripted_vendor):
    body = {"error": {"message": "Rate limit reached for requests", "code": "rate_limit_exceeded"}}
    vendor = scripted_vendor([(429, body, {"retry-after": "7"})])
    facade = Completions("openai:gpt-4o", api_key="sk-live", transport=vendor.transport)

    with pytest.raises(RateLimitError) as ei:
        facade.get_answer(Capital, FRANCE)

    assert ei.value.retry_after == pytest.approx(7.0)  # nosec B101
    assert ei.value.status == 429  # nosec B101
    assert ei.value.retryable  # nosec B101
    # rate limits are never retried inside the call
    assert len(vendor.requests) == 1  # nosec B101


def test_prompt_larger_than_budget_fails_before_dispatch(scripted_vendor, chat_reply):
    vendor = scripted_vendor([(200, chat_reply('{"capital": "Paris"}'))])
    facade = Completions(
        "openai:gpt-4o",
        api_key="sk-live",
        config=CompletionsConfig(max_tokens=10),
        transport=vendor.transport,
    )

    with pytest.raises(ProviderError) as ei:
        facade.get_answer(Capital, FRANCE)

    assert ei.value.code is ErrorCode.VALIDATION  # nosec B101
    assert vendor.requests == []  # nosec B101


def test_response_budget_is_total_minus_prompt(scripted_vendor, chat_reply):
    vendor = scripted_vendor([(200, chat_reply('{"capital": "Paris"}'))])
    facade = Completions(
        "openai:gpt-4o",
        api_key="sk-live",
        config=CompletionsConfig(max_tokens=5000),
        transport=vendor.transport,
    )
    estimate = facade.check_prompt_tokens(Capital, FRANCE)

    facade.get_answer(Capital, FRANCE)

    assert 0 < estimate < 5000  # nosec B101
    assert vendor.sent_json()["max_tokens"] == 5000 - estimate  # nosec B101


def test_response_budget_is_capped_at_model_output_limit(scripted_vendor, chat_reply):
    vendor = scripted_vendor([(200, chat_reply('{"capital": "Paris"}'))])

    Completions("openai:gpt-4o", api_key="sk-live", transport=vendor.transport).get_answer(Capital, FRANCE)

    # 128k context window, 16k largest answer
    assert vendor.sent_json()["max_tokens"] == 16_384  # nosec B101


def test_gemini_output_cap_is_model_output_limit(scripted_vendor):
    reply = {
        "candidates": [
            {"content": {"role": "model", "parts": [{"text": '{"capital": "Paris"}'}]}, "finishReason": "STOP"}
        ],
    }
    vendor = scripted_vendor([(200, reply)])

    Completions("google:gemini-2.0-flash", api_key="g-key", transport=vendor.transport).get_answer(Capital, FRANCE)

    assert vendor.sent_json()["generationConfig"]["maxOutputTokens"] == 8_192  # nosec B101


def _sent_prompt_words(body) -> int:
    return sum(len(message["content"].split()) for message in body["messages"])


def test_corrected_request_is_rebudgeted(scripted_vendor, chat_reply):
    padded = '{"capital": 42, "note": "' + "word " * 400 + '"}'
    vendor = scripted_vendor(
        [
            (200, chat_reply(padded)),
            (200, chat_reply('{"capital": "Paris"}')),
        ]
    )
    facade = Completions(
        "openai:gpt-4o",
        api_key="sk-live",
        config=CompletionsConfig(max_tokens=5000, max_retries=1),
        transport=vendor.transport,
    )

    result = facade.get_answer(Capital, FRANCE)

    assert result.retries == 1  # nosec B101
    first, second = vendor.sent_json(0), vendor.sent_json(1)
    for body in (first, second):
        assert _sent_prompt_words(body) + body["max_tokens"] <= 5000  # nosec B101
    # the rejected output now counts against the total
    assert second["max_tokens"] <= first["max_tokens"] - 400  # nosec B101


def test_correction_that_no_longer_fits_fails_before_dispatch(scripted_vendor, chat_reply):
    padded = '{"capital": 42, "note": "' + "word " * 2000 + '"}'
    vendor = scripted_vendor([(200, chat_reply(padded))])
    facade = Completions("openai:gpt-4o", api_key="sk-live", transport=vendor.transport)
    estimate = facade.check_prompt_tokens(Capital, FRANCE)
    facade = facade.with_max_tokens(estimate + 500).with_max_retries(1)

    with pytest.raises(ProviderError) as ei:
        facade.get_answer(Capital, FRANCE)

    assert ei.value.code is ErrorCode.VALIDATION  # nosec B101
    assert len(vendor.requests) == 1  # nosec B101


def test_function_calling_reads_arguments(scripted_vendor, chat_reply):
    vendor = scripted_vendor([(200, chat_reply(None, function_arguments='{"capital": "Paris"}', finish="function_call"))])
    facade = Completions("openai:gpt-4o", api_key="sk-live", transport=vendor.transport).with_function_calling(True)

    result = facade.get_answer(Capital, FRANCE)

    sent = vendor.sent_json()
    assert sent["function_call"] == {"name": "analyze_data"}  # nosec B101
    assert sent["functions"][0]["parameters"]["properties"]["capital"]["type"] == "string"  # nosec B101
    assert "response_format" not in sent  # nosec B101
    assert result.value.capital == "Paris"  # nosec B101


def test_function_call_arguments_win_over_preamble_text(scripted_vendor, chat_reply):
    reply = chat_reply(
        "Sure, here is the capital.",
        function_arguments='{"capital": "Paris"}',
        finish="function_call",
    )
    vendor = scripted_vendor([(200, reply)])
    facade = Completions("openai:gpt-4o", api_key="sk-live", transport=vendor.transport).with_function_calling(True)

    result = facade.get_answer(Capital, FRANCE)

    assert result.value.capital == "Paris"  # nosec B101
    assert result.retries == 0  # nosec B101
    assert len(vendor.requests) == 1  # nosec B101


def test_function_calling_on_model_without_support_is_rejected(scripted_vendor, chat_reply):
    vendor = scripted_vendor([(200, chat_reply("{}"))])
    facade = Completions("mistral:mistral-large-latest", api_key="m-key", transport=vendor.transport)

    with pytest.raises(UnsupportedCapabilityError) as ei:
        facade.with_function_calling(True).get_answer(Capital, FRANCE)

    assert ei.value.capability == "function_calling"  # nosec B101
    assert vendor.requests == []  # nosec B101


def test_non_object_output_is_wrapped_and_unwrapped(scripted_vendor, chat_reply):
    vendor = scripted_vendor([(200, chat_reply('{"data": ["Paris", "Lyon"]}'))])
    facade = Completions("openai:gpt-4o", api_key="sk-live", transport=vendor.transport)

    result = facade.get_answer(List[str], "List two French cities")

    assert result.value == ["Paris", "Lyon"]  # nosec B101
    user_turn = vendor.sent_json()["messages"][1]["content"]
    assert '"data"' in user_turn  # nosec B101


def test_deepseek_think_blocks_are_removed_before_validation(scripted_vendor, chat_reply):
    reply = chat_reply('<think>France... Paris.</think>\n```json\n{"capital": "Paris"}\n```')
    vendor = scripted_vendor([(200, reply)])
    facade = Completions("deepseek:deepseek-reasoner", api_key="ds-key", transport=vendor.transport)

    result = facade.get_answer(Capital, FRANCE)

    assert result.retries == 0  # nosec B101
    assert "temperature" not in vendor.sent_json()  # nosec B101


def test_anthropic_round_trip(scripted_vendor):
    reply = {
        "id": "msg_01",
        "type": "message",
        "role": "assistant",
        "model": "claude-sonnet-4-5",
        "content": [{"type": "text", "text": '{"capital": "Paris"}'}],
        "stop_reason": "end_turn",
        "usage": {"input_tokens": 30, "output_tokens": 8},
    }
    vendor = scripted_vendor([(200, reply)])
    facade = Completions("anthropic:claude-sonnet-4-5", api_key="sk-ant", transport=vendor.transport)

    result = facade.with_temperature(50).get_answer(Capital, FRANCE)

    request = vendor.requests[0]
    assert request.headers["x-api-key"] == "sk-ant"  # nosec B101
    assert request.headers["anthropic-version"] == "2023-06-01"  # nosec B101
    assert vendor.sent_json()["temperature"] == pytest.approx(0.5)  # nosec B101
    assert result.value.capital == "Paris"  # nosec B101
    assert result.usage.total == 38  # nosec B101


def test_google_round_trip(scripted_vendor):
    reply = {
        "candidates": [
            {
                "content": {"role": "model", "parts": [{"text": '{"capital": "Paris"}'}]},
                "finishReason": "STOP",
            }
        ],
        "usageMetadata": {"promptTokenCount": 12, "candidatesTokenCount": 6, "totalTokenCount": 18},
        "modelVersion": "gemini-2.0-flash",
    }
    vendor = scripted_vendor([(200, reply)])
    facade = Completions("google:gemini-2.0-flash", api_key="g-key", transport=vendor.transport)

    result = facade.get_answer(Capital, FRANCE)

    request = vendor.requests[0]
    assert request.url.path.endswith("/models/gemini-2.0-flash:generateContent")  # nosec B101
    assert request.headers["x-goog-api-key"] == "g-key"  # nosec B101
    assert result.value.capital == "Paris"  # nosec B101


def test_context_documents_are_sent(scripted_vendor, chat_reply):
    vendor = scripted_vendor([(200, chat_reply('{"capital": "Paris"}'))])
    facade = (
        Completions("openai:gpt-4o", api_key="sk-live", transport=vendor.transport)
        .with_context("country", {"name": "France"})
        .with_history([("user", "Hi"), ("assistant", "Hello")])
    )

    facade.get_answer(Capital, FRANCE)

    messages = vendor.sent_json()["messages"]
    assert [m["role"] for m in messages] == ["system", "user", "assistant", "user"]  # nosec B101
    assert '<country>{"name": "France"}</country>' in messages[-1]["content"]  # nosec B101


def test_credential_falls_back_to_environment(scripted_vendor, chat_reply, monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-from-env")
    vendor = scripted_vendor([(200, chat_reply('{"capital": "Paris"}'))])

    Completions("openai:gpt-4o", transport=vendor.transport).get_answer(Capital, FRANCE)

    assert vendor.requests[0].headers["Authorization"] == "Bearer sk-from-env"  # nosec B101


def test_missing_credential_fails_before_dispatch(scripted_vendor, chat_reply):
    vendor = scripted_vendor([(200, chat_reply("{}"))])
    facade = Completions("openai:gpt-4o", transport=vendor.transport)

    with pytest.raises(ProviderError) as ei:
        facade.get_answer(Capital, FRANCE)

    assert ei.value.code is ErrorCode.AUTH  # nosec B101
    assert ei.value.message == "missing_api_key"  # nosec B101
    assert vendor.requests == []  # nosec B101


def test_cancelled_token_stops_before_dispatch(scripted_vendor, chat_reply):
    vendor = scripted_vendor([(200, chat_reply('{"capital": "Paris"}'))])
    token = CancellationToken()
    token.cancel("user abort")

    with pytest.raises(CancelledError):
        Completions("openai:gpt-4o", api_key="sk-live", transport=vendor.transport).get_answer(
            Capital, FRANCE, cancel=token
        )

    assert vendor.requests == []  # nosec B101


def test_with_helpers_return_new_facades():
    base = Completions("openai:gpt-4o", api_key="sk-live")
    tuned = base.with_temperature(25).with_max_retries(5).with_debug()

    assert base.config.temperature == 0.0  # nosec B101
    assert base.config.max_retries == 2  # nosec B101
    assert tuned.config.temperature == 25  # nosec B101
    assert tuned.config.max_retries == 5  # nosec B101
    assert tuned.config.debug  # nosec B101
    assert tuned.model is base.model  # nosec B101


def test_unchecked_temperature_is_sent_verbatim(scripted_vendor, chat_reply):
    vendor = scripted_vendor([(200, chat_reply('{"capital": "Paris"}'))])
    facade = Completions("openai:gpt-4o", api_key="sk-live", transport=vendor.transport).with_temperature_unchecked(1.3)

    facade.get_answer(Capital, FRANCE)

    assert vendor.sent_json()["temperature"] == pytest.approx(1.3)  # nosec B101


def test_invalid_config_combination_is_rejected():
    from pydantic import ValidationError

    with pytest.raises(ValidationError):
        CompletionsConfig(temperature=10, temperature_unchecked=0.5)
    with pytest.raises(ValidationError):
        Completions("openai:gpt-4o", api_key="sk-live").with_max_retries(-1)


def test_azure_deployment_routing(scripted_vendor, chat_reply):
    vendor = scripted_vendor([(200, chat_reply('{"capital": "Paris"}'))])
    facade = Completions(
        "azure:my-deployment",
        api_key="az-key",
        transport=vendor.transport,
        settings={"base_url": "https://res.openai.azure.com"},
        allow_custom=True,
    ).with_api_version("azure:2024-10-21")

    facade.get_answer(Capital, FRANCE)

    request = vendor.requests[0]
    assert request.url.path == "/openai/deployments/my-deployment/chat/completions"  # nosec B101
    assert request.url.params["api-version"] == "2024-10-21"  # nosec B101
    assert request.headers["api-key"] == "az-key"  # nosec B101
    assert "model" not in json.loads(request.content)  # nosec B101


def test_with_tools_accumulates_on_new_facades():
    base = Completions("xai:grok-4", api_key="xai-k")
    searching = base.with_tools(XAIWebSearch()).with_tools(XAIXSearch(allowed_x_handles=("xai",)))

    assert base._tools == ()  # nosec B101
    assert [tool.kind for tool in searching._tools] == ["web_search", "x_search"]  # nosec B101


def test_tool_of_another_vendor_is_rejected_before_dispatch(scripted_vendor, chat_reply):
    vendor = scripted_vendor([(200, chat_reply('{"capital": "Paris"}'))])
    facade = Completions("deepseek:deepseek-chat", api_key="ds-key", transport=vendor.transport)

    with pytest.raises(UnsupportedCapabilityError) as ei:
        facade.with_tools(OpenAIWebSearch()).get_answer(Capital, FRANCE)

    assert ei.value.capability == "tools"  # nosec B101
    assert vendor.requests == []  # nosec B101

    with pytest.raises(UnsupportedCapabilityError) as ei:
        Completions("openai:gpt-4o", api_key="sk-live", transport=vendor.transport).with_tools(
            MistralWebSearch()
        ).get_answer(Capital, FRANCE)

    assert ei.value.capability == "tools:web_search"  # nosec B101
    assert vendor.requests == []  # nosec B101


def test_mistral_web_search_round_trip(scripted_vendor):
    reply = {
        "object": "conversation.response",
        "conversation_id": "conv_01",
        "outputs": [
            {"object": "entry", "type": "tool.execution", "name": "web_search"},
            {
                "object": "entry",
                "type": "message.output",
                "model": "mistral-large-latest",
                "content": [
                    {"type": "text", "text": '{"capital": '},
                    {"type": "tool_reference", "tool": "web_search", "title": "France", "url": "https://example.com"},
                    {"type": "text", "text": '"Paris"}'},
                ],
            },
        ],
        "usage": {"prompt_tokens": 40, "completion_tokens": 9, "total_tokens": 49},
    }
    vendor = scripted_vendor([(200, reply)])
    facade = Completions("mistral:mistral-large-latest", api_key="m-key", transport=vendor.transport)

    result = facade.with_tools(MistralWebSearch()).get_answer(Capital, FRANCE)

    assert vendor.requests[0].url.path == "/v1/conversations"  # nosec B101
    sent = vendor.sent_json()
    assert sent["tools"] == [{"type": "web_search"}]  # nosec B101
    assert sent["completion_args"]["max_tokens"] > 0  # nosec B101
    assert result.value.capital == "Paris"  # nosec B101
    assert result.usage.total == 49  # nosec B101


def test_xai_search_round_trip(scripted_vendor):
    reply = {
        "id": "resp_01",
        "object": "response",
        "model": "grok-4",
        "status": "completed",
        "output": [
            {"type": "web_search_call", "id": "ws_1", "status": "completed"},
            {
                "type": "message",
                "role": "assistant",
                "content": [{"type": "output_text", "text": '{"capital": "Paris"}', "annotations": []}],
            },
        ],
        "usage": {"input_tokens": 50, "output_tokens": 6, "total_tokens": 56},
    }
    vendor = scripted_vendor([(200, reply)])
    facade = Completions("xai:grok-4", api_key="xai-k", transport=vendor.transport)

    result = facade.with_tools(XAIWebSearch()).get_answer(Capital, FRANCE)

    assert vendor.requests[0].url.path == "/v1/responses"  # nosec B101
    assert vendor.sent_json()["input"][0]["role"] == "system"  # nosec B101
    assert result.value.capital == "Paris"  # nosec B101
    assert result.usage.total == 56  # nosec B101
