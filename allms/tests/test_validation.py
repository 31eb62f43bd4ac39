"""Output schema derivation, validation and correction feedback."""

from __future__ import annotations

from typing import Callable, List

import pytest
from jsonschema.exceptions import SchemaError
from pydantic import BaseModel, PydanticUserError, field_validator

from allms.base.errors import ErrorCode, ProviderError
from allms.base.models_parts.request import CompletionRequest
from allms.base.prompt import conversation, correction_message
from allms.base.utils.json_text import (
    extract_json_text,
    remove_code_fences,
    remove_schema_wrappers,
    remove_think_blocks,
    sanitize_model_output,
)
from allms.validation import build_correction, build_output_schema, derive_schema, describe_failure, validate_text


class Capital(BaseModel):
    capital: str


class Person(BaseModel):
    name: str

    @field_validator("name")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("name must not be blank")
        return value


def test_derive_schema_drops_titles():
    schema = derive_schema(Capital)

    assert schema == {  # nosec B101
        "type": "object",
        "properties": {"capital": {"type": "string"}},
        "required": ["capital"],
    }


def test_non_object_output_is_wrapped():
    output = build_output_schema(List[int])

    assert output.wrapped  # nosec B101
    assert output.wire_schema == {  # nosec B101
        "type": "object",
        "properties": {"data": {"type": "array", "items": {"type": "integer"}}},
        "required": ["data"],
    }


def test_invalid_schema_mapping_is_rejected():
    with pytest.raises(ProviderError) as ei:
        build_output_schema({"type": "nonsense"})

    assert ei.value.code is ErrorCode.VALIDATION  # nosec B101
    assert isinstance(ei.value.raw, SchemaError)  # nosec B101


def test_type_without_json_schema_is_rejected():
    with pytest.raises(ProviderError) as ei:
        build_output_schema(Callable[[int], int])

    assert ei.value.code is ErrorCode.VALIDATION  # nosec B101
    assert isinstance(ei.value.raw, PydanticUserError)  # nosec B101


@pytest.mark.parametrize(
    "text",
    [
        '{"capital": "Paris"}',
        '```json\n{"capital": "Paris"}\n```',
        'Sure! Here it is: {"capital": "Paris"} Hope that helps.',
        '{"data": {"capital": "Paris"}}',
    ],
)
def test_validate_text_accepts_common_answer_shapes(text):
    outcome = validate_text(text, build_output_schema(Capital))

    assert outcome.ok  # nosec B101
    assert outcome.value == Capital(capital="Paris")  # nosec B101


def test_wrapped_values_are_unwrapped():
    output = build_output_schema(List[int])

    assert validate_text('{"data": [1, 2]}', output).value == [1, 2]  # nosec B101
    assert validate_text("[3]", output).value == [3]  # nosec B101


def test_non_json_answer():
    outcome = validate_text("I cannot help with that.", build_output_schema(Capital))

    assert not outcome.ok  # nosec B101
    assert outcome.reason.startswith("answer is not valid JSON")  # nosec B101
    assert outcome.path == "$"  # nosec B101
    assert outcome.fragment == "I cannot help with that."  # nosec B101


def test_schema_failure_reports_nested_path():
    schema = {
        "type": "object",
        "properties": {"items": {"type": "array", "items": {"type": "integer"}}},
        "required": ["items"],
    }

    outcome = validate_text('{"items": [1, "two"]}', build_output_schema(schema))

    assert not outcome.ok  # nosec B101
    assert outcome.path == "$.items[1]"  # nosec B101
    assert outcome.fragment == "two"  # nosec B101
    assert outcome.data == {"items": [1, "two"]}  # nosec B101


def test_schema_mapping_returns_decoded_json():
    outcome = validate_text('{"n": 3}', build_output_schema({"type": "object"}))

    assert outcome.value == {"n": 3}  # nosec B101


def test_coercion_failure_after_schema_passes():
    outcome = validate_text('{"name": "   "}', build_output_schema(Person))

    assert not outcome.ok  # nosec B101
    assert outcome.path == "$.name"  # nosec B101
    assert "name must not be blank" in outcome.reason  # nosec B101


def test_describe_failure_truncates_long_fragments():
    outcome = validate_text('{"capital": "' + "x" * 300 + '"}', build_output_schema({"type": "object", "properties": {"capital": {"maxLength": 3}}}))

    message = describe_failure(outcome)

    assert message.endswith("...)")  # nosec B101
    assert "offending value" in message  # nosec B101


def test_correction_keeps_only_last_output():
    request = CompletionRequest(instructions="Capital of France?", schema=derive_schema(Capital))
    bad = validate_text('{"capital": 1}', build_output_schema(Capital))
    worse = validate_text('{"capital": 2}', build_output_schema(Capital))

    first = build_correction(request, '{"capital": 1}', bad)
    second = build_correction(first, '{"capital": 2}', worse)

    assert second.correction.attempt == 2  # nosec B101
    assert second.correction.previous_output == '{"capital": 2}'  # nosec B101
    turns = conversation(second)
    assert [t.role for t in turns] == ["user", "assistant", "user"]  # nosec B101
    assert turns[1].content == '{"capital": 2}'  # nosec B101
    assert "Location: $.capital" in turns[2].content  # nosec B101
    assert turns[2].content == correction_message(second.correction)  # nosec B101
    assert second.instructions == request.instructions  # nosec B101


def test_json_text_helpers():
    assert remove_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'  # nosec B101
    assert remove_code_fences('```json\n{"a": 1') == '{"a": 1'  # nosec B101
    assert remove_think_blocks("<think>hmm\nok</think>\n{}") == "{}"  # nosec B101
    assert extract_json_text('noise [1, 2] more') == "[1, 2]"  # nosec B101
    assert extract_json_text("no json") == "no json"  # nosec B101
    assert remove_schema_wrappers('{"properties": {"a": 1}}') == '{"a": 1}'  # nosec B101
    assert remove_schema_wrappers('{"tags": {"items": ["x"]}}') == '{"tags": ["x"]}'  # nosec B101
    assert remove_schema_wrappers("not json") == "not json"  # nosec B101
    assert sanitize_model_output("<think>x</think>```\n{}\n```", think_blocks=True) == "{}"  # nosec B101
