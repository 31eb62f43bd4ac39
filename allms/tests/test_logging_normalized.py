"""Focused tests for allms.base.logging.

Covers:
- _parse_level string parsing
- normalized_log_event emits the required keys and drops ``None`` error codes
- child loggers propagate to the shared logger
- facade calls emit ``call.state`` transitions and a final ``call.end``
- an unusable output type fails the call with a logged ``call.error``
- configure_logger attaches and removes the managed file handler
"""
from __future__ import annotations

import json
import logging

import pytest

import allms.completions as completions_module
from allms import Completions, ErrorCode, ProviderError
from allms.base.log_support import LogContext
from allms.base.logging import (
    BASE_LOGGER_NAME,
    REQUIRED_NORMALIZED_KEYS,
    _parse_level,  # type: ignore[attr-defined]
    configure_logger,
    get_logger,
    normalized_log_event,
)


class _ListHandler(logging.Handler):
    """Capture log records into a list for assertions."""

    def __init__(self) -> None:
        super().__init__(level=logging.DEBUG)
        self.messages: list[str] = []

    def emit(self, record: logging.LogRecord) -> None:  # pragma: no cover - exercised via tests
        self.messages.append(record.getMessage())

    def events(self) -> list[dict]:
        return [json.loads(m) for m in self.messages]


@pytest.fixture()
def captured():
    base = get_logger(BASE_LOGGER_NAME)
    handler = _ListHandler()
    previous_level = base.level
    base.addHandler(handler)
    base.setLevel(logging.DEBUG)
    yield handler
    base.removeHandler(handler)
    base.setLevel(previous_level)


def test_parse_level_variants():
    assert _parse_level(None) == logging.INFO  # nosec B101
    assert _parse_level("debug") == logging.DEBUG  # nosec B101
    assert _parse_level("WARN") == logging.WARNING  # nosec B101
    assert _parse_level("unknown", default=logging.ERROR) == logging.ERROR  # nosec B101


def test_child_logger_names_are_prefixed():
    assert get_logger("transport").name == "allms.transport"  # nosec B101
    assert get_logger("allms.completions").name == "allms.completions"  # nosec B101
    assert get_logger().name == BASE_LOGGER_NAME  # nosec B101


def test_normalized_log_event_emits_required_keys(captured):
    logger = get_logger("tests.logging")
    ctx = LogContext(provider="p", model="m", call_id="c1")

    normalized_log_event(
        logger,
        "call.end",
        ctx,
        phase="finalize",
        attempt=2,
        emitted=True,
        tokens={"prompt": 10, "completion": 5},
    )

    payload = captured.events()[-1]
    for key in REQUIRED_NORMALIZED_KEYS:
        if key == "error_code":
            continue
        assert key in payload  # nosec B101
    assert "error_code" not in payload  # nosec B101
    assert payload["event"] == "call.end"  # nosec B101
    assert payload["call_id"] == "c1"  # nosec B101
    assert payload["tokens"] == {"prompt": 10, "completion": 5}  # nosec B101


def test_normalized_log_event_keeps_error_code_and_pairs(captured):
    logger = get_logger("tests.logging2")

    normalized_log_event(
        logger,
        "call.error",
        LogContext(provider="p", model="m"),
        phase="dispatch",
        error_code="timeout",
        tokens=[("a", 1), ("b", 2)],
    )

    payload = captured.events()[-1]
    assert payload["error_code"] == "timeout"  # nosec B101
    assert payload["tokens"] == {"a": 1, "b": 2}  # nosec B101


def test_facade_call_logs_state_transitions(captured, scripted_vendor, chat_reply, monkeypatch):
    monkeypatch.setattr(completions_module, "count_tokens", lambda text, model_name="": len(text.split()))
    vendor = scripted_vendor([(200, chat_reply('{"ok": true}'))])
    facade = Completions("openai:gpt-4o", api_key="sk-live", transport=vendor.transport)

    facade.get_answer({"type": "object", "properties": {"ok": {"type": "boolean"}}}, "Reply ok")

    events = captured.events()
    states = [e["state"] for e in events if e["event"] == "call.state"]
    assert states == ["dispatching", "parsing", "validating", "succeeded"]  # nosec B101
    end = [e for e in events if e["event"] == "call.end"][-1]
    assert end["provider"] == "openai"  # nosec B101
    assert end["response_id"] == "chatcmpl-123"  # nosec B101
    # request bodies are only logged with debug enabled
    assert not any(e["event"] == "call.debug.request" for e in events)  # nosec B101
    assert all("sk-live" not in m for m in captured.messages)  # nosec B101


def test_unusable_output_type_is_logged_as_failed_call(captured, scripted_vendor, chat_reply):
    vendor = scripted_vendor([(200, chat_reply("{}"))])
    facade = Completions("openai:gpt-4o", api_key="sk-live", transport=vendor.transport)

    with pytest.raises(ProviderError) as ei:
        facade.get_answer({"type": "nonsense"}, "Reply ok")

    assert ei.value.code is ErrorCode.VALIDATION  # nosec B101
    assert vendor.requests == []  # nosec B101
    events = captured.events()
    states = [e["state"] for e in events if e["event"] == "call.state"]
    assert states == ["failed"]  # nosec B101
    error = [e for e in events if e["event"] == "call.error"][-1]
    assert error["error_code"] == "validation"  # nosec B101
    assert error["kind"] == "ProviderError"  # nosec B101


def test_configure_logger_file_handler(tmp_path):
    path = tmp_path / "logs" / "allms.log"
    logger = configure_logger(level="INFO", file_path=str(path))
    try:
        get_logger("tests.file").info(json.dumps({"event": "file.check"}))
        for handler in logger.handlers:
            handler.flush()
        assert path.exists()  # nosec B101
        assert "file.check" in path.read_text(encoding="utf-8")  # nosec B101
    finally:
        configure_logger(file_path=None)
    assert not any(getattr(h, "baseFilename", None) == str(path) for h in logger.handlers)  # nosec B101
