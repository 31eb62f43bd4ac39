"""Pytest configuration for the allms test suite.

Provides:
- an autouse fixture isolating every test from the developer's credentials,
  ``.env`` file and config file, so missing-key paths are deterministic;
- ``scripted_vendor``: a fake vendor endpoint built on ``httpx.MockTransport``
  that replays canned replies and records the requests it received;
- small body builders for the common vendor reply shapes.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple, Union

import httpx
import pytest

from allms.base.http import close_all_clients
from allms.base.transport import Transport
from allms.config import CONFIG_FILE_ENV, ENV_FIELD_MAP, reset_config_cache
from allms.config.env import ENV_ALIASES, ENV_MAP, SETTING_ENV_ALIASES, VERTEX_TOKEN_ENV
from allms.base.models import Provider

Reply = Union[Tuple[int, Any], Tuple[int, Any, Dict[str, str]], httpx.Response]


def _credential_and_setting_vars() -> List[str]:
    names = set(ENV_MAP.values())
    for aliases in ENV_ALIASES.values():
        names.update(aliases)
    for aliases in SETTING_ENV_ALIASES.values():
        names.update(aliases)
    for provider in Provider:
        for suffix in ENV_FIELD_MAP.values():
            names.add(f"{provider.value.upper()}_{suffix}")
    names.update({VERTEX_TOKEN_ENV, CONFIG_FILE_ENV})
    return sorted(names)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> Iterator[None]:
    """Strip provider credentials/settings from the environment for each test."""

    for name in _credential_and_setting_vars():
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("DOTENV_FILE", str(tmp_path / "absent.env"))
    reset_config_cache()
    yield
    reset_config_cache()
    close_all_clients()


class ScriptedVendor:
    """Callable ``httpx.MockTransport`` handler replaying canned replies.

    Replies are consumed in order; the last one repeats once the script runs
    out. Each reply is ``(status, json_body)``, ``(status, json_body,
    headers)`` or a ready ``httpx.Response``.
    """

    def __init__(self, replies: Sequence[Reply]) -> None:
        self._replies = list(replies)
        self.requests: List[httpx.Request] = []
        self.transport = Transport(client=httpx.Client(transport=httpx.MockTransport(self)))

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        reply = self._replies.pop(0) if len(self._replies) > 1 else self._replies[0]
        if isinstance(reply, httpx.Response):
            return reply
        status, body, *rest = reply
        headers = rest[0] if rest else {}
        if isinstance(body, (bytes, str)):
            return httpx.Response(status, content=body, headers=headers)
        return httpx.Response(status, json=body, headers=headers)

    def sent_json(self, index: int = -1) -> Any:
        return json.loads(self.requests[index].content.decode("utf-8"))


@pytest.fixture()
def scripted_vendor():
    """Factory fixture: ``scripted_vendor([(200, body), ...])``."""

    def _make(replies: Sequence[Reply]) -> ScriptedVendor:
        return ScriptedVendor(replies)

    return _make


def chat_completion(content: Optional[str], *, function_arguments: Optional[str] = None, finish: str = "stop") -> Dict[str, Any]:
    """OpenAI-compatible chat completion body."""
    message: Dict[str, Any] = {"role": "assistant", "content": content}
    if function_arguments is not None:
        message["function_call"] = {"name": "analyze_data", "arguments": function_arguments}
    return {
        "id": "chatcmpl-123",
        "object": "chat.completion",
        "model": "gpt-4o",
        "choices": [{"index": 0, "message": message, "finish_reason": finish}],
        "usage": {"prompt_tokens": 20, "completion_tokens": 7, "total_tokens": 27},
    }


def sse_body(events: Sequence[Any]) -> bytes:
    """Encode JSON events (or raw strings) as a server-sent events body."""
    lines = []
    for event in events:
        data = event if isinstance(event, str) else json.dumps(event)
        lines.append(f"data: {data}\n\n")
    return "".join(lines).encode("utf-8")


@pytest.fixture()
def chat_reply():
    return chat_completion


@pytest.fixture()
def sse():
    return sse_body
