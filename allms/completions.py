"""Completions facade.

``Completions`` is the single entry point: it resolves the model, builds the
vendor request, sends it, normalizes the answer and validates it against the
caller's output type, asking the model for a corrected answer while the
retry budget lasts.

Per-call state machine (each transition logged as ``call.state``)::

    BUILDING -> DISPATCHING -> PARSING -> VALIDATING -> SUCCEEDED
                                              |
                                              +-> RETRYING -> BUILDING
                                              +-> FAILED

Corrective retries resend the original request (system text, instructions,
context, history) plus only the last rejected output and a correction turn
quoting the validation error and its JSON path. Earlier rejected outputs are
not accumulated, so a retry costs roughly one extra answer of prompt tokens.

The facade is immutable: ``with_*`` helpers return new instances, so one
configured facade can be shared between threads. Transient failures
(``NetworkFailure``, ``RateLimitError``) are never retried here; wrap the
call with ``allms.base.resilience.retry`` for that.
"""

from __future__ import annotations

import contextlib
import json
import logging
import time
import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Generic, Iterable, Iterator, List, Mapping, Optional, Tuple, TypeVar, Union

from .adapters import ProviderAdapter, adapter_for
from .base.capabilities import require_tools
from .base.cancellation import CancellationToken
from .base.constants import PROMPT_TOKEN_MARGIN
from .base.dto.completions_config import CompletionsConfig
from .base.errors import ErrorCode, LLMError, ParseError, ProviderError, SchemaValidationExhausted
from .base.log_support import LogContext
from .base.logging import get_logger, normalized_log_event
from .base.models_parts.answer import NormalizedAnswer, TokenUsage
from .base.models_parts.provider_model import ProviderModel
from .base.models_parts.request import CompletionRequest, ContextDocument, Message
from .base.models_parts.tools import HostedTool
from .base.prompt import prompt_text
from .base.streaming.streaming import StreamChunk
from .base.tokens.counting import count_tokens
from .base.transport import Transport
from .catalog import ModelSpec, resolve_model
from .config import get_provider_config
from .validation import OutputSchema, build_correction, build_output_schema, describe_failure, validate_text

T = TypeVar("T")

_logger = get_logger("allms.completions")

# facade state carried outside CompletionsConfig
_FACADE_ATTRS = ("_context", "_history", "_tools")


class CallState(str, Enum):
    BUILDING = "building"
    DISPATCHING = "dispatching"
    PARSING = "parsing"
    VALIDATING = "validating"
    RETRYING = "retrying"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


_TRANSITIONS: Dict[CallState, Tuple[CallState, ...]] = {
    CallState.BUILDING: (CallState.DISPATCHING, CallState.FAILED),
    CallState.DISPATCHING: (CallState.PARSING, CallState.FAILED),
    CallState.PARSING: (CallState.VALIDATING, CallState.FAILED),
    CallState.VALIDATING: (CallState.SUCCEEDED, CallState.RETRYING, CallState.FAILED),
    CallState.RETRYING: (CallState.BUILDING, CallState.FAILED),
    CallState.SUCCEEDED: (),
    CallState.FAILED: (),
}


class _CallTracker:
    """Records and logs the state transitions of one call."""

    def __init__(self, ctx: LogContext) -> None:
        self.ctx = ctx
        self.state = CallState.BUILDING
        self.history: List[CallState] = [CallState.BUILDING]
        self.attempt = 0

    def move(self, state: CallState, **fields: Any) -> None:
        if state not in _TRANSITIONS[self.state]:
            raise RuntimeError(f"invalid call transition {self.state.value} -> {state.value}")
        normalized_log_event(
            _logger,
            "call.state",
            self.ctx,
            phase="call",
            attempt=self.attempt,
            level=logging.DEBUG,
            previous=self.state.value,
            state=state.value,
            **fields,
        )
        self.state = state
        self.history.append(state)

    def fail(self, error: LLMError) -> None:
        if self.state not in (CallState.SUCCEEDED, CallState.FAILED):
            self.move(CallState.FAILED, error_code=error.code.value)


@dataclass(frozen=True)
class CompletionResult(Generic[T]):
    """Validated value plus what it took to get it.

    Attributes:
        value: Instance of the requested output type.
        retries: Corrective retries used (0 when the first answer was valid).
        answer: The accepted normalized answer.
        attempts: Every normalized answer received, in order.
        states: State machine path the call took.
    """

    value: T
    retries: int
    answer: NormalizedAnswer
    attempts: Tuple[NormalizedAnswer, ...] = ()
    states: Tuple[CallState, ...] = field(default=(), repr=False)

    @property
    def usage(self) -> TokenUsage:
        """Token usage summed over every attempt."""
        total = TokenUsage()
        for attempt in self.attempts:
            total = total + attempt.usage
        return total


def _serialize_context(data: Any) -> str:
    if isinstance(data, str):
        return data
    dump = getattr(data, "model_dump", None)
    if callable(dump):
        data = dump(mode="json")
    return json.dumps(data, ensure_ascii=False, sort_keys=True, default=str)


def _as_message(item: Union[Message, Mapping[str, str], Tuple[str, str]]) -> Message:
    if isinstance(item, Message):
        return item
    if isinstance(item, Mapping):
        return Message(role=item["role"], content=item["content"])  # type: ignore[arg-type]
    role, content = item
    return Message(role=role, content=content)  # type: ignore[arg-type]


class Completions:
    """Structured completions against one model.

    Parameters:
        model: ``ProviderModel``, ``"provider:name"`` or ``(provider, name)``.
        api_key: Credential; falls back to the provider configuration
            (config file, then environment).
        config: ``CompletionsConfig``; defaults apply when omitted.
        transport: ``Transport`` to send through (tests inject one over
            ``httpx.MockTransport``).
        settings: Provider setting overrides (``base_url``, ``region``,
            ``project_id``...), merged over file and environment values.
        allow_custom: Accept names outside the catalog for vendors that
            serve caller-named deployments (OpenAI, Azure, Google Vertex).
    """

    def __init__(
        self,
        model: ModelSpec,
        api_key: Optional[str] = None,
        config: Optional[CompletionsConfig] = None,
        transport: Optional[Transport] = None,
        *,
        settings: Optional[Mapping[str, Any]] = None,
        allow_custom: bool = False,
    ) -> None:
        self.model: ProviderModel = resolve_model(model, allow_custom=allow_custom)
        self.config = config or CompletionsConfig()
        self._settings: Dict[str, Any] = get_provider_config(self.model.provider, settings)
        self._api_key = api_key or self._settings.get("api_key")
        self._transport = transport or Transport()
        self._context: Tuple[ContextDocument, ...] = ()
        self._history: Tuple[Message, ...] = ()
        self._tools: Tuple[HostedTool, ...] = ()

    # builder-style helpers -------------------------------------------------
    def _copy(self, **changes: Any) -> "Completions":
        clone = object.__new__(Completions)
        clone.__dict__.update(self.__dict__)
        config_changes = {k: v for k, v in changes.items() if k not in _FACADE_ATTRS}
        if config_changes:
            clone.config = CompletionsConfig.model_validate({**self.config.model_dump(), **config_changes})
        for attr in _FACADE_ATTRS:
            if attr in changes:
                setattr(clone, attr, changes[attr])
        return clone

    def with_temperature(self, percent: float) -> "Completions":
        """Relative temperature, 0-100 percent of the model's range."""
        return self._copy(temperature=percent, temperature_unchecked=None)

    def with_temperature_unchecked(self, value: float) -> "Completions":
        """Absolute temperature sent without normalization."""
        return self._copy(temperature=0.0, temperature_unchecked=value)

    def with_max_tokens(self, max_tokens: Optional[int]) -> "Completions":
        return self._copy(max_tokens=max_tokens)

    def with_max_retries(self, max_retries: int) -> "Completions":
        return self._copy(max_retries=max_retries)

    def with_api_version(self, api_version: Optional[str]) -> "Completions":
        return self._copy(api_version=api_version)

    def with_function_calling(self, enabled: bool) -> "Completions":
        return self._copy(function_calling=enabled)

    def with_debug(self, enabled: bool = True) -> "Completions":
        return self._copy(debug=enabled)

    def with_context(self, name: str, data: Any) -> "Completions":
        """Attach a named context document (serialized to JSON unless a string)."""
        doc = ContextDocument(name=name, content=_serialize_context(data))
        return self._copy(_context=self._context + (doc,))

    def with_history(self, messages: Iterable[Union[Message, Mapping[str, str], Tuple[str, str]]]) -> "Completions":
        """Prior turns sent before the instructions."""
        return self._copy(_history=tuple(_as_message(m) for m in messages))

    def with_tools(self, *tools: HostedTool) -> "Completions":
        """Enable vendor-hosted tools (web search, file search, code execution).

        Tools accumulate across calls. Each config names its vendor; a tool
        for another vendor, or one the model does not serve, fails the call
        with ``UnsupportedCapabilityError`` before anything is sent.
        """
        return self._copy(_tools=self._tools + tuple(tools))

    # internals --------------------------------------------------------------
    @property
    def _adapter(self) -> ProviderAdapter:
        return adapter_for(self.model)

    def _temperature(self) -> Optional[float]:
        if self.config.temperature_unchecked is not None:
            return self.config.temperature_unchecked
        return self.model.normalized_temperature(self.config.temperature)

    def _request(self, instructions: str, output: Optional[OutputSchema], *, stream: bool = False) -> CompletionRequest:
        require_tools(self.model, self._tools)
        return CompletionRequest(
            instructions=instructions,
            schema=output.wire_schema if output is not None else None,
            context=self._context,
            history=self._history,
            temperature=self._temperature(),
            function_calling=bool(self.config.function_calling) and output is not None,
            stream=stream,
            api_version=self.config.api_version,
            tools=self._tools,
        )

    def _total_tokens(self) -> int:
        return self.config.max_tokens or self.model.max_tokens

    def _estimate(self, request: CompletionRequest) -> int:
        return int(count_tokens(prompt_text(request), self.model.name) * PROMPT_TOKEN_MARGIN)

    def _budget(self, request: CompletionRequest, ctx: LogContext) -> CompletionRequest:
        """Attach the response budget, failing when the prompt does not fit.

        The budget is what is left of the total after the prompt, capped at
        the largest answer the model accepts. Called again for every
        corrected request, whose prompt grows by the rejected output.
        """
        prompt_tokens = self._estimate(request)
        total = self._total_tokens()
        if prompt_tokens >= total:
            raise ProviderError(
                message=f"prompt requires ~{prompt_tokens} tokens, more than the {total} allocated",
                code=ErrorCode.VALIDATION,
                provider=self.model.provider.value,
                model=self.model.name,
            )
        response_tokens = min(total - prompt_tokens, self.model.output_limit)
        if prompt_tokens * 2 >= total:
            normalized_log_event(
                _logger,
                "prompt.tokens.warning",
                ctx,
                phase="build",
                level=logging.WARNING,
                tokens={"prompt": prompt_tokens, "allocated": total, "remaining": response_tokens},
            )
        return replace(request, max_tokens=response_tokens)

    def _ctx(self) -> LogContext:
        return LogContext(
            provider=self.model.provider.value,
            model=self.model.name,
            call_id=uuid.uuid4().hex[:12],
        )

    def check_prompt_tokens(self, output_type: Any, instructions: str) -> int:
        """Estimated prompt tokens (system text, instructions, context, schema, +5%)."""
        return self._estimate(self._request(instructions, build_output_schema(output_type)))

    # calls ----------------------------------------------------------------
    def get_answer(
        self,
        output_type: Any,
        instructions: str,
        *,
        cancel: Optional[CancellationToken] = None,
        timeout: Optional[float] = None,
    ) -> CompletionResult[Any]:
        """Ask for an answer shaped like ``output_type`` and validate it.

        ``output_type`` is anything pydantic can build a ``TypeAdapter`` for
        (a ``BaseModel``, dataclass, ``TypedDict``, ``List[int]``...) or a
        JSON Schema mapping, in which case the decoded JSON is returned.

        Raises:
            SchemaValidationExhausted: every answer failed validation.
            ProviderError / RateLimitError / NetworkFailure / ParseError /
            UnsupportedCapabilityError / CancelledError: propagated unchanged.
        """
        ctx = self._ctx()
        tracker = _CallTracker(ctx)
        adapter = self._adapter
        retries = 0
        attempts: List[NormalizedAnswer] = []
        delays = iter(self.config.retry_config().delays())
        normalized_log_event(
            _logger,
            "call.start",
            ctx,
            phase="call",
            attempt=0,
            max_retries=self.config.max_retries,
            function_calling=bool(self.config.function_calling),
        )
        started = time.perf_counter()
        try:
            output = build_output_schema(output_type)
            request = self._budget(self._request(instructions, output), ctx)
            while True:
                tracker.attempt = retries
                if cancel is not None:
                    cancel.raise_if_cancelled()
                descriptor = adapter.build(request, self.model, self._api_key, self._settings)
                if self.config.debug:
                    normalized_log_event(
                        _logger,
                        "call.debug.request",
                        ctx,
                        phase="build",
                        attempt=retries,
                        url=descriptor.url,
                        body=descriptor.body.decode("utf-8", errors="replace"),
                    )
                tracker.move(CallState.DISPATCHING)
                raw = self._transport.send(descriptor, timeout=timeout or self.config.timeout_seconds, cancel=cancel)
                tracker.move(CallState.PARSING, status=raw.status)
                answer = adapter.parse(raw, self.model)
                attempts.append(answer)
                ctx = ctx.with_response(answer.response_id)
                tracker.ctx = ctx
                if self.config.debug:
                    normalized_log_event(
                        _logger,
                        "call.debug.answer",
                        ctx,
                        phase="parse",
                        attempt=retries,
                        text=answer.output_for(request.function_calling),
                    )
                tracker.move(CallState.VALIDATING)
                text = adapter.clean(answer.output_for(request.function_calling))
                outcome = validate_text(text, output)
                if outcome.ok:
                    tracker.move(CallState.SUCCEEDED)
                    normalized_log_event(
                        _logger,
                        "call.end",
                        ctx,
                        phase="call",
                        attempt=retries,
                        emitted=True,
                        tokens=sum((a.usage for a in attempts), TokenUsage()),
                        elapsed_ms=round((time.perf_counter() - started) * 1000.0, 2),
                    )
                    return CompletionResult(
                        value=outcome.value,
                        retries=retries,
                        answer=answer,
                        attempts=tuple(attempts),
                        states=tuple(tracker.history),
                    )
                normalized_log_event(
                    _logger,
                    "validation.failed",
                    ctx,
                    phase="validate",
                    attempt=retries,
                    level=logging.WARNING,
                    reason=outcome.reason,
                    path=outcome.path,
                )
                if retries >= self.config.max_retries:
                    raise SchemaValidationExhausted(
                        message=f"answer failed validation after {retries} corrective retries: {describe_failure(outcome)}",
                        provider=self.model.provider.value,
                        model=self.model.name,
                        last_output=text,
                        reason=outcome.reason,
                        path=outcome.path,
                        retries=retries,
                    )
                tracker.move(CallState.RETRYING)
                delay = next(delays, 0.0)
                if delay > 0:
                    time.sleep(delay)
                retries += 1
                tracker.attempt = retries
                tracker.move(CallState.BUILDING)
                request = self._budget(build_correction(request, text, outcome), ctx)
        except LLMError as exc:
            tracker.fail(exc)
            normalized_log_event(
                _logger,
                "call.error",
                ctx,
                phase="call",
                attempt=retries,
                error_code=exc.code.value,
                level=logging.ERROR,
                error=exc.message,
                kind=type(exc).__name__,
            )
            raise

    def get_answer_stream(
        self,
        instructions: str,
        *,
        cancel: Optional[CancellationToken] = None,
        timeout: Optional[float] = None,
    ) -> Iterator[StreamChunk]:
        """Stream a free-text answer as ``StreamChunk`` values.

        Lazy and single pass: nothing is sent before the first ``next()``,
        and closing the iterator early releases the connection. Chunks are
        not validated; use ``accumulate_chunks`` to fold them into a
        ``NormalizedAnswer``.

        Raises:
            ParseError: an event could not be decoded; the stream ends there
                and the connection is released.
            ProviderError / NetworkFailure / CancelledError: as for
                ``get_answer``.
        """
        ctx = self._ctx()
        adapter = self._adapter
        request = self._budget(self._request(instructions, None, stream=True), ctx)
        descriptor = adapter.build(request, self.model, self._api_key, self._settings)
        emitted = 0
        with contextlib.closing(
            self._transport.stream(descriptor, timeout=timeout or self.config.timeout_seconds, cancel=cancel)
        ) as payloads:
            for payload in payloads:
                try:
                    chunk = adapter.parse_stream_event(payload, self.model)
                except ParseError as exc:
                    normalized_log_event(
                        _logger,
                        "stream.decode_error",
                        ctx,
                        phase="stream",
                        error_code=exc.code.value,
                        level=logging.ERROR,
                        emitted=emitted,
                        error=exc.message,
                    )
                    raise
                if chunk is None:
                    continue
                emitted += 1
                yield chunk


__all__ = ["CallState", "CompletionResult", "Completions"]
