"""Backoff policy and caller-level retry decorator.

``RetryConfig`` is used in two places:

* the schema correction loop in ``allms.completions`` reads ``delays()`` to
  pause between corrective attempts (``delay_base`` of 0 disables pausing);
* ``retry(config)`` lets callers wrap their own call sites so transient
  failures (``NetworkFailure``, ``RateLimitError``...) are retried with
  exponential backoff. ``RateLimitError.retry_after`` takes precedence over
  the computed delay. The library itself never retries these kinds.
"""
from __future__ import annotations

import functools
import logging
import time
from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Protocol, TypeVar

from ..errors import RETRYABLE_CODES, ErrorCode, LLMError, RateLimitError
from ..log_support import LogContext
from ..logging import get_logger, normalized_log_event

T = TypeVar("T")

_logger = get_logger("allms.retry")


class AttemptLogger(Protocol):  # pragma: no cover - structural protocol
    def __call__(
        self,
        *,
        attempt: int,
        max_attempts: int,
        delay: float | None,
        error: LLMError | None,
    ) -> None: ...


@dataclass(frozen=True)
class RetryConfig:
    max_attempts: int = 3
    delay_base: float = 2.0  # exponential base (base ** attempt)
    delay_cap: float = 60.0
    retryable_codes: tuple[ErrorCode, ...] = RETRYABLE_CODES
    attempt_logger: AttemptLogger | None = None

    def delays(self) -> Iterable[float]:
        """Yield the pause before each attempt after the first."""
        for attempt in range(self.max_attempts - 1):
            if self.delay_base <= 0:
                yield 0.0
            else:
                yield min(self.delay_cap, self.delay_base**attempt)

    def delay_for(self, error: LLMError, computed: float) -> float:
        hint: Optional[float] = error.retry_after if isinstance(error, RateLimitError) else None
        if hint is not None:
            return min(self.delay_cap, hint)
        return computed


DEFAULT_RETRY_CONFIG = RetryConfig()


def retry(config: RetryConfig = DEFAULT_RETRY_CONFIG):
    """Return a decorator applying the retry policy.

    - Retries only ``LLMError`` whose code is in ``config.retryable_codes``
    - Exponential backoff using ``delay_base ** attempt`` capped at ``delay_cap``
    - Honours ``RateLimitError.retry_after``
    - Preserves the original function signature
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> T:
            schedule = list(config.delays()) + [None]  # final attempt has no delay
            for attempt, delay in enumerate(schedule):
                try:
                    result = func(*args, **kwargs)
                except LLMError as e:
                    wait = None if delay is None else config.delay_for(e, delay)
                    if config.attempt_logger:
                        config.attempt_logger(
                            attempt=attempt,
                            max_attempts=config.max_attempts,
                            delay=wait,
                            error=e,
                        )
                    if e.code in config.retryable_codes and wait is not None:
                        normalized_log_event(
                            _logger,
                            "retry.attempt",
                            LogContext(provider=e.provider, model=e.model),
                            phase="retry",
                            attempt=attempt + 1,
                            error_code=e.code.value,
                            level=logging.WARNING,
                            delay_seconds=wait,
                        )
                        time.sleep(wait)
                        continue
                    raise
                if config.attempt_logger:
                    config.attempt_logger(
                        attempt=attempt,
                        max_attempts=config.max_attempts,
                        delay=None,
                        error=None,
                    )
                return result
            raise RuntimeError("retry: schedule ended without a result")  # pragma: no cover

        return wrapper

    return decorator


__all__ = [
    "RetryConfig",
    "DEFAULT_RETRY_CONFIG",
    "retry",
]
