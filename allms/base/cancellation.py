"""Cooperative cancellation primitives (public API facade).

- ``CancellationToken`` is passed per call (``Completions.get_answer(...,
  cancel=token)``); cancelling it abandons the in-flight HTTP request and
  releases streaming connections.
- ``CancelledError`` is raised by the call that observed the cancellation.
"""

from .cancellation_parts.cancelled_error import CancelledError
from .cancellation_parts.cancellation_token import CancellationToken

__all__ = ["CancellationToken", "CancelledError"]
