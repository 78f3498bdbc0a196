"""Cancellation and deadline context bound to outbound requests."""

from __future__ import annotations

import math
import threading
import time
from contextlib import contextmanager
from typing import Callable, Iterator, Mapping, Optional

import anyio
import httpx

from .exceptions import ContextError, DeadlineExceededError, RequestCancelledError

CONTEXT_EXTENSION = "context"
TIMEOUT_EXTENSION = "timeout"
TIMEOUT_KEYS = ("connect", "read", "write", "pool")


class RequestContext:
    """Caller-controlled cancellation flag with an optional deadline.

    A context is bound to a request by the ``*_ctx`` builders. Synchronous
    dispatch checks it right before the transport is called and caps the
    request timeout at the remaining time. Asynchronous dispatch also opens
    an anyio cancel scope so that :meth:`cancel` interrupts a send already
    in flight. ``cancel`` must be called from the event loop thread when
    the context is used with async clients.
    """

    def __init__(
        self,
        *,
        deadline: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._deadline = deadline
        self._clock = clock
        self._cancelled = threading.Event()
        self._lock = threading.Lock()
        self._scopes: set[anyio.CancelScope] = set()

    @classmethod
    def with_timeout(
        cls,
        seconds: float,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> "RequestContext":
        """Return a context whose deadline is ``seconds`` from now."""

        if seconds < 0:
            raise ValueError("timeout seconds cannot be negative")
        return cls(deadline=clock() + seconds, clock=clock)

    @property
    def deadline(self) -> Optional[float]:
        return self._deadline

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def expired(self) -> bool:
        return self._deadline is not None and self._clock() >= self._deadline

    def cancel(self) -> None:
        self._cancelled.set()
        with self._lock:
            scopes = list(self._scopes)
        for scope in scopes:
            scope.cancel()

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, ``None`` when there is no deadline."""

        if self._deadline is None:
            return None
        return max(0.0, self._deadline - self._clock())

    def error(self) -> Optional[ContextError]:
        if self.cancelled:
            return RequestCancelledError("request context was cancelled")
        if self.expired:
            return DeadlineExceededError("request context deadline exceeded")
        return None

    def raise_if_done(self) -> None:
        error = self.error()
        if error is not None:
            raise error

    @contextmanager
    def cancel_scope(self) -> Iterator[anyio.CancelScope]:
        """Open an anyio cancel scope tied to this context's deadline and cancel flag."""

        remaining = self.remaining()
        deadline = math.inf if remaining is None else anyio.current_time() + remaining
        with anyio.CancelScope(deadline=deadline) as scope:
            with self._lock:
                self._scopes.add(scope)
            try:
                if self.cancelled:
                    scope.cancel()
                yield scope
            finally:
                with self._lock:
                    self._scopes.discard(scope)


def bind_context(request: httpx.Request, context: RequestContext) -> httpx.Request:
    request.extensions[CONTEXT_EXTENSION] = context
    return request


def request_context(request: httpx.Request) -> Optional[RequestContext]:
    context = request.extensions.get(CONTEXT_EXTENSION)
    if isinstance(context, RequestContext):
        return context
    return None


def cap_timeout(
    request: httpx.Request,
    context: RequestContext,
    default: Optional[Mapping[str, Optional[float]]] = None,
) -> None:
    """Limit every timeout of ``request`` to the time left on ``context``."""

    remaining = context.remaining()
    if remaining is None:
        return
    current = dict(request.extensions.get(TIMEOUT_EXTENSION) or default or {})
    capped: dict[str, float] = {}
    for key in TIMEOUT_KEYS:
        value = current.get(key)
        capped[key] = remaining if value is None else min(value, remaining)
    request.extensions[TIMEOUT_EXTENSION] = capped


__all__ = [
    "CONTEXT_EXTENSION",
    "RequestContext",
    "TIMEOUT_EXTENSION",
    "bind_context",
    "cap_timeout",
    "request_context",
]
