"""Common type aliases and protocols used across the package."""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Iterable, Mapping, Optional, Protocol, Union

import httpx

Middleware = Callable[[httpx.Request], httpx.Request]
"""Transform an outbound request; raise to abort dispatch."""

MiddlewareChain = Iterable[Middleware]
HeaderMap = Mapping[str, str]
QueryParams = Mapping[str, Union[str, int, float, bool]]
RequestPayload = Optional[Union[bytes, str, Iterable[bytes]]]


class Transport(Protocol):
    """Anything that can send a constructed request, e.g. ``httpx.Client``."""

    def send(self, request: httpx.Request) -> Any:  # pragma: no cover - protocol definition
        ...


class AsyncTransport(Protocol):
    """Async counterpart of :class:`Transport`, e.g. ``httpx.AsyncClient``."""

    def send(self, request: httpx.Request) -> Awaitable[Any]:  # pragma: no cover - protocol definition
        ...


__all__ = [
    "AsyncTransport",
    "HeaderMap",
    "Middleware",
    "MiddlewareChain",
    "QueryParams",
    "RequestPayload",
    "Transport",
]
