"""Exceptions raised by pipeline_client itself.

Errors coming from middleware, transports, and JSON decoding are never
wrapped; only failures that originate inside this package use these types.
"""

from __future__ import annotations


class PipelineClientError(Exception):
    """Base class for errors raised by the client."""


class InvalidMethodError(PipelineClientError, ValueError):
    """The HTTP method is not a valid RFC 7230 token."""


class InvalidMiddlewareResult(PipelineClientError, TypeError):
    """A middleware returned something other than an ``httpx.Request``."""

    def __init__(self, middleware: object, result: object) -> None:
        super().__init__(
            f"middleware {middleware!r} returned {type(result).__name__}, expected httpx.Request"
        )
        self.middleware = middleware
        self.result = result


class ContextError(PipelineClientError):
    """The request context finished before the transport was reached."""


class RequestCancelledError(ContextError):
    """The request context was cancelled."""


class DeadlineExceededError(ContextError, TimeoutError):
    """The request context deadline elapsed."""


__all__ = [
    "ContextError",
    "DeadlineExceededError",
    "InvalidMethodError",
    "InvalidMiddlewareResult",
    "PipelineClientError",
    "RequestCancelledError",
]
