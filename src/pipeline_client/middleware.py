"""Middleware composition and ready-made request mutators."""

from __future__ import annotations

import base64
import logging
import uuid
from typing import Callable

import httpx

from .exceptions import InvalidMiddlewareResult
from .types import HeaderMap, Middleware, MiddlewareChain, QueryParams

LOGGER = logging.getLogger(__name__)


def apply_middleware(request: httpx.Request, chain: MiddlewareChain) -> httpx.Request:
    """Run ``chain`` in order, feeding each middleware the previous result.

    An exception raised by a middleware propagates as-is and stops the chain.
    """

    for middleware in chain:
        try:
            result = middleware(request)
        except Exception:
            LOGGER.debug("Middleware %r rejected %s %s", middleware, request.method, request.url)
            raise
        if not isinstance(result, httpx.Request):
            raise InvalidMiddlewareResult(middleware, result)
        request = result
    return request


def with_header(name: str, value: str) -> Middleware:
    """Set a single header, replacing any existing value."""

    def middleware(request: httpx.Request) -> httpx.Request:
        request.headers[name] = value
        return request

    return middleware


def with_headers(headers: HeaderMap) -> Middleware:
    frozen = dict(headers)

    def middleware(request: httpx.Request) -> httpx.Request:
        request.headers.update(frozen)
        return request

    return middleware


def bearer_token(token: str) -> Middleware:
    return with_header("Authorization", f"Bearer {token}")


def basic_auth(username: str, password: str) -> Middleware:
    encoded = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
    return with_header("Authorization", f"Basic {encoded}")


def user_agent(value: str) -> Middleware:
    return with_header("User-Agent", value)


def with_query(params: QueryParams) -> Middleware:
    """Merge query parameters into the request URL."""

    frozen = dict(params)

    def middleware(request: httpx.Request) -> httpx.Request:
        request.url = request.url.copy_merge_params(frozen)
        return request

    return middleware


def idempotency_key(
    header: str = "Idempotency-Key",
    *,
    factory: Callable[[], object] = uuid.uuid4,
) -> Middleware:
    """Attach a fresh key per request unless the caller already set one."""

    def middleware(request: httpx.Request) -> httpx.Request:
        if header not in request.headers:
            request.headers[header] = str(factory())
        return request

    return middleware


__all__ = [
    "apply_middleware",
    "basic_auth",
    "bearer_token",
    "idempotency_key",
    "user_agent",
    "with_header",
    "with_headers",
    "with_query",
]
