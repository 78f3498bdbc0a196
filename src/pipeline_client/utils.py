"""Helpers for URL joining and request construction."""

from __future__ import annotations

import re

import httpx

from .exceptions import InvalidMethodError
from .types import RequestPayload

ABSOLUTE_URL_PREFIX = "http"

# RFC 7230 section 3.2.6 token characters.
_METHOD_TOKEN = re.compile(r"^[!#$%&'*+\-.^_`|~0-9A-Za-z]+$")


def join_url(base: str, path: str) -> str:
    """Join ``path`` onto ``base`` with exactly one slash.

    Paths that already start with ``http`` are treated as absolute and
    returned unchanged.
    """

    if path.startswith(ABSOLUTE_URL_PREFIX):
        return path
    trimmed = base.rstrip("/")
    relative = path.lstrip("/")
    if not relative:
        return trimmed
    return f"{trimmed}/{relative}"


def build_request(method: str, url: str, payload: RequestPayload = None) -> httpx.Request:
    """Construct a request, rejecting malformed methods and URLs up front."""

    if not _METHOD_TOKEN.match(method or ""):
        raise InvalidMethodError(f"invalid HTTP method {method!r}")
    return httpx.Request(method, url, content=payload)


__all__ = ["ABSOLUTE_URL_PREFIX", "build_request", "join_url"]
