"""JSON response decoding."""

from __future__ import annotations

from typing import Any, Type, TypeVar

import httpx
from pydantic import TypeAdapter

T = TypeVar("T")


def decode_json(response: Any, target: Type[T]) -> T:
    """Read the full response body and validate it as JSON into ``target``.

    ``target`` may be anything pydantic can validate: a model, a dataclass,
    a ``TypedDict``, or a plain annotation such as ``dict[str, int]``.
    Decoding errors propagate unchanged and nothing is returned on failure.
    The caller remains responsible for closing the response.
    """

    body = _read_body(response)
    return TypeAdapter(target).validate_json(body)


async def adecode_json(response: Any, target: Type[T]) -> T:
    """Async variant of :func:`decode_json` for streamed ``httpx`` responses."""

    if isinstance(response, httpx.Response):
        body = await response.aread()
    else:
        body = response.content
    return TypeAdapter(target).validate_json(body)


def _read_body(response: Any) -> bytes:
    if isinstance(response, httpx.Response):
        return response.read()
    return response.content


__all__ = ["adecode_json", "decode_json"]
