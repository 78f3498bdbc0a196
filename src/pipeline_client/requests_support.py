"""Integration helpers for using a ``requests.Session`` as the transport."""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Optional, Tuple, Union

import httpx
import requests

from .context import TIMEOUT_EXTENSION

RequestsTimeout = Union[None, float, Tuple[Optional[float], Optional[float]]]

# Recomputed by requests from the replayed body and URL.
REPLAY_EXCLUDED_HEADERS = frozenset({"content-length", "host", "transfer-encoding"})


class RequestsTransport(AbstractContextManager):
    """Replay ``httpx.Request`` objects through ``requests``.

    The returned value is the ``requests.Response`` itself, passed through
    untouched. A session passed in is borrowed; one created here is closed
    by :meth:`close`.
    """

    def __init__(self, session: Optional[requests.Session] = None) -> None:
        self._owns_session = session is None
        self.session = session or requests.Session()

    def send(self, request: httpx.Request) -> requests.Response:
        body = request.read()
        headers = {
            name: value
            for name, value in request.headers.items()
            if name.lower() not in REPLAY_EXCLUDED_HEADERS
        }
        return self.session.request(
            request.method,
            str(request.url),
            headers=headers,
            data=body or None,
            timeout=_timeout(request),
        )

    def close(self) -> None:
        if self._owns_session:
            self.session.close()

    def __exit__(self, exc_type, exc, tb) -> None:  # type: ignore[override]
        self.close()


def _timeout(request: httpx.Request) -> RequestsTimeout:
    timeout = request.extensions.get(TIMEOUT_EXTENSION)
    if not timeout:
        return None
    # requests only distinguishes connect and read timeouts.
    return timeout.get("connect"), timeout.get("read")


__all__ = ["RequestsTransport"]
