"""Method-based HTTP clients that run requests through a middleware pipeline."""

from __future__ import annotations

import logging
from contextlib import AbstractContextManager
from typing import Any, Mapping, Optional

import httpx

from .config import ClientConfig
from .context import RequestContext, bind_context, cap_timeout, request_context
from .exceptions import DeadlineExceededError
from .middleware import apply_middleware, user_agent, with_headers
from .types import AsyncTransport, Middleware, MiddlewareChain, RequestPayload, Transport
from .utils import build_request, join_url

LOGGER = logging.getLogger(__name__)


def _transport_timeout(transport: object) -> Optional[Mapping[str, Optional[float]]]:
    timeout = getattr(transport, "timeout", None)
    if isinstance(timeout, httpx.Timeout):
        return timeout.as_dict()
    return None


def _config_middleware(config: ClientConfig) -> list[Middleware]:
    middleware: list[Middleware] = []
    if config.default_headers:
        middleware.append(with_headers(config.default_headers))
    if config.user_agent:
        middleware.append(user_agent(config.user_agent))
    return middleware


class _PipelineMixin:
    """Middleware registration and path helpers shared by both clients.

    Registration is not synchronized: call :meth:`use` before the client is
    shared between threads or tasks.
    """

    base_url: str
    _middleware: list[Middleware]

    def use(self, *middleware: Middleware) -> None:
        """Append client-level middleware; it runs before call-level middleware."""

        self._middleware.extend(middleware)

    @property
    def middleware(self) -> tuple[Middleware, ...]:
        return tuple(self._middleware)

    def path(self, path: str) -> str:
        """Join ``path`` onto the base URL, leaving absolute URLs untouched."""

        return join_url(self.base_url, path)

    def pathf(self, template: str, *args: Any) -> str:
        """Format ``template`` with ``%``-style positional arguments, then call :meth:`path`.

        The template is always formatted, so ``%%`` collapses to ``%`` even
        without arguments.
        """

        return self.path(template % args)

    def _run_middleware(self, request: httpx.Request, middleware: MiddlewareChain) -> httpx.Request:
        request = apply_middleware(request, self._middleware)
        return apply_middleware(request, middleware)

    def _prepare_context(self, request: httpx.Request, transport: object) -> Optional[RequestContext]:
        context = request_context(request)
        if context is not None:
            context.raise_if_done()
            cap_timeout(request, context, _transport_timeout(transport))
        return context


class Client(_PipelineMixin, AbstractContextManager):
    """Synchronous client over any transport exposing ``send(request)``.

    The transport is borrowed: closing the client only closes transports it
    created itself (see :meth:`from_config`).

    Cancellation is checked once, after middleware and before the send.
    Cancelling a context while the send is in flight has no effect, and the
    deadline only caps each httpx timeout phase, so a slowly streamed
    response can outlive it. Use :class:`AsyncClient` when an in-flight
    send must be interruptible.
    """

    def __init__(
        self,
        transport: Transport,
        base_url: str = "",
        *,
        owns_transport: bool = False,
    ) -> None:
        self.transport = transport
        self.base_url = base_url
        self._middleware: list[Middleware] = []
        self._owns_transport = owns_transport

    @classmethod
    def from_config(cls, config: ClientConfig, **client_options: Any) -> "Client":
        """Build a client with its own ``httpx.Client`` configured from ``config``."""

        options = config.transport_options()
        options.update(client_options)
        client = cls(httpx.Client(**options), config.base_url, owns_transport=True)
        client.use(*_config_middleware(config))
        return client

    # ------------------------------------------------------------------
    # Context management
    # ------------------------------------------------------------------
    def close(self) -> None:
        if self._owns_transport:
            self.transport.close()

    def __exit__(self, exc_type, exc, tb) -> None:  # type: ignore[override]
        self.close()

    # ------------------------------------------------------------------
    # Request builders
    # ------------------------------------------------------------------
    def request(
        self,
        method: str,
        url: str,
        payload: RequestPayload = None,
        *middleware: Middleware,
        context: Optional[RequestContext] = None,
    ) -> Any:
        """Build a request and dispatch it through :meth:`do`.

        Construction errors are raised before any middleware runs.
        """

        request = build_request(method, url, payload)
        if context is not None:
            bind_context(request, context)
        return self.do(request, middleware)

    def get(self, url: str, *middleware: Middleware) -> Any:
        return self.request("GET", url, None, *middleware)

    def get_ctx(self, context: RequestContext, url: str, *middleware: Middleware) -> Any:
        """Send a GET bound to ``context``; it is checked only before the send starts."""

        return self.request("GET", url, None, *middleware, context=context)

    def post(self, url: str, payload: RequestPayload, *middleware: Middleware) -> Any:
        return self.request("POST", url, payload, *middleware)

    def post_ctx(
        self,
        context: RequestContext,
        url: str,
        payload: RequestPayload,
        *middleware: Middleware,
    ) -> Any:
        return self.request("POST", url, payload, *middleware, context=context)

    def put(self, url: str, payload: RequestPayload, *middleware: Middleware) -> Any:
        return self.request("PUT", url, payload, *middleware)

    def put_ctx(
        self,
        context: RequestContext,
        url: str,
        payload: RequestPayload,
        *middleware: Middleware,
    ) -> Any:
        return self.request("PUT", url, payload, *middleware, context=context)

    def delete(self, url: str, *middleware: Middleware) -> Any:
        return self.request("DELETE", url, None, *middleware)

    def delete_ctx(self, context: RequestContext, url: str, *middleware: Middleware) -> Any:
        return self.request("DELETE", url, None, *middleware, context=context)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------
    def do(self, request: httpx.Request, middleware: MiddlewareChain = ()) -> Any:
        """Send ``request`` after applying client-level then call-level middleware.

        Request -> client middleware -> call middleware -> transport.send

        The first middleware that raises stops the pipeline; its exception
        propagates unchanged and the transport is never called. Transport
        results and errors are returned or raised as-is.
        """

        request = self._run_middleware(request, middleware)
        self._prepare_context(request, self.transport)
        LOGGER.debug("Sending %s %s", request.method, request.url)
        return self.transport.send(request)


class AsyncClient(_PipelineMixin):
    """Asynchronous client over a transport with an awaitable ``send``.

    Requests bound to a :class:`RequestContext` are sent inside an anyio
    cancel scope, so cancelling the context or reaching its deadline
    interrupts the send.
    """

    def __init__(
        self,
        transport: AsyncTransport,
        base_url: str = "",
        *,
        owns_transport: bool = False,
    ) -> None:
        self.transport = transport
        self.base_url = base_url
        self._middleware: list[Middleware] = []
        self._owns_transport = owns_transport

    @classmethod
    def from_config(cls, config: ClientConfig, **client_options: Any) -> "AsyncClient":
        options = config.transport_options()
        options.update(client_options)
        client = cls(httpx.AsyncClient(**options), config.base_url, owns_transport=True)
        client.use(*_config_middleware(config))
        return client

    async def aclose(self) -> None:
        if self._owns_transport:
            await self.transport.aclose()

    async def __aenter__(self) -> "AsyncClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def request(
        self,
        method: str,
        url: str,
        payload: RequestPayload = None,
        *middleware: Middleware,
        context: Optional[RequestContext] = None,
    ) -> Any:
        request = build_request(method, url, payload)
        if context is not None:
            bind_context(request, context)
        return await self.do(request, middleware)

    async def get(self, url: str, *middleware: Middleware) -> Any:
        return await self.request("GET", url, None, *middleware)

    async def get_ctx(self, context: RequestContext, url: str, *middleware: Middleware) -> Any:
        return await self.request("GET", url, None, *middleware, context=context)

    async def post(self, url: str, payload: RequestPayload, *middleware: Middleware) -> Any:
        return await self.request("POST", url, payload, *middleware)

    async def post_ctx(
        self,
        context: RequestContext,
        url: str,
        payload: RequestPayload,
        *middleware: Middleware,
    ) -> Any:
        return await self.request("POST", url, payload, *middleware, context=context)

    async def put(self, url: str, payload: RequestPayload, *middleware: Middleware) -> Any:
        return await self.request("PUT", url, payload, *middleware)

    async def put_ctx(
        self,
        context: RequestContext,
        url: str,
        payload: RequestPayload,
        *middleware: Middleware,
    ) -> Any:
        return await self.request("PUT", url, payload, *middleware, context=context)

    async def delete(self, url: str, *middleware: Middleware) -> Any:
        return await self.request("DELETE", url, None, *middleware)

    async def delete_ctx(self, context: RequestContext, url: str, *middleware: Middleware) -> Any:
        return await self.request("DELETE", url, None, *middleware, context=context)

    async def do(self, request: httpx.Request, middleware: MiddlewareChain = ()) -> Any:
        """Async counterpart of :meth:`Client.do` with the same ordering rules."""

        request = self._run_middleware(request, middleware)
        context = self._prepare_context(request, self.transport)
        LOGGER.debug("Sending %s %s", request.method, request.url)
        if context is None:
            return await self.transport.send(request)

        with context.cancel_scope():
            return await self.transport.send(request)
        # Only reached when the context's scope caught its own cancellation.
        raise context.error() or DeadlineExceededError("request context deadline exceeded")


__all__ = ["AsyncClient", "Client"]
