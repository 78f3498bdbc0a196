"""Public package interface for pipeline_client."""

from .client import AsyncClient, Client
from .config import ClientConfig, load_config
from .context import RequestContext, bind_context, request_context
from .decoding import adecode_json, decode_json
from .exceptions import (
    ContextError,
    DeadlineExceededError,
    InvalidMethodError,
    InvalidMiddlewareResult,
    PipelineClientError,
    RequestCancelledError,
)
from .middleware import (
    apply_middleware,
    basic_auth,
    bearer_token,
    idempotency_key,
    user_agent,
    with_header,
    with_headers,
    with_query,
)
from .requests_support import RequestsTransport
from .types import AsyncTransport, Middleware, Transport

__all__ = [
    "AsyncClient",
    "AsyncTransport",
    "Client",
    "ClientConfig",
    "ContextError",
    "DeadlineExceededError",
    "InvalidMethodError",
    "InvalidMiddlewareResult",
    "Middleware",
    "PipelineClientError",
    "RequestCancelledError",
    "RequestContext",
    "RequestsTransport",
    "Transport",
    "adecode_json",
    "apply_middleware",
    "basic_auth",
    "bearer_token",
    "bind_context",
    "decode_json",
    "idempotency_key",
    "load_config",
    "request_context",
    "user_agent",
    "with_header",
    "with_headers",
    "with_query",
]
