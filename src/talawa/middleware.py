"""
Request logging middleware
"""

import json
import re
import time
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from .logging import bind_request_context, clear_request_context, get_logger

logger = get_logger(__name__)

GRAPHQL_PATH = "/graphql"
REDACTED = "[REDACTED]"

# Matched as substrings of lowercased parameter names
SENSITIVE_PARAM_FRAGMENTS = (
    "password",
    "token",
    "secret",
    "key",
    "auth",
    "jwt",
    "session",
    "cookie",
    "credential",
)

# GraphQL GET requests carry the document and variables in the query string
GRAPHQL_PAYLOAD_PARAMS = ("query", "variables", "extensions")

_OPERATION_RE = re.compile(r"^\s*(query|mutation|subscription)\s+(\w+)")


def _is_sensitive(name: str) -> bool:
    lowered = name.lower()
    return any(fragment in lowered for fragment in SENSITIVE_PARAM_FRAGMENTS)


def sanitize_query_params(params: Mapping[str, Any]) -> dict[str, Any]:
    """Copy of ``params`` with credential-like values replaced by a marker."""
    return {
        key: REDACTED if _is_sensitive(key) else value for key, value in params.items()
    }


def graphql_operation_name(operation_name: Any, query: Any) -> str | None:
    """Loggable name of a GraphQL operation.

    An explicit ``operationName`` wins. Otherwise the name comes from the
    document's first operation, prefixed with ``mutation:`` for mutations.
    """
    if isinstance(operation_name, str) and operation_name:
        return operation_name
    if not isinstance(query, str) or not query:
        return None
    if "__schema" in query or "IntrospectionQuery" in query:
        return "__introspection"

    match = _OPERATION_RE.search(query)
    if match is None:
        return "unnamed_operation"
    kind, name = match.groups()
    return name if kind == "query" else f"{kind}:{name}"


async def extract_graphql_operation_name(request: Request) -> str | None:
    if request.url.path != GRAPHQL_PATH:
        return None

    if request.method == "GET":
        return graphql_operation_name(
            request.query_params.get("operationName"), request.query_params.get("query")
        )
    if request.method != "POST":
        return None

    body = await request.body()
    try:
        payload = json.loads(body) if body else None
    except json.JSONDecodeError:
        return None
    if not isinstance(payload, dict):
        return None
    return graphql_operation_name(payload.get("operationName"), payload.get("query"))


class LoggingContextMiddleware(BaseHTTPMiddleware):
    """Give each request its own log context and log its start and outcome."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        bind_request_context()
        started = time.perf_counter()

        query_params = sanitize_query_params(request.query_params) if request.query_params else None
        if query_params and request.url.path == GRAPHQL_PATH:
            query_params.update({k: REDACTED for k in GRAPHQL_PAYLOAD_PARAMS if k in query_params})

        operation = await extract_graphql_operation_name(request)
        logger.info(
            "Request started",
            method=request.method,
            path=request.url.path,
            query_params=query_params,
            graphql_operation=operation,
            remote_addr=request.client.host if request.client else None,
        )

        try:
            response = await call_next(request)
        except Exception:
            logger.exception("Request failed", method=request.method, path=request.url.path)
            raise
        else:
            logger.info(
                "Request completed",
                status_code=response.status_code,
                duration_ms=round((time.perf_counter() - started) * 1000, 1),
                graphql_operation=operation,
            )
            return response
        finally:
            clear_request_context()
