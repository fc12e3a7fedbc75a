"""
structlog configuration and per-request log context

Request-scoped fields (``request_id``, ``user_id``) live in structlog's
context variables and are merged into every event logged while a request is
being handled.
"""

import base64
import logging
import secrets
import sys
import time
from typing import Any

import structlog
from structlog.contextvars import bind_contextvars, clear_contextvars, merge_contextvars


def configure_logging(debug: bool = False) -> None:
    """Route structlog through stdlib logging; console output in debug, JSON lines otherwise."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        stream=sys.stdout,
        format="%(message)s",
        force=True,
    )

    renderer: Any = (
        structlog.dev.ConsoleRenderer(colors=True) if debug else structlog.processors.JSONRenderer()
    )

    structlog.configure(
        processors=[
            merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def generate_request_id() -> str:
    """14-character unpadded base64url id: microsecond timestamp plus two random bytes."""
    raw = int(time.time() * 1_000_000).to_bytes(8, "big") + secrets.token_bytes(2)
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def bind_request_context(request_id: str | None = None) -> str:
    """Start a fresh log context for a request and return its id."""
    request_id = request_id or generate_request_id()
    clear_contextvars()
    bind_contextvars(request_id=request_id)
    return request_id


def bind_user_id(user_id: str) -> None:
    """Attach the authenticated user to subsequent log events of this request."""
    bind_contextvars(user_id=user_id)


def clear_request_context() -> None:
    clear_contextvars()
