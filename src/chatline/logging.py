"""
Structured logging for Chatline.

Every log line emitted while a request or websocket connection is being
served carries the request id, the authenticated user and the GraphQL
operation.
"""

import logging
import secrets
import sys
from contextvars import ContextVar
from typing import Any

import structlog

_request_id: ContextVar[str | None] = ContextVar("chatline_request_id", default=None)
_user_id: ContextVar[str | None] = ContextVar("chatline_user_id", default=None)
_operation: ContextVar[str | None] = ContextVar("chatline_graphql_operation", default=None)

_CONTEXT_FIELDS: tuple[tuple[str, ContextVar[str | None]], ...] = (
    ("request_id", _request_id),
    ("user_id", _user_id),
    ("graphql_operation", _operation),
)

# Chatty third-party loggers, kept at WARNING unless explicitly enabled
_NOISY_LOGGERS = ("sqlalchemy.engine", "aiosqlite", "asyncio", "httpx")


class RequestContextFilter:
    """structlog processor adding the current request context to each event."""

    def __call__(self, logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
        _ = logger, method_name
        for field, var in _CONTEXT_FIELDS:
            value = var.get()
            if value and field not in event_dict:
                event_dict[field] = value
        return event_dict


def configure_logging(debug: bool = False, level: str | None = None) -> None:
    """Configure structlog on top of the stdlib logging module.

    Args:
        debug: Human-readable console output at DEBUG level. JSON otherwise.
        level: Explicit level name; defaults to ``settings.log_level``.
    """
    from .config import settings

    if debug:
        log_level = logging.DEBUG
    else:
        log_level = logging.getLevelName((level or settings.log_level).upper())
        if not isinstance(log_level, int):
            log_level = logging.INFO

    logging.basicConfig(level=log_level, stream=sys.stdout, format="%(message)s", force=True)

    for name in _NOISY_LOGGERS:
        if name == "sqlalchemy.engine" and settings.sql_echo:
            continue
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))

    renderer: Any = (
        structlog.dev.ConsoleRenderer(colors=True) if debug else structlog.processors.JSONRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            RequestContextFilter(),
            structlog.processors.TimeStamper(fmt="ISO", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def generate_request_id() -> str:
    """A random 16-character hex request id."""
    return secrets.token_hex(8)


def set_request_context(request_id: str | None = None) -> str:
    """Start a fresh request context and return its request id."""
    request_id = request_id or generate_request_id()
    _request_id.set(request_id)
    _user_id.set(None)
    _operation.set(None)
    return request_id


def bind_user_id(user_id: str | None) -> None:
    """Attach the authenticated user to the current logging context."""
    _user_id.set(user_id)


def bind_graphql_operation(operation: str | None) -> None:
    """Attach the GraphQL operation name to the current logging context."""
    _operation.set(operation)


def clear_request_context() -> None:
    for _, var in _CONTEXT_FIELDS:
        var.set(None)


def get_request_id() -> str | None:
    return _request_id.get()


def get_user_id() -> str | None:
    return _user_id.get()


def get_graphql_operation() -> str | None:
    return _operation.get()
