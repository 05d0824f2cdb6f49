"""
Logging for relaygraph, built on structlog.

Every module logs through ``get_logger(__name__)``. Hosts that already
configure structlog need nothing else; ``configure_logging`` is a
convenience for applications that don't.
"""

import base64
import logging
import secrets
import sys
import time
from contextvars import ContextVar
from typing import Any

import structlog

LOGGER_NAME = "relaygraph"

# Request ID of the execution running in the current task
request_id_ctx: ContextVar[str | None] = ContextVar("relay_request_id", default=None)


def add_request_id(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """structlog processor stamping the current request ID on each event."""
    _ = logger, method_name

    request_id = request_id_ctx.get()
    if request_id and "request_id" not in event_dict:
        event_dict["request_id"] = request_id
    return event_dict


def _level(debug: bool, log_level: str | None) -> int:
    from .config import settings

    if log_level is not None:
        return logging.getLevelName(log_level.upper())
    if debug:
        return logging.DEBUG
    return logging.getLevelName(settings.log_level.upper())


def configure_logging(debug: bool | None = None, log_level: str | None = None) -> None:
    """Configure structlog and the ``relaygraph`` stdlib logger.

    Args:
        debug: Console output when True, JSON lines otherwise. Defaults to
            ``settings.debug``.
        log_level: Level name for the ``relaygraph`` logger. Defaults to
            ``settings.log_level``, or DEBUG in debug mode.
    """
    from .config import settings

    if debug is None:
        debug = settings.debug

    stdlib_logger = logging.getLogger(LOGGER_NAME)
    stdlib_logger.setLevel(_level(debug, log_level))
    if not stdlib_logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter("%(message)s"))
        stdlib_logger.addHandler(handler)
    stdlib_logger.propagate = False

    processors: list[Any] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        add_request_id,
        structlog.processors.TimeStamper(fmt="ISO", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if debug:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))
    else:
        processors.append(structlog.processors.JSONRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """Return a structlog logger, usually for ``__name__``."""
    return structlog.get_logger(name)


def generate_request_id() -> str:
    """Generate a compact, roughly time-ordered request ID.

    Eight bytes of microsecond timestamp plus two random bytes, URL-safe
    base64 without padding (14 characters).
    """
    timestamp_us = int(time.time() * 1_000_000)
    raw = timestamp_us.to_bytes(8, byteorder="big") + secrets.token_bytes(2)
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def set_request_context(request_id: str | None = None) -> str:
    """Set the request ID for the current task and return it.

    Hosts call this once per incoming request, before executing the query.
    Request scopes created afterwards reuse the ID.
    """
    if request_id is None:
        request_id = generate_request_id()
    request_id_ctx.set(request_id)
    return request_id


def clear_request_context() -> None:
    request_id_ctx.set(None)


def get_request_id() -> str | None:
    return request_id_ctx.get()
