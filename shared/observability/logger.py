"""Logging helpers combining structlog event rendering with loguru sinks."""

from __future__ import annotations

import logging
import sys
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from types import FrameType
from typing import Any, Iterator, Mapping

import structlog
from loguru import logger as loguru_logger

__all__ = [
    "configure_logging",
    "generate_request_id",
    "get_logger",
    "get_request_id",
    "request_context",
]

_REQUEST_ID: ContextVar[str | None] = ContextVar("request_id", default=None)
_CONFIGURED: bool = False
_SERVICE_NAME: str | None = None


def _format_record(record: Mapping[str, Any]) -> str:
    """Return the loguru line format for structured log output."""

    extra = record.get("extra") or {}
    service = extra.get("service", "-")
    request_id = extra.get("request_id") or "-"
    message = str(record.get("message", ""))
    # loguru treats the returned value as a format template; the JSON payloads
    # rendered by structlog contain literal braces.
    message = message.replace("{", "{{").replace("}", "}}")
    return (
        f"{record['time'].isoformat()} | {record['level'].name:<8} | "
        f"{service} | {request_id} | {message}\n"
    )


def _coerce_level(level: str | int) -> tuple[int, str]:
    if isinstance(level, int):
        numeric = level
    else:
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level: {level}")
        numeric = resolved
    return numeric, logging.getLevelName(numeric)


class LoguruInterceptHandler(logging.Handler):
    """Forward standard library log records to loguru."""

    def emit(self, record: logging.LogRecord) -> None:  # pragma: no cover - thin wrapper
        level: str | int
        try:
            level = loguru_logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame: FrameType | None = logging.currentframe()
        depth = 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        bound = loguru_logger.bind(logger=record.name)
        request_id = get_request_id()
        if request_id:
            bound = bound.bind(request_id=request_id)
        bound.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def configure_logging(*, service_name: str | None = None, level: str | int = "INFO") -> None:
    """Install the loguru sink and structlog processors once per process.

    Later calls only update the service name attached to log entries.
    """

    global _CONFIGURED, _SERVICE_NAME

    numeric_level, level_name = _coerce_level(level)

    if not _CONFIGURED:
        loguru_logger.remove()
        loguru_logger.add(
            sys.stdout,
            level=level_name,
            backtrace=False,
            diagnose=False,
            format=_format_record,
        )
        logging.basicConfig(
            handlers=[LoguruInterceptHandler()], level=numeric_level, force=True
        )
        logging.captureWarnings(True)

        structlog.configure(
            processors=[
                structlog.contextvars.merge_contextvars,
                structlog.processors.add_log_level,
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer(),
            ],
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )
        _CONFIGURED = True

    if service_name:
        _SERVICE_NAME = service_name
        loguru_logger.configure(extra={"service": service_name})
        structlog.contextvars.bind_contextvars(service=service_name)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Return a structlog bound logger with the given ``name``."""

    if name is None:
        return structlog.get_logger()
    return structlog.get_logger(name)


def get_request_id() -> str | None:
    return _REQUEST_ID.get()


def generate_request_id() -> str:
    return uuid.uuid4().hex


@contextmanager
def request_context(request_id: str | None = None, **extra: Any) -> Iterator[str]:
    """Bind a request id and ``extra`` fields to every log entry in the block."""

    extra.pop("request_id", None)
    rid = request_id or generate_request_id()
    token = _REQUEST_ID.set(rid)

    values = dict(extra)
    if _SERVICE_NAME and "service" not in values:
        values["service"] = _SERVICE_NAME

    previous = structlog.contextvars.get_contextvars()
    structlog.contextvars.bind_contextvars(request_id=rid, **values)
    bound_keys = ["request_id", *values]

    try:
        with loguru_logger.contextualize(request_id=rid, **extra):
            yield rid
    finally:
        structlog.contextvars.unbind_contextvars(*bound_keys)
        restore = {key: previous[key] for key in bound_keys if key in previous}
        if restore:
            structlog.contextvars.bind_contextvars(**restore)
        _REQUEST_ID.reset(token)
