"""Structured logging with a per-run correlation id.

structlog renders on top of the stdlib ``logging`` module, so calculator
modules that log through ``logging.getLogger(__name__)`` and the engine's
structlog events end up in the same stream.  Every structlog entry
emitted inside an analytics run carries that run's ``run_id``.
"""

from __future__ import annotations

import logging
import sys
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Iterator

import structlog

from trade_analytics.core.errors import ConfigError

LOG_FORMATS = ("json", "console")

_run_id: ContextVar[str] = ContextVar("run_id", default="")


def get_run_id() -> str:
    """Current run id, or an empty string outside of a run."""
    return _run_id.get()


@contextmanager
def run_context(run_id: str | None = None) -> Iterator[str]:
    """Bind *run_id* (or a fresh one) for the duration of the block.

    The previous run id is restored on exit, so nested or interleaved
    runs in one context do not leak ids into each other's logs.
    """
    rid = run_id or uuid.uuid4().hex
    token = _run_id.set(rid)
    try:
        yield rid
    finally:
        _run_id.reset(token)


def _add_run_id(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Structlog processor: stamp the current run id, if any."""
    rid = get_run_id()
    if rid:
        event_dict.setdefault("run_id", rid)
    return event_dict


def _processors(format: str) -> list[Any]:
    renderer: Any = (
        structlog.processors.JSONRenderer()
        if format == "json"
        else structlog.dev.ConsoleRenderer()
    )
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        _add_run_id,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        renderer,
    ]


def setup_logging(level: str = "INFO", format: str = "json") -> None:
    """Configure process-wide structured logging.

    Args:
        level: stdlib level name (DEBUG, INFO, WARNING, ERROR).
        format: "json" for machine-readable output, "console" for humans.

    Raises:
        ConfigError: if *level* or *format* is not recognised.
    """
    log_level = logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        raise ConfigError(f"Unknown log level {level!r}")
    if format not in LOG_FORMATS:
        raise ConfigError(f"Unknown log format {format!r}, expected one of {LOG_FORMATS}")

    structlog.configure(
        processors=_processors(format),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=log_level)
    logging.getLogger("trade_analytics").setLevel(log_level)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Structlog logger writing through ``logging.getLogger(name)``.

    Until the host calls :func:`setup_logging` (or configures stdlib
    logging itself) events follow the stdlib defaults, so library use
    never writes to stdout.
    """
    return structlog.wrap_logger(
        logging.getLogger(name), wrapper_class=structlog.stdlib.BoundLogger
    )
