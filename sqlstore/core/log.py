"""
Logging setup for sqlstore.

structlog renders our own events; the standard library logging module stays
the sink for third-party loggers such as ``sqlalchemy``.
``attach_sql_logger`` hooks an Engine so failed, slow and (in debug mode)
all statements are reported with their SQL, elapsed time and row count.
"""
from __future__ import annotations

import logging
import sys
import time

import structlog
from sqlalchemy import event
from sqlalchemy.engine import Engine

SLOW_THRESHOLD_SECONDS = 0.2


def configure_logging(level: str = "info", fmt: str = "console") -> None:
    """Configure structlog to emit JSON (``fmt="json"``) or console lines."""
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if fmt == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(level.upper())),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level.upper())


def get_logger(name: str | None = None):
    return structlog.get_logger(name)


def attach_sql_logger(engine: Engine, *, debug: bool = False, slow_threshold: float = SLOW_THRESHOLD_SECONDS) -> None:
    logger = get_logger("sqlstore.sql")

    @event.listens_for(engine, "before_cursor_execute")
    def _start(conn, cursor, statement, parameters, context, executemany):
        conn.info["sqlstore_query_start"] = time.perf_counter()

    @event.listens_for(engine, "after_cursor_execute")
    def _finish(conn, cursor, statement, parameters, context, executemany):
        elapsed = time.perf_counter() - conn.info.pop("sqlstore_query_start", time.perf_counter())
        if elapsed > slow_threshold:
            logger.warning("slow sql", elapsed=round(elapsed, 6), rows=cursor.rowcount, sql=statement)
        elif debug:
            logger.debug("trace", elapsed=round(elapsed, 6), rows=cursor.rowcount, sql=statement)

    @event.listens_for(engine, "handle_error")
    def _error(exception_context):
        conn = exception_context.connection
        started = conn.info.pop("sqlstore_query_start", None) if conn is not None else None
        elapsed = time.perf_counter() - started if started is not None else 0.0
        logger.error(
            "trace",
            err=str(exception_context.original_exception),
            elapsed=round(elapsed, 6),
            sql=exception_context.statement,
        )
