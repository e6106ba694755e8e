"""Connection factory and session helpers for the SQL backend."""
from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from sqlstore.core.config import SQLConfig
from sqlstore.core.context import Context
from sqlstore.core.log import attach_sql_logger, get_logger
from .engines import EngineBackend, backend_for

Base = declarative_base()

CONTEXT_OPTION = "sqlstore_context"
_RELEASE_KEY = "sqlstore_release_interrupt"

logger = get_logger(__name__)


class Database:
    """Owns the single engine (connection pool) shared by every storage call.

    The engine is opened on the first call to ``engine()``; concurrent first
    callers block on a lock and all observe the same engine. Failing to open
    it is fatal: the error is logged and ``SystemExit`` is raised.
    """

    def __init__(self, cfg: SQLConfig) -> None:
        self.cfg = cfg
        self.backend: EngineBackend = backend_for(cfg.type)
        self._engine: Optional[Engine] = None
        self._sessionmaker: Optional[sessionmaker] = None
        self._lock = threading.Lock()

    def engine(self) -> Engine:
        if self._engine is None:
            with self._lock:
                if self._engine is None:
                    self._engine = self._open()
        return self._engine

    def _open(self) -> Engine:
        cfg = self.cfg
        try:
            engine = create_engine(
                self.backend.url(cfg),
                connect_args=self.backend.connect_args(cfg),
                **self.backend.pool_options(cfg),
            )
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except (SQLAlchemyError, ImportError) as exc:
            # ImportError: the driver module for cfg.type is not installed
            logger.critical("failed to connect database", driver=cfg.type, err=str(exc))
            raise SystemExit(f"failed to connect database with driver '{cfg.type}': {exc}") from exc

        attach_sql_logger(engine, debug=cfg.debug)
        event.listen(engine, "before_cursor_execute", self._guard_statement)
        event.listen(engine, "handle_error", self._release_on_error)
        event.listen(engine, "checkin", self._release_on_checkin)
        self._sessionmaker = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
        logger.info("database connected", driver=cfg.type)
        return engine

    @contextmanager
    def session(self, ctx: Context) -> Iterator[Session]:
        """Yield a Session whose statements honour ``ctx``.

        Rolls back on error and always closes. A backend error raised while
        ``ctx`` is done is replaced by the context error.
        """
        ctx.check()
        engine = self.engine()
        session: Session = self._sessionmaker(bind=engine.execution_options(**{CONTEXT_OPTION: ctx}))
        try:
            yield session
        except SQLAlchemyError as exc:
            session.rollback()
            err = ctx.err()
            if err is not None:
                raise err from exc
            raise
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def dispose(self) -> None:
        if self._engine is not None:
            self._engine.dispose()

    # -------------------------- statement guards --------------------------
    # The interrupt stays registered on the context from the first statement
    # until the connection goes back to the pool, so rows still being fetched
    # after execute() returns can be cancelled too.
    def _guard_statement(self, conn, cursor, statement, parameters, context, executemany):
        ctx: Optional[Context] = conn.get_execution_options().get(CONTEXT_OPTION)
        if ctx is None:
            return
        ctx.check()
        registered = conn.info.get(_RELEASE_KEY)
        if registered is not None:
            if registered[0] is ctx:
                return
            _release(conn.info)
        interrupt = self.backend.interrupter(self.cfg, conn.connection.dbapi_connection)
        if interrupt is not None:
            conn.info[_RELEASE_KEY] = (ctx, ctx.add_done_callback(interrupt))

    def _release_on_error(self, exception_context):
        conn = exception_context.connection
        if conn is not None:
            _release(conn.info)

    def _release_on_checkin(self, dbapi_connection, connection_record):
        if connection_record is not None:
            _release(connection_record.info)


def _release(info: dict) -> None:
    registered = info.pop(_RELEASE_KEY, None)
    if registered is not None:
        registered[1]()
