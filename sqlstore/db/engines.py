"""Engine backends: one connection contract, two database engines."""
from __future__ import annotations

from typing import Callable, Optional

from sqlalchemy.engine import URL

from sqlstore.core.config import MYSQL, SQLITE3, SQLConfig
from sqlstore.core.errors import InvalidConfig
from sqlstore.core.log import get_logger

logger = get_logger(__name__)

# seconds allowed for the side connection that issues KILL QUERY
KILL_CONNECT_TIMEOUT = 5


class EngineBackend:
    """Builds the driver URL and engine options for one engine type."""

    name: str = ""

    def url(self, cfg: SQLConfig) -> URL:
        raise NotImplementedError

    def connect_args(self, cfg: SQLConfig) -> dict:
        return {}

    def pool_options(self, cfg: SQLConfig) -> dict:
        options: dict = {"pool_pre_ping": True}
        if cfg.max_idle_conns > 0:
            options["pool_size"] = cfg.max_idle_conns
        if cfg.max_open_conns > 0:
            options["max_overflow"] = max(cfg.max_open_conns - options.get("pool_size", 5), 0)
        return options

    def interrupter(self, cfg: SQLConfig, dbapi_connection) -> Optional[Callable[[], None]]:
        """Return a callable aborting the statement running on ``dbapi_connection``, if the driver can."""
        return None


class SqliteBackend(EngineBackend):
    """Embedded engine; ``cfg.db`` is the path of the database file."""

    name = SQLITE3

    def url(self, cfg: SQLConfig) -> URL:
        return URL.create("sqlite", database=cfg.db)

    def connect_args(self, cfg: SQLConfig) -> dict:
        # the pool hands connections to whichever thread asks
        return {"check_same_thread": False}

    def interrupter(self, cfg: SQLConfig, dbapi_connection) -> Optional[Callable[[], None]]:
        return dbapi_connection.interrupt


def _split_host(cfg: SQLConfig) -> tuple[Optional[str], Optional[int]]:
    host, _, port = (cfg.host or "").partition(":")
    return host or None, int(port) if port else None


class MySQLBackend(EngineBackend):
    """Client-server engine reached through PyMySQL.

    PyMySQL cannot abort a statement from the connection running it, so a
    cancelled statement is killed from a second, short-lived connection with
    ``KILL QUERY <thread id>``. The server then fails the statement with
    "Query execution was interrupted" and the pooled connection stays usable.
    """

    name = MYSQL

    def url(self, cfg: SQLConfig) -> URL:
        host, port = _split_host(cfg)
        return URL.create(
            "mysql+pymysql",
            username=cfg.user or None,
            password=cfg.password or None,
            host=host,
            port=port,
            database=cfg.db or None,
            query={"charset": "utf8mb4"},
        )

    def interrupter(self, cfg: SQLConfig, dbapi_connection) -> Optional[Callable[[], None]]:
        thread_id = int(dbapi_connection.thread_id())

        def kill_query() -> None:
            import pymysql

            host, port = _split_host(cfg)
            options = {
                "host": host or "localhost",
                "user": cfg.user or None,
                "password": cfg.password or "",
                "charset": "utf8mb4",
                "connect_timeout": KILL_CONNECT_TIMEOUT,
            }
            if port is not None:
                options["port"] = port
            try:
                conn = pymysql.connect(**options)
                try:
                    with conn.cursor() as cursor:
                        cursor.execute(f"KILL QUERY {thread_id}")
                finally:
                    conn.close()
            except pymysql.MySQLError as exc:
                # the statement keeps running; the next one still fails on the context check
                logger.warning("failed to kill query", thread_id=thread_id, err=str(exc))

        return kill_query


_BACKENDS: dict[str, EngineBackend] = {
    SQLITE3: SqliteBackend(),
    MYSQL: MySQLBackend(),
}


def backend_for(engine_type: str) -> EngineBackend:
    try:
        return _BACKENDS[engine_type]
    except KeyError:
        raise InvalidConfig(f"invalid database type: {engine_type}") from None
