"""
Configuration helpers for the SQL backend.

``SQLConfig`` is the resolved connection configuration consumed by
``sqlstore.db.session.Database``. It can be built in code with
``new_sql_config`` or read from the environment with ``get_sql_config``
(``EXT_SQL_TYPE``, ``EXT_SQL_HOST``, ``EXT_SQL_USER``, ``EXT_SQL_PASSWORD``,
``EXT_SQL_DB``, ``EXT_SQL_MAXIDLECONNS``, ``EXT_SQL_MAXOPENCONNS``,
``EXT_SQL_DEBUG``).
"""

from dataclasses import dataclass, replace
from functools import lru_cache
import os

from .errors import InvalidConfig

MYSQL = "mysql"
SQLITE3 = "sqlite3"

SUPPORTED_TYPES = (MYSQL, SQLITE3)

_DEFAULT_SQL_TYPE = SQLITE3
_DEFAULT_SQL_DB = "./sqlite.db"


@dataclass(frozen=True)
class SQLConfig:
    """Typed view of the database settings."""

    type: str = _DEFAULT_SQL_TYPE
    # host may include the port, e.g. 127.0.0.1:3306
    host: str = ""
    user: str = ""
    password: str = ""
    # database name, or the file path for sqlite3
    db: str = _DEFAULT_SQL_DB
    max_idle_conns: int = 0
    max_open_conns: int = 0
    # log every statement
    debug: bool = False


def new_sql_config(**options) -> SQLConfig:
    """Apply ``options`` over the defaults and validate the engine type."""
    cfg = replace(SQLConfig(), **options)
    if cfg.type not in SUPPORTED_TYPES:
        raise InvalidConfig(f"invalid database type: {cfg.type}")
    return cfg


@lru_cache
def get_sql_config() -> SQLConfig:
    """Read the current environment and build a validated SQLConfig."""
    def _int(value: str | None, default: int = 0) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    def _bool(value: str | None, default: bool = False) -> bool:
        if value is None:
            return default
        return value.strip().lower() in {"1", "true", "yes", "on"}

    return new_sql_config(
        type=(os.getenv("EXT_SQL_TYPE") or _DEFAULT_SQL_TYPE).strip().lower(),
        host=os.getenv("EXT_SQL_HOST", ""),
        user=os.getenv("EXT_SQL_USER", ""),
        password=os.getenv("EXT_SQL_PASSWORD", ""),
        db=os.getenv("EXT_SQL_DB") or _DEFAULT_SQL_DB,
        max_idle_conns=_int(os.getenv("EXT_SQL_MAXIDLECONNS")),
        max_open_conns=_int(os.getenv("EXT_SQL_MAXOPENCONNS")),
        debug=_bool(os.getenv("EXT_SQL_DEBUG")),
    )
