from __future__ import annotations

import pytest

from sqlstore.core import config as core_config
from sqlstore.core.config import MYSQL, SQLITE3, SQLConfig, get_sql_config, new_sql_config
from sqlstore.core.errors import InvalidConfig


@pytest.fixture(autouse=True)
def clear_settings_cache():
    core_config.get_sql_config.cache_clear()
    yield
    core_config.get_sql_config.cache_clear()


def test_defaults_to_sqlite_file():
    cfg = new_sql_config()
    assert cfg == SQLConfig()
    assert cfg.type == SQLITE3
    assert cfg.db == "./sqlite.db"
    assert cfg.debug is False


def test_options_override_defaults():
    cfg = new_sql_config(type=MYSQL, host="127.0.0.1:3306", user="root", password="pw", db="app", max_open_conns=10)
    assert cfg.type == MYSQL
    assert cfg.host == "127.0.0.1:3306"
    assert cfg.max_open_conns == 10
    assert cfg.max_idle_conns == 0


def test_invalid_type_is_rejected():
    with pytest.raises(InvalidConfig, match="invalid database type: oracle"):
        new_sql_config(type="oracle")


def test_get_sql_config_reads_env(monkeypatch):
    monkeypatch.setenv("EXT_SQL_TYPE", "MySQL")
    monkeypatch.setenv("EXT_SQL_HOST", "db:3306")
    monkeypatch.setenv("EXT_SQL_USER", "app")
    monkeypatch.setenv("EXT_SQL_PASSWORD", "secret")
    monkeypatch.setenv("EXT_SQL_DB", "appdb")
    monkeypatch.setenv("EXT_SQL_MAXIDLECONNS", "4")
    monkeypatch.setenv("EXT_SQL_MAXOPENCONNS", "not-a-number")
    monkeypatch.setenv("EXT_SQL_DEBUG", "yes")

    cfg = get_sql_config()

    assert cfg.type == MYSQL
    assert cfg.host == "db:3306"
    assert cfg.user == "app"
    assert cfg.password == "secret"
    assert cfg.db == "appdb"
    assert cfg.max_idle_conns == 4
    assert cfg.max_open_conns == 0
    assert cfg.debug is True
    assert get_sql_config() is cfg


def test_get_sql_config_rejects_unknown_engine(monkeypatch):
    monkeypatch.setenv("EXT_SQL_TYPE", "postgres")
    with pytest.raises(InvalidConfig):
        get_sql_config()
