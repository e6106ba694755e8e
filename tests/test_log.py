from __future__ import annotations

import pytest
import structlog
from sqlalchemy import create_engine, text
from sqlalchemy.exc import OperationalError
from structlog.testing import capture_logs

from sqlstore.core.log import attach_sql_logger, configure_logging


@pytest.fixture(autouse=True)
def reset_structlog():
    structlog.reset_defaults()
    yield
    structlog.reset_defaults()


@pytest.fixture()
def engine():
    engine = create_engine("sqlite://")
    yield engine
    engine.dispose()


def test_slow_statements_are_warned(engine):
    attach_sql_logger(engine, slow_threshold=-1)
    with capture_logs() as logs, engine.connect() as conn:
        conn.execute(text("SELECT 1"))

    slow = [entry for entry in logs if entry["event"] == "slow sql"]
    assert slow
    assert slow[0]["log_level"] == "warning"
    assert slow[0]["sql"] == "SELECT 1"


def test_debug_traces_every_statement(engine):
    attach_sql_logger(engine, debug=True)
    with capture_logs() as logs, engine.connect() as conn:
        conn.execute(text("SELECT 1"))

    traces = [entry for entry in logs if entry["event"] == "trace"]
    assert traces
    assert traces[0]["log_level"] == "debug"


def test_quiet_without_debug(engine):
    attach_sql_logger(engine)
    with capture_logs() as logs, engine.connect() as conn:
        conn.execute(text("SELECT 1"))
    assert logs == []


def test_failed_statements_are_logged(engine):
    attach_sql_logger(engine)
    with capture_logs() as logs, engine.connect() as conn:
        with pytest.raises(OperationalError):
            conn.execute(text("SELECT * FROM missing_table"))

    errors = [entry for entry in logs if entry["log_level"] == "error"]
    assert errors
    assert "missing_table" in errors[0]["err"]
    assert errors[0]["sql"] == "SELECT * FROM missing_table"


@pytest.mark.parametrize("fmt", ["json", "console"])
def test_configure_logging(fmt, capsys):
    configure_logging(level="info", fmt=fmt)
    structlog.get_logger("sqlstore.test").info("hello", answer=42)
    out = capsys.readouterr().out
    assert "hello" in out
    assert "42" in out
