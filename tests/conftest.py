from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Make the sqlstore package importable when running the tests from a checkout
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import sample_models  # noqa: E402,F401  # registers the tables on Base
from sqlstore.core import config as core_config  # noqa: E402
from sqlstore.core.config import new_sql_config  # noqa: E402
from sqlstore.core.context import Context  # noqa: E402
from sqlstore.db.create_tables import create_all  # noqa: E402
from sqlstore.db.session import Base, Database  # noqa: E402
from sqlstore.repositories.sql_repository import SQLStorage  # noqa: E402


@pytest.fixture()
def database(tmp_path):
    """Temporary SQLite file with every sample table; fully torn down afterwards."""
    db_file = tmp_path / "test.db"
    core_config.get_sql_config.cache_clear()
    db = Database(new_sql_config(type="sqlite3", db=str(db_file)))
    create_all(db)

    yield db

    try:
        Base.metadata.drop_all(bind=db.engine())
    except Exception:
        pass
    try:
        db.dispose()
    except Exception:
        pass
    core_config.get_sql_config.cache_clear()


@pytest.fixture()
def storage(database):
    return SQLStorage(database)


@pytest.fixture()
def ctx():
    return Context.background()
