"""Create the tables declared on a model base."""
from __future__ import annotations

import argparse
import importlib

from sqlalchemy.exc import SQLAlchemyError

from sqlstore.core.config import get_sql_config
from .session import Base, Database


def create_all(database: Database, base=Base) -> None:
    base.metadata.create_all(bind=database.engine())


def main(argv: list[str] | None = None) -> None:
    ap = argparse.ArgumentParser(description="Create the tables declared by a models module")
    ap.add_argument("module", help="dotted path of the module declaring the models, e.g. app.models")
    args = ap.parse_args(argv)

    models = importlib.import_module(args.module)
    database = Database(get_sql_config())
    try:
        create_all(database, getattr(models, "Base", Base))
        print("Database tables created successfully.")
    except SQLAlchemyError as exc:
        raise SystemExit(f"Failed to create tables: {exc}") from exc
    finally:
        database.dispose()


if __name__ == "__main__":
    main()
