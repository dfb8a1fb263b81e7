"""Database layer: abstract service, SQLite backend and factory."""

from csv2sqlite.database.service import DatabaseService
from csv2sqlite.database.sqlite_service import SQLiteDatabaseService
from csv2sqlite.database.types import Params, ParamsList, Row


def create_service(db_url: str) -> DatabaseService:
    """Create a DatabaseService from a connection URL.

    Supported schemes:
    - sqlite:///path/to/db  or  sqlite:///:memory:
    """
    if db_url.startswith("sqlite"):
        # Extract path: sqlite:///foo.db -> foo.db, sqlite:///:memory: -> :memory:
        path = db_url.split(":///", 1)[1] if ":///" in db_url else ":memory:"
        return SQLiteDatabaseService(path)
    raise ValueError(f"Unsupported database URL scheme: {db_url}")


__all__ = [
    "DatabaseService",
    "SQLiteDatabaseService",
    "create_service",
    "Row",
    "Params",
    "ParamsList",
]
