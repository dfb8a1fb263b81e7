"""SQLite implementation of DatabaseService."""

import sqlite3
from contextlib import contextmanager
from typing import Iterator

from csv2sqlite.database.service import DatabaseService
from csv2sqlite.database.types import Params, ParamsList, Row


class SQLiteDatabaseService(DatabaseService):
    """SQLite backend using stdlib sqlite3.

    Owns a single connection between connect() and close(). Statements run
    inside a `with service.transaction():` block, which commits on success
    and rolls back on error. The default rollback journal is kept so a
    finished run leaves exactly one database file.
    """

    def __init__(self, db_path: str):
        self._db_path = db_path
        self._conn: sqlite3.Connection | None = None
        self._in_transaction = False

    @property
    def db_path(self) -> str:
        return self._db_path

    def connect(self) -> None:
        if self._conn is None:
            self._conn = sqlite3.connect(self._db_path)

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise RuntimeError("Service is not connected. Call connect() first.")
        return self._conn

    def _get_conn(self) -> sqlite3.Connection:
        """Get the connection bound to the current transaction."""
        if not self._in_transaction:
            raise RuntimeError(
                "No active transaction. Wrap calls in a `with service.transaction():` block."
            )
        return self._connection()

    @contextmanager
    def transaction(self) -> Iterator[None]:
        conn = self._connection()
        if self._in_transaction:
            raise RuntimeError("A transaction is already active.")
        self._in_transaction = True
        try:
            yield
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            self._in_transaction = False

    def execute(self, sql: str, params: Params | None = None) -> list[Row]:
        conn = self._get_conn()
        cursor = conn.execute(sql, params or ())
        if cursor.description is None:
            return []
        columns = [desc[0] for desc in cursor.description]
        return [dict(zip(columns, row)) for row in cursor.fetchall()]

    def execute_many(self, sql: str, params_list: ParamsList) -> None:
        conn = self._get_conn()
        conn.executemany(sql, params_list)

    def execute_ddl(self, sql: str) -> None:
        conn = self._connection()
        conn.executescript(sql)
        conn.commit()

    def batch_insert(self, table: str, columns: list[str], rows: list[tuple]) -> None:
        if not rows:
            return
        cols = ", ".join(columns)
        placeholders = ", ".join("?" for _ in columns)
        sql = f"INSERT INTO {table} ({cols}) VALUES ({placeholders})"
        self.execute_many(sql, rows)
