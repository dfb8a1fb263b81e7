"""Shared test fixtures."""

import csv

import pytest

from csv2sqlite import create_service


@pytest.fixture
def db_service(tmp_path):
    """Provide a fresh SQLite DatabaseService for each test."""
    db_path = tmp_path / "test.db"
    service = create_service(f"sqlite:///{db_path}")
    service.connect()
    yield service
    service.close()


@pytest.fixture
def write_csv(tmp_path):
    """Write rows (header first) to a CSV file under tmp_path and return its path."""

    def _write(rows, name="input.csv", delimiter=","):
        csv_file = tmp_path / name
        with open(csv_file, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f, delimiter=delimiter)
            writer.writerows(rows)
        return csv_file

    return _write


@pytest.fixture
def read_table():
    """Return all rows of a table in an SQLite file, in insertion order."""

    def _read(db_path, table="data"):
        service = create_service(f"sqlite:///{db_path}")
        service.connect()
        try:
            with service.transaction():
                return service.execute(f'SELECT * FROM "{table}" ORDER BY rowid')
        finally:
            service.close()

    return _read
