"""Batched loading of coerced rows into the target table."""

import logging
import sqlite3
from typing import Iterable

from csv2sqlite.database import DatabaseService
from csv2sqlite.ingestion.errors import ConversionError, TransactionFailure, TypeCoercionFailure
from csv2sqlite.ingestion.inference import ColumnType, classify, parse_int64
from csv2sqlite.ingestion.schema import TableSchema

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 5000
PROGRESS_EVERY = 1000

TypedValue = int | float | str | None


def coerce(raw: str, column_type: ColumnType) -> TypedValue:
    """Convert a raw field to the storage value of its column.

    Empty fields become None; other text is kept verbatim in TEXT columns.
    Raises ValueError when the text does not fit a numeric column.
    """
    if column_type is ColumnType.TEXT:
        return raw if raw else None
    value = raw.strip()
    if not value:
        return None
    if column_type is ColumnType.INTEGER:
        number = parse_int64(value)
        if number is not None:
            return number
    elif classify(value) in (ColumnType.INTEGER, ColumnType.REAL):
        return float(value)
    raise ValueError(f"{raw!r} is not a valid {column_type.name} value")


def coerce_row(row_index: int, fields: list[str], schema: TableSchema) -> tuple:
    values = []
    for column, raw in zip(schema.columns, fields):
        try:
            values.append(coerce(raw, column.inferred_type))
        except ValueError as e:
            raise TypeCoercionFailure(row_index, column.name, raw) from e
    return tuple(values)


def load_rows(
    service: DatabaseService,
    schema: TableSchema,
    rows: Iterable[tuple[int, list[str]]],
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> int:
    """Insert ``rows`` into the schema's table, one transaction per batch.

    A batch is committed every ``batch_size`` rows and at the end of the
    stream. A failure rolls back the current batch only; rows committed
    before it stay in the table. Progress is logged every PROGRESS_EVERY
    rows as they are read, independently of the batch boundaries.

    Returns the number of rows loaded.
    """
    if batch_size < 1:
        raise ValueError(f"batch_size must be positive, got {batch_size}")

    total = 0
    processed = 0
    batch: list[tuple] = []
    try:
        for row_index, fields in rows:
            batch.append(coerce_row(row_index, fields, schema))
            processed += 1
            if processed % PROGRESS_EVERY == 0:
                logger.info("Processed %d rows...", processed)
            if len(batch) >= batch_size:
                total = _commit_batch(service, schema, batch, total)
                batch = []
    except ConversionError as e:
        e.rows_loaded = total
        raise

    if batch:
        total = _commit_batch(service, schema, batch, total)

    logger.info("Loaded %d rows into %s", total, schema.name)
    return total


def _commit_batch(
    service: DatabaseService, schema: TableSchema, batch: list[tuple], total: int
) -> int:
    try:
        with service.transaction():
            service.batch_insert(schema.quoted_name, schema.quoted_column_names, batch)
    except sqlite3.Error as e:
        raise TransactionFailure(str(e), rows_loaded=total) from e

    loaded = total + len(batch)
    logger.info("Committed batch of %d rows (total: %d)", len(batch), loaded)
    return loaded
