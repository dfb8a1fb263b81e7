"""Conversion of a delimited text file into a single SQLite table.

Stages run in order: infer types (optional), create the table, load the
rows. Any stage failure raises a ConversionError and halts the run. Nothing
is cleaned up afterwards; the output may hold a partially loaded table.
"""

import logging
import sqlite3
from dataclasses import dataclass
from pathlib import Path
from typing import IO

from csv2sqlite.database import DatabaseService, create_service
from csv2sqlite.ingestion.errors import SchemaCreationFailure, SourceUnreadable
from csv2sqlite.ingestion.inference import infer_stream_types
from csv2sqlite.ingestion.loader import DEFAULT_BATCH_SIZE, load_rows
from csv2sqlite.ingestion.records import RecordStream
from csv2sqlite.ingestion.schema import Column, TableSchema, build_schema, text_schema

logger = logging.getLogger(__name__)

DEFAULT_TABLE_NAME = "data"


@dataclass(frozen=True)
class ConversionResult:
    table_name: str
    output_path: str
    columns: tuple[Column, ...]
    rows_loaded: int


def create_table(service: DatabaseService, schema: TableSchema) -> None:
    try:
        service.execute_ddl(schema.create_table_sql())
    except sqlite3.Error as e:
        raise SchemaCreationFailure(str(e)) from e
    logger.info("Created table: %s", schema.name)


def convert(
    input_path: str | Path | IO[str],
    output_path: str | Path,
    table_name: str = DEFAULT_TABLE_NAME,
    infer_types: bool = False,
    batch_size: int = DEFAULT_BATCH_SIZE,
    delimiter: str = ",",
    encoding: str = "utf-8-sig",
    skip_malformed: bool = False,
) -> ConversionResult:
    """Convert ``input_path`` into table ``table_name`` of ``output_path``.

    Without ``infer_types`` every column is created as TEXT. With
    ``skip_malformed`` rows whose width differs from the header are logged
    and dropped instead of aborting the run.

    ``input_path`` may also be an open text stream; type inference then
    needs it to be seekable.
    """
    if batch_size < 1:
        raise ValueError(f"batch_size must be positive, got {batch_size}")

    with RecordStream.open(input_path, delimiter=delimiter, encoding=encoding) as stream:
        logger.info("Reading %s: found %d columns", stream.name, len(stream.header))

        if infer_types:
            if not stream.rereadable:
                raise SourceUnreadable(
                    f"{stream.name}: type inference reads the input twice and needs a seekable file"
                )
            logger.info("Inferring column types...")
            verdicts = infer_stream_types(stream, skip_malformed=skip_malformed)
            schema = build_schema(table_name, stream.header, verdicts)
        else:
            schema = text_schema(table_name, stream.header)

        logger.info("Creating SQLite database: %s", output_path)
        service = create_service(f"sqlite:///{output_path}")
        try:
            service.connect()
        except sqlite3.Error as e:
            raise SchemaCreationFailure(f"cannot open {output_path}: {e}") from e
        try:
            create_table(service, schema)
            rows_loaded = load_rows(
                service, schema, stream.rows(skip_malformed=skip_malformed), batch_size
            )
        finally:
            service.close()

    logger.info(
        "Successfully converted %s: table %s in %s, %d rows inserted",
        input_path,
        schema.name,
        output_path,
        rows_loaded,
    )
    return ConversionResult(schema.name, str(output_path), schema.columns, rows_loaded)
