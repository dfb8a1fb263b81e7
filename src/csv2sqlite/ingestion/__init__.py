"""CSV ingestion: record stream, type inference, schema and batched loading."""

from csv2sqlite.ingestion.converter import ConversionResult, convert, create_table
from csv2sqlite.ingestion.errors import (
    ConversionError,
    MalformedRow,
    SchemaCreationFailure,
    SourceUnreadable,
    TransactionFailure,
    TypeCoercionFailure,
)
from csv2sqlite.ingestion.inference import ColumnType, classify, infer_types, parse_int64, widen
from csv2sqlite.ingestion.loader import coerce, load_rows
from csv2sqlite.ingestion.records import RecordStream
from csv2sqlite.ingestion.schema import (
    Column,
    TableSchema,
    build_schema,
    quote_identifier,
    text_schema,
)

__all__ = [
    "convert",
    "create_table",
    "ConversionResult",
    "ConversionError",
    "SourceUnreadable",
    "MalformedRow",
    "TypeCoercionFailure",
    "SchemaCreationFailure",
    "TransactionFailure",
    "ColumnType",
    "classify",
    "widen",
    "infer_types",
    "parse_int64",
    "coerce",
    "load_rows",
    "RecordStream",
    "Column",
    "TableSchema",
    "build_schema",
    "quote_identifier",
    "text_schema",
]
