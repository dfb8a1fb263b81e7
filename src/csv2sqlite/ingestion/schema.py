"""Table schema built from the header and the inferred column types."""

from dataclasses import dataclass

from csv2sqlite.ingestion.errors import SchemaCreationFailure
from csv2sqlite.ingestion.inference import ColumnType


def quote_identifier(name: str) -> str:
    """Quote an SQL identifier, doubling any embedded double quotes."""
    if "\x00" in name:
        raise SchemaCreationFailure(f"identifier {name!r} contains a NUL character")
    return '"' + name.replace('"', '""') + '"'


@dataclass(frozen=True)
class Column:
    name: str
    ordinal: int
    inferred_type: ColumnType

    @property
    def quoted_name(self) -> str:
        return quote_identifier(self.name)


@dataclass(frozen=True)
class TableSchema:
    name: str
    columns: tuple[Column, ...]

    @property
    def quoted_name(self) -> str:
        return quote_identifier(self.name)

    @property
    def quoted_column_names(self) -> list[str]:
        return [column.quoted_name for column in self.columns]

    @property
    def column_types(self) -> list[ColumnType]:
        return [column.inferred_type for column in self.columns]

    def column_definitions(self) -> list[tuple[str, str]]:
        return [(column.quoted_name, column.inferred_type.sql_type) for column in self.columns]

    def create_table_sql(self) -> str:
        definitions = ", ".join(f"{ident} {sql_type}" for ident, sql_type in self.column_definitions())
        return f"CREATE TABLE {self.quoted_name} ({definitions})"


def build_schema(
    table_name: str, header: list[str], verdicts: list[ColumnType]
) -> TableSchema:
    """Pair header names with their verdicts, in header order.

    Identifiers are quoted when rendered, so any header text is accepted.
    """
    if not table_name or not table_name.strip():
        raise SchemaCreationFailure("table name is empty")
    if not header:
        raise SchemaCreationFailure("header has no columns")
    if len(header) != len(verdicts):
        raise SchemaCreationFailure(
            f"{len(header)} header names but {len(verdicts)} column types"
        )
    columns = tuple(
        Column(name, ordinal, verdict)
        for ordinal, (name, verdict) in enumerate(zip(header, verdicts))
    )
    schema = TableSchema(table_name, columns)
    # Render once so unquotable names fail here, before any database work.
    schema.create_table_sql()
    return schema


def text_schema(table_name: str, header: list[str]) -> TableSchema:
    """Schema used when inference is disabled: every column is TEXT."""
    return build_schema(table_name, header, [ColumnType.TEXT] * len(header))
