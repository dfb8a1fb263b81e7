"""Conversion failures.

Every failure of a conversion run is a ConversionError subclass whose str()
is the single message shown to the user.
"""


class ConversionError(Exception):
    """Base class for all conversion failures.

    rows_loaded is set when the failure happens during loading.
    """

    rows_loaded: int | None = None


class SourceUnreadable(ConversionError):
    """The input could not be opened, decoded or re-read."""


class MalformedRow(ConversionError):
    def __init__(self, row_index: int, expected_fields: int, actual_fields: int):
        self.row_index = row_index
        self.expected_fields = expected_fields
        self.actual_fields = actual_fields
        super().__init__(
            f"Row {row_index}: expected {expected_fields} fields, found {actual_fields}"
        )


class TypeCoercionFailure(ConversionError):
    def __init__(self, row_index: int, column: str, raw_value: str):
        self.row_index = row_index
        self.column = column
        self.raw_value = raw_value
        super().__init__(
            f"Row {row_index}: cannot store {raw_value!r} in column {column!r}"
        )


class SchemaCreationFailure(ConversionError):
    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Cannot create table: {reason}")


class TransactionFailure(ConversionError):
    """A batch could not be written; rows_loaded counts the committed rows."""

    def __init__(self, reason: str, rows_loaded: int = 0):
        self.reason = reason
        self.rows_loaded = rows_loaded
        super().__init__(f"Transaction failed after {rows_loaded} rows: {reason}")
