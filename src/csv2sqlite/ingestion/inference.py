"""Column type inference.

Inference is a fold over the data rows. The accumulator is a tuple holding
one verdict per column, where None means no non-empty value has been seen
yet. Each value can only widen its column along INTEGER < REAL < TEXT.
"""

import enum
import logging
import math
import re
from functools import reduce
from typing import Iterable

logger = logging.getLogger(__name__)

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")


class ColumnType(enum.IntEnum):
    """Storage type of a column, ordered from most to least specific."""

    INTEGER = 1
    REAL = 2
    TEXT = 3

    @property
    def sql_type(self) -> str:
        return self.name


Verdicts = tuple[ColumnType | None, ...]


def parse_int64(value: str) -> int | None:
    """Parse a plain decimal integer literal, or return None if it is not one
    or does not fit a signed 64-bit integer.

    Leading zeros are dropped before conversion so padded values stay within
    the interpreter's integer string length limit.
    """
    if not _INTEGER_RE.fullmatch(value):
        return None
    sign = "-" if value.startswith("-") else ""
    digits = value.lstrip("+-").lstrip("0") or "0"
    if len(digits) > 19:
        return None
    number = int(sign + digits)
    if INT64_MIN <= number <= INT64_MAX:
        return number
    return None


def classify(raw: str) -> ColumnType | None:
    """Classify a single field. Empty fields return None and carry no vote."""
    value = raw.strip()
    if not value:
        return None
    if not value.isascii():
        return ColumnType.TEXT
    if parse_int64(value) is not None:
        return ColumnType.INTEGER
    if _INTEGER_RE.fullmatch(value):
        return ColumnType.REAL if math.isfinite(float(value)) else ColumnType.TEXT
    try:
        number = float(value)
    except ValueError:
        return ColumnType.TEXT
    # float() also accepts "nan", "inf" and "1_000"; none of those are numeric literals here
    if not math.isfinite(number) or "_" in value:
        return ColumnType.TEXT
    return ColumnType.REAL


def widen(current: ColumnType | None, raw: str) -> ColumnType | None:
    if current is ColumnType.TEXT:
        return current
    observed = classify(raw)
    if observed is None:
        return current
    if current is None:
        return observed
    return max(current, observed)


def _widen_row(verdicts: Verdicts, row: list[str]) -> Verdicts:
    return tuple(widen(current, raw) for current, raw in zip(verdicts, row))


def infer_types(rows: Iterable[list[str]], width: int) -> list[ColumnType]:
    """Return one verdict per column after a full scan of ``rows``.

    Columns that never held a non-empty value default to TEXT.
    """
    initial: Verdicts = (None,) * width
    verdicts = reduce(_widen_row, rows, initial)
    return [ColumnType.TEXT if v is None else v for v in verdicts]


def infer_stream_types(stream, skip_malformed: bool = False) -> list[ColumnType]:
    """Run inference over every data row of a RecordStream."""
    rows = (fields for _, fields in stream.rows(skip_malformed=skip_malformed))
    verdicts = infer_types(rows, len(stream.header))
    logger.info(
        "Inferred column types: %s",
        ", ".join(f"{name}={v.name}" for name, v in zip(stream.header, verdicts)),
    )
    return verdicts
