"""Record stream over a delimited text file.

The header is read once when the stream is opened. Each call to rows()
starts again at the first data row, so the same stream serves both the
inference pass and the load pass. That requires a seekable source; a pipe
can be read once only.
"""

import csv
import logging
import sys
from pathlib import Path
from typing import IO, Iterator

from csv2sqlite.ingestion.errors import MalformedRow, SourceUnreadable

logger = logging.getLogger(__name__)

AUTO_DELIMITER = "auto"
SNIFF_SAMPLE_SIZE = 64 * 1024

# The csv module caps fields at 128 KiB by default; the limit is stored in a C long.
csv.field_size_limit(min(sys.maxsize, 2**31 - 1))


class RecordStream:
    def __init__(
        self,
        handle: IO[str],
        name: str,
        delimiter: str = ",",
        fieldnames: list[str] | None = None,
        encoding: str = "utf-8-sig",
        owns_handle: bool = False,
    ):
        self._handle = handle
        self._owns_handle = owns_handle
        self._encoding = encoding
        self.name = name
        self.delimiter = delimiter
        self._declared_header = fieldnames is not None
        self._reader = csv.reader(handle, delimiter=delimiter)
        self._fresh = True
        if fieldnames is not None:
            self.header = list(fieldnames)
        else:
            self.header = self._read_header(self._reader)

    @classmethod
    def open(
        cls,
        source: str | Path | IO[str],
        delimiter: str = ",",
        encoding: str = "utf-8-sig",
        fieldnames: list[str] | None = None,
    ) -> "RecordStream":
        """Open a path or wrap an already-open text stream.

        With ``fieldnames`` the input has no header row and the given names
        are used. ``delimiter="auto"`` sniffs the delimiter from the start of
        the input.
        """
        if isinstance(source, (str, Path)):
            name = str(source)
            try:
                handle = open(source, newline="", encoding=encoding)
            except (OSError, LookupError) as e:
                raise SourceUnreadable(f"{name}: {e}") from e
            owns_handle = True
        else:
            handle = source
            name = getattr(source, "name", "<stream>")
            owns_handle = False

        try:
            if delimiter == AUTO_DELIMITER:
                delimiter = _sniff_delimiter(handle, name)
            return cls(handle, name, delimiter, fieldnames, encoding, owns_handle)
        except BaseException:
            if owns_handle:
                handle.close()
            raise

    @property
    def rereadable(self) -> bool:
        try:
            return self._handle.seekable()
        except ValueError:
            return False

    def rows(self, skip_malformed: bool = False) -> Iterator[tuple[int, list[str]]]:
        """Yield (row_index, fields) for each data row.

        row_index is the 1-based ordinal of the record among the data rows.
        A record whose width differs from the header raises MalformedRow,
        or is logged and dropped when ``skip_malformed`` is set.
        """
        width = len(self.header)
        reader = self._data_reader()
        row_index = 0
        try:
            for record in reader:
                if not record:
                    continue
                row_index += 1
                if len(record) != width:
                    error = MalformedRow(row_index, width, len(record))
                    if not skip_malformed:
                        raise error
                    logger.warning("Skipping malformed row: %s", error)
                    continue
                yield row_index, record
        except UnicodeDecodeError as e:
            raise SourceUnreadable(f"{self.name}: cannot decode as {self._encoding}: {e}") from e
        except csv.Error as e:
            raise SourceUnreadable(f"{self.name}, line {reader.line_num}: {e}") from e
        except OSError as e:
            raise SourceUnreadable(f"{self.name}: {e}") from e

    def close(self) -> None:
        if self._owns_handle:
            self._handle.close()

    def __enter__(self) -> "RecordStream":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def _data_reader(self):
        if self._fresh:
            self._fresh = False
            return self._reader
        if not self.rereadable:
            raise SourceUnreadable(
                f"{self.name}: input is not seekable and cannot be read a second time"
            )
        self._handle.seek(0)
        reader = csv.reader(self._handle, delimiter=self.delimiter)
        if not self._declared_header:
            self._read_header(reader)
        return reader

    def _read_header(self, reader) -> list[str]:
        try:
            for record in reader:
                if record:
                    return record
        except UnicodeDecodeError as e:
            raise SourceUnreadable(f"{self.name}: cannot decode as {self._encoding}: {e}") from e
        except csv.Error as e:
            raise SourceUnreadable(f"{self.name}, line {reader.line_num}: {e}") from e
        except OSError as e:
            raise SourceUnreadable(f"{self.name}: {e}") from e
        raise SourceUnreadable(f"{self.name}: input is empty, no header row found")


def _sniff_delimiter(handle: IO[str], name: str) -> str:
    if not handle.seekable():
        raise SourceUnreadable(f"{name}: delimiter detection needs a seekable input")
    try:
        sample = handle.read(SNIFF_SAMPLE_SIZE)
        handle.seek(0)
    except (OSError, UnicodeDecodeError) as e:
        raise SourceUnreadable(f"{name}: {e}") from e
    try:
        delimiter = csv.Sniffer().sniff(sample).delimiter
    except csv.Error as e:
        raise SourceUnreadable(f"{name}: could not detect delimiter: {e}") from e
    logger.info("Auto-detected delimiter: %r", delimiter)
    return delimiter
