"""Tests for the record stream."""

import io

import pytest

from csv2sqlite.ingestion.errors import MalformedRow, SourceUnreadable
from csv2sqlite.ingestion.records import RecordStream


class _Pipe(io.StringIO):
    """In-memory text stream that behaves like a pipe."""

    def seekable(self):
        return False


class TestHeader:
    def test_header_available_before_rows(self, write_csv):
        path = write_csv([["name", "age"], ["Ann", "3"]])
        with RecordStream.open(path) as stream:
            assert stream.header == ["name", "age"]

    def test_declared_fieldnames(self, write_csv):
        path = write_csv([["Ann", "3"], ["Bob", "4"]])
        with RecordStream.open(path, fieldnames=["name", "age"]) as stream:
            assert stream.header == ["name", "age"]
            assert [fields for _, fields in stream.rows()] == [["Ann", "3"], ["Bob", "4"]]

    def test_leading_bom_is_stripped(self, tmp_path):
        path = tmp_path / "bom.csv"
        path.write_bytes("\ufeffid,name\n1,a\n".encode("utf-8"))
        with RecordStream.open(path) as stream:
            assert stream.header == ["id", "name"]

    def test_empty_input(self, tmp_path):
        path = tmp_path / "empty.csv"
        path.write_text("")
        with pytest.raises(SourceUnreadable, match="no header row"):
            RecordStream.open(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(SourceUnreadable):
            RecordStream.open(tmp_path / "nope.csv")


class TestRows:
    def test_rows_are_indexed_from_one(self, write_csv):
        path = write_csv([["a", "b"], ["1", "2"], ["3", "4"]])
        with RecordStream.open(path) as stream:
            assert list(stream.rows()) == [(1, ["1", "2"]), (2, ["3", "4"])]

    def test_rows_can_be_iterated_twice(self, write_csv):
        path = write_csv([["a", "b"], ["1", "2"], ["3", "4"]])
        with RecordStream.open(path) as stream:
            first = list(stream.rows())
            second = list(stream.rows())
            assert first == second
            assert stream.header == ["a", "b"]

    def test_blank_lines_are_skipped(self, tmp_path):
        path = tmp_path / "blank.csv"
        path.write_text("a,b\n1,2\n\n3,4\n")
        with RecordStream.open(path) as stream:
            assert [fields for _, fields in stream.rows()] == [["1", "2"], ["3", "4"]]

    def test_quoted_fields(self, tmp_path):
        path = tmp_path / "quoted.csv"
        path.write_text('a,b\n"x, y","say ""hi"""\n')
        with RecordStream.open(path) as stream:
            assert list(stream.rows()) == [(1, ["x, y", 'say "hi"'])]

    def test_field_larger_than_csv_default_limit(self, write_csv):
        body = "x" * 200_000
        path = write_csv([["id", "body"], ["1", body]])
        with RecordStream.open(path) as stream:
            assert list(stream.rows()) == [(1, ["1", body])]

    def test_short_row_is_malformed(self, write_csv):
        path = write_csv([["a", "b", "c"], ["1", "2", "3"], ["4", "5"]])
        with RecordStream.open(path) as stream:
            with pytest.raises(MalformedRow) as excinfo:
                list(stream.rows())
        assert excinfo.value.row_index == 2
        assert excinfo.value.expected_fields == 3
        assert excinfo.value.actual_fields == 2
        assert "Row 2" in str(excinfo.value)

    def test_skip_malformed(self, write_csv, caplog):
        path = write_csv([["a", "b"], ["1", "2"], ["3", "4", "5"], ["6", "7"]])
        with RecordStream.open(path) as stream:
            rows = list(stream.rows(skip_malformed=True))
        assert rows == [(1, ["1", "2"]), (3, ["6", "7"])]
        assert "Skipping malformed row" in caplog.text

    def test_undecodable_input(self, tmp_path):
        path = tmp_path / "latin1.csv"
        path.write_bytes("a,b\n1,caf\xe9\n".encode("latin-1"))
        with pytest.raises(SourceUnreadable, match="cannot decode"):
            RecordStream.open(path)

    def test_explicit_encoding(self, tmp_path):
        path = tmp_path / "latin1.csv"
        path.write_bytes("a,b\n1,caf\xe9\n".encode("latin-1"))
        with RecordStream.open(path, encoding="latin-1") as stream:
            assert list(stream.rows()) == [(1, ["1", "café"])]


class TestDelimiter:
    def test_custom_delimiter(self, write_csv):
        path = write_csv([["a", "b"], ["1", "2"]], delimiter=";")
        with RecordStream.open(path, delimiter=";") as stream:
            assert stream.header == ["a", "b"]

    def test_auto_delimiter(self, write_csv):
        path = write_csv([["a", "b", "c"], ["1", "2", "3"], ["4", "5", "6"]], delimiter=";")
        with RecordStream.open(path, delimiter="auto") as stream:
            assert stream.delimiter == ";"
            assert stream.header == ["a", "b", "c"]
            assert list(stream.rows())[0] == (1, ["1", "2", "3"])


class TestNonSeekableSource:
    def test_single_pass_works(self):
        stream = RecordStream.open(_Pipe("a,b\n1,2\n"))
        assert not stream.rereadable
        assert list(stream.rows()) == [(1, ["1", "2"])]

    def test_second_pass_fails_fast(self):
        stream = RecordStream.open(_Pipe("a,b\n1,2\n"))
        list(stream.rows())
        with pytest.raises(SourceUnreadable, match="not seekable"):
            list(stream.rows())

    def test_caller_owned_stream_is_not_closed(self):
        source = io.StringIO("a\n1\n")
        with RecordStream.open(source):
            pass
        assert not source.closed
