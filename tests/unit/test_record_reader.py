from __future__ import annotations

import pytest

from csvsync.records.reader import RecordParseError, parse_records, project


def test_parse_records_basic_comma():
    content = b"id,name\n1,Alice\n2,Bob\n"
    assert parse_records(content, ",") == [["id", "name"], ["1", "Alice"], ["2", "Bob"]]


def test_parse_records_skip_header():
    content = b"id,name\n1,Alice\n"
    assert parse_records(content, ",", skip_rows=1) == [["1", "Alice"]]


def test_parse_records_quoted_fields_keep_delimiters_and_newlines():
    content = b'a;"b;c";"say ""hi"""\r\n"multi\nline";x;y\r\n'
    records = parse_records(content, ";")
    assert records == [["a", "b;c", 'say "hi"'], ["multi\nline", "x", "y"]]


def test_parse_records_tab_delimiter():
    assert parse_records(b"1\t2,5\t3\n", "\t") == [["1", "2,5", "3"]]


def test_parse_records_strips_utf8_bom():
    content = "\ufeffname,qty\n\u00c4pfel,3\n".encode("utf-8")
    assert parse_records(content, ",") == [["name", "qty"], ["Äpfel", "3"]]


def test_parse_records_projection_order_and_missing_positions():
    content = b"a,b,c\n"
    assert parse_records(content, ",", columns=[2, 0, 5]) == [["c", "a", ""]]


def test_parse_records_header_only_yields_nothing():
    assert parse_records(b"id,name\n", ",", skip_rows=1) == []


def test_parse_records_empty_content():
    assert parse_records(b"", ",", skip_rows=1) == []


def test_parse_records_blank_lines_are_not_records():
    content = b"h1,h2\n\n1,2\n\n"
    assert parse_records(content, ",", skip_rows=1) == [["1", "2"]]


def test_parse_records_ragged_rows_kept_as_is():
    content = b"1\n1,2,3\n"
    assert parse_records(content, ",") == [["1"], ["1", "2", "3"]]


def test_parse_records_invalid_utf8():
    with pytest.raises(RecordParseError, match="UTF-8"):
        parse_records(b"\xff\xfe\x00bad", ",")


def test_parse_records_unterminated_quote():
    with pytest.raises(RecordParseError):
        parse_records(b'a,"unterminated\n', ",")


def test_parse_records_rejects_multichar_delimiter():
    with pytest.raises(RecordParseError, match="single character"):
        parse_records(b"a,b", ",,")


def test_project_none_keeps_all_fields():
    assert project(["x", "y"], None) == ["x", "y"]
