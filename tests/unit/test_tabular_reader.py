from __future__ import annotations

import pytest

from metafield_sync.models.row_data import RowData
from metafield_sync.tabular.reader import decode_source, normalize_header, read_rows, split_fields


def test_split_fields_plain_and_trimmed():
    assert split_fields(" a , b,c ") == ["a", "b", "c"]


def test_split_fields_quoted_delimiter_and_escaped_quote():
    line = 'x,"Malt, hops","He said ""hi"""'
    assert split_fields(line) == ["x", "Malt, hops", 'He said "hi"']


def test_split_fields_empty_fields():
    assert split_fields(",,") == ["", "", ""]


def test_split_fields_custom_delimiter():
    assert split_fields("a;b;c", ";") == ["a", "b", "c"]


@pytest.mark.parametrize(
    "cell,expected",
    [
        ("Metafield: custom.country", "custom.country"),
        ("metafield:custom.pack_type", "custom.pack_type"),
        ("  Handle ", "Handle"),
        ("Title", "Title"),
    ],
)
def test_normalize_header(cell, expected):
    assert normalize_header(cell) == expected


def test_decode_source_strips_bom_bytes_and_str():
    assert decode_source(b"\xef\xbb\xbfHandle\n") == "Handle\n"
    assert decode_source("\ufeffHandle\n") == "Handle\n"
    assert decode_source("Handle") == "Handle"


def test_read_rows_basic():
    text = "Handle,Metafield: custom.country\r\nipa-1,Japan\nstout-2,Ireland\n"
    rows = list(read_rows(text))
    assert [r.row_number for r in rows] == [1, 2]
    assert rows[0].values == {"Handle": "ipa-1", "custom.country": "Japan"}
    assert rows[1].handle == "stout-2"


def test_read_rows_skips_blank_lines_and_numbers_data_rows_only():
    text = "\n  \nHandle,custom.country\n\nipa-1,Japan\n   \nstout-2,Ireland"
    rows = list(read_rows(text))
    assert [(r.row_number, r.handle) for r in rows] == [(1, "ipa-1"), (2, "stout-2")]


def test_read_rows_short_line_padded_and_surplus_ignored():
    text = "Handle,custom.country,custom.pack_type\nipa-1\nstout-2,Ireland,Can,extra"
    rows = list(read_rows(text))
    assert rows[0].values == {"Handle": "ipa-1", "custom.country": "", "custom.pack_type": ""}
    assert rows[1].values == {"Handle": "stout-2", "custom.country": "Ireland", "custom.pack_type": "Can"}


def test_read_rows_header_only_or_empty():
    assert list(read_rows("")) == []
    assert list(read_rows("Handle,custom.country\n")) == []


def test_read_rows_duplicate_header_last_wins():
    rows = list(read_rows("Handle,custom.country,custom.country\nipa,Japan,Belgium"))
    assert rows[0].get("custom.country") == "Belgium"


def test_row_handle_case_insensitive_and_blank():
    rows = list(read_rows("handle,custom.country\n  ipa  ,Japan\n,Belgium"))
    assert rows[0].handle == "ipa"
    assert rows[1].handle == ""


def test_row_handle_falls_back_to_lowercase_column_when_blank():
    assert RowData(1, {"Handle": "", "handle": " stout-1 "}).handle == "stout-1"
    assert RowData(1, {"Handle": "ipa", "handle": "stout-1"}).handle == "ipa"
    assert RowData(1, {"Handle": " ", "HANDLE": ""}).handle == ""
