"""Tests for the delimited-text tokenizer and upload reader."""

from __future__ import annotations

import pytest

from csvbridge.core.config import ImportConfig
from csvbridge.core.exceptions import UnsupportedFileError
from csvbridge.ingest.tokenizer import (
    check_upload_name,
    clean_headers,
    decode_upload,
    read_upload,
    serialize,
    tokenize,
)
from csvbridge.models.table import RawTable


class TestTokenize:
    def test_quoted_comma_is_kept_in_field(self):
        table = tokenize('Name,Price\n"Acme, Inc",100000\n')
        assert table.headers == ["Name", "Price"]
        assert table.rows == [["Acme, Inc", "100000"]]

    def test_quoted_newline_stays_in_one_row(self):
        table = tokenize('title,description\nShop,"line one\nline two"\nBlog,short\n')
        assert table.rows == [["Shop", "line one\nline two"], ["Blog", "short"]]

    def test_doubled_quote_decodes_to_one(self):
        table = tokenize('title\n"The ""Best"" Store"\n')
        assert table.rows == [['The "Best" Store']]

    def test_crlf_and_lone_cr_end_rows(self):
        assert tokenize("a,b\r\n1,2\r\n").rows == [["1", "2"]]
        assert tokenize("a,b\r1,2\r3,4").rows == [["1", "2"], ["3", "4"]]

    def test_final_row_without_newline(self):
        assert tokenize("a,b\n1,2").rows == [["1", "2"]]

    def test_empty_file(self):
        table = tokenize("")
        assert table.headers == []
        assert table.rows == []

    def test_blank_rows_are_dropped(self):
        assert tokenize("a,b\n\n , \n1,2\n,\n").rows == [["1", "2"]]

    def test_cells_trimmed_internal_whitespace_kept(self):
        assert tokenize("a\n  two  words  \n").rows == [["two  words"]]

    def test_unbalanced_quote_does_not_raise(self):
        table = tokenize('a,b\n"open,1\n2,3\n')
        assert table.headers == ["a", "b"]
        assert len(table.rows) == 1

    def test_ragged_rows_kept_as_is(self):
        assert tokenize("a,b,c\n1\n1,2,3,4\n").rows == [["1"], ["1", "2", "3", "4"]]


class TestSerialize:
    @pytest.mark.parametrize("table", [
        RawTable(headers=["Name", "Price"], rows=[["Acme, Inc", "100"], ["Solo", ""]]),
        RawTable(headers=["notes"], rows=[["multi\nline"], ["plain"]]),
    ])
    def test_tokenize_inverts_serialize(self, table):
        assert tokenize(serialize(table)) == table


class TestUploads:
    def test_clean_headers_strips_quotes(self):
        assert clean_headers(['"Title"', ' Price ']) == ["Title", "Price"]

    def test_decode_strips_bom(self):
        assert decode_upload("\ufefftitle".encode("utf-8")) == "title"

    def test_decode_replaces_bad_bytes(self):
        assert decode_upload(b"a\xffb") == "a\ufffdb"

    def test_check_upload_name_accepts_csv(self):
        check_upload_name("Export.CSV")

    def test_spreadsheet_gets_reexport_instruction(self):
        with pytest.raises(UnsupportedFileError, match="save your Excel file as CSV"):
            check_upload_name("pnl.xlsx")

    def test_other_extension_rejected(self):
        with pytest.raises(UnsupportedFileError, match="Please upload a CSV file"):
            check_upload_name("pnl.pdf")

    def test_read_upload(self):
        table = read_upload("l.csv", b'\xef\xbb\xbf"Title",Price\nShop,10\n')
        assert table.headers == ["Title", "Price"]
        assert table.rows == [["Shop", "10"]]

    def test_read_upload_size_ceiling(self):
        with pytest.raises(UnsupportedFileError):
            read_upload("l.csv", b"a\n" * 10, ImportConfig(max_upload_bytes=5))
