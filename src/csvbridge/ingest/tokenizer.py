"""Delimited-text tokenizer.

A single pass over the whole file with an explicit quote state, so quoted
fields may contain commas, doubled quotes and raw line breaks. The scanner
never raises on malformed quoting; it always produces some table.
"""

from __future__ import annotations

from pathlib import PurePath

from csvbridge.core.config import ImportConfig
from csvbridge.core.exceptions import UnsupportedFileError
from csvbridge.core.logging_config import get_logger
from csvbridge.models.table import RawTable

logger = get_logger("ingest.tokenizer")

QUOTE = '"'
DELIMITER = ","


def _close_row(row: list[str], rows: list[list[str]]) -> None:
    if any(cell != "" for cell in row):
        rows.append(row)


def tokenize(text: str) -> RawTable:
    """Split file text into a header row and data rows.

    Cells are trimmed; rows whose every cell is empty are dropped. ``\\n``,
    ``\\r\\n`` and a lone ``\\r`` all end a row when outside quotes.
    """
    rows: list[list[str]] = []
    current_row: list[str] = []
    current_field: list[str] = []
    in_quotes = False

    i = 0
    length = len(text)
    while i < length:
        char = text[i]
        next_char = text[i + 1] if i + 1 < length else ""

        if char == QUOTE:
            if in_quotes and next_char == QUOTE:
                current_field.append(QUOTE)
                i += 1
            else:
                in_quotes = not in_quotes
        elif char == DELIMITER and not in_quotes:
            current_row.append("".join(current_field).strip())
            current_field = []
        elif char in "\r\n" and not in_quotes:
            if char == "\r" and next_char == "\n":
                i += 1
            current_row.append("".join(current_field).strip())
            _close_row(current_row, rows)
            current_row = []
            current_field = []
        else:
            current_field.append(char)
        i += 1

    if current_field or current_row:
        current_row.append("".join(current_field).strip())
        _close_row(current_row, rows)

    table = RawTable(headers=rows[0] if rows else [], rows=rows[1:])
    logger.debug(
        "table_tokenized",
        extra={"columns": len(table.headers), "rows": table.row_count, "unbalanced_quotes": in_quotes},
    )
    return table


def _quote(cell: str) -> str:
    if any(ch in cell for ch in (DELIMITER, QUOTE, "\n", "\r")):
        return QUOTE + cell.replace(QUOTE, QUOTE * 2) + QUOTE
    return cell


def serialize(table: RawTable) -> str:
    """Render a table back to comma-delimited text."""
    lines = [DELIMITER.join(_quote(c) for c in table.headers)]
    lines.extend(DELIMITER.join(_quote(c) for c in row) for row in table.rows)
    return "\n".join(lines) + "\n"


def clean_headers(headers: list[str]) -> list[str]:
    """Drop stray quote characters left in header cells."""
    return [h.replace(QUOTE, "").strip() for h in headers]


def check_upload_name(filename: str, config: ImportConfig | None = None) -> None:
    """Reject anything that is not a delimited text export."""
    config = config or ImportConfig()
    suffix = PurePath(filename).suffix.lower()
    if suffix in config.allowed_extensions:
        return
    if suffix in config.spreadsheet_extensions:
        raise UnsupportedFileError(
            filename,
            "For best results, please save your Excel file as CSV and upload again.",
        )
    raise UnsupportedFileError(filename, "Please upload a CSV file")


def decode_upload(data: bytes | str) -> str:
    """UTF-8 decode an upload, dropping a byte-order mark."""
    text = data if isinstance(data, str) else data.decode("utf-8", errors="replace")
    return text.removeprefix("\ufeff")


def read_upload(filename: str, data: bytes | str, config: ImportConfig | None = None) -> RawTable:
    """Validate, decode and tokenize one uploaded file."""
    config = config or ImportConfig()
    check_upload_name(filename, config)
    size = len(data.encode("utf-8")) if isinstance(data, str) else len(data)
    if size > config.max_upload_bytes:
        raise UnsupportedFileError(
            filename, f"File {filename!r} is larger than {config.max_upload_bytes} bytes"
        )
    table = tokenize(decode_upload(data))
    table = RawTable(headers=clean_headers(table.headers), rows=table.rows)
    logger.info(
        "upload_read",
        extra={"upload": filename, "columns": len(table.headers), "rows": table.row_count},
    )
    return table
