"""csvbridge exception hierarchy."""

from __future__ import annotations


class CsvBridgeError(Exception):
    """Base exception for all csvbridge errors."""


class ImportBlockedError(CsvBridgeError):
    """A precondition blocks the import from starting."""


class MappingIncompleteError(ImportBlockedError):
    """Required canonical fields have no bound source header."""

    def __init__(self, missing_fields: list[str], message: str | None = None) -> None:
        self.missing_fields = list(missing_fields)
        super().__init__(message or f"Please map required fields: {', '.join(self.missing_fields)}")


class YearAmbiguousError(ImportBlockedError):
    """No plausible year in the date column and no manual year supplied."""

    def __init__(self, column: str = "") -> None:
        self.column = column
        super().__init__("Year not found in date column. Please enter the year for this data.")


class UnsupportedFileError(ImportBlockedError):
    """Uploaded file is not a delimited text file."""

    def __init__(self, filename: str, message: str | None = None) -> None:
        self.filename = filename
        super().__init__(message or f"Unsupported file {filename!r}: please upload a CSV file")


class RecordWriteError(CsvBridgeError):
    """The record store rejected a single record."""


class StorageError(CsvBridgeError):
    """A record or file store operation failed."""


class CacheError(CsvBridgeError):
    """Redis cache operation failed."""


class SessionNotFoundError(CsvBridgeError):
    """No import session is registered under the given id."""

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__(f"Import session {session_id!r} not found")
