"""Base import flow with common dependency wiring and session lifecycle."""

from __future__ import annotations

from typing import Any

from csvbridge.core.config import AppSettings, ImportConfig
from csvbridge.core.exceptions import ImportBlockedError, MappingIncompleteError
from csvbridge.core.logging_config import get_logger
from csvbridge.core.protocols import IRecordStore
from csvbridge.ingest.mapper import auto_detect
from csvbridge.ingest.tokenizer import read_upload
from csvbridge.ingest.transformer import RowTransformer
from csvbridge.models.records import TransformBatch
from csvbridge.models.schema_mapping import ColumnMapping, ImportSchema
from csvbridge.models.table import RawTable

logger = get_logger("services.flow")


class BaseImportFlow:
    """Common base for the listing and financial import flows.

    One flow instance owns one uploaded table and its editable mapping.
    Settings and the record store are injected at construction time.
    """

    schema: ImportSchema

    def __init__(self, *, settings: AppSettings, store: IRecordStore) -> None:
        self._settings = settings
        self._store = store
        self.table: RawTable | None = None
        self.filename: str = ""
        self.mapping = ColumnMapping()

    @property
    def config(self) -> ImportConfig:
        return self._settings.imports

    def load(self, filename: str, data: bytes | str) -> RawTable:
        """Tokenize an upload and propose a mapping for its headers."""
        self.table = read_upload(filename, data, self.config)
        self.filename = filename
        self.mapping = auto_detect(
            self.table.headers, self.schema, self.config.mapping_conflict_policy,
        )
        return self.table

    def bind(self, key: str, header: str) -> None:
        """Manually override one field; an empty header unmaps it."""
        try:
            self.schema.field(key)
        except KeyError:
            raise ImportBlockedError(f"Unknown field {key!r}") from None
        if header and self.table is not None and header not in self.table.headers:
            raise ImportBlockedError(f"Column {header!r} is not in the uploaded file")
        self.mapping.bind(key, header)
        logger.debug("mapping_overridden", extra={"field": key, "header": header})

    def unbind(self, key: str) -> None:
        self.mapping.unbind(key)

    def apply_mapping(self, bindings: dict[str, str]) -> None:
        for key, header in bindings.items():
            self.bind(key, header)

    def ensure_ready(self) -> None:
        """Raise an ImportBlockedError subclass when the import cannot start."""
        if self.table is None:
            raise ImportBlockedError("No file loaded")
        missing = self.mapping.missing_required(self.schema)
        if missing:
            raise MappingIncompleteError([f.label for f in missing])

    def transformer(self, **kwargs: Any) -> RowTransformer:
        assert self.table is not None
        return RowTransformer(
            self.schema,
            self.mapping,
            self.table.headers,
            list_delimiter=self.config.list_delimiter,
            **kwargs,
        )

    def transform(self, **kwargs: Any) -> TransformBatch:
        self.ensure_ready()
        return self.transformer(**kwargs).transform_table(self.table)

    def preview(self) -> dict[str, Any]:
        """Headers, row count and current mapping for display."""
        table = self.table or RawTable()
        return {
            "filename": self.filename,
            "headers": table.headers,
            "row_count": table.row_count,
            "mapping": dict(self.mapping.bindings),
            "fields": [f.model_dump() for f in self.schema.fields],
            "missing_required": [f.key for f in self.mapping.missing_required(self.schema)],
        }
