"""Monthly P&L import: several uploads gap-filled into one ledger per listing."""

from __future__ import annotations

from typing import Any, Optional

from csvbridge.core.config import AppSettings
from csvbridge.core.exceptions import (
    ImportBlockedError,
    MappingIncompleteError,
    StorageError,
    YearAmbiguousError,
)
from csvbridge.core.logging_config import get_logger
from csvbridge.core.protocols import IRecordStore
from csvbridge.ingest import reconciler
from csvbridge.ingest.dates import is_plausible_year, year_in_data
from csvbridge.models.pipeline import UploadedFile
from csvbridge.models.records import AMOUNT_FIELDS, FinancialRecord, TransformBatch
from csvbridge.schemas.financials import DATA_FIELDS, DATE_FIELD, FINANCIAL_SCHEMA
from csvbridge.services.base import BaseImportFlow

logger = get_logger("services.financials")

UPLOAD_SOURCE = "csv_upload"


class FinancialImportFlow(BaseImportFlow):
    """Builds the P&L ledger of one listing across successive uploads."""

    schema = FINANCIAL_SCHEMA

    def __init__(self, *, settings: AppSettings, store: IRecordStore, listing_id: str) -> None:
        super().__init__(settings=settings, store=store)
        self.listing_id = listing_id
        self.ledger: list[FinancialRecord] = []
        self.uploaded_files: list[UploadedFile] = []
        self.manual_year: Optional[int] = None

    def set_manual_year(self, year: Optional[int]) -> None:
        if year is not None and not is_plausible_year(year, self.config.min_year, self.config.max_year):
            raise ImportBlockedError(f"Year {year} is out of range")
        self.manual_year = year

    def year_detected(self) -> bool:
        """Whether the mapped date column carries a plausible year in its first rows."""
        header = self.mapping.get(DATE_FIELD)
        if self.table is None or header is None:
            return False
        return year_in_data(
            self.table.column(header, limit=self.config.year_probe_rows),
            self.config.year_probe_rows,
            self.config.min_year,
            self.config.max_year,
        )

    def ensure_ready(self) -> None:
        super().ensure_ready()
        if not any(self.mapping.is_bound(key) for key in DATA_FIELDS):
            raise MappingIncompleteError(
                ["at least one data field"],
                "Please map the date field and at least one data field",
            )
        if self.manual_year is None and not self.year_detected():
            raise YearAmbiguousError(self.mapping.get(DATE_FIELD) or "")

    def merge(self) -> TransformBatch:
        """Transform the loaded upload and gap-fill it into the ledger."""
        batch = self.transform(fallback_year=self.manual_year)
        self.ledger = reconciler.merge(self.ledger, batch.records)
        upload = UploadedFile(
            name=self.filename,
            type=reconciler.classify_upload(self.mapping),
            row_count=len(batch.records),
        )
        self.uploaded_files.append(upload)
        logger.info(
            "upload_merged",
            extra={"listing_id": self.listing_id, "upload": upload.name, "upload_type": upload.type,
                   "rows": upload.row_count, "rejected": len(batch.errors)},
        )
        return batch

    def clear(self) -> None:
        self.ledger = []
        self.uploaded_files = []

    def totals(self) -> dict[str, int]:
        return reconciler.ledger_totals(self.ledger)

    def yearly_summary(self) -> list[tuple[int, dict[str, float]]]:
        return reconciler.yearly_summary(self.ledger)

    def ledger_rows(self) -> list[dict[str, Any]]:
        rows = []
        for record in self.ledger:
            row: dict[str, Any] = {
                "listing_id": self.listing_id,
                "month": record.month_index + 1,
                "year": record.year,
                "date_key": record.date_key,
                "source": UPLOAD_SOURCE,
                "verified": False,
            }
            row.update({name: getattr(record, name) for name in AMOUNT_FIELDS})
            rows.append(row)
        return rows

    def save(self) -> int:
        """Replace the stored ledger of this listing wholesale."""
        rows = self.ledger_rows()
        try:
            self._store.delete_by_key(self.listing_id)
            if rows:
                self._store.insert_many(rows)
        except StorageError:
            logger.exception("ledger_save_failed", extra={"listing_id": self.listing_id})
            raise
        logger.info("ledger_saved", extra={"listing_id": self.listing_id, "rows": len(rows)})
        return len(rows)
