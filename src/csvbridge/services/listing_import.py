"""Bulk listing import: CSV rows become marketplace listings, one write each."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from csvbridge.core.config import AppSettings
from csvbridge.core.exceptions import ImportBlockedError
from csvbridge.core.logging_config import get_logger
from csvbridge.core.protocols import IRecordStore
from csvbridge.ingest.orchestrator import ImportOrchestrator, ProgressCallback, QueuedRecord
from csvbridge.models.pipeline import ImportSession
from csvbridge.models.records import ListingRecord
from csvbridge.schemas.listings import LISTING_SCHEMA
from csvbridge.services.base import BaseImportFlow

logger = get_logger("services.listings")

NO_VALID_LISTINGS = "No valid listings found"


class ListingImportFlow(BaseImportFlow):
    """Imports listings for one importing user.

    ``seller_directory`` maps seller e-mail addresses to user ids; rows whose
    seller e-mail is unknown (or absent) are attributed to ``default_seller_id``.
    """

    schema = LISTING_SCHEMA

    def __init__(
        self,
        *,
        settings: AppSettings,
        store: IRecordStore,
        default_seller_id: str,
        seller_directory: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(settings=settings, store=store)
        self._default_seller_id = default_seller_id
        self._prepared: tuple[list[QueuedRecord], list[str]] | None = None
        self._sellers = {
            email.strip().lower(): user_id for email, user_id in (seller_directory or {}).items()
        }

    def resolve_seller(self, email: str | None) -> str:
        if email:
            return self._sellers.get(email.strip().lower(), self._default_seller_id)
        return self._default_seller_id

    def to_payload(self, record: ListingRecord) -> dict[str, Any]:
        now = datetime.now(timezone.utc).isoformat()
        payload = record.to_item()
        payload.update(
            id=uuid4().hex,
            seller_id=self.resolve_seller(record.seller_email),
            created_at=now,
            updated_at=now,
            published_at=now if record.status == "active" else None,
        )
        return payload

    def queue(self) -> tuple[list[QueuedRecord], list[str]]:
        """Transform the loaded table into write-ready records plus row errors."""
        batch = self.transform()
        queued = [QueuedRecord(r.source_row_number, self.to_payload(r)) for r in batch.records]
        return queued, batch.error_messages

    def prepare(self) -> tuple[list[QueuedRecord], list[str]]:
        """Queue the loaded table for writing; blocked when no row survives."""
        queued, row_errors = self.queue()
        if not queued:
            logger.warning("import_blocked", extra={"rejected_rows": len(row_errors)})
            raise ImportBlockedError(NO_VALID_LISTINGS)
        self._prepared = (queued, row_errors)
        return queued, row_errors

    async def run(
        self,
        session: ImportSession | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> ImportSession:
        """Write every surviving listing through the orchestrator."""
        session = session or ImportSession()
        queued, row_errors = self._prepared or self.prepare()
        self._prepared = None

        orchestrator = ImportOrchestrator(
            write_delay=self.config.write_delay_seconds, on_progress=on_progress,
        )
        return await orchestrator.run(queued, self._store.insert_one, session, row_errors)
