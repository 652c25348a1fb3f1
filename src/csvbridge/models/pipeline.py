"""Import session, progress snapshot and upload history models."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, Field

CANCELLED_MESSAGE = "Import cancelled by user"


class ImportStatus(StrEnum):
    IDLE = "IDLE"
    RUNNING = "RUNNING"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class ProgressSnapshot(BaseModel):
    """Read-only view of a session handed to the presentation layer."""

    model_config = {"frozen": True}

    session_id: str
    status: ImportStatus
    current: int
    total: int
    error_count: int
    errors: list[str] = Field(default_factory=list)
    cancelled: bool = False


class ImportSession(BaseModel):
    """Mutable state of one batch submission, owned by the orchestrator."""

    session_id: str = Field(default_factory=lambda: uuid4().hex)
    status: ImportStatus = ImportStatus.IDLE
    current: int = 0
    total: int = 0
    error_count: int = 0
    errors: list[str] = Field(default_factory=list)
    cancelled: bool = False
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    rejected_rows: int = 0  # validation errors counted before the first write

    @property
    def success_count(self) -> int:
        """Records written successfully; derived, never stored."""
        return self.current - (self.error_count - self.rejected_rows)

    def cancel(self) -> None:
        """Request cancellation; honoured before the next write."""
        self.cancelled = True

    @property
    def is_finished(self) -> bool:
        return self.status in (ImportStatus.COMPLETED, ImportStatus.CANCELLED)

    def snapshot(self) -> ProgressSnapshot:
        return ProgressSnapshot(
            session_id=self.session_id,
            status=self.status,
            current=self.current,
            total=self.total,
            error_count=self.error_count,
            errors=list(self.errors),
            cancelled=self.cancelled,
        )


class UploadedFile(BaseModel):
    """One file merged into a financial ledger."""

    id: str = Field(default_factory=lambda: uuid4().hex)
    name: str
    type: str  # complete, marketing, expenses, sales
    row_count: int = 0
