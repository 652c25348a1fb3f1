"""Sequential, cancellable batch submission with live progress.

Records are written strictly one at a time so that ``session.current`` and
the n-th record stay in 1:1 correspondence. Cancellation is a polled flag,
checked before each write; a write already in flight always finishes.
Synchronous writers and progress callbacks run in a worker thread so a slow
store never blocks the event loop.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Callable, Sequence
from datetime import datetime, timezone
from typing import Any, NamedTuple

from csvbridge.core.exceptions import CacheError, RecordWriteError
from csvbridge.core.logging_config import get_logger
from csvbridge.models.pipeline import CANCELLED_MESSAGE, ImportSession, ImportStatus, ProgressSnapshot

logger = get_logger("ingest.orchestrator")

WriteFn = Callable[[dict[str, Any]], Any]
ProgressCallback = Callable[[ProgressSnapshot], None]


class QueuedRecord(NamedTuple):
    source_row_number: int
    payload: dict[str, Any]


async def _call(fn: Callable[..., Any], arg: Any) -> Any:
    if inspect.iscoroutinefunction(fn):
        return await fn(arg)
    result = await asyncio.to_thread(fn, arg)
    if inspect.isawaitable(result):
        result = await result
    return result


class ImportOrchestrator:
    """Drives one ImportSession from Idle to Completed or Cancelled."""

    def __init__(
        self,
        *,
        write_delay: float = 0.0,
        on_progress: ProgressCallback | None = None,
    ) -> None:
        self._write_delay = write_delay
        self._on_progress = on_progress

    async def _publish(self, session: ImportSession) -> None:
        """Hand a snapshot to the progress callback; delivery failures only log."""
        if self._on_progress is None:
            return
        try:
            await _call(self._on_progress, session.snapshot())
        except CacheError as exc:
            logger.warning(
                "progress_publish_failed",
                extra={"session_id": session.session_id, "current": session.current, "error": str(exc)},
            )

    async def _attempt(self, write: WriteFn, record: QueuedRecord) -> str | None:
        """Write one record; return an error message or None on success."""
        try:
            await _call(write, record.payload)
        except RecordWriteError as exc:
            return str(exc) or "Unknown error"
        except Exception as exc:
            logger.exception(
                "record_write_crashed", extra={"source_row": record.source_row_number},
            )
            return str(exc) or "Unknown error"
        return None

    async def run(
        self,
        records: Sequence[QueuedRecord],
        write: WriteFn,
        session: ImportSession,
        row_errors: Sequence[str] = (),
    ) -> ImportSession:
        session.total = len(records)
        session.current = 0
        session.errors = list(row_errors)
        session.error_count = session.rejected_rows = len(row_errors)
        session.status = ImportStatus.RUNNING
        session.started_at = datetime.now(timezone.utc)
        logger.info(
            "import_started",
            extra={"session_id": session.session_id, "total": session.total,
                   "rejected_rows": session.rejected_rows},
        )

        try:
            await self._publish(session)
            for record in records:
                if session.cancelled:
                    session.errors.append(CANCELLED_MESSAGE)
                    session.status = ImportStatus.CANCELLED
                    logger.info(
                        "import_cancelled",
                        extra={"session_id": session.session_id, "current": session.current},
                    )
                    break

                error = await self._attempt(write, record)
                if error is not None:
                    session.errors.append(f"Row {record.source_row_number}: {error}")
                    session.error_count += 1
                    logger.warning(
                        "record_write_failed",
                        extra={"session_id": session.session_id,
                               "source_row": record.source_row_number, "error": error},
                    )

                session.current += 1
                await self._publish(session)
                await asyncio.sleep(self._write_delay)
        finally:
            # A run torn down mid-batch (task cancellation) still ends terminal.
            if session.status == ImportStatus.RUNNING:
                session.status = (
                    ImportStatus.COMPLETED if session.current == session.total else ImportStatus.CANCELLED
                )
            session.finished_at = datetime.now(timezone.utc)

        await self._publish(session)
        logger.info(
            "import_finished",
            extra={"session_id": session.session_id, "status": str(session.status),
                   "current": session.current, "total": session.total,
                   "error_count": session.error_count, "succeeded": session.success_count},
        )
        return session
