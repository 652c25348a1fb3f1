"""Progress delivery and the in-process registry of import sessions."""

from __future__ import annotations

import threading
from typing import Optional

from csvbridge.core.exceptions import SessionNotFoundError
from csvbridge.core.logging_config import get_logger
from csvbridge.core.protocols import ICacheBackend
from csvbridge.core.types import SessionId
from csvbridge.models.pipeline import ImportSession, ProgressSnapshot

logger = get_logger("services.progress")


def progress_key(session_id: SessionId) -> str:
    return f"import:{session_id}:progress"


class ProgressPublisher:
    """Orchestrator progress callback that mirrors snapshots into the cache."""

    def __init__(self, cache: ICacheBackend, ttl_seconds: int = 4 * 60 * 60) -> None:
        self._cache = cache
        self._ttl = ttl_seconds

    def __call__(self, snapshot: ProgressSnapshot) -> None:
        self._cache.setex(progress_key(snapshot.session_id), self._ttl, snapshot.model_dump_json())

    def read(self, session_id: SessionId) -> Optional[ProgressSnapshot]:
        raw = self._cache.get(progress_key(session_id))
        if raw is None:
            return None
        return ProgressSnapshot.model_validate_json(raw)


class SessionRegistry:
    """Sessions by id, so a cancel request can reach a running import."""

    def __init__(self) -> None:
        self._sessions: dict[SessionId, ImportSession] = {}
        self._lock = threading.Lock()

    def register(self, session: ImportSession) -> ImportSession:
        with self._lock:
            self._sessions[session.session_id] = session
        return session

    def get(self, session_id: str) -> ImportSession:
        with self._lock:
            session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def cancel(self, session_id: str) -> ImportSession:
        session = self.get(session_id)
        session.cancel()
        logger.info("cancel_requested", extra={"session_id": session_id, "status": str(session.status)})
        return session

    def discard(self, session_id: str) -> None:
        with self._lock:
            self._sessions.pop(session_id, None)

    def __len__(self) -> int:
        return len(self._sessions)
