"""Tests for progress publishing and the session registry."""

from __future__ import annotations

import pytest

from csvbridge.core.exceptions import SessionNotFoundError
from csvbridge.models.pipeline import ImportSession, ImportStatus
from csvbridge.services.progress import ProgressPublisher, SessionRegistry, progress_key
from tests.fakes import MemoryCacheBackend


class TestProgressPublisher:
    def test_snapshot_round_trips_through_cache(self):
        cache = MemoryCacheBackend()
        publisher = ProgressPublisher(cache, ttl_seconds=60)
        session = ImportSession(total=4, current=1, errors=["Row 2: boom"], error_count=1)
        publisher(session.snapshot())

        assert cache.ttls[progress_key(session.session_id)] == 60
        snapshot = publisher.read(session.session_id)
        assert snapshot.current == 1
        assert snapshot.errors == ["Row 2: boom"]
        assert snapshot.status == ImportStatus.IDLE

    def test_unknown_session_reads_none(self):
        assert ProgressPublisher(MemoryCacheBackend()).read("nope") is None

    def test_key_format(self):
        assert progress_key("abc") == "import:abc:progress"


class TestSessionRegistry:
    def test_register_get_cancel(self):
        registry = SessionRegistry()
        session = registry.register(ImportSession())
        assert registry.get(session.session_id) is session
        registry.cancel(session.session_id)
        assert session.cancelled is True

    def test_unknown_session_raises(self):
        with pytest.raises(SessionNotFoundError):
            SessionRegistry().get("missing")

    def test_discard(self):
        registry = SessionRegistry()
        session = registry.register(ImportSession())
        registry.discard(session.session_id)
        assert len(registry) == 0
