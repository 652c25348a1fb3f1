"""Protocol interfaces for csvbridge collaborators.

The import engine only talks to storage through these Protocols: structural
typing, no inheritance required, easy to test with isinstance().
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from csvbridge.core.types import JsonDict, OwnerId


# ---------------------------------------------------------------------------
# Persistence: Record Store
# ---------------------------------------------------------------------------

@runtime_checkable
class IRecordStore(Protocol):
    """Storage collaborator receiving transformed records."""

    def insert_one(self, record: JsonDict) -> None: ...

    def delete_by_key(self, owner_id: OwnerId) -> None: ...

    def insert_many(self, records: list[JsonDict]) -> None: ...


# ---------------------------------------------------------------------------
# Persistence: Cache Backend
# ---------------------------------------------------------------------------

@runtime_checkable
class ICacheBackend(Protocol):
    """Redis-compatible cache interface."""

    def get(self, key: str) -> str | None: ...

    def setex(self, key: str, ttl: int, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


# ---------------------------------------------------------------------------
# Persistence: File Store
# ---------------------------------------------------------------------------

@runtime_checkable
class IFileStore(Protocol):
    """S3-compatible upload storage interface."""

    def read(self, path: str) -> bytes: ...

    def write(self, path: str, data: bytes, content_type: str = "text/csv") -> str: ...

    def list_files(self, prefix: str) -> list[str]: ...
