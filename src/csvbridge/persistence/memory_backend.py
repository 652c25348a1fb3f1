"""In-memory backends for unit tests: dict-backed fakes."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from csvbridge.core.exceptions import RecordWriteError


class MemoryRecordStore:
    """List-backed IRecordStore for unit tests.

    ``fail_when`` lets a test reject chosen records: any record for which it
    returns a string is refused with that string as the error message.
    """

    def __init__(
        self,
        owner_attr: str = "listing_id",
        fail_when: Callable[[dict[str, Any]], str | None] | None = None,
    ) -> None:
        self._owner_attr = owner_attr
        self._fail_when = fail_when
        self.records: list[dict[str, Any]] = []
        self.calls: list[str] = []

    def insert_one(self, record: dict[str, Any]) -> None:
        self.calls.append("insert_one")
        if self._fail_when is not None:
            reason = self._fail_when(record)
            if reason is not None:
                raise RecordWriteError(reason)
        self.records.append(dict(record))

    def delete_by_key(self, owner_id: str) -> None:
        self.calls.append("delete_by_key")
        self.records = [r for r in self.records if r.get(self._owner_attr) != owner_id]

    def insert_many(self, records: list[dict[str, Any]]) -> None:
        self.calls.append("insert_many")
        self.records.extend(dict(r) for r in records)

    def list_by_owner(self, owner_id: str) -> list[dict[str, Any]]:
        return [r for r in self.records if r.get(self._owner_attr) == owner_id]


class MemoryCacheBackend:
    """Dict-backed ICacheBackend for unit tests."""

    def __init__(self) -> None:
        self._store: dict[str, str] = {}
        self.ttls: dict[str, int] = {}

    def get(self, key: str) -> str | None:
        return self._store.get(key)

    def setex(self, key: str, ttl: int, value: str) -> None:
        self._store[key] = value
        self.ttls[key] = ttl

    def delete(self, key: str) -> None:
        self._store.pop(key, None)
        self.ttls.pop(key, None)


class MemoryFileStore:
    """Dict-backed IFileStore for unit tests."""

    def __init__(self) -> None:
        self._files: dict[str, bytes] = {}

    def read(self, path: str) -> bytes:
        return self._files[path]

    def write(self, path: str, data: bytes, content_type: str = "text/csv") -> str:
        self._files[path] = data
        return path

    def list_files(self, prefix: str) -> list[str]:
        return [k for k in self._files if k.startswith(prefix)]
