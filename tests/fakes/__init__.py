"""Shared test doubles: re-exported memory backends."""

from __future__ import annotations

from csvbridge.persistence.memory_backend import (
    MemoryCacheBackend,
    MemoryFileStore,
    MemoryRecordStore,
)

__all__ = ["MemoryCacheBackend", "MemoryFileStore", "MemoryRecordStore"]
