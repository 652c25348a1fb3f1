"""Redis cache backend implementing ICacheBackend.

Holds the JSON progress snapshots of running imports. Every key is stored
under ``key_prefix`` so several deployments can share one Redis database.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

import redis

from csvbridge.core.config import RedisConfig
from csvbridge.core.exceptions import CacheError

T = TypeVar("T")


class RedisCacheBackend:
    """Production ICacheBackend backed by Redis."""

    def __init__(self, host: str = "localhost", port: int = 6379, db: int = 0,
                 decode_responses: bool = True, key_prefix: str = "") -> None:
        self._host = host
        self._port = port
        self._key_prefix = key_prefix
        self._client = redis.Redis(
            host=host, port=port, db=db, decode_responses=decode_responses,
        )

    @classmethod
    def from_config(cls, config: RedisConfig) -> RedisCacheBackend:
        return cls(
            host=config.host,
            port=config.port,
            db=config.db,
            decode_responses=config.decode_responses,
            key_prefix=config.key_prefix,
        )

    def _key(self, key: str) -> str:
        return f"{self._key_prefix}{key}"

    def _run(self, op: str, key: str, fn: Callable[[], T]) -> T:
        try:
            return fn()
        except redis.RedisError as exc:
            raise CacheError(
                f"Redis {op} failed for key={key!r} on {self._host}:{self._port}: {exc}"
            ) from exc

    def ping(self) -> bool:
        return bool(self._run("PING", "", self._client.ping))

    def get(self, key: str) -> str | None:
        value: Any = self._run("GET", key, lambda: self._client.get(self._key(key)))
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        return value

    def setex(self, key: str, ttl: int, value: str) -> None:
        self._run("SETEX", key, lambda: self._client.setex(self._key(key), ttl, value))

    def delete(self, key: str) -> None:
        self._run("DELETE", key, lambda: self._client.delete(self._key(key)))
