"""Unit tests for RedisCacheBackend using fakeredis."""

from __future__ import annotations

from unittest.mock import patch

import fakeredis
import pytest

from csvbridge.core.config import RedisConfig
from csvbridge.core.exceptions import CacheError
from csvbridge.core.protocols import ICacheBackend
from csvbridge.persistence.redis_backend import RedisCacheBackend


@pytest.fixture
def fake_server():
    return fakeredis.FakeServer()


@pytest.fixture
def backend(fake_server):
    with patch("redis.Redis", return_value=fakeredis.FakeRedis(server=fake_server, decode_responses=True)):
        return RedisCacheBackend(host="localhost", port=6379, db=0)


def test_satisfies_protocol(backend):
    assert isinstance(backend, ICacheBackend)


class TestGet:
    def test_returns_none_on_miss(self, backend):
        assert backend.get("nonexistent") is None

    def test_returns_stored_string(self, backend):
        backend.setex("import:abc:progress", 300, '{"current": 3}')
        assert backend.get("import:abc:progress") == '{"current": 3}'


class TestSetex:
    def test_sets_ttl(self, backend, fake_server):
        backend.setex("mykey", 60, "v")
        client = fakeredis.FakeRedis(server=fake_server)
        assert 0 < client.ttl("mykey") <= 60

    def test_overwrites_existing_value(self, backend):
        backend.setex("k", 60, "old")
        backend.setex("k", 60, "new")
        assert backend.get("k") == "new"


class TestDelete:
    def test_removes_existing_key(self, backend):
        backend.setex("del_me", 60, "val")
        backend.delete("del_me")
        assert backend.get("del_me") is None

    def test_noop_on_missing_key(self, backend):
        backend.delete("never_existed")


class TestErrorWrapping:
    def test_get_wraps_connection_error(self, fake_server, backend):
        fake_server.connected = False
        with pytest.raises(CacheError):
            backend.get("k")

    def test_setex_wraps_connection_error(self, fake_server, backend):
        fake_server.connected = False
        with pytest.raises(CacheError):
            backend.setex("k", 10, "v")

    def test_ping(self, backend):
        assert backend.ping() is True

    def test_ping_wraps_connection_error(self, fake_server, backend):
        fake_server.connected = False
        with pytest.raises(CacheError, match="PING"):
            backend.ping()


class TestKeyPrefix:
    @pytest.fixture
    def prefixed(self, fake_server):
        config = RedisConfig(key_prefix="csvbridge-test:")
        with patch("redis.Redis", return_value=fakeredis.FakeRedis(server=fake_server, decode_responses=True)):
            return RedisCacheBackend.from_config(config)

    def test_keys_are_namespaced(self, prefixed, fake_server):
        prefixed.setex("import:abc:progress", 60, "{}")
        client = fakeredis.FakeRedis(server=fake_server, decode_responses=True)
        assert client.keys("*") == ["csvbridge-test:import:abc:progress"]
        assert prefixed.get("import:abc:progress") == "{}"

    def test_delete_uses_prefix(self, prefixed):
        prefixed.setex("k", 60, "v")
        prefixed.delete("k")
        assert prefixed.get("k") is None

    def test_bytes_client_still_returns_text(self, fake_server):
        with patch("redis.Redis", return_value=fakeredis.FakeRedis(server=fake_server)):
            backend = RedisCacheBackend(decode_responses=False)
        backend.setex("k", 60, "snapshot")
        assert backend.get("k") == "snapshot"
