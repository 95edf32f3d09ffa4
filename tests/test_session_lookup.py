"""Session lookup tests: in-memory store and Redis-backed store with a mocked client"""
import asyncio
import time
from unittest.mock import MagicMock

import pytest
import redis

from backend import RedisBackend
from session_lookup import InMemorySessionLookup, RedisSessionLookup, SessionRecord


@pytest.fixture
def mock_redis():
    """Mock Redis client"""
    redis_mock = MagicMock()
    redis_mock.hgetall = MagicMock(return_value={})
    redis_mock.ping = MagicMock(return_value=True)
    return redis_mock


class TestRedisBackend:

    def test_get_session_reads_session_hash(self, mock_redis):
        mock_redis.hgetall.return_value = {"therapist_id": "t1", "client_id": "c1", "created_at": "2024-01-15"}
        backend = RedisBackend(redis_client=mock_redis)

        assert backend.get_session("s1") == {"therapist_id": "t1", "client_id": "c1"}
        mock_redis.hgetall.assert_called_once_with("session:s1")

    def test_missing_session_returns_none(self, mock_redis):
        backend = RedisBackend(redis_client=mock_redis)
        assert backend.get_session("s1") is None

    def test_incomplete_session_returns_none(self, mock_redis):
        mock_redis.hgetall.return_value = {"therapist_id": "t1"}
        backend = RedisBackend(redis_client=mock_redis)
        assert backend.get_session("s1") is None

    def test_ping_reports_connection_errors(self, mock_redis):
        mock_redis.ping.side_effect = redis.ConnectionError("refused")
        backend = RedisBackend(redis_client=mock_redis)
        assert backend.ping() is False


class TestRedisSessionLookup:

    @pytest.mark.asyncio
    async def test_returns_session_record(self, mock_redis):
        mock_redis.hgetall.return_value = {"therapist_id": "t1", "client_id": "c1"}
        lookup = RedisSessionLookup(RedisBackend(redis_client=mock_redis))

        record = await lookup.get_session_by_id("s1")

        assert record == SessionRecord(session_id="s1", therapist_id="t1", client_id="c1")

    @pytest.mark.asyncio
    async def test_unknown_session_returns_none(self, mock_redis):
        lookup = RedisSessionLookup(RedisBackend(redis_client=mock_redis))
        assert await lookup.get_session_by_id("s1") is None

    @pytest.mark.asyncio
    async def test_redis_errors_propagate(self, mock_redis):
        mock_redis.hgetall.side_effect = redis.ConnectionError("refused")
        lookup = RedisSessionLookup(RedisBackend(redis_client=mock_redis))

        with pytest.raises(redis.ConnectionError):
            await lookup.get_session_by_id("s1")

    @pytest.mark.asyncio
    async def test_slow_lookup_times_out(self, mock_redis):
        def slow_hgetall(key):
            time.sleep(0.5)
            return {"therapist_id": "t1", "client_id": "c1"}

        mock_redis.hgetall.side_effect = slow_hgetall
        lookup = RedisSessionLookup(RedisBackend(redis_client=mock_redis), timeout=0.05)

        with pytest.raises(asyncio.TimeoutError):
            await lookup.get_session_by_id("s1")

    @pytest.mark.asyncio
    async def test_is_available(self, mock_redis):
        lookup = RedisSessionLookup(RedisBackend(redis_client=mock_redis))
        assert await lookup.is_available() is True

        mock_redis.ping.side_effect = redis.ConnectionError("refused")
        assert await lookup.is_available() is False


class TestInMemorySessionLookup:

    @pytest.mark.asyncio
    async def test_add_and_remove(self):
        lookup = InMemorySessionLookup()
        lookup.add_session("s1", therapist_id="t1", client_id="c1")

        assert await lookup.get_session_by_id("s1") == SessionRecord("s1", "t1", "c1")

        lookup.remove_session("s1")
        assert await lookup.get_session_by_id("s1") is None
        assert await lookup.is_available() is True
