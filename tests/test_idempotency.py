"""Tests for webhook deduplication helpers."""

from unittest.mock import AsyncMock

from redis.exceptions import ConnectionError as RedisConnectionError

from app.core.idempotency import inbound_dedup_key
from app.infrastructure.redis import RedisClient


class TestInboundDedupKey:
    def test_stable_and_prefixed(self):
        key = inbound_dedup_key("whatsapp", "SM0001")

        assert key == inbound_dedup_key("whatsapp", "SM0001")
        assert key.startswith("inbound_msg_processed:")

    def test_channel_and_id_both_matter(self):
        assert inbound_dedup_key("whatsapp", "SM0001") != inbound_dedup_key("sms", "SM0001")
        assert inbound_dedup_key("whatsapp", "SM0001") != inbound_dedup_key("whatsapp", "SM0002")


class TestRedisClient:
    async def test_disabled_client_lets_everything_through(self):
        client = RedisClient(url="redis://localhost:6379/0", enabled=False)
        await client.connect()

        assert client.enabled is False
        assert await client.setnx("k", "1", ttl=60) is True
        assert await client.delete("k") == 0

    async def test_setnx_reports_existing_key(self):
        client = RedisClient(url="redis://localhost:6379/0", enabled=True)
        client._client = AsyncMock()
        client._client.set = AsyncMock(side_effect=[True, None])

        assert await client.setnx("k", "1", ttl=60) is True
        assert await client.setnx("k", "1", ttl=60) is False
        client._client.set.assert_awaited_with("k", "1", nx=True, ex=60)

    async def test_setnx_fails_open_on_redis_error(self):
        client = RedisClient(url="redis://localhost:6379/0", enabled=True)
        client._client = AsyncMock()
        client._client.set = AsyncMock(side_effect=RedisConnectionError("down"))

        assert await client.setnx("k", "1", ttl=60) is True
