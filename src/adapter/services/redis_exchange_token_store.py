"""
Redis exchange token store.

Shared by every service instance. Expiry is delegated to Redis key TTLs and
redemption uses GETDEL, so a token is returned to exactly one caller.
"""

import logging
from typing import Optional

from redis import asyncio as aioredis

from src.app.services.exchange_token_store import IExchangeTokenStore
from src.domain.base import utcnow
from src.domain.entities import ExchangeGrant

logger = logging.getLogger(__name__)


class RedisExchangeTokenStore(IExchangeTokenStore):
    """Exchange token store backed by Redis SET EX / GETDEL"""

    def __init__(self, redis_client: aioredis.Redis, prefix: str = "exchange-token"):
        self.redis = redis_client
        self.prefix = prefix

    @classmethod
    def from_url(cls, url: str) -> "RedisExchangeTokenStore":
        client = aioredis.Redis.from_url(
            url,
            decode_responses=True,
            socket_timeout=5,
            socket_connect_timeout=5,
        )
        return cls(client)

    def _key(self, token: str) -> str:
        return f"{self.prefix}:{token}"

    async def put(self, grant: ExchangeGrant) -> None:
        ttl_seconds = int((grant.expires_at - utcnow()).total_seconds())
        if ttl_seconds <= 0:
            logger.warning("Refusing to store an already expired exchange token")
            return
        await self.redis.set(self._key(grant.token), grant.model_dump_json(), ex=ttl_seconds)

    async def take(self, token: str) -> Optional[ExchangeGrant]:
        payload = await self.redis.getdel(self._key(token))
        if payload is None:
            return None

        grant = ExchangeGrant.model_validate_json(payload)
        if grant.is_expired():
            return None
        return grant

    async def sweep(self) -> int:
        # Keys expire through their TTL
        return 0
