"""Redis implementation of the mapping store."""

import logging
import math
from contextlib import asynccontextmanager
from datetime import datetime
from typing import List, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from .base import MappingStoreBase
from ..errors import StorageError
from ..models import UrlMapping


# Flip is_active only if the hash exists and is still active
DEACTIVATE_SCRIPT = """
local current = redis.call('HGET', KEYS[1], 'is_active')
if current == '1' then
    redis.call('HSET', KEYS[1], 'is_active', '0')
    return 1
end
return 0
"""


class RedisMappingStore(MappingStoreBase):
    """Mapping store backed by one Redis hash per short code.

    Keys are ``<key_prefix><short_code>``. When a mapping has an expiration
    the key carries a native PEXPIREAT, so expired codes simply disappear.
    """

    backend_name = "redis"

    def __init__(
        self,
        redis_url: Optional[str] = None,
        key_prefix: str = "url:",
        client: Optional["redis.Redis"] = None,
        scan_count: int = 500,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize Redis store.

        Args:
            redis_url: Redis connection URL (e.g., redis://localhost:6379/0)
            key_prefix: Namespace prefix for mapping keys
            client: Pre-built client, mainly for tests
            scan_count: SCAN batch size hint for full scans
            logger: Optional logger instance
        """
        if client is None and not redis_url:
            raise ValueError("Either redis_url or client is required")

        self.redis_url = redis_url
        self.key_prefix = key_prefix
        self.scan_count = scan_count
        self.logger = logger or logging.getLogger(__name__)
        self.client = client

    async def connect(self) -> None:
        """Connect to Redis and verify the connection."""
        if self.client is None:
            self.client = redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
            )
        async with self._errors("connect"):
            await self.client.ping()
        self.logger.info("Connected to Redis mapping store")

    def key_for(self, short_code: str) -> str:
        return f"{self.key_prefix}{short_code}"

    @asynccontextmanager
    async def _errors(self, operation: str):
        try:
            yield
        except RedisError as e:
            self.logger.error(f"Redis {operation} error: {e}")
            raise StorageError(f"Redis {operation} failed") from e

    async def put(
        self,
        short_code: str,
        original_url: str,
        created_at: datetime,
        expires_at: Optional[datetime] = None,
    ) -> UrlMapping:
        mapping = UrlMapping(
            short_code=short_code,
            original_url=original_url,
            created_at=created_at,
            expires_at=expires_at,
            is_active=True,
        )
        key = self.key_for(short_code)

        async with self._errors("put"):
            pipe = self.client.pipeline(transaction=True)
            pipe.hset(key, mapping=self._serialize(mapping))
            if expires_at is not None:
                # Round up so the key never vanishes before expires_at
                pipe.pexpireat(key, math.ceil(expires_at.timestamp() * 1000))
            else:
                # Overwrites must not inherit a previous TTL
                pipe.persist(key)
            await pipe.execute()

        self.logger.debug(f"Stored mapping {key} -> {original_url}")
        return mapping

    async def get(self, short_code: str) -> Optional[UrlMapping]:
        async with self._errors("get"):
            data = await self.client.hgetall(self.key_for(short_code))

        if not data:
            return None
        return self._deserialize(short_code, data)

    async def exists(self, short_code: str) -> bool:
        async with self._errors("exists"):
            return await self.client.exists(self.key_for(short_code)) > 0

    async def deactivate(self, short_code: str) -> bool:
        async with self._errors("deactivate"):
            flipped = await self.client.eval(DEACTIVATE_SCRIPT, 1, self.key_for(short_code))
        return bool(flipped)

    async def list_mappings(self) -> List[UrlMapping]:
        keys: List[str] = []
        cursor = 0

        async with self._errors("scan"):
            while True:
                cursor, batch = await self.client.scan(
                    cursor=cursor,
                    match=f"{self.key_prefix}*",
                    count=self.scan_count,
                )
                keys.extend(batch)
                if cursor == 0:
                    break

            mappings = []
            for key in keys:
                data = await self.client.hgetall(key)
                # Key may have expired between SCAN and HGETALL
                if data:
                    mappings.append(self._deserialize(key[len(self.key_prefix):], data))

        return mappings

    async def health_check(self) -> bool:
        if self.client is None:
            return False
        try:
            await self.client.ping()
            return True
        except RedisError as e:
            self.logger.error(f"Redis health check failed: {e}")
            return False

    async def close(self) -> None:
        if self.client is not None:
            await self.client.aclose()
            self.logger.info("Redis mapping store connection closed")

    @staticmethod
    def _serialize(mapping: UrlMapping) -> dict:
        return {
            "short_code": mapping.short_code,
            "original_url": mapping.original_url,
            "created_at": mapping.created_at.isoformat(),
            "expires_at": mapping.expires_at.isoformat() if mapping.expires_at else "",
            "is_active": "1" if mapping.is_active else "0",
        }

    def _deserialize(self, short_code: str, data: dict) -> UrlMapping:
        try:
            return UrlMapping.from_dict({"short_code": short_code, **data})
        except (KeyError, ValueError) as e:
            self.logger.error(f"Corrupt mapping for {short_code}: {e}")
            raise StorageError(f"Corrupt mapping stored for {short_code!r}") from e
