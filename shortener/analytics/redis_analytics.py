"""Redis analytics backend."""

import json
from datetime import datetime
from typing import List, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from .base import AnalyticsRecorderBase
from ..errors import StorageError
from ..models import ClickCounter, ClickRecord


DAY_FIELD_PREFIX = "day:"

# Keep the latest access time; clicks may land out of order
LAST_ACCESS_SCRIPT = """
local current = redis.call('HGET', KEYS[1], 'last_accessed_ts')
if not current or tonumber(current) < tonumber(ARGV[1]) then
    redis.call('HSET', KEYS[1], 'last_accessed_ts', ARGV[1], 'last_accessed_at', ARGV[2])
    return 1
end
return 0
"""


class RedisAnalyticsRecorder(AnalyticsRecorderBase):
    """Click counters in Redis hashes, history in capped lists.

    Layout per short code:
        ``<key_prefix><code>``      hash: total, last_accessed_at, last_accessed_ts, day:<YYYY-MM-DD>
        ``<history_prefix><code>``  list of JSON click records, newest first

    Counters use HINCRBY so concurrent clicks are counted exactly. Analytics
    keys carry no TTL; they outlive expired mappings.
    """

    backend_name = "redis"

    def __init__(
        self,
        *args,
        client: "redis.Redis",
        key_prefix: str = "analytics:",
        history_prefix: str = "clicks:",
        **kwargs,
    ):
        super().__init__(*args, **kwargs)
        self.client = client
        self.key_prefix = key_prefix
        self.history_prefix = history_prefix

    def counter_key(self, short_code: str) -> str:
        return f"{self.key_prefix}{short_code}"

    def history_key(self, short_code: str) -> str:
        return f"{self.history_prefix}{short_code}"

    async def _record(self, click: ClickRecord, day: str) -> None:
        key = self.counter_key(click.short_code)
        history_key = self.history_key(click.short_code)

        pipe = self.client.pipeline(transaction=True)
        pipe.hincrby(key, "total", 1)
        pipe.hincrby(key, f"{DAY_FIELD_PREFIX}{day}", 1)
        pipe.eval(
            LAST_ACCESS_SCRIPT, 1, key,
            repr(click.timestamp.timestamp()), click.timestamp.isoformat(),
        )
        pipe.lpush(history_key, json.dumps(click.to_dict()))
        pipe.ltrim(history_key, 0, self.history_limit - 1)
        await pipe.execute()

    async def _read_counter(self, short_code: str) -> ClickCounter:
        try:
            data = await self.client.hgetall(self.counter_key(short_code))
        except RedisError as e:
            self.logger.error(f"Redis analytics read error: {e}")
            raise StorageError("Redis analytics read failed") from e

        if not data:
            return ClickCounter()

        last_accessed: Optional[datetime] = None
        if data.get("last_accessed_at"):
            last_accessed = datetime.fromisoformat(data["last_accessed_at"])

        by_day = {
            field[len(DAY_FIELD_PREFIX):]: int(value)
            for field, value in data.items()
            if field.startswith(DAY_FIELD_PREFIX)
        }

        return ClickCounter(
            total=int(data.get("total", 0)),
            last_accessed_at=last_accessed,
            by_day=by_day,
        )

    async def _read_history(self, short_code: str, limit: int) -> List[ClickRecord]:
        try:
            raw = await self.client.lrange(self.history_key(short_code), 0, limit - 1)
        except RedisError as e:
            self.logger.error(f"Redis analytics read error: {e}")
            raise StorageError("Redis analytics read failed") from e

        return [ClickRecord.from_dict(json.loads(item)) for item in raw]
