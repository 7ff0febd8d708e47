"""Local gauge cache - write-through Redis mirror used to seed cold starts."""

import asyncio
import logging

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from mongle.core.gauges import Gauge

logger = logging.getLogger(__name__)


class LocalCache:
    """Best-effort mirror of the three raw gauge values.

    Only read once at startup. Writes are coalesced through a single
    background writer so the newest values always land last.
    """

    def __init__(self, redis: aioredis.Redis, user_id: int):
        self.redis = redis
        self.user_id = user_id
        self._latest: dict[Gauge, float] | None = None
        self._writer: asyncio.Task | None = None

    def _key(self, gauge: Gauge) -> str:
        return f"pet:{self.user_id}:gauge:{gauge.value}"

    async def load(self) -> dict[Gauge, float] | None:
        """Read cached values; None if any entry is missing or unreadable."""
        try:
            raw = await self.redis.mget([self._key(g) for g in Gauge])
        except RedisError as e:
            logger.warning(f"[LocalCache] Read failed, using defaults: {e}")
            return None

        if any(v is None for v in raw):
            return None
        try:
            return {g: float(v) for g, v in zip(Gauge, raw)}
        except ValueError:
            logger.warning(f"[LocalCache] Ignoring malformed cache entries: {raw}")
            return None

    async def save(self, values: dict[Gauge, float]) -> None:
        """Write all three values as decimal strings."""
        await self.redis.mset({self._key(g): str(values[g]) for g in Gauge})

    def mirror(self, values: dict[Gauge, float]) -> None:
        """GaugeStore listener: schedule a write of the latest values."""
        self._latest = values
        if self._writer is None or self._writer.done():
            self._writer = asyncio.get_running_loop().create_task(self._drain())

    async def _drain(self) -> None:
        while self._latest is not None:
            values, self._latest = self._latest, None
            try:
                await self.save(values)
            except RedisError as e:
                logger.warning(f"[LocalCache] Write failed: {e}")

    async def flush(self) -> None:
        """Wait until every scheduled write has been attempted."""
        if self._writer is not None:
            await self._writer
            self._writer = None
