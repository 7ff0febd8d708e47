"""Emotion shards - short-lived collectibles spawned from diary emotions."""

import asyncio
import logging
import random
import uuid
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from mongle.schemas.pet import PetStatus

logger = logging.getLogger(__name__)

SHARD_LIFETIME_SECONDS = 10.0

# Spawn area, in percent of the room view
SHARD_X_RANGE = (20.0, 80.0)
SHARD_Y_RANGE = (30.0, 70.0)


@dataclass(frozen=True)
class Shard:
    id: str
    emotion: str
    x: float
    y: float


class ShardTray:
    """Shards currently on screen.

    Collecting goes through the action gate; the shard only disappears once
    the server has accepted the collection.
    """

    def __init__(
        self,
        collect_remote: Callable[[], Awaitable[PetStatus | None]],
        lifetime: float = SHARD_LIFETIME_SECONDS,
        rng: random.Random | None = None,
    ):
        self.collect_remote = collect_remote
        self.lifetime = lifetime
        self.rng = rng or random.Random()
        self._shards: dict[str, Shard] = {}
        self._expiry: dict[str, asyncio.TimerHandle] = {}

    @property
    def shards(self) -> list[Shard]:
        return list(self._shards.values())

    def spawn(self, emotion: str | None) -> Shard | None:
        if not emotion or emotion == "neutral":
            return None
        shard = Shard(
            id=uuid.uuid4().hex,
            emotion=emotion,
            x=self.rng.uniform(*SHARD_X_RANGE),
            y=self.rng.uniform(*SHARD_Y_RANGE),
        )
        self._shards[shard.id] = shard
        loop = asyncio.get_running_loop()
        self._expiry[shard.id] = loop.call_later(self.lifetime, self._discard, shard.id)
        return shard

    async def collect(self, shard_id: str) -> PetStatus | None:
        if shard_id not in self._shards:
            return None
        status = await self.collect_remote()
        if status is not None:
            self._discard(shard_id)
        return status

    def clear(self) -> None:
        for handle in self._expiry.values():
            handle.cancel()
        self._expiry.clear()
        self._shards.clear()

    def _discard(self, shard_id: str) -> None:
        handle = self._expiry.pop(shard_id, None)
        if handle is not None:
            handle.cancel()
        if self._shards.pop(shard_id, None) is not None:
            logger.debug(f"[Shards] Removed shard {shard_id}")
