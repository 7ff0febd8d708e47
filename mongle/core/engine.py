"""Pet engine - wires the gauge store, timers, gate, resolver and cache together.

This is the single surface the UI layer talks to: read gauge values and
lock flags, fire gestures through ``perform_action``.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from mongle.config import settings
from mongle.core.autosave import AutosavePump
from mongle.core.cache import LocalCache
from mongle.core.conflict import ConflictResolver
from mongle.core.gate import ActionGate
from mongle.core.gauges import Gauge, GaugeStore
from mongle.core.scheduler import DecayScheduler
from mongle.core.shards import Shard, ShardTray
from mongle.db.redis import close_redis, get_redis_client
from mongle.schemas.pet import PetStatus
from mongle.schemas.profile import TimingProfile
from mongle.services.pet_client import ActionKind, PetApiClient
from mongle.services.profile_service import profile_service

logger = logging.getLogger(__name__)


class PetEngine:
    def __init__(
        self,
        client: PetApiClient,
        cache: LocalCache | None = None,
        user_id: int | None = None,
        profile: TimingProfile | None = None,
        action_timeout: float | None = None,
    ):
        self.client = client
        self.cache = cache
        self.user_id = user_id if user_id is not None else settings.USER_ID
        self.profile = profile or profile_service.load_profile(settings.PET_PROFILE)

        self.store = GaugeStore()
        self.resolver = ConflictResolver(self.store, self._fetch_status, timeout=action_timeout)
        self.gate = ActionGate(self.store, self.resolver, timeout=action_timeout)
        self.decay = DecayScheduler(
            self.store,
            decay_window=self.profile.decay_window_seconds,
            tick_interval=self.profile.decay_tick_seconds,
        )
        self.autosave = AutosavePump(
            self.store,
            self.gate,
            self._save_gauges,
            interval=self.profile.autosave_interval_seconds,
        )
        self.shard_tray = ShardTray(lambda: self.perform_action(ActionKind.COLLECT_SHARD))
        self._mirroring = False

    # --- Lifecycle ---

    async def start(self, fetch: bool = True) -> None:
        """Seed from the cache, start both timers, then ask the server."""
        if self.cache is not None:
            cached = await self.cache.load()
            if cached is not None and self.store.seed(cached):
                logger.info(f"[PetEngine] Seeded gauges from cache: {cached}")
            if not self._mirroring:
                self.store.subscribe(self.cache.mirror)
                self._mirroring = True

        self.decay.start()
        self.autosave.start()
        if fetch:
            await self.refresh()

    async def stop(self) -> None:
        """Cancel both timers and let pending cache writes finish."""
        await self.decay.stop()
        await self.autosave.stop()
        self.shard_tray.clear()
        if self.cache is not None:
            await self.cache.flush()

    async def __aenter__(self) -> "PetEngine":
        await self.start()
        return self

    async def __aexit__(self, *exc) -> None:
        await self.stop()

    # --- Read access ---

    def value(self, gauge: Gauge) -> float:
        return self.store.value(gauge)

    def is_locked(self, gauge: Gauge) -> bool:
        return self.store.is_locked(gauge)

    @property
    def is_action_pending(self) -> bool:
        return self.gate.is_pending

    @property
    def status(self) -> PetStatus | None:
        """Last authoritative pet status (level, exp, ...) received."""
        return self.store.last_status

    @property
    def shards(self) -> list[Shard]:
        return self.shard_tray.shards

    # --- Gestures ---

    async def perform_action(self, kind: ActionKind) -> PetStatus | None:
        return await self.gate.perform(lambda: self.client.perform_action(kind, self.user_id))

    async def refresh(self) -> PetStatus | None:
        """Pull the authoritative status through the gate."""
        return await self.gate.perform(self._fetch_status)

    def rub(self, amount: float) -> float:
        """Petting fills the affection gauge locally until it locks at 100."""
        return self.store.apply_delta(Gauge.AFFECTION, amount)

    def spawn_shard(self, emotion: str | None) -> Shard | None:
        return self.shard_tray.spawn(emotion)

    async def collect_shard(self, shard_id: str) -> PetStatus | None:
        return await self.shard_tray.collect(shard_id)

    # --- Remote glue ---

    async def _fetch_status(self):
        return await self.client.get_status(self.user_id)

    async def _save_gauges(self, values: dict[Gauge, float]):
        return await self.client.save_gauges(self.user_id, values)


@asynccontextmanager
async def engine_session(user_id: int | None = None, profile_name: str | None = None) -> AsyncIterator[PetEngine]:
    """Run an engine wired to the configured server and Redis cache."""
    client = PetApiClient()
    profile = profile_service.load_profile(profile_name or settings.PET_PROFILE)
    cache = LocalCache(get_redis_client(), user_id if user_id is not None else settings.USER_ID)
    engine = PetEngine(client, cache=cache, user_id=user_id, profile=profile)
    try:
        async with engine:
            yield engine
    finally:
        await client.aclose()
        await close_redis()
