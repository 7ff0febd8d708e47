"""Conflict resolver - resyncs local gauges after a stale-write rejection."""

import logging
from enum import Enum

from mongle.config import settings
from mongle.core.gauges import GaugeStore
from mongle.core.results import Ok, RemoteCall, run_guarded

logger = logging.getLogger(__name__)


class SyncState(str, Enum):
    STABLE = "stable"
    RESYNCING = "resyncing"


class ConflictResolver:
    """STABLE -> RESYNCING on conflict; back to STABLE once a fetch lands.

    A failed, hung or raising fetch leaves the resolver RESYNCING; the next
    user action retries it. No backoff: conflicts come from rare
    multi-writer races.
    """

    def __init__(self, store: GaugeStore, fetch_status: RemoteCall, timeout: float | None = None):
        self.store = store
        self.fetch_status = fetch_status
        self.timeout = timeout if timeout is not None else settings.ACTION_TIMEOUT_SECONDS
        self.state = SyncState.STABLE

    @property
    def is_resyncing(self) -> bool:
        return self.state is SyncState.RESYNCING

    async def resolve(self) -> bool:
        """Discard local state and adopt the server's. Returns True once STABLE."""
        self.state = SyncState.RESYNCING
        result = await run_guarded(self.fetch_status, self.timeout, "ConflictResolver")
        if isinstance(result, Ok) and result.status is not None:
            self.store.apply_server_snapshot(result.status)
            self.state = SyncState.STABLE
            logger.info("[ConflictResolver] Resynced from server")
            return True
        logger.warning(f"[ConflictResolver] Resync failed, staying frozen: {result}")
        return False
