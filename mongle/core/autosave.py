"""Autosave pump - periodically flushes local gauges to the remote store."""

import logging
from collections.abc import Awaitable, Callable

from mongle.core.gate import ActionGate
from mongle.core.gauges import Gauge, GaugeStore
from mongle.core.results import Ok, RemoteResult
from mongle.core.scheduler import PeriodicTask

logger = logging.getLogger(__name__)

SaveGauges = Callable[[dict[Gauge, float]], Awaitable[RemoteResult]]


class AutosavePump(PeriodicTask):
    """Lossy background persistence of idle decay.

    A tick that lands while a gesture is in flight, or while a failed
    conflict resync has left local values stale, is skipped outright;
    the next tick picks up the current values. Failures are never retried
    early and never surface.
    """

    name = "Autosave"

    def __init__(self, store: GaugeStore, gate: ActionGate, save: SaveGauges, interval: float):
        super().__init__(interval)
        self.store = store
        self.gate = gate
        self.save = save

    async def tick(self) -> bool:
        """Run one cycle. Returns True if a write was sent."""
        if self.gate.is_pending:
            logger.debug("[Autosave] Gesture in flight, skipping this cycle")
            return False
        if self.gate.resolver.is_resyncing:
            logger.debug("[Autosave] Local gauges are stale, waiting for a resync")
            return False

        result = await self.save(self.store.snapshot())
        if not isinstance(result, Ok):
            logger.debug(f"[Autosave] Save not acknowledged, next tick retries: {result}")
        return True
