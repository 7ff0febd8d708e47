"""Recurring timers bound to the engine's lifecycle, and the decay scheduler."""

import asyncio
import logging
from abc import ABC, abstractmethod

from mongle.core.gauges import GAUGE_MAX, GaugeStore

logger = logging.getLogger(__name__)


class PeriodicTask(ABC):
    """Runs ``tick()`` every ``interval`` seconds on the running event loop.

    Owned and explicitly stopped by whoever started it. Starting an already
    running task is a no-op, so a remount can never leave two loops ticking.
    """

    name = "PeriodicTask"

    def __init__(self, interval: float):
        if interval <= 0:
            raise ValueError(f"{self.name} interval must be positive, got {interval}")
        self.interval = interval
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            logger.warning(f"[{self.name}] Already running")
            return
        self._task = asyncio.create_task(self._loop(), name=self.name)
        logger.info(f"[{self.name}] Started (every {self.interval}s)")

    async def stop(self) -> None:
        if self._task is None:
            return
        task, self._task = self._task, None
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            # Only absorb the cancellation we asked for, not one aimed at our caller
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
        logger.info(f"[{self.name}] Stopped")

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                await self.tick()
            except Exception:
                # A broken tick must not kill the timer
                logger.exception(f"[{self.name}] Tick failed")

    @abstractmethod
    async def tick(self) -> None:
        """One cycle of work; subclasses decide what a tick does."""


def decay_per_tick(decay_window: float, tick_interval: float) -> float:
    """Per-tick delta that drains a full gauge to zero in exactly ``decay_window``."""
    if decay_window <= 0:
        raise ValueError(f"decay window must be positive, got {decay_window}")
    return -GAUGE_MAX / (decay_window / tick_interval)


class DecayScheduler(PeriodicTask):
    """Erodes every gauge on a fixed cadence, regardless of network or user."""

    name = "DecayScheduler"

    def __init__(self, store: GaugeStore, decay_window: float, tick_interval: float):
        super().__init__(tick_interval)
        self.store = store
        self.delta = decay_per_tick(decay_window, tick_interval)

    async def tick(self) -> None:
        self.store.apply_deltas(self.delta)
