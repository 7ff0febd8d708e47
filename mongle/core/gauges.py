"""Gauge store - the three decaying need-gauges and their lock flags."""

import logging
from collections.abc import Callable, Mapping
from enum import Enum

from mongle.schemas.pet import PetStatus

logger = logging.getLogger(__name__)

GAUGE_MIN = 0.0
GAUGE_MAX = 100.0
DEFAULT_GAUGE_VALUE = 50.0
# Accumulated decay steps leave ~1e-12 residue; far below any per-tick delta
SNAP_EPSILON = 1e-9

# Hysteresis band: lock at the ceiling, unlock only once drained back down
LOCK_AT = 100.0
UNLOCK_AT = 30.0


class Gauge(str, Enum):
    AFFECTION = "affection"
    AIR = "air"
    ENERGY = "energy"


GaugeListener = Callable[[dict[Gauge, float]], None]


def clamp(value: float) -> float:
    """Saturate into [0, 100], snapping float drift at the bounds."""
    if value <= GAUGE_MIN + SNAP_EPSILON:
        return GAUGE_MIN
    if value >= GAUGE_MAX - SNAP_EPSILON:
        return GAUGE_MAX
    return value


def snapshot_from_status(status: PetStatus) -> dict[Gauge, float]:
    """Pull the gauge values out of a full pet status."""
    return {
        Gauge.AFFECTION: status.affection_gauge,
        Gauge.AIR: status.air_gauge,
        Gauge.ENERGY: status.energy_gauge,
    }


class GaugeStore:
    """Sole owner of gauge values and lock flags inside the client.

    Lock flags are derived: they only change through ``recompute_lock``,
    which every mutation runs for the gauges it touched. Listeners get the
    full value snapshot after each mutation (used for the local cache).
    """

    def __init__(self, initial: float = DEFAULT_GAUGE_VALUE):
        self._values: dict[Gauge, float] = {g: clamp(initial) for g in Gauge}
        self._locked: dict[Gauge, bool] = {g: False for g in Gauge}
        self._listeners: list[GaugeListener] = []
        self.has_server_snapshot = False
        self.last_status: PetStatus | None = None  # full aggregate, for display
        for gauge in Gauge:
            self.recompute_lock(gauge)

    # --- Read access ---

    def value(self, gauge: Gauge) -> float:
        return self._values[gauge]

    def is_locked(self, gauge: Gauge) -> bool:
        return self._locked[gauge]

    def snapshot(self) -> dict[Gauge, float]:
        return dict(self._values)

    def locks(self) -> dict[Gauge, bool]:
        return dict(self._locked)

    def subscribe(self, listener: GaugeListener) -> None:
        self._listeners.append(listener)

    # --- Transitions ---

    def recompute_lock(self, gauge: Gauge) -> bool:
        """Apply the hysteresis rule to one gauge and return the new flag."""
        value = self._values[gauge]
        if value >= LOCK_AT:
            self._locked[gauge] = True
        elif value <= UNLOCK_AT:
            self._locked[gauge] = False
        return self._locked[gauge]

    def apply_delta(self, gauge: Gauge, delta: float) -> float:
        """Shift one gauge by ``delta``, saturating at 0 and 100."""
        self._values[gauge] = clamp(self._values[gauge] + delta)
        self.recompute_lock(gauge)
        self._notify()
        return self._values[gauge]

    def apply_deltas(self, delta: float) -> None:
        """Shift every gauge by the same amount (one decay tick)."""
        for gauge in Gauge:
            self._values[gauge] = clamp(self._values[gauge] + delta)
            self.recompute_lock(gauge)
        self._notify()

    def apply_server_snapshot(self, snapshot: Mapping[Gauge, float] | PetStatus) -> None:
        """Overwrite all three gauges with an authoritative server response.

        Always wins over local values, including local changes made while
        the request was in flight.
        """
        if isinstance(snapshot, PetStatus):
            self.last_status = snapshot
            snapshot = snapshot_from_status(snapshot)
        for gauge in Gauge:
            self._values[gauge] = clamp(float(snapshot[gauge]))
            self.recompute_lock(gauge)
        self.has_server_snapshot = True
        self._notify()

    def seed(self, values: Mapping[Gauge, float]) -> bool:
        """Apply cached values on cold start.

        Ignored once the server has answered in this session: the cache is
        never authoritative. Returns whether the seed was applied.
        """
        if self.has_server_snapshot:
            logger.debug("[GaugeStore] Ignoring cache seed, server snapshot already applied")
            return False
        for gauge in Gauge:
            self._values[gauge] = clamp(float(values[gauge]))
            self.recompute_lock(gauge)
        return True

    def _notify(self) -> None:
        values = self.snapshot()
        for listener in self._listeners:
            listener(values)
