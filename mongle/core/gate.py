"""Action gate - single-flight guard around authoritative pet writes.

At most one gesture request is outstanding. A gesture that arrives while
another is pending is dropped, not queued: a lost duplicate pat is better
than two concurrent writes corrupting the server's additive gauge updates.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from enum import Enum

from mongle.config import settings
from mongle.core.conflict import ConflictResolver
from mongle.core.gauges import GaugeStore
from mongle.core.results import Conflict, Ok, RemoteCall, run_guarded
from mongle.schemas.pet import PetStatus

logger = logging.getLogger(__name__)


class GateState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"


class ActionGate:
    def __init__(
        self,
        store: GaugeStore,
        resolver: ConflictResolver,
        timeout: float | None = None,
    ):
        self.store = store
        self.resolver = resolver
        self.timeout = timeout if timeout is not None else settings.ACTION_TIMEOUT_SECONDS
        self.state = GateState.IDLE

    @property
    def is_pending(self) -> bool:
        return self.state is GateState.PENDING

    @contextmanager
    def _held(self) -> Iterator[None]:
        # No await between the check in perform() and this assignment, so
        # two gestures on the same loop cannot both get through.
        self.state = GateState.PENDING
        try:
            yield
        finally:
            self.state = GateState.IDLE

    async def perform(self, call: RemoteCall) -> PetStatus | None:
        """Issue ``call`` unless another one is in flight.

        Returns the applied status, or None when the call was dropped,
        failed, or ended in a conflict.
        """
        if self.is_pending:
            logger.debug("[ActionGate] Dropped gesture, another request is in flight")
            return None

        with self._held():
            if self.resolver.is_resyncing and not await self.resolver.resolve():
                logger.warning("[ActionGate] Still out of sync, gesture dropped")
                return None

            result = await run_guarded(call, self.timeout, "ActionGate")

            if isinstance(result, Ok):
                if result.status is not None:
                    self.store.apply_server_snapshot(result.status)
                return result.status
            if isinstance(result, Conflict):
                logger.info("[ActionGate] Write rejected as stale, resyncing")
                await self.resolver.resolve()
                return None

            logger.warning(f"[ActionGate] Request failed, keeping local state: {result.reason}")
            return None
