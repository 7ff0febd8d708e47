"""Tagged results of remote pet calls.

The HTTP client is the only place that knows about status codes; everything
downstream branches on these types instead.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from mongle.schemas.pet import PetStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Ok:
    status: PetStatus | None = None  # None when the endpoint has no useful body


@dataclass(frozen=True)
class Conflict:
    """The server rejected a write because its copy of the pet moved on."""
    detail: str = ""


@dataclass(frozen=True)
class TransientError:
    """Timeout, 5xx, offline, bad payload. Retried by the next tick or gesture."""
    reason: str


RemoteResult = Ok | Conflict | TransientError
RemoteCall = Callable[[], Awaitable[RemoteResult]]


async def run_guarded(call: RemoteCall, timeout: float, tag: str) -> RemoteResult:
    """Await ``call`` with a deadline; timeouts and stray exceptions become TransientError."""
    try:
        return await asyncio.wait_for(call(), timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning(f"[{tag}] Request timed out after {timeout}s")
        return TransientError(reason=f"timed out after {timeout}s")
    except Exception as e:
        logger.exception(f"[{tag}] Request raised unexpectedly")
        return TransientError(reason=f"{type(e).__name__}: {e}")
