"""Pet API client - talks to the remote pet authority over HTTP.

Every call returns a tagged result (Ok / Conflict / TransientError) instead
of raising, so the gate and resolver never look at status codes.
"""

import logging
from datetime import datetime, timezone
from enum import Enum

import httpx
from pydantic import ValidationError

from mongle.config import settings
from mongle.core.gauges import Gauge
from mongle.core.results import Conflict, Ok, RemoteResult, TransientError
from mongle.schemas.pet import GaugeSaveRequest, PetActionRequest, PetStatus

logger = logging.getLogger(__name__)

CONFLICT_STATUS = 409


class ActionKind(str, Enum):
    """User gestures that the server turns into gauge/exp changes."""
    VENTILATE = "ventilate"
    AFFECTION_COMPLETE = "affection-complete"
    COLLECT_SHARD = "collect-shard"


class PetApiClient:
    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        http: httpx.AsyncClient | None = None,
    ):
        self._owns_http = http is None
        self.http = http or httpx.AsyncClient(
            base_url=base_url or settings.API_BASE_URL,
            timeout=timeout or settings.REQUEST_TIMEOUT_SECONDS,
        )

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_http:
            await self.http.aclose()

    async def get_status(self, user_id: int) -> RemoteResult:
        """GET /pet/status - authoritative snapshot."""
        return await self._request("GET", "/pet/status", params={"userId": user_id})

    async def perform_action(self, kind: ActionKind, user_id: int) -> RemoteResult:
        """POST /pet/{action} - one gauge-affecting gesture."""
        body = PetActionRequest(user_id=user_id).model_dump(by_alias=True)
        return await self._request("POST", f"/pet/{kind.value}", json=body)

    async def save_gauges(
        self,
        user_id: int,
        values: dict[Gauge, float],
        timestamp: datetime | None = None,
    ) -> RemoteResult:
        """POST /pet/gauges - best-effort autosave; the response body is ignored."""
        timestamp = timestamp or datetime.now(timezone.utc)
        body = GaugeSaveRequest(
            user_id=user_id,
            affection_gauge=values[Gauge.AFFECTION],
            air_gauge=values[Gauge.AIR],
            energy_gauge=values[Gauge.ENERGY],
            last_update=timestamp.isoformat(),
        ).model_dump(by_alias=True)
        return await self._request("POST", "/pet/gauges", json=body, parse=False)

    async def _request(self, method: str, path: str, parse: bool = True, **kwargs) -> RemoteResult:
        try:
            response = await self.http.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.warning(f"[PetApi] {method} {path} failed: {e!r}")
            return TransientError(reason=f"{type(e).__name__}: {e}")

        if response.status_code == CONFLICT_STATUS:
            logger.info(f"[PetApi] {method} {path} rejected as stale")
            return Conflict(detail=response.text)
        if response.is_error:
            logger.warning(f"[PetApi] {method} {path} returned {response.status_code}")
            return TransientError(reason=f"HTTP {response.status_code}")
        if not parse:
            return Ok()

        try:
            return Ok(PetStatus.model_validate_json(response.content))
        except ValidationError as e:
            logger.warning(f"[PetApi] {method} {path} returned an unreadable status: {e}")
            return TransientError(reason="invalid pet status payload")
