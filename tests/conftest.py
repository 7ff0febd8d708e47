"""Shared test fixtures - an in-process fake pet server and an in-memory Redis."""

import asyncio

import fakeredis
import pytest
from fakeredis import aioredis as fake_aioredis
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from httpx import ASGITransport, AsyncClient

from mongle.core.cache import LocalCache
from mongle.core.engine import PetEngine
from mongle.schemas.profile import TimingProfile
from mongle.services.pet_client import PetApiClient

TEST_USER_ID = 1


class FakePetServer:
    """Stands in for the remote pet authority.

    Knobs:
    - ``conflicts``: number of upcoming action writes to reject with 409
    - ``fail``: path tail ("status", "ventilate", "gauges", ...) -> forced status code
    - ``hold``: when set to an Event, action handlers wait on it before answering
    """

    def __init__(self):
        self.status = {
            "userId": TEST_USER_ID,
            "level": 1,
            "currentExp": 0,
            "requiredExp": 100,
            "sunlight": 0,
            "affection": 0,
            "evolutionStage": "BABY",
            "ventilationAvailable": True,
            "affectionGauge": 50.0,
            "airGauge": 50.0,
            "energyGauge": 50.0,
        }
        self.calls: list[str] = []
        self.saved: list[dict] = []
        self.conflicts = 0
        self.fail: dict[str, int] = {}
        self.hold: asyncio.Event | None = None
        self.entered = asyncio.Event()

    def count(self, tail: str) -> int:
        return self.calls.count(tail)

    def apply_action(self, action: str) -> None:
        if action == "ventilate":
            self.status["airGauge"] = 100.0
            self.status["ventilationAvailable"] = False
            self.status["currentExp"] += 5
        elif action == "affection-complete":
            self.status["affectionGauge"] = 0.0
            self.status["currentExp"] += 40
        elif action == "collect-shard":
            self.status["energyGauge"] = min(100.0, self.status["energyGauge"] + 10.0)
            self.status["currentExp"] += 10
            self.status["sunlight"] += 5


def make_app(server: FakePetServer) -> FastAPI:
    app = FastAPI()

    @app.get("/api/pet/status")
    async def get_status(userId: int):
        server.calls.append("status")
        if "status" in server.fail:
            return JSONResponse({"error": "boom"}, status_code=server.fail["status"])
        return server.status

    @app.post("/api/pet/gauges")
    async def save_gauges(request: Request):
        server.calls.append("gauges")
        if "gauges" in server.fail:
            return JSONResponse({"error": "boom"}, status_code=server.fail["gauges"])
        body = await request.json()
        server.saved.append(body)
        for key in ("affectionGauge", "airGauge", "energyGauge"):
            server.status[key] = body[key]
        return server.status

    @app.post("/api/pet/{action}")
    async def perform_action(action: str, request: Request):
        server.calls.append(action)
        server.entered.set()
        await request.json()
        if server.hold is not None:
            await server.hold.wait()
        if action in server.fail:
            return JSONResponse({"error": "boom"}, status_code=server.fail[action])
        if server.conflicts > 0:
            server.conflicts -= 1
            return JSONResponse({"error": "stale pet status"}, status_code=409)
        server.apply_action(action)
        return server.status

    return app


@pytest.fixture
def pet_server():
    return FakePetServer()


@pytest.fixture
async def http(pet_server):
    """Async HTTP client routed into the fake pet server."""
    transport = ASGITransport(app=make_app(pet_server))
    async with AsyncClient(transport=transport, base_url="http://test/api") as ac:
        yield ac


@pytest.fixture
def pet_client(http):
    return PetApiClient(http=http)


@pytest.fixture
async def fake_redis():
    client = fake_aioredis.FakeRedis(server=fakeredis.FakeServer(), decode_responses=True)
    yield client
    await client.aclose()


@pytest.fixture
def cache(fake_redis):
    return LocalCache(fake_redis, TEST_USER_ID)


@pytest.fixture
def slow_profile():
    """Timers too slow to fire during a test; tests call tick() themselves."""
    return TimingProfile(
        name="test",
        decay_window_seconds=36000,
        decay_tick_seconds=3600,
        autosave_interval_seconds=3600,
    )


@pytest.fixture
async def engine(pet_client, cache, slow_profile):
    """Engine wired to the fake server and fake Redis, not yet started."""
    eng = PetEngine(
        pet_client,
        cache=cache,
        user_id=TEST_USER_ID,
        profile=slow_profile,
        action_timeout=2.0,
    )
    yield eng
    await eng.stop()
