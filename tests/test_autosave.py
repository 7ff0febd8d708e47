"""Tests for the autosave pump."""

import asyncio

from mongle.core.autosave import AutosavePump
from mongle.core.conflict import ConflictResolver
from mongle.core.gate import ActionGate
from mongle.core.gauges import Gauge, GaugeStore
from mongle.core.results import Conflict, Ok, TransientError
from mongle.schemas.pet import PetStatus


class RecordingSave:
    """Records what the pump sends and answers with scripted results."""

    def __init__(self, *results):
        self.results = list(results)
        self.sent = []

    async def __call__(self, values):
        self.sent.append(values)
        return self.results.pop(0)


def _pump(save, interval=60):
    store = GaugeStore()

    async def fetch():
        return TransientError("unused")

    gate = ActionGate(store, ConflictResolver(store, fetch), timeout=1.0)
    return AutosavePump(store, gate, save, interval=interval)


async def test_idle_tick_sends_current_values():
    save = RecordingSave(Ok())
    pump = _pump(save)
    pump.store.apply_delta(Gauge.AIR, -12.5)

    assert await pump.tick() is True
    assert save.sent == [{Gauge.AFFECTION: 50.0, Gauge.AIR: 37.5, Gauge.ENERGY: 50.0}]


async def test_tick_while_action_pending_sends_nothing():
    save = RecordingSave(Ok())
    pump = _pump(save)
    release = asyncio.Event()

    async def slow_action():
        await release.wait()
        return Ok(PetStatus(affection_gauge=1, air_gauge=2, energy_gauge=3))

    action = asyncio.create_task(pump.gate.perform(slow_action))
    await asyncio.sleep(0)
    assert pump.gate.is_pending

    assert await pump.tick() is False
    assert save.sent == []

    release.set()
    await action

    # Next cycle picks up whatever the action left behind
    assert await pump.tick() is True
    assert save.sent == [{Gauge.AFFECTION: 1.0, Gauge.AIR: 2.0, Gauge.ENERGY: 3.0}]


async def test_failures_are_swallowed():
    save = RecordingSave(TransientError("HTTP 500"), Conflict("stale"))
    pump = _pump(save)

    assert await pump.tick() is True
    assert await pump.tick() is True
    assert len(save.sent) == 2
    # Autosave never resyncs; conflicts there are just dropped
    assert not pump.gate.resolver.is_resyncing


async def test_timer_flushes_periodically():
    save = RecordingSave(*[Ok()] * 50)
    pump = _pump(save, interval=0.01)
    pump.start()
    for _ in range(100):
        if len(save.sent) >= 2:
            break
        await asyncio.sleep(0.01)
    await pump.stop()
    assert len(save.sent) >= 2


async def test_save_to_server_payload(pet_client, pet_server):
    store = GaugeStore()
    gate = ActionGate(store, ConflictResolver(store, lambda: pet_client.get_status(1)))
    pump = AutosavePump(store, gate, lambda values: pet_client.save_gauges(1, values), interval=60)
    store.apply_delta(Gauge.ENERGY, -20)

    await pump.tick()

    assert pet_server.count("gauges") == 1
    body = pet_server.saved[0]
    assert body["userId"] == 1
    assert body["affectionGauge"] == 50.0
    assert body["airGauge"] == 50.0
    assert body["energyGauge"] == 30.0
    assert body["lastUpdate"]


async def test_server_error_on_save_is_swallowed(pet_client, pet_server):
    pet_server.fail["gauges"] = 503
    store = GaugeStore()
    gate = ActionGate(store, ConflictResolver(store, lambda: pet_client.get_status(1)))
    pump = AutosavePump(store, gate, lambda values: pet_client.save_gauges(1, values), interval=60)

    assert await pump.tick() is True
    assert pet_server.saved == []
    assert store.value(Gauge.AIR) == 50.0


async def test_tick_after_failed_resync_sends_nothing():
    save = RecordingSave(Ok())
    pump = _pump(save)
    assert await pump.gate.resolver.resolve() is False  # fetch fails, values are stale

    assert await pump.tick() is False
    assert save.sent == []
