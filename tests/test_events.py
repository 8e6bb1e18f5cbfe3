"""Tests for the in-process event bus."""

import asyncio
import json

from smart_parking.events import EventBus


def test_publish_fans_out_to_subscribers() -> None:
    async def scenario():
        bus = EventBus()
        a, b = bus.subscribe(), bus.subscribe()
        await bus.publish("hello")
        return await a.get(), await b.get()

    assert asyncio.run(scenario()) == ("hello", "hello")


def test_unsubscribed_queue_gets_nothing() -> None:
    async def scenario():
        bus = EventBus()
        q = bus.subscribe()
        bus.unsubscribe(q)
        await bus.publish("ignored")
        return q.empty(), len(bus)

    assert asyncio.run(scenario()) == (True, 0)


def test_full_queue_drops_events() -> None:
    async def scenario():
        bus = EventBus(max_pending=2)
        q = bus.subscribe()
        for i in range(5):
            await bus.publish(str(i))
        return [q.get_nowait() for _ in range(q.qsize())]

    assert asyncio.run(scenario()) == ["0", "1"]


def test_publish_event_encodes_json() -> None:
    async def scenario():
        bus = EventBus()
        q = bus.subscribe()
        await bus.publish_event("vehicle_parked", {"slot": {"slotNo": 3}})
        return json.loads(await q.get())

    assert asyncio.run(scenario()) == {"type": "vehicle_parked", "slot": {"slotNo": 3}}
