import pytest
from fastapi.testclient import TestClient

from smart_parking.events import EventBus
from smart_parking.registry import SlotRegistry
from smart_parking.server import create_app


@pytest.fixture
def registry() -> SlotRegistry:
    return SlotRegistry()


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture
def client(registry: SlotRegistry, event_bus: EventBus) -> TestClient:
    return TestClient(create_app(registry, event_bus))
