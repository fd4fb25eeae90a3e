"""Shared pytest fixtures for the Medicart test suite."""

from __future__ import annotations

from decimal import Decimal
from typing import Generator, List

import pytest

from medicart.app import MedicartApp, create_app
from medicart.config import get_settings
from medicart.db.collections import CartRepository, CollectionStore, ReminderRepository
from medicart.db.store import MemoryKeyValueStore
from medicart.events import EventBus
from medicart.ingest.prescriptions import PrescriptionExtractor
from medicart.models.cart import CartItem
from medicart.services.cart import CartService
from medicart.services.reminders import ReminderService


class SequentialIds:
    """Deterministic reminder id factory."""

    def __init__(self) -> None:
        self.issued = 0

    def __call__(self) -> str:
        self.issued += 1
        return f"rem-{self.issued}"


class FixedCountRandom:
    """Random stand-in whose ``randint`` always returns ``count``."""

    def __init__(self, count: int) -> None:
        self.count = count

    def randint(self, low: int, high: int) -> int:
        return self.count


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch) -> Generator[None, None, None]:
    """Ensure each test uses an isolated store file."""

    store_path = tmp_path / "test_medicart.db"
    monkeypatch.setenv("MEDICART_STORE_PATH", str(store_path))
    get_settings.cache_clear()
    yield
    monkeypatch.delenv("MEDICART_STORE_PATH", raising=False)
    get_settings.cache_clear()


@pytest.fixture()
def store() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture()
def bus() -> EventBus:
    return EventBus()


@pytest.fixture()
def collections(store) -> CollectionStore:
    return CollectionStore(store)


@pytest.fixture()
def cart_repository(collections) -> CartRepository:
    return CartRepository(collections)


@pytest.fixture()
def reminder_repository(collections) -> ReminderRepository:
    return ReminderRepository(collections)


@pytest.fixture()
def cart_service(cart_repository, bus) -> CartService:
    return CartService(cart_repository, bus)


@pytest.fixture()
def reminder_service(reminder_repository, bus) -> ReminderService:
    return ReminderService(reminder_repository, bus, id_factory=SequentialIds())


@pytest.fixture()
def medicart(store, bus) -> MedicartApp:
    """Application wired around the in-memory store with a three-item extractor."""

    return create_app(
        store,
        bus=bus,
        extractor=PrescriptionExtractor(FixedCountRandom(3)),
        id_factory=SequentialIds(),
    )


@pytest.fixture()
def sample_items() -> List[CartItem]:
    """Two medications as produced by the prescription step."""

    return [
        CartItem(
            name="Amoxicillin",
            dosage="500mg",
            frequency="Take 3 times daily",
            duration="10 days",
            price=Decimal("12.99"),
        ),
        CartItem(
            name="Ibuprofen",
            dosage="400mg",
            frequency="Take as needed for pain",
            duration="30 days",
            price=Decimal("8.99"),
        ),
    ]
