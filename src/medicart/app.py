"""Application wiring: one store, one bus and the services built on them."""

from __future__ import annotations

import dataclasses
import logging
import random
from typing import Callable, Optional

from medicart.config import Settings, get_settings
from medicart.db.collections import CartRepository, CollectionStore, ReminderRepository
from medicart.db.repository import SqliteKeyValueStore
from medicart.db.store import KeyValueStore
from medicart.events import EventBus
from medicart.ingest.prescriptions import PrescriptionExtractor, PrescriptionUploader
from medicart.services.cart import CartService
from medicart.services.reminders import ReminderService, new_reminder_id
from medicart.surfaces import CartScreen, HeaderBadges, RemindersScreen, UploadScreen
from medicart.watcher import StorageWatcher

logger = logging.getLogger(__name__)


@dataclasses.dataclass
class MedicartApp:
    """Explicit dependency container handed to surfaces and the CLI."""

    settings: Settings
    store: KeyValueStore
    bus: EventBus
    cart_repository: CartRepository
    reminder_repository: ReminderRepository
    cart: CartService
    reminders: ReminderService
    uploader: PrescriptionUploader

    def header_badges(self) -> HeaderBadges:
        return HeaderBadges(self.bus, self.cart_repository, self.reminder_repository)

    def cart_screen(self) -> CartScreen:
        return CartScreen(self.bus, self.cart, self.reminders)

    def reminders_screen(self) -> RemindersScreen:
        return RemindersScreen(self.bus, self.reminders)

    def upload_screen(self) -> UploadScreen:
        return UploadScreen(self.bus, self.uploader)

    def storage_watcher(self, poll_interval: Optional[float] = None) -> StorageWatcher:
        return StorageWatcher(
            self.store,
            self.bus,
            poll_interval=poll_interval or self.settings.watch_poll_interval,
        )

    def close(self) -> None:
        self.store.close()
        logger.debug("Closed store")


def create_app(
    store: Optional[KeyValueStore] = None,
    *,
    settings: Optional[Settings] = None,
    bus: Optional[EventBus] = None,
    extractor: Optional[PrescriptionExtractor] = None,
    id_factory: Optional[Callable[[], str]] = None,
) -> MedicartApp:
    """Build the services around ``store`` (the configured SQLite file by default)."""

    settings = settings or get_settings()
    if store is None:
        store = SqliteKeyValueStore.open(settings.store_path)
        logger.debug("Opened store at %s", settings.store_path)
    bus = bus or EventBus()

    collections = CollectionStore(store)
    cart_repository = CartRepository(collections)
    reminder_repository = ReminderRepository(collections)
    cart = CartService(cart_repository, bus)
    reminders = ReminderService(reminder_repository, bus, id_factory=id_factory or new_reminder_id)
    extractor = extractor or PrescriptionExtractor(random.Random(settings.extractor_seed))

    return MedicartApp(
        settings=settings,
        store=store,
        bus=bus,
        cart_repository=cart_repository,
        reminder_repository=reminder_repository,
        cart=cart,
        reminders=reminders,
        uploader=PrescriptionUploader(extractor, cart),
    )


__all__ = ["MedicartApp", "create_app"]
