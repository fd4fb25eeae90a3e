"""Headless screens that cache collection state and stay in sync through the bus."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, ClassVar, Iterator, List, Mapping, Optional, Tuple, TypeVar

from medicart.db.collections import CartRepository, ReminderRepository
from medicart.events import EventBus, Topic
from medicart.ingest.prescriptions import PrescriptionUploader, UploadResult
from medicart.models.cart import CartItem, CartTotals
from medicart.models.reminder import Reminder, ReminderDraft
from medicart.services.cart import CartService, compute_totals
from medicart.services.counters import BadgeCounts, active_reminder_count, badge_counts
from medicart.services.reminders import ReminderId, ReminderService

logger = logging.getLogger(__name__)

SurfaceT = TypeVar("SurfaceT", bound="Surface")


class Surface(ABC):
    """Base class for a mounted view holding a transient copy of stored state."""

    topics: ClassVar[Tuple[Topic, ...]] = ()

    def __init__(self, bus: EventBus) -> None:
        self._bus = bus
        self._mounted = False

    @property
    def is_mounted(self) -> bool:
        return self._mounted

    @contextmanager
    def mount(self: SurfaceT) -> Iterator[SurfaceT]:
        """Subscribe, load initial state and release the subscription on exit."""

        with self._bus.subscription(self.topics, self._on_change):
            self.refresh()
            self._mounted = True
            logger.debug("Mounted %s", type(self).__name__)
            try:
                yield self
            finally:
                self._mounted = False
                logger.debug("Unmounted %s", type(self).__name__)

    def _on_change(self, topic: Topic) -> None:
        self.refresh()

    @abstractmethod
    def refresh(self) -> None:
        """Reload cached state from storage."""


class HeaderBadges(Surface):
    """Navigation header showing cart size and active reminder count."""

    topics = (Topic.CART_CHANGED, Topic.REMINDERS_CHANGED, Topic.STORAGE_CHANGED)

    def __init__(
        self,
        bus: EventBus,
        cart: CartRepository,
        reminders: ReminderRepository,
    ) -> None:
        super().__init__(bus)
        self._cart = cart
        self._reminders = reminders
        self.counts = BadgeCounts()

    def refresh(self) -> None:
        self.counts = badge_counts(self._cart.load(), self._reminders.load())


class CartScreen(Surface):
    topics = (Topic.CART_CHANGED, Topic.STORAGE_CHANGED)

    def __init__(self, bus: EventBus, cart: CartService, reminders: ReminderService) -> None:
        super().__init__(bus)
        self._cart = cart
        self._reminders = reminders
        self.items: List[CartItem] = []

    @property
    def totals(self) -> CartTotals:
        return compute_totals(self.items)

    def refresh(self) -> None:
        self.items = self._cart.items()

    def increment(self, index: int) -> Optional[CartItem]:
        return self._cart.update_quantity(index, 1)

    def decrement(self, index: int) -> Optional[CartItem]:
        return self._cart.update_quantity(index, -1)

    def remove(self, index: int) -> Optional[CartItem]:
        return self._cart.remove_item(index)

    def setup_reminders(self) -> List[Reminder]:
        """Turn every medication in the stored cart into a default reminder."""

        return self._reminders.create_from_cart(self._cart.items())


class RemindersScreen(Surface):
    topics = (Topic.REMINDERS_CHANGED, Topic.STORAGE_CHANGED)

    def __init__(self, bus: EventBus, reminders: ReminderService) -> None:
        super().__init__(bus)
        self._reminders = reminders
        self.reminders: List[Reminder] = []

    @property
    def active_count(self) -> int:
        return active_reminder_count(self.reminders)

    def refresh(self) -> None:
        self.reminders = self._reminders.items()

    def create(self, draft: ReminderDraft | Mapping[str, Any]) -> Reminder:
        return self._reminders.create(draft)

    def toggle(self, reminder_id: ReminderId) -> Optional[Reminder]:
        return self._reminders.toggle(reminder_id)

    def update(self, reminder_id: ReminderId, fields: Mapping[str, Any]) -> Optional[Reminder]:
        return self._reminders.update(reminder_id, fields)

    def delete(self, reminder_id: ReminderId) -> bool:
        return self._reminders.delete(reminder_id)

    def add_time(self, reminder_id: ReminderId, time: str) -> Optional[Reminder]:
        return self._reminders.add_time(reminder_id, time)

    def remove_time(self, reminder_id: ReminderId, index: int) -> Optional[Reminder]:
        return self._reminders.remove_time(reminder_id, index)


class UploadScreen(Surface):
    """Prescription upload view; keeps the last extraction result only."""

    def __init__(self, bus: EventBus, uploader: PrescriptionUploader) -> None:
        super().__init__(bus)
        self._uploader = uploader
        self.last_result: Optional[UploadResult] = None

    def refresh(self) -> None:
        return None

    def upload(self, filename: str, *, content_type: Optional[str], size_bytes: int) -> UploadResult:
        self.last_result = self._uploader.upload(
            filename, content_type=content_type, size_bytes=size_bytes
        )
        return self.last_result


__all__ = [
    "CartScreen",
    "HeaderBadges",
    "RemindersScreen",
    "Surface",
    "UploadScreen",
]
