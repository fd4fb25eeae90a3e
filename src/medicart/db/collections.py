"""JSON collection adapter layered over the key-value store."""

from __future__ import annotations

import json
import logging
from typing import Any, ClassVar, Dict, Generic, Iterable, List, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from medicart import metrics
from medicart.models.cart import CartItem
from medicart.models.reminder import Reminder

from .store import KeyValueStore

logger = logging.getLogger(__name__)

CART_KEY = "medicationCart"
REMINDERS_KEY = "medicationReminders"

ModelT = TypeVar("ModelT", bound=BaseModel)


class CollectionStore:
    """Load and save JSON arrays of records under fixed keys.

    A missing key and a corrupt value both read as an empty collection; corruption
    is logged and counted, never raised.
    """

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    @property
    def store(self) -> KeyValueStore:
        return self._store

    def load(self, key: str) -> List[Dict[str, Any]]:
        raw = self._store.get_item(key)
        if raw is None:
            return []
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as exc:
            self.report_corruption(key, f"invalid JSON: {exc}")
            return []
        if not isinstance(payload, list) or not all(isinstance(record, dict) for record in payload):
            self.report_corruption(key, "expected a JSON array of objects")
            return []
        return payload

    def save(self, key: str, records: Iterable[Dict[str, Any]]) -> None:
        encoded = json.dumps(list(records))
        self._store.set_item(key, encoded)
        metrics.STORE_WRITES.labels(key=key).inc()
        logger.debug("Saved collection", extra={"storage_key": key})

    def revision(self, key: str) -> int:
        return self._store.revision(key)

    def report_corruption(self, key: str, reason: str) -> None:
        metrics.STORAGE_CORRUPTION.labels(key=key).inc()
        logger.warning(
            "Discarding corrupt collection %s: %s",
            key,
            reason,
            extra={"storage_key": key},
        )


class CollectionRepository(Generic[ModelT]):
    """Typed view of one collection."""

    key: ClassVar[str]
    model: ClassVar[Type[BaseModel]]

    def __init__(self, collections: CollectionStore) -> None:
        self._collections = collections

    def load(self) -> List[ModelT]:
        records = self._collections.load(self.key)
        try:
            return [self.model.model_validate(record) for record in records]  # type: ignore[misc]
        except PydanticValidationError as exc:
            self._collections.report_corruption(
                self.key, f"{exc.error_count()} invalid field(s)"
            )
            return []

    def save(self, items: Iterable[ModelT]) -> None:
        self._collections.save(self.key, [item.model_dump(mode="json") for item in items])


class CartRepository(CollectionRepository[CartItem]):
    key = CART_KEY
    model = CartItem


class ReminderRepository(CollectionRepository[Reminder]):
    key = REMINDERS_KEY
    model = Reminder


__all__ = [
    "CART_KEY",
    "REMINDERS_KEY",
    "CollectionStore",
    "CollectionRepository",
    "CartRepository",
    "ReminderRepository",
]
