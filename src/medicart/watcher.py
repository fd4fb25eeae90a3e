"""Background watcher turning writes from other processes into bus notifications."""

from __future__ import annotations

import logging
import threading
from typing import Dict, List, Mapping, Optional

from medicart.db.collections import CART_KEY, REMINDERS_KEY
from medicart.db.store import KeyValueStore
from medicart.events import EventBus, Topic

logger = logging.getLogger(__name__)

DEFAULT_KEY_TOPICS: Mapping[str, Topic] = {
    CART_KEY: Topic.CART_CHANGED,
    REMINDERS_KEY: Topic.REMINDERS_CHANGED,
}


class StorageWatcher:
    """Poll per-key revisions and republish changes made outside this process.

    Delivery is opportunistic: several writes between two polls collapse into one
    notification. The first poll records a baseline and publishes nothing.

    After :meth:`start`, handlers run on the watcher's daemon thread rather than
    the caller's. Surfaces only reload from the store when notified, so a refresh
    racing a local write at worst shows stale state until the next poll. Callers
    that need single-threaded delivery drive :meth:`poll_once` from their own loop.
    """

    def __init__(
        self,
        store: KeyValueStore,
        bus: EventBus,
        *,
        key_topics: Mapping[str, Topic] = DEFAULT_KEY_TOPICS,
        poll_interval: float = 1.0,
    ) -> None:
        self._store = store
        self._bus = bus
        self._key_topics = dict(key_topics)
        self._poll_interval = poll_interval
        self._revisions: Optional[Dict[str, int]] = None
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def poll_once(self) -> List[Topic]:
        """Compare revisions against the last poll and publish for changed keys."""

        current = {key: self._store.revision(key) for key in self._key_topics}
        previous, self._revisions = self._revisions, current
        if previous is None:
            return []

        changed = [
            self._key_topics[key] for key, revision in current.items() if previous.get(key) != revision
        ]
        if not changed:
            return []

        logger.debug("Storage changed for %s", [topic.value for topic in changed])
        for topic in changed:
            self._bus.publish(topic)
        self._bus.publish(Topic.STORAGE_CHANGED)
        return changed

    def start(self) -> None:
        """Spawn the polling loop in a daemon thread."""

        if self._thread and self._thread.is_alive():
            logger.debug("Storage watcher already running")
            return
        logger.info("Starting storage watcher poll_interval=%s", self._poll_interval)
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run_loop,
            name="medicart-storage-watcher",
            daemon=True,
        )
        self._thread.start()

    def stop(self) -> None:
        """Signal the loop to exit and wait briefly for shutdown."""

        if not self._thread:
            return
        logger.info("Stopping storage watcher")
        self._stop_event.set()
        self._thread.join(timeout=self._poll_interval + 1)
        self._thread = None

    def _run_loop(self) -> None:
        while not self._stop_event.is_set():
            try:
                self.poll_once()
            except Exception:  # pragma: no cover - keep watching after a failed delivery
                logger.exception("Storage watcher poll failed")
            if self._stop_event.wait(self._poll_interval):
                break


__all__ = ["DEFAULT_KEY_TOPICS", "StorageWatcher"]
