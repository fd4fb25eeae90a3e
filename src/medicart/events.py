"""In-process change notification bus."""

from __future__ import annotations

import enum
import logging
from collections import defaultdict
from contextlib import contextmanager
from typing import Callable, Dict, Iterable, Iterator, List, Union

from medicart import metrics

logger = logging.getLogger(__name__)


class Topic(str, enum.Enum):
    """Named change channels, one per persisted collection plus the cross-process signal."""

    CART_CHANGED = "cart-changed"
    REMINDERS_CHANGED = "reminders-changed"
    STORAGE_CHANGED = "storage"


Handler = Callable[[Topic], None]


class EventBus:
    """Synchronous publish/subscribe channel keyed by :class:`Topic`.

    Handlers run in registration order on the publisher's thread. Delivery iterates
    over a snapshot of the subscriber list, so handlers may subscribe or unsubscribe
    while a publish is in progress. A handler that raises is logged and counted;
    delivery continues with the next handler.
    """

    def __init__(self) -> None:
        self._handlers: Dict[Topic, List[Handler]] = defaultdict(list)

    def subscribe(self, topic: Topic, handler: Handler) -> None:
        self._handlers[topic].append(handler)

    def unsubscribe(self, topic: Topic, handler: Handler) -> None:
        """Remove ``handler`` from ``topic``; unknown handlers are ignored."""

        handlers = self._handlers.get(topic)
        if not handlers:
            return
        try:
            handlers.remove(handler)
        except ValueError:
            return

    def publish(self, topic: Topic) -> int:
        """Notify every handler subscribed to ``topic`` and return how many ran."""

        handlers = list(self._handlers.get(topic, ()))
        metrics.EVENTS_PUBLISHED.labels(topic=topic.value).inc()
        logger.debug(
            "Publishing %s to %s handler(s)",
            topic.value,
            len(handlers),
            extra={"topic": topic.value},
        )
        for handler in handlers:
            try:
                handler(topic)
            except Exception:
                metrics.SUBSCRIBER_ERRORS.labels(topic=topic.value).inc()
                logger.exception(
                    "Subscriber failed while handling %s",
                    topic.value,
                    extra={"topic": topic.value},
                )
        return len(handlers)

    def subscriber_count(self, topic: Topic) -> int:
        return len(self._handlers.get(topic, ()))

    @contextmanager
    def subscription(
        self,
        topics: Union[Topic, Iterable[Topic]],
        handler: Handler,
    ) -> Iterator[None]:
        """Subscribe ``handler`` for the duration of the block.

        Every topic subscribed so far is released on exit, including when a later
        subscription or the body raises.
        """

        wanted = [topics] if isinstance(topics, Topic) else list(topics)
        acquired: List[Topic] = []
        try:
            for topic in wanted:
                self.subscribe(topic, handler)
                acquired.append(topic)
            yield
        finally:
            for topic in reversed(acquired):
                self.unsubscribe(topic, handler)


__all__ = ["EventBus", "Handler", "Topic"]
