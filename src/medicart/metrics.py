"""Prometheus metrics definitions for Medicart."""

from __future__ import annotations

from prometheus_client import Counter

STORE_WRITES = Counter(
    "medicart_store_writes_total",
    "Number of collection writes to the shared key-value store",
    ["key"],
)

STORAGE_CORRUPTION = Counter(
    "medicart_storage_corruption_total",
    "Number of stored collections discarded because they failed to parse",
    ["key"],
)

EVENTS_PUBLISHED = Counter(
    "medicart_events_published_total",
    "Number of change notifications published on the event bus",
    ["topic"],
)

SUBSCRIBER_ERRORS = Counter(
    "medicart_subscriber_errors_total",
    "Number of event bus handlers that raised while handling a notification",
    ["topic"],
)

__all__ = [
    "STORE_WRITES",
    "STORAGE_CORRUPTION",
    "EVENTS_PUBLISHED",
    "SUBSCRIBER_ERRORS",
]
