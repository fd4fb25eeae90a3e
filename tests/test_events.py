"""Tests for the change notification bus."""

from __future__ import annotations

import logging

import pytest
from prometheus_client import REGISTRY

from medicart.events import EventBus, Topic
from medicart.models.cart import CartItem


def test_publish_calls_handlers_in_registration_order(bus):
    calls = []
    bus.subscribe(Topic.CART_CHANGED, lambda topic: calls.append(("first", topic)))
    bus.subscribe(Topic.CART_CHANGED, lambda topic: calls.append(("second", topic)))

    delivered = bus.publish(Topic.CART_CHANGED)

    assert delivered == 2
    assert calls == [("first", Topic.CART_CHANGED), ("second", Topic.CART_CHANGED)]


def test_topics_are_independent(bus):
    calls = []
    bus.subscribe(Topic.REMINDERS_CHANGED, calls.append)

    assert bus.publish(Topic.CART_CHANGED) == 0
    assert calls == []


def test_unsubscribe_stops_delivery(bus):
    calls = []
    bus.subscribe(Topic.CART_CHANGED, calls.append)
    bus.unsubscribe(Topic.CART_CHANGED, calls.append)
    bus.unsubscribe(Topic.CART_CHANGED, calls.append)

    bus.publish(Topic.CART_CHANGED)

    assert calls == []


def test_handler_may_unsubscribe_during_delivery(bus):
    calls = []

    def once(topic):
        calls.append("once")
        bus.unsubscribe(topic, once)

    bus.subscribe(Topic.CART_CHANGED, once)
    bus.subscribe(Topic.CART_CHANGED, lambda topic: calls.append("always"))

    bus.publish(Topic.CART_CHANGED)
    bus.publish(Topic.CART_CHANGED)

    assert calls == ["once", "always", "always"]


def _subscriber_errors(topic: Topic) -> float:
    return REGISTRY.get_sample_value("medicart_subscriber_errors_total", {"topic": topic.value}) or 0.0


def test_failing_handler_does_not_stop_later_handlers(bus, caplog):
    calls = []

    def broken(topic):
        raise RuntimeError("render failed")

    bus.subscribe(Topic.CART_CHANGED, broken)
    bus.subscribe(Topic.CART_CHANGED, calls.append)
    before = _subscriber_errors(Topic.CART_CHANGED)

    with caplog.at_level(logging.ERROR, logger="medicart.events"):
        delivered = bus.publish(Topic.CART_CHANGED)

    assert delivered == 2
    assert calls == [Topic.CART_CHANGED]
    assert _subscriber_errors(Topic.CART_CHANGED) == before + 1
    assert "Subscriber failed while handling cart-changed" in caplog.text


def test_cart_change_is_kept_when_a_subscriber_fails(medicart):
    def broken(topic):
        raise RuntimeError("render failed")

    medicart.bus.subscribe(Topic.CART_CHANGED, broken)

    with medicart.header_badges().mount() as header:
        added = medicart.cart.add_medications([CartItem(name="A")])

        assert [item.name for item in added] == ["A"]
        assert len(medicart.cart.items()) == 1
        assert header.counts.cart == 1


def test_subscription_releases_on_exit(bus):
    calls = []

    with bus.subscription([Topic.CART_CHANGED, Topic.REMINDERS_CHANGED], calls.append):
        assert bus.subscriber_count(Topic.CART_CHANGED) == 1
        bus.publish(Topic.REMINDERS_CHANGED)

    bus.publish(Topic.CART_CHANGED)
    assert calls == [Topic.REMINDERS_CHANGED]
    assert bus.subscriber_count(Topic.CART_CHANGED) == 0
    assert bus.subscriber_count(Topic.REMINDERS_CHANGED) == 0


def test_subscription_releases_when_body_raises():
    bus = EventBus()

    with pytest.raises(ValueError):
        with bus.subscription(Topic.STORAGE_CHANGED, lambda topic: None):
            raise ValueError("mount failed")

    assert bus.subscriber_count(Topic.STORAGE_CHANGED) == 0


def test_topic_values_match_event_names():
    assert Topic.CART_CHANGED.value == "cart-changed"
    assert Topic.REMINDERS_CHANGED.value == "reminders-changed"
    assert Topic.STORAGE_CHANGED.value == "storage"
