"""Tests for derived badge counters."""

from __future__ import annotations

from medicart.models.cart import CartItem
from medicart.models.reminder import Reminder
from medicart.services.counters import (
    BadgeCounts,
    active_reminder_count,
    badge_counts,
    cart_count,
)


def _reminder(reminder_id: str, enabled: bool) -> Reminder:
    return Reminder(id=reminder_id, medication=reminder_id, dosage="1mg", enabled=enabled)


def test_cart_count_is_collection_size():
    assert cart_count([]) == 0
    assert cart_count([CartItem(name="A"), CartItem(name="B")]) == 2


def test_active_reminder_count_ignores_disabled():
    reminders = [_reminder("a", True), _reminder("b", False), _reminder("c", True)]

    assert active_reminder_count(reminders) == 2


def test_badge_counts_combines_both():
    counts = badge_counts([CartItem(name="A")], [_reminder("a", False)])

    assert counts == BadgeCounts(cart=1, reminders=0)
