"""Derived badge counters computed from the persisted collections."""

from __future__ import annotations

from typing import Sequence

from pydantic import BaseModel, ConfigDict

from medicart.models.cart import CartItem
from medicart.models.reminder import Reminder


class BadgeCounts(BaseModel):
    """Navigation badge values for the cart and reminders entries."""

    cart: int = 0
    reminders: int = 0

    model_config = ConfigDict(frozen=True)


def cart_count(cart: Sequence[CartItem]) -> int:
    return len(cart)


def active_reminder_count(reminders: Sequence[Reminder]) -> int:
    return sum(1 for reminder in reminders if reminder.enabled)


def badge_counts(cart: Sequence[CartItem], reminders: Sequence[Reminder]) -> BadgeCounts:
    return BadgeCounts(cart=cart_count(cart), reminders=active_reminder_count(reminders))


__all__ = ["BadgeCounts", "active_reminder_count", "badge_counts", "cart_count"]
