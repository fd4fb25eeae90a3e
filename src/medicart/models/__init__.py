"""Pydantic models defining the persisted collections."""

from medicart.models.cart import CartItem, CartTotals
from medicart.models.reminder import Reminder, ReminderDraft

__all__ = [
    "CartItem",
    "CartTotals",
    "Reminder",
    "ReminderDraft",
]
