"""Domain operations over the cart and reminder collections."""

from .cart import TAX_RATE, CartService, compute_totals
from .counters import BadgeCounts, active_reminder_count, badge_counts, cart_count
from .reminders import ReminderService, new_reminder_id

__all__ = [
    "TAX_RATE",
    "BadgeCounts",
    "CartService",
    "ReminderService",
    "active_reminder_count",
    "badge_counts",
    "cart_count",
    "compute_totals",
    "new_reminder_id",
]
