"""Cart domain operations: validated read-modify-write-notify cycles on the cart."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Iterable, List, Optional

from medicart.db.collections import CartRepository
from medicart.events import EventBus, Topic
from medicart.models.cart import CartItem, CartTotals

logger = logging.getLogger(__name__)

TAX_RATE = Decimal("0.08")


def compute_totals(cart: Iterable[CartItem]) -> CartTotals:
    """Return subtotal, tax and total for ``cart`` without touching storage.

    Amounts are exact; rounding to cents happens only for display.
    """

    subtotal = sum((item.price * item.quantity for item in cart), Decimal("0"))
    return CartTotals(
        subtotal=subtotal,
        tax=subtotal * TAX_RATE,
        total=subtotal * (1 + TAX_RATE),
    )


def _dedupe_by_name(items: Iterable[CartItem], existing: Iterable[CartItem] = ()) -> List[CartItem]:
    seen = {item.name for item in existing}
    unique: List[CartItem] = []
    for item in items:
        if item.name in seen:
            continue
        seen.add(item.name)
        unique.append(item)
    return unique


class CartService:
    """Mutate the persisted cart and announce each change on the bus."""

    def __init__(self, repository: CartRepository, bus: EventBus) -> None:
        self._repository = repository
        self._bus = bus

    def items(self) -> List[CartItem]:
        return self._repository.load()

    def add_medications(self, candidates: Iterable[CartItem]) -> List[CartItem]:
        """Append candidates whose name is not already in the cart.

        Existing entries win: their quantity and fields are left untouched. Returns
        the items that were actually appended.
        """

        cart = self._repository.load()
        added = _dedupe_by_name(candidates, existing=cart)
        self._commit(cart + added)
        logger.info("Added %s medication(s) to cart", len(added))
        return added

    def update_quantity(self, index: int, delta: int) -> Optional[CartItem]:
        """Shift the quantity at ``index`` by ``delta``, never below 1."""

        cart = self._repository.load()
        if not 0 <= index < len(cart):
            logger.debug("Ignoring quantity update for missing cart index %s", index)
            return None
        current = cart[index]
        updated = current.model_copy(update={"quantity": max(1, current.quantity + delta)})
        cart[index] = updated
        self._commit(cart)
        return updated

    def remove_item(self, index: int) -> Optional[CartItem]:
        cart = self._repository.load()
        if not 0 <= index < len(cart):
            logger.debug("Ignoring removal of missing cart index %s", index)
            return None
        removed = cart.pop(index)
        self._commit(cart)
        logger.info("Removed %s from cart", removed.name)
        return removed

    def replace(self, items: Iterable[CartItem]) -> List[CartItem]:
        """Overwrite the whole cart; duplicate names keep their first occurrence."""

        cart = _dedupe_by_name(items)
        self._commit(cart)
        return cart

    def clear(self) -> None:
        self.replace([])

    def _commit(self, cart: List[CartItem]) -> None:
        self._repository.save(cart)
        self._bus.publish(Topic.CART_CHANGED)


__all__ = ["CartService", "TAX_RATE", "compute_totals"]
