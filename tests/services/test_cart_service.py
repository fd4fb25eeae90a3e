"""Tests for cart domain operations."""

from __future__ import annotations

from decimal import Decimal

import pytest

from medicart.events import Topic
from medicart.models.cart import CartItem
from medicart.services.cart import compute_totals


@pytest.fixture()
def cart_events(bus):
    events = []
    bus.subscribe(Topic.CART_CHANGED, events.append)
    return events


def test_add_medications_appends_and_publishes(cart_service, sample_items, cart_events):
    added = cart_service.add_medications(sample_items)

    assert added == sample_items
    assert [item.name for item in cart_service.items()] == ["Amoxicillin", "Ibuprofen"]
    assert cart_events == [Topic.CART_CHANGED]


def test_add_medications_keeps_existing_entry(cart_service, sample_items):
    cart_service.add_medications(sample_items)
    cart_service.update_quantity(0, 2)

    added = cart_service.add_medications(
        [CartItem(name="Amoxicillin", dosage="250mg", price=Decimal("1.00")), CartItem(name="Lisinopril")]
    )

    cart = cart_service.items()
    assert [item.name for item in added] == ["Lisinopril"]
    assert [item.name for item in cart] == ["Amoxicillin", "Ibuprofen", "Lisinopril"]
    assert cart[0].quantity == 3
    assert cart[0].dosage == "500mg"


def test_repeated_adds_never_duplicate_names(cart_service, sample_items):
    duplicate_batch = sample_items + sample_items[:1]

    for _ in range(3):
        cart_service.add_medications(duplicate_batch)

    names = [item.name for item in cart_service.items()]
    assert len(names) == len(set(names)) == 2


def test_update_quantity_clamps_at_one(cart_service, sample_items):
    cart_service.add_medications(sample_items)

    updated = cart_service.update_quantity(0, -5)

    assert updated.quantity == 1
    assert cart_service.items()[0].quantity == 1


@pytest.mark.parametrize("index", [2, 10, -1])
def test_update_quantity_out_of_range_is_silent(cart_service, sample_items, cart_events, index):
    cart_service.add_medications(sample_items)
    cart_events.clear()

    assert cart_service.update_quantity(index, 1) is None
    assert cart_service.items() == sample_items
    assert cart_events == []


def test_remove_item(cart_service, sample_items, cart_events):
    cart_service.add_medications(sample_items)

    removed = cart_service.remove_item(0)

    assert removed.name == "Amoxicillin"
    assert [item.name for item in cart_service.items()] == ["Ibuprofen"]
    assert cart_events == [Topic.CART_CHANGED, Topic.CART_CHANGED]


def test_remove_item_out_of_range_is_silent(cart_service, cart_events):
    assert cart_service.remove_item(0) is None
    assert cart_events == []


def test_replace_and_clear(cart_service, sample_items):
    cart_service.add_medications(sample_items)

    replaced = cart_service.replace([CartItem(name="X"), CartItem(name="X", dosage="2mg")])
    assert [item.dosage for item in replaced] == [""]

    cart_service.clear()
    assert cart_service.items() == []


def test_quantity_scenario_totals(cart_service):
    cart_service.add_medications([CartItem(name="A", price=Decimal("10"), quantity=1)])

    cart_service.update_quantity(0, 2)
    cart = cart_service.items()
    totals = compute_totals(cart)

    assert cart[0].quantity == 3
    assert totals.subtotal == Decimal("30.00")
    assert totals.tax == Decimal("2.40")
    assert totals.total == Decimal("32.40")
    assert totals.display() == {"subtotal": "30.00", "tax": "2.40", "total": "32.40"}


def test_compute_totals_is_linear(sample_items):
    cart = [item.model_copy(update={"quantity": 3}) for item in sample_items]
    doubled = [item.model_copy(update={"quantity": item.quantity * 2}) for item in cart]

    single = compute_totals(cart)
    double = compute_totals(doubled)

    assert double.subtotal == single.subtotal * 2
    assert double.tax == single.tax * 2
    assert double.total == single.total * 2


def test_compute_totals_of_empty_cart():
    totals = compute_totals([])

    assert totals.subtotal == totals.tax == totals.total == Decimal("0")


def test_display_rounds_half_up():
    totals = compute_totals([CartItem(name="A", price=Decimal("0.07"))])

    assert totals.tax == Decimal("0.0056")
    assert totals.display()["tax"] == "0.01"
