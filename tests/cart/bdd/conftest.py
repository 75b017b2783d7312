"""Shared BDD fixtures and step definitions for the cart."""

import asyncio

import pytest
from pytest_bdd import given, parsers, then

from storefront.cart.store import CartStore


@pytest.fixture()
def store(cart_service):
    return CartStore(cart_service)


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("an empty cart")
def empty_cart(store):
    asyncio.run(store.load())
    assert store.cart.is_empty


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the cart total is {total:d}"))
def cart_total_is(store, total):
    assert store.total == total


@then(parsers.cfparse("the selected total is {total:d}"))
def selected_total_is(store, total):
    assert store.selected_total == total


@then("the cart is empty")
def cart_is_empty(store):
    assert store.cart.is_empty
    assert len(store.selection) == 0
