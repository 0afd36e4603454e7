"""Pytest fixtures for checkout orchestration and verification tests."""

import pytest

from eventify_checkout.checkout.cart import InMemoryCart
from eventify_checkout.checkout.notices import CollectingNotifier
from eventify_checkout.integrations.clients.mocks.backend import MockCheckoutBackend
from eventify_checkout.integrations.contracts.interfaces import CartItem, CustomerContact


@pytest.fixture
def contact():
    return CustomerContact(
        first_name="Ada",
        last_name="Obi",
        email="a@b.com",
        phone="08030000000",
        city="Lagos",
        state="Lagos",
        country="NG",
    )


@pytest.fixture
def vip_item():
    return CartItem(
        event_id="E1",
        tier_id="E1-VIP",
        quantity=2,
        max_quantity=10,
        tier_name="VIP",
        event_title="Lagos Jazz Night",
        unit_price_minor_units=1,
    )


@pytest.fixture
def cart(vip_item):
    return InMemoryCart([vip_item])


@pytest.fixture
def notifier():
    return CollectingNotifier()


@pytest.fixture
def backend():
    """In-memory storefront backend."""
    return MockCheckoutBackend(settle_after=1)
