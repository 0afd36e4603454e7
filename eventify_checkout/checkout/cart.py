"""
In-memory cart store.

Checkout only relies on get_items() and clear(); the rest is what the cart
page uses to edit quantities and show an estimated total.
"""

import logging
from dataclasses import replace
from typing import Dict, List, Sequence, Tuple

from eventify_checkout.checkout.pricing import DisplayTotals, order_totals
from eventify_checkout.integrations.contracts.interfaces import CartItem, CartStore

logger = logging.getLogger(__name__)


class InMemoryCart(CartStore):
    def __init__(self, items: Sequence[CartItem] = ()):
        self._items: Dict[Tuple[str, str], CartItem] = {}
        for item in items:
            self.add_item(item)

    def get_items(self) -> List[CartItem]:
        return list(self._items.values())

    def clear(self) -> None:
        self._items.clear()
        logger.info("Cart cleared")

    def add_item(self, item: CartItem) -> CartItem:
        """Add an item, merging with an existing line for the same tier."""
        key = (item.event_id, item.tier_id)
        existing = self._items.get(key)
        quantity = item.quantity + (existing.quantity if existing else 0)
        stored = replace(item, quantity=_clamp(quantity, item.max_quantity))
        self._items[key] = stored
        return stored

    def update_quantity(self, event_id: str, tier_id: str, quantity: int) -> None:
        key = (event_id, tier_id)
        item = self._items.get(key)
        if item is None:
            raise KeyError(f"No cart line for event {event_id} tier {tier_id}")
        if quantity <= 0:
            del self._items[key]
            return
        self._items[key] = replace(item, quantity=_clamp(quantity, item.max_quantity))

    def remove_item(self, event_id: str, tier_id: str) -> None:
        self._items.pop((event_id, tier_id), None)

    def display_totals(self) -> DisplayTotals:
        """Estimated totals for the cart page. Display only."""
        subtotal = sum(item.unit_price_minor_units * item.quantity for item in self._items.values())
        return order_totals(subtotal)

    def __len__(self) -> int:
        return len(self._items)


def _clamp(quantity: int, max_quantity: int) -> int:
    if max_quantity > 0:
        return max(1, min(quantity, max_quantity))
    return max(1, quantity)
