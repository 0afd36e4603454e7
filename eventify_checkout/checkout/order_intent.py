"""
Order intent builder.

Pure transform from cart contents and checkout form state to the request
body for order initialization. Callers validate first: items must be
non-empty and the email well formed. No price, subtotal or total is copied
across; the backend prices the order itself.
"""

from typing import Sequence

from eventify_checkout.integrations.contracts.interfaces import CartItem, CustomerContact
from eventify_checkout.integrations.contracts.orders import CustomerPayload, OrderInitRequest, OrderItemIntent


def build_order_intent(email: str, items: Sequence[CartItem], customer: CustomerContact) -> OrderInitRequest:
    return OrderInitRequest(
        email=email,
        items=[
            OrderItemIntent(event_id=item.event_id, tier_name=item.tier_name, quantity=item.quantity)
            for item in items
        ],
        customer=CustomerPayload(**customer.to_payload()),
    )
