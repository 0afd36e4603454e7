"""
Storefront backend — MOCK client.

⚠️  In-memory stand-in for the real order initialization and verification
    endpoints. No network calls. Implements the same initialize()/verify()
    surface as the real HTTP clients and raises the same errors, so the
    checkout flow can run end-to-end in development and tests.

Behaviour:
- initialize(...) prices every line from the tier catalogue (never from the
  request), checks stock and stores a PENDING order under a fresh reference
- verify(...) reports "pending" for the first ``settle_after`` reads of an
  order whose payment was marked as made, then "success" for good; unknown
  references give NotFound; orders marked declined report "failed"
"""

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from eventify_checkout.checkout.errors import NotFound
from eventify_checkout.checkout.pricing import order_totals
from eventify_checkout.integrations.contracts.interfaces import OrderInitResult
from eventify_checkout.integrations.contracts.orders import OrderInitRequest
from eventify_checkout.integrations.policy.response_wrappers import (
    VerificationResponseModel,
    normalize_order_init_response,
    normalize_verification_response,
)

logger = logging.getLogger(__name__)


@dataclass
class TierListing:
    event_id: str
    event_title: str
    tier_name: str
    price_minor_units: int
    available: int


@dataclass
class MockOrder:
    reference: str
    email: str
    customer: Dict[str, Any]
    items: List[Dict[str, Any]]
    subtotal: int
    service_fee: int
    vat: int
    amount_minor_units: int
    status: str = "pending"
    paid: bool = False
    declined: bool = False
    verify_reads: int = 0
    order_id: str = field(default_factory=lambda: uuid.uuid4().hex[:24])


# ---------------------------------------------------------------------------
# Seed data
# ---------------------------------------------------------------------------

_MOCK_CATALOGUE: List[TierListing] = [
    TierListing("E1", "Lagos Jazz Night", "Regular", 500_000, 200),
    TierListing("E1", "Lagos Jazz Night", "VIP", 2_500_000, 20),
    TierListing("E2", "Abuja Tech Summit", "Early Bird", 150_000, 50),
    TierListing("E2", "Abuja Tech Summit", "Standard", 1_000_000, 5),
]


class MockCheckoutBackend:
    def __init__(self, catalogue: Optional[List[TierListing]] = None, settle_after: int = 1, currency: str = "NGN"):
        self._catalogue: Dict[tuple, TierListing] = {
            (t.event_id, t.tier_name.lower()): t for t in (catalogue or _MOCK_CATALOGUE)
        }
        self.settle_after = settle_after
        self.currency = currency
        self.orders: Dict[str, MockOrder] = {}
        self.initialize_calls = 0
        self.verify_calls = 0
        logger.info("[BACKEND MOCK] Initialised with %d tiers", len(self._catalogue))

    # ------------------------------------------------------------------
    # Same surface as the real clients
    # ------------------------------------------------------------------

    async def initialize(self, request: OrderInitRequest) -> OrderInitResult:
        return normalize_order_init_response(self.initialize_payload(request.to_payload()), fallback_currency=self.currency)

    async def verify(self, reference: str) -> VerificationResponseModel:
        status_code, body = self.verify_payload(reference)
        if status_code == 404:
            raise NotFound(body["message"], status_code=404, payload=body)
        return normalize_verification_response(body)

    # ------------------------------------------------------------------
    # Wire-level bodies, shared with the mock HTTP endpoints
    # ------------------------------------------------------------------

    def initialize_payload(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        self.initialize_calls += 1
        items = payload.get("items") or []
        if not items:
            return {"status": "error", "message": "Invalid order data", "details": "validation failed: no items"}

        priced: List[Dict[str, Any]] = []
        subtotal = 0
        for item in items:
            listing = self._catalogue.get((str(item.get("event_id")), str(item.get("tier_name") or "").lower()))
            if listing is None:
                return {
                    "status": "error",
                    "message": "Order processing failed",
                    "details": f"ticket tier not found: event {item.get('event_id')} tier {item.get('tier_name')}",
                }
            quantity = int(item.get("quantity") or 0)
            if quantity <= 0:
                return {"status": "error", "message": "Invalid order data", "details": "invalid quantity"}
            if quantity > listing.available:
                return {
                    "status": "error",
                    "message": "Invalid order data or item out of stock",
                    "details": (
                        f"insufficient stock for {listing.event_title} - {listing.tier_name}: "
                        f"requested {quantity}, only {listing.available} available"
                    ),
                }
            line_total = listing.price_minor_units * quantity
            subtotal += line_total
            priced.append(
                {
                    "event_id": listing.event_id,
                    "event_title": listing.event_title,
                    "tier_name": listing.tier_name,
                    "quantity": quantity,
                    "price": listing.price_minor_units,
                    "subtotal": line_total,
                }
            )

        totals = order_totals(subtotal)
        reference = f"TIX_{uuid.uuid4().hex[:16].upper()}"
        order = MockOrder(
            reference=reference,
            email=str(payload.get("email") or ""),
            customer=dict(payload.get("customer") or {}),
            items=priced,
            subtotal=totals.subtotal,
            service_fee=totals.service_fee,
            vat=totals.vat,
            amount_minor_units=totals.final_total,
        )
        self.orders[reference] = order
        logger.info("[BACKEND MOCK] Pending order %s for %d minor units", reference, order.amount_minor_units)
        return {
            "status": "success",
            "message": "Order initialized successfully. Proceed to payment.",
            "data": {
                "reference": reference,
                "amount_minor_units": order.amount_minor_units,
                "currency": self.currency,
                "order_id": order.order_id,
            },
        }

    def verify_payload(self, reference: str):
        """Return (http_status, body). Repeated reads of a finalized order give the same answer."""
        self.verify_calls += 1
        order = self.orders.get(reference)
        if order is None:
            return 404, {"status": "failed", "message": "Order not found. Please try payment again."}

        order.verify_reads += 1
        if order.declined:
            order.status = "failed"
            return 200, {"status": "failed", "message": "Payment verification failed."}
        if order.paid and order.verify_reads > self.settle_after:
            order.status = "success"
        if order.status == "success":
            return 200, {"status": "success", "message": "Payment verified and order processed.", "data": self._order_data(order)}
        return 200, {"status": "pending", "message": "Payment is still processing."}

    # ------------------------------------------------------------------
    # Simulation controls
    # ------------------------------------------------------------------

    def mark_paid(self, reference: str) -> None:
        self.orders[reference].paid = True

    def mark_declined(self, reference: str) -> None:
        self.orders[reference].declined = True

    def _order_data(self, order: MockOrder) -> Dict[str, Any]:
        return {
            "reference": order.reference,
            "status": order.status,
            "order_id": order.order_id,
            "amount_minor_units": order.amount_minor_units,
            "subtotal": order.subtotal,
            "service_fee": order.service_fee,
            "vat_amount": order.vat,
            "customer": order.customer,
            "items": order.items,
        }
