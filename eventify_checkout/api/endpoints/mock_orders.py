"""
Mock storefront backend endpoints, served from the in-memory MockCheckoutBackend.
Mounted only when INTEGRATIONS_MODE is mock. Remove or disable in production.
"""

from typing import Any, Dict

from fastapi import APIRouter, HTTPException
from fastapi.responses import JSONResponse

from eventify_checkout.integrations.clients.mocks.backend import MockCheckoutBackend

router = APIRouter(tags=["Mock Backend"])

# Will be set by main.py after import
backend: MockCheckoutBackend = None


@router.post("/api/orders/initialize")
async def initialize_order(payload: Dict[str, Any]):
    """
    Example payload:
    {
        "email": "a@b.com",
        "items": [{"event_id": "E1", "tier_name": "VIP", "quantity": 2}],
        "customer": {"first_name": "Ada", "last_name": "Obi", "email": "a@b.com"}
    }
    """
    body = backend.initialize_payload(payload)
    status_code = 200 if body.get("status") == "success" else 400
    return JSONResponse(status_code=status_code, content=body)


@router.get("/api/payments/verify/{reference}")
async def verify_payment(reference: str):
    status_code, body = backend.verify_payload(reference)
    return JSONResponse(status_code=status_code, content=body)


@router.post("/api/v1/mock/payments/{reference}/settle")
async def settle_payment(reference: str, declined: bool = False):
    """Simulate the gateway settling (or declining) a payment for a pending order."""
    if reference not in backend.orders:
        raise HTTPException(status_code=404, detail="Order not found")
    if declined:
        backend.mark_declined(reference)
    else:
        backend.mark_paid(reference)
    return {"reference": reference, "declined": declined}
