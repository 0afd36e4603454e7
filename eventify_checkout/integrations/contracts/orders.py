"""
Order contracts.

Defines the request/response structures for the storefront backend, e.g.:
- initializing a pending order (POST /api/orders/initialize)
- verifying a payment by reference (GET /api/payments/verify/{reference})

The initialization request is price-free: the backend looks up every tier
price itself and answers with the amount to charge. The models below forbid
extra fields so a price can never be attached by accident.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .interfaces import CustomerContact

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

REQUIRED_CONTACT_FIELDS = ("first_name", "last_name", "email")


class OrderItemIntent(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    event_id: str
    tier_name: str
    quantity: int


class CustomerPayload(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    first_name: str
    last_name: str
    email: str
    phone: str = ""
    city: str = ""
    state: str = ""
    country: str = ""


class OrderInitRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    email: str
    items: List[OrderItemIntent]
    customer: CustomerPayload

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump()


class CustomerSummary(BaseModel):
    first_name: str = ""
    last_name: str = ""
    email: str = ""


class VerificationSummary(BaseModel):
    """Display-only view of a verified order."""

    reference: str
    amount_minor_units: Optional[int] = None
    status: str = ""
    customer: Optional[CustomerSummary] = None
    raw: Dict[str, Any] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------

def is_valid_email(email: Optional[str]) -> bool:
    return bool(email) and bool(_EMAIL_RE.match(email.strip()))


def missing_contact_fields(contact: Optional[CustomerContact]) -> List[str]:
    """Return the required contact fields that are blank. Empty list means complete."""
    if contact is None:
        return list(REQUIRED_CONTACT_FIELDS)
    return [name for name in REQUIRED_CONTACT_FIELDS if not str(getattr(contact, name, "") or "").strip()]


def mask_email(email: str) -> str:
    """a.person@example.com -> a***@example.com, for log lines."""
    local, _, domain = (email or "").partition("@")
    if not domain:
        return "***"
    return f"{local[:1]}***@{domain}"
