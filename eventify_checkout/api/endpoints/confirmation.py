"""
Confirmation view.

The gateway redirect lands here. The outcome shown is whatever the backend
reports for the reference in the URL; the ``status`` hint in the URL is
echoed for display but never decides anything.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Request
from pydantic import BaseModel

from eventify_checkout.checkout.notices import verification_copy
from eventify_checkout.checkout.redirect_params import QueryLike, extract_status_hint
from eventify_checkout.checkout.verification import PaymentVerifier, VerificationPoller
from eventify_checkout.utils.config_loader import CheckoutConfig

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Confirmation"])

# Will be set by main.py after import
verifier: PaymentVerifier = None
settings: CheckoutConfig = None


class RefreshRequest(BaseModel):
    reference: str


def _poller(query: QueryLike) -> VerificationPoller:
    cfg = settings or CheckoutConfig()
    return VerificationPoller(
        query,
        verifier,
        max_attempts=cfg.verification.max_attempts,
        retry_delay_seconds=cfg.verification.retry_delay_seconds,
    )


def _outcome(poller: VerificationPoller, status_hint: Optional[str] = None) -> Dict[str, Any]:
    return {
        "state": poller.state.value,
        "terminal": poller.is_terminal,
        "reference": poller.reference,
        "status_hint": status_hint,
        "retry_count": poller.retry_count,
        "checks": poller.calls,
        "summary": poller.summary.model_dump(exclude={"raw"}) if poller.summary else None,
        "error": {"kind": poller.error.kind, "next_action": poller.error.next_action} if poller.error else None,
        "copy": verification_copy(poller.state, poller.reference),
    }


@router.get("/confirmation")
async def confirmation(request: Request):
    poller = _poller(request.query_params)
    try:
        await poller.run()
    finally:
        poller.close()
    return _outcome(poller, extract_status_hint(request.query_params))


@router.post("/confirmation/refresh")
async def refresh_confirmation(body: RefreshRequest):
    """Manual refresh for a payment left in ``pending``."""
    poller = _poller({"reference": body.reference})
    try:
        await poller.refresh()
    finally:
        poller.close()
    return _outcome(poller)
