"""
Payment handoff to the external gateway.

Launches one gateway session per checkout attempt, using the amount and
reference from the backend's order initialization verbatim. The gateway's
success callback is treated as a hint only: the handoff clears the cart and
redirects to the confirmation view, where the payment is verified again
against the backend.
"""

from __future__ import annotations

import asyncio
import json
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence

from eventify_checkout.checkout.errors import (
    ConfigurationError,
    EmptyCartError,
    GatewayNotReadyError,
    InvalidEmailError,
    MissingOrderError,
    PreconditionError,
)
from eventify_checkout.checkout.gateway_bootstrap import GatewayBootstrapper
from eventify_checkout.checkout.notices import Notifier
from eventify_checkout.checkout.redirect_params import build_confirmation_url
from eventify_checkout.integrations.contracts.interfaces import (
    CartItem,
    CartStore,
    CustomerContact,
    GatewayConfig,
    GatewayResponse,
    OrderInitResult,
    PaymentSessionState,
)
from eventify_checkout.integrations.contracts.orders import is_valid_email, missing_contact_fields

logger = logging.getLogger(__name__)

Navigator = Callable[[str], None]

DEFAULT_CHANNELS = ("card", "bank", "ussd", "qr", "mobile_money")


def build_gateway_config(
    public_key: str,
    email: str,
    order: OrderInitResult,
    items: Sequence[CartItem],
    customer: Optional[CustomerContact] = None,
    channels: Sequence[str] = DEFAULT_CHANNELS,
) -> GatewayConfig:
    """
    Assemble the gateway session configuration.

    Amount, currency and reference come from the order initialization result
    and nothing else. Line items go into metadata for the gateway's receipt
    display; they carry no prices.
    """
    if not public_key or not public_key.strip():
        raise ConfigurationError("Payment gateway public key is not configured")
    missing = missing_contact_fields(customer) if customer is not None else []
    if missing:
        raise ConfigurationError(f"Missing required contact fields: {', '.join(missing)}")

    order_details = {
        "customer": customer.to_payload() if customer is not None else {},
        "items": [
            {
                "event_id": item.event_id,
                "tier_id": item.tier_id,
                "tier_name": item.tier_name,
                "event_title": item.event_title,
                "quantity": item.quantity,
            }
            for item in items
        ],
    }
    metadata: Dict[str, Any] = {
        "custom_fields": [
            {
                "display_name": "Order Details",
                "variable_name": "order_details",
                "value": json.dumps(order_details, sort_keys=True),
            }
        ],
        "reference": order.reference,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    return GatewayConfig(
        public_key=public_key,
        email=email,
        amount_minor_units=order.amount.minor_units,
        reference=order.reference,
        currency=order.amount.currency,
        channels=list(channels),
        metadata=metadata,
    )


class PaymentHandoff:
    def __init__(
        self,
        bootstrapper: GatewayBootstrapper,
        cart: CartStore,
        navigator: Navigator,
        notifier: Notifier,
        public_key: str,
        confirmation_path: str = "/confirmation",
        channels: Sequence[str] = DEFAULT_CHANNELS,
    ):
        self.bootstrapper = bootstrapper
        self.cart = cart
        self.navigator = navigator
        self.notifier = notifier
        self.public_key = public_key
        self.confirmation_path = confirmation_path
        self.channels = list(channels)

        self.state = PaymentSessionState.IDLE
        self.last_reference: Optional[str] = None
        self.last_config: Optional[GatewayConfig] = None
        self._session_done: Optional[asyncio.Future] = None

    @property
    def can_launch(self) -> bool:
        return self.state != PaymentSessionState.SUBMITTING and self.bootstrapper.is_ready

    def sync_gateway_state(self) -> PaymentSessionState:
        """Reflect the bootstrapper in the idle-side states (for the pay button)."""
        if self.state in (PaymentSessionState.IDLE, PaymentSessionState.LOADING_GATEWAY, PaymentSessionState.READY_TO_PAY):
            self.state = PaymentSessionState.READY_TO_PAY if self.bootstrapper.is_ready else PaymentSessionState.LOADING_GATEWAY
        return self.state

    async def launch(
        self,
        order: Optional[OrderInitResult],
        email: str,
        customer: Optional[CustomerContact] = None,
    ) -> PaymentSessionState:
        """
        Run one gateway session and return the state it ended in.

        Preconditions are checked before anything else; a failed one is
        notified and raised as a PreconditionError without touching the
        gateway. While a session is in flight further calls are ignored.
        """
        if self.state == PaymentSessionState.SUBMITTING:
            logger.warning("Payment session already in progress; ignoring launch")
            return self.state

        items = list(self.cart.get_items())
        self._check_preconditions(order, email, items)

        config = build_gateway_config(self.public_key, email, order, items, customer, self.channels)
        self.last_config = config

        loop = asyncio.get_running_loop()
        self._session_done = loop.create_future()
        self.state = PaymentSessionState.SUBMITTING
        logger.info(
            "Launching gateway session reference=%s amount_minor_units=%d",
            config.reference,
            config.amount_minor_units,
        )

        try:
            session = self.bootstrapper.sdk.setup(config, self._handle_success, self._handle_close)
            session.open()
        except Exception:
            logger.exception("Gateway session could not be opened")
            self.state = PaymentSessionState.FAILED
            self._session_done = None
            self.notifier.error("We couldn't open the payment window. Please try again.", kind="gateway_session")
            return self.state

        try:
            return await self._session_done
        except asyncio.CancelledError:
            # The hosting view went away mid-session; free the handoff for a new attempt.
            if self.state == PaymentSessionState.SUBMITTING:
                logger.info("Gateway session for reference=%s abandoned by teardown", config.reference)
                self.state = PaymentSessionState.CANCELLED
            raise
        finally:
            self._session_done = None

    def _check_preconditions(self, order: Optional[OrderInitResult], email: str, items: List[CartItem]) -> None:
        error: Optional[PreconditionError] = None
        if not self.bootstrapper.is_ready or self.bootstrapper.sdk is None:
            error = GatewayNotReadyError()
        elif order is None:
            error = MissingOrderError()
        elif not is_valid_email(email):
            error = InvalidEmailError()
        elif not items:
            error = EmptyCartError()
        if error is not None:
            logger.warning("Payment launch blocked: %s", error.kind)
            self.notifier.error(error.remediation, kind=error.kind)
            raise error

    def _handle_success(self, response: GatewayResponse) -> None:
        if self.state != PaymentSessionState.SUBMITTING:
            logger.warning("Ignoring gateway success callback in state %s", self.state.value)
            return
        reference = self.last_config.reference if self.last_config else response.reference
        logger.info("Gateway reported success for reference=%s", reference)

        self.state = PaymentSessionState.SUCCESS
        self.last_reference = reference
        url = build_confirmation_url(self.confirmation_path, reference, status_hint="success")
        try:
            self.cart.clear()
        finally:
            try:
                self.navigator(url)
            finally:
                self._resolve(PaymentSessionState.SUCCESS)

    def _handle_close(self) -> None:
        if self.state != PaymentSessionState.SUBMITTING:
            return
        logger.info("Gateway window closed without payment")
        self.state = PaymentSessionState.CANCELLED
        self.notifier.warn("Payment cancelled. You can try again anytime.", kind="cancelled")
        self._resolve(PaymentSessionState.CANCELLED)

    def _resolve(self, state: PaymentSessionState) -> None:
        if self._session_done is not None and not self._session_done.done():
            self._session_done.set_result(state)
