"""
Checkout flow - turn a cart and a filled-in contact form into one gateway session
"""

import logging
from typing import Optional, Protocol

from eventify_checkout.checkout.errors import (
    CheckoutError,
    ConfigurationError,
    EmptyCartError,
    GatewayLoadError,
    InitializationError,
    InvalidEmailError,
    PreconditionError,
)
from eventify_checkout.checkout.gateway_bootstrap import GatewayBootstrapper
from eventify_checkout.checkout.notices import Notifier
from eventify_checkout.checkout.order_intent import build_order_intent
from eventify_checkout.checkout.payment_handoff import PaymentHandoff
from eventify_checkout.integrations.contracts.interfaces import (
    CartStore,
    CustomerContact,
    GatewayLoadState,
    OrderInitResult,
    PaymentSessionState,
)
from eventify_checkout.integrations.contracts.orders import OrderInitRequest, is_valid_email

logger = logging.getLogger(__name__)


class OrderInitializer(Protocol):
    async def initialize(self, request: OrderInitRequest) -> OrderInitResult: ...


class CheckoutFlow:
    def __init__(
        self,
        cart: CartStore,
        orders: OrderInitializer,
        bootstrapper: GatewayBootstrapper,
        handoff: PaymentHandoff,
        notifier: Notifier,
    ):
        self.cart = cart
        self.orders = orders
        self.bootstrapper = bootstrapper
        self.handoff = handoff
        self.notifier = notifier
        self.order: Optional[OrderInitResult] = None
        self.last_error: Optional[CheckoutError] = None
        self._busy = False

    async def pay(self, contact: CustomerContact) -> PaymentSessionState:
        """
        One checkout attempt: validate, initialize the order, wait for the
        gateway, hand off. Every attempt gets a fresh order and reference.
        """
        if self._busy:
            logger.warning("Checkout attempt already in progress")
            return self.handoff.state

        self._busy = True
        self.last_error = None
        try:
            return await self._attempt(contact)
        finally:
            self._busy = False

    async def _attempt(self, contact: CustomerContact) -> PaymentSessionState:
        items = list(self.cart.get_items())
        if not items:
            return self._stop(EmptyCartError())
        if not is_valid_email(contact.email):
            return self._stop(InvalidEmailError())

        request = build_order_intent(contact.email, items, contact)

        try:
            self.order = await self.orders.initialize(request)
        except InitializationError as exc:
            return self._stop(exc)

        try:
            await self.bootstrapper.wait_ready()
        except GatewayLoadError as exc:
            self.last_error = exc
            # A failed load with a notifier attached has already been shown.
            if self.bootstrapper.state != GatewayLoadState.LOAD_FAILED or self.bootstrapper.notifier is None:
                logger.error("Gateway not available for checkout: %s", exc)
                self.notifier.error(exc.remediation, kind=exc.kind)
            return PaymentSessionState.FAILED

        try:
            return await self.handoff.launch(self.order, contact.email, contact)
        except PreconditionError as exc:
            self.last_error = exc
            return self.handoff.state
        except ConfigurationError as exc:
            logger.error("Checkout blocked by configuration: %s", exc)
            self.last_error = exc
            self.notifier.error(exc.remediation, kind=exc.kind)
            raise

    def _stop(self, exc: CheckoutError) -> PaymentSessionState:
        logger.warning("Checkout attempt stopped: kind=%s detail=%s", exc.kind, exc)
        self.last_error = exc
        self.notifier.error(exc.remediation, kind=exc.kind)
        return PaymentSessionState.FAILED if isinstance(exc, InitializationError) else self.handoff.state
