"""
Checkout error taxonomy.

Every network-originating failure is converted into one of these at the
boundary of the component that issued the call. Each class carries the copy
shown to the customer and the next action offered with it.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class CheckoutError(Exception):
    kind = "checkout_error"
    remediation = "Something went wrong with your checkout. Please try again."
    next_action = "retry"

    def __init__(self, message: str = "", *, payload: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message or self.remediation)
        self.payload = payload or {}


# ---------------------------------------------------------------------------
# Pre-flight
# ---------------------------------------------------------------------------

class ConfigurationError(CheckoutError):
    kind = "configuration"
    remediation = "Payment configuration error. Please contact support."
    next_action = "contact_support"


class GatewayLoadError(CheckoutError):
    kind = "gateway_load"
    remediation = "Payment system unavailable. Please try again later."
    next_action = "reload"


class PreconditionError(CheckoutError):
    kind = "precondition"


class GatewayNotReadyError(PreconditionError):
    kind = "gateway_not_ready"
    remediation = "Payment gateway not loaded yet. Please wait a moment."
    next_action = "wait"


class MissingOrderError(PreconditionError):
    kind = "order_missing"
    remediation = "Your order has not been prepared yet. Please try again."


class InvalidEmailError(PreconditionError):
    kind = "invalid_email"
    remediation = "Valid email is required for payment."
    next_action = "fix_details"


class EmptyCartError(PreconditionError):
    kind = "empty_cart"
    remediation = "Your cart is empty. Add tickets before checking out."
    next_action = "return_home"


# ---------------------------------------------------------------------------
# Order initialization
# ---------------------------------------------------------------------------

class InitializationError(CheckoutError):
    kind = "initialization"


class InventoryError(InitializationError):
    kind = "inventory"
    remediation = "Some tickets in your cart are no longer available. Please update your cart and try again."
    next_action = "update_cart"


class ValidationError(InitializationError):
    kind = "validation"
    remediation = "One of the events or ticket tiers in your cart could not be found. Please remove it and try again."
    next_action = "update_cart"


class GenericServerError(InitializationError):
    kind = "server"
    remediation = "We couldn't start your payment right now. Please try again in a moment."


# ---------------------------------------------------------------------------
# Verification
# ---------------------------------------------------------------------------

class VerificationTransportError(CheckoutError):
    kind = "verification"

    def __init__(self, message: str = "", *, status_code: Optional[int] = None, payload: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, payload=payload)
        self.status_code = status_code


class NotFound(VerificationTransportError):
    kind = "not_found"
    remediation = "We couldn't find this order. If you just completed payment, please wait a moment and refresh this page."
    next_action = "refresh"


class BadRequest(VerificationTransportError):
    kind = "bad_request"
    remediation = "Your payment was not successful. No charges were made to your account."
    next_action = "retry"


class Unknown(VerificationTransportError):
    kind = "unknown"
    remediation = "We encountered an error verifying your payment. If you were charged, please contact support with your reference number."
    next_action = "contact_support"
