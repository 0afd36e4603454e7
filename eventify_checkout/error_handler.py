"""Error handling helpers for the checkout HTTP surface."""
from typing import Any, Dict
import logging

from eventify_checkout.checkout.errors import CheckoutError

logger = logging.getLogger(__name__)

GENERIC_MESSAGE = "An internal error occurred while processing your payment. Please try again later."


class ErrorHandler:
    def handle_exception(self, exc: Exception, context: Dict[str, Any] = None) -> Dict[str, Any]:
        if isinstance(exc, CheckoutError):
            logger.warning("Checkout error kind=%s: %s", exc.kind, exc)
            return {
                "message": exc.remediation,
                "kind": exc.kind,
                "next_action": exc.next_action,
                "fallback": False,
                "metadata": {"error": str(exc), "context": context or {}},
            }

        logger.error("Unhandled exception in checkout: %s", exc, exc_info=True)
        return {
            "message": GENERIC_MESSAGE,
            "kind": "internal",
            "next_action": "retry",
            "fallback": True,
            "metadata": {"error": str(exc), "context": context or {}},
        }
