from eventify_checkout.checkout.errors import GatewayLoadError, InventoryError, NotFound
from eventify_checkout.error_handler import ErrorHandler


def test_handle_exception_returns_payload():
    eh = ErrorHandler()
    out = eh.handle_exception(Exception("boom"), context={"k": "v"})
    assert out["fallback"] is True
    assert "internal error" in out["message"].lower()
    assert "boom" in out["metadata"]["error"]
    assert out["metadata"]["context"] == {"k": "v"}


def test_checkout_errors_carry_remediation_copy():
    eh = ErrorHandler()
    out = eh.handle_exception(InventoryError("insufficient stock for VIP"))
    assert out["fallback"] is False
    assert out["kind"] == "inventory"
    assert out["next_action"] == "update_cart"
    assert "no longer available" in out["message"]
    assert "insufficient stock" in out["metadata"]["error"]


def test_next_action_differs_by_error_kind():
    eh = ErrorHandler()
    assert eh.handle_exception(NotFound())["next_action"] == "refresh"
    assert eh.handle_exception(GatewayLoadError())["message"] == "Payment system unavailable. Please try again later."
