import logging

from eventify_checkout.checkout.notices import LoggingNotifier, verification_copy
from eventify_checkout.integrations.contracts.interfaces import VerificationState


def test_logging_notifier_maps_levels(caplog):
    notifier = LoggingNotifier()
    with caplog.at_level(logging.INFO, logger="eventify_checkout.checkout.notices"):
        notifier.error("Payment system unavailable. Please try again later.", kind="gateway_load")
        notifier.warn("Payment cancelled. You can try again anytime.", kind="cancelled")
        notifier.success("Payment verified")

    levels = [(r.levelno, r.getMessage()) for r in caplog.records]
    assert levels[0] == (logging.ERROR, "[notice:gateway_load] Payment system unavailable. Please try again later.")
    assert levels[1][0] == logging.WARNING
    assert levels[2] == (logging.INFO, "[notice:success] Payment verified")


def test_every_verification_state_has_copy():
    for state in VerificationState:
        copy = verification_copy(state, "PAY-1")
        assert copy["title"]
        assert copy["reference"] == "PAY-1"


def test_pending_copy_offers_refresh():
    actions = [a["type"] for a in verification_copy(VerificationState.PENDING)["actions"]]
    assert "refresh" in actions
