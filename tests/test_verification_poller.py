import asyncio

import pytest

from eventify_checkout.checkout.errors import BadRequest, NotFound, Unknown
from eventify_checkout.checkout.order_intent import build_order_intent
from eventify_checkout.checkout.verification import VerificationPoller
from eventify_checkout.integrations.contracts.interfaces import VerificationState
from eventify_checkout.integrations.policy.response_wrappers import normalize_verification_response

PENDING = {"status": "pending", "message": "Payment is still processing."}
SUCCESS = {
    "status": "success",
    "message": "Payment verified and order processed.",
    "data": {"reference": "PAY-123", "status": "success", "amount_minor_units": 500000},
}


class ScriptedVerifier:
    """Answers verify() calls from a script of bodies or exceptions; the last entry repeats."""

    def __init__(self, *script):
        self.script = list(script)
        self.references = []

    async def verify(self, reference):
        self.references.append(reference)
        step = self.script[min(len(self.references), len(self.script)) - 1]
        if isinstance(step, Exception):
            raise step
        return normalize_verification_response(step)


class RecordingSleep:
    def __init__(self):
        self.delays = []

    async def __call__(self, seconds):
        self.delays.append(seconds)


def _poller(verifier, query="trxref=PAY-123&status=success", **kwargs):
    kwargs.setdefault("sleep", RecordingSleep())
    return VerificationPoller(query, verifier, **kwargs)


@pytest.mark.asyncio
async def test_pending_twice_then_success():
    verifier = ScriptedVerifier(PENDING, PENDING, SUCCESS)
    sleep = RecordingSleep()
    poller = _poller(verifier, sleep=sleep)

    state = await poller.run()

    assert state == VerificationState.SUCCESS
    assert poller.retry_count == 2
    assert poller.calls == 3
    assert sleep.delays == [3.0, 3.0]
    assert poller.summary.amount_minor_units == 500000
    assert verifier.references == ["PAY-123"] * 3


@pytest.mark.asyncio
async def test_always_pending_stops_after_three_checks():
    verifier = ScriptedVerifier(PENDING)
    poller = _poller(verifier)

    state = await poller.run()

    assert state == VerificationState.PENDING
    assert poller.calls == 3
    assert len(verifier.references) == 3
    assert not poller.is_terminal

    # nothing scheduled behind our back
    for _ in range(3):
        await asyncio.sleep(0)
    assert len(verifier.references) == 3
    assert not poller.is_running


@pytest.mark.asyncio
async def test_not_found_is_terminal_without_retry():
    verifier = ScriptedVerifier(NotFound("Order not found", status_code=404))
    poller = _poller(verifier)

    state = await poller.run()

    assert state == VerificationState.NOT_FOUND
    assert poller.retry_count == 0
    assert poller.calls == 1
    assert poller.error.next_action == "refresh"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "step,expected",
    [
        (BadRequest("declined", status_code=400), VerificationState.FAILED),
        (Unknown("upstream 502", status_code=502), VerificationState.ERROR),
        (RuntimeError("boom"), VerificationState.ERROR),
        ({"status": "failed", "message": "Payment verification failed."}, VerificationState.FAILED),
        ({"status": "success", "message": "no data"}, VerificationState.FAILED),
    ],
)
async def test_terminal_outcomes_make_one_call(step, expected):
    verifier = ScriptedVerifier(step)
    poller = _poller(verifier)

    assert await poller.run() == expected
    assert poller.calls == 1
    assert poller.retry_count == 0


@pytest.mark.asyncio
async def test_missing_reference_errors_without_calls():
    verifier = ScriptedVerifier(SUCCESS)
    poller = _poller(verifier, query="status=success")

    assert poller.state == VerificationState.ERROR
    assert await poller.run() == VerificationState.ERROR
    assert verifier.references == []
    assert isinstance(poller.error, Unknown)


@pytest.mark.asyncio
async def test_reference_param_is_used_when_trxref_absent():
    verifier = ScriptedVerifier(SUCCESS)
    poller = _poller(verifier, query={"reference": "PAY-9"})

    await poller.run()

    assert verifier.references == ["PAY-9"]


@pytest.mark.asyncio
async def test_close_cancels_scheduled_retry():
    verifier = ScriptedVerifier(PENDING)
    poller = VerificationPoller("trxref=PAY-123", verifier, retry_delay_seconds=60)

    task = poller.start()
    for _ in range(3):
        await asyncio.sleep(0)
    assert poller.calls == 1
    assert poller.is_running

    poller.close()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert poller.calls == 1
    assert poller.state == VerificationState.PENDING


@pytest.mark.asyncio
async def test_refresh_starts_a_new_bounded_run():
    verifier = ScriptedVerifier(PENDING, PENDING, PENDING, SUCCESS)
    poller = _poller(verifier)

    assert await poller.run() == VerificationState.PENDING
    assert poller.calls == 3

    assert await poller.refresh() == VerificationState.SUCCESS
    assert poller.calls == 4
    assert poller.retry_count == 0
    assert poller.history[-1] == VerificationState.SUCCESS


@pytest.mark.asyncio
async def test_refresh_after_close_does_nothing():
    verifier = ScriptedVerifier(PENDING)
    poller = _poller(verifier)
    poller.close()

    assert await poller.refresh() == VerificationState.VERIFYING
    assert verifier.references == []


@pytest.mark.asyncio
async def test_verification_against_backend_is_idempotent(backend, contact, vip_item):
    order = await backend.initialize(build_order_intent(contact.email, [vip_item], contact))
    backend.mark_paid(order.reference)

    first = _poller(backend, query={"trxref": order.reference})
    assert await first.run() == VerificationState.SUCCESS
    assert first.calls == 2

    second = _poller(backend, query={"trxref": order.reference})
    assert await second.run() == VerificationState.SUCCESS
    assert second.calls == 1
    assert second.summary.amount_minor_units == first.summary.amount_minor_units == order.amount_minor_units


@pytest.mark.asyncio
async def test_declined_payment_reports_failed(backend, contact, vip_item):
    order = await backend.initialize(build_order_intent(contact.email, [vip_item], contact))
    backend.mark_declined(order.reference)

    poller = _poller(backend, query={"trxref": order.reference})

    assert await poller.run() == VerificationState.FAILED
    assert poller.calls == 1


@pytest.mark.asyncio
async def test_rerun_of_frozen_poller_makes_no_call():
    verifier = ScriptedVerifier(PENDING)
    poller = _poller(verifier)

    await poller.run()
    assert poller.attempts_exhausted

    assert await poller.run() == VerificationState.PENDING
    assert poller.calls == 3
    assert len(verifier.references) == 3
