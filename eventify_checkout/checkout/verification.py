"""
Post-redirect payment verification.

The gateway's success callback runs in the customer's browser and proves
nothing. After the redirect, the confirmation view asks the backend for the
outcome by reference, polling a bounded number of times while the backend
still reports the payment as pending:

    verifying -> success | failed | not_found | error     (terminal)
    verifying -> pending -> (wait) -> verifying ...        (at most max_attempts calls)

When the attempts run out the poller stays in ``pending`` and makes no more
calls until refresh() is invoked.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional, Protocol

from eventify_checkout.checkout.errors import (
    BadRequest,
    CheckoutError,
    NotFound,
    Unknown,
    VerificationTransportError,
)
from eventify_checkout.checkout.redirect_params import QueryLike, extract_reference
from eventify_checkout.integrations.contracts.interfaces import TERMINAL_VERIFICATION_STATES, VerificationState
from eventify_checkout.integrations.contracts.orders import VerificationSummary
from eventify_checkout.integrations.policy.response_wrappers import VerificationResponseModel

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_RETRY_DELAY_SECONDS = 3.0


class PaymentVerifier(Protocol):
    async def verify(self, reference: str) -> VerificationResponseModel: ...


class VerificationPoller:
    def __init__(
        self,
        query: QueryLike,
        verifier: PaymentVerifier,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        retry_delay_seconds: float = DEFAULT_RETRY_DELAY_SECONDS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.verifier = verifier
        self.max_attempts = max(1, max_attempts)
        self.retry_delay_seconds = retry_delay_seconds
        self._sleep = sleep

        self.reference: Optional[str] = extract_reference(query)
        self.retry_count = 0
        self.calls = 0
        self.summary: Optional[VerificationSummary] = None
        self.error: Optional[CheckoutError] = None
        self.history: List[VerificationState] = []
        self._task: Optional[asyncio.Task] = None
        self._closed = False

        if self.reference is None:
            logger.error("No payment reference found in confirmation URL")
            self.state = VerificationState.ERROR
            self.error = Unknown("No payment reference provided")
        else:
            self.state = VerificationState.VERIFYING
        self.history.append(self.state)

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_VERIFICATION_STATES

    @property
    def attempts_exhausted(self) -> bool:
        """Frozen in pending; only refresh() starts another run."""
        return self.state == VerificationState.PENDING and self.retry_count + 1 >= self.max_attempts

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> asyncio.Task:
        """Run in the background, owned by the hosting view."""
        if not self.is_running:
            self._task = asyncio.ensure_future(self.run())
        return self._task

    def close(self) -> None:
        """Tear down: cancel any pending retry so no state is written afterwards."""
        self._closed = True
        if self._task is not None and not self._task.done():
            self._task.cancel()
            logger.info("Verification for reference=%s cancelled by teardown", self.reference)

    async def refresh(self) -> VerificationState:
        """Manual refresh: one fresh bounded run from the current reference."""
        if self.reference is None or self._closed:
            return self.state
        if self.is_running:
            return await self._task
        self.retry_count = 0
        self.error = None
        self._set(VerificationState.VERIFYING)
        return await self.run()

    async def run(self) -> VerificationState:
        if self.reference is None or self.is_terminal or self.attempts_exhausted:
            return self.state

        while not self._closed:
            self._set(VerificationState.VERIFYING)
            state = await self._verify_once()
            if state != VerificationState.PENDING:
                return state
            if self.retry_count + 1 >= self.max_attempts:
                logger.warning(
                    "Payment reference=%s still pending after %d checks; waiting for manual refresh",
                    self.reference,
                    self.calls,
                )
                return state
            await self._sleep(self.retry_delay_seconds)
            if self._closed:
                break
            self.retry_count += 1
        return self.state

    async def _verify_once(self) -> VerificationState:
        self.calls += 1
        try:
            response = await self.verifier.verify(self.reference)
        except NotFound as exc:
            return self._fail(VerificationState.NOT_FOUND, exc)
        except BadRequest as exc:
            return self._fail(VerificationState.FAILED, exc)
        except VerificationTransportError as exc:
            return self._fail(VerificationState.ERROR, exc)
        except Exception as exc:
            logger.exception("Unexpected error verifying reference=%s", self.reference)
            return self._fail(VerificationState.ERROR, Unknown(str(exc)))

        if self._closed:
            return self.state

        if response.status == "success" and response.summary is not None:
            self.summary = response.summary
            logger.info("Payment reference=%s verified", self.reference)
            return self._set(VerificationState.SUCCESS)
        if response.status == "pending":
            logger.info("Payment reference=%s pending (check %d)", self.reference, self.calls)
            return self._set(VerificationState.PENDING)

        logger.warning("Payment reference=%s reported as %r", self.reference, response.status or "<empty>")
        return self._set(VerificationState.FAILED)

    def _fail(self, state: VerificationState, exc: CheckoutError) -> VerificationState:
        logger.error("Verification for reference=%s ended in %s: %s", self.reference, state.value, exc)
        if self._closed:
            return self.state
        self.error = exc
        return self._set(state)

    def _set(self, state: VerificationState) -> VerificationState:
        if state != self.state:
            self.history.append(state)
        self.state = state
        return state
