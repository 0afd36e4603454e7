"""
Payment gateway — MOCK SDK.

⚠️  Stand-in for the hosted payment popup. Each session answers with either
    the success callback or the close callback, chosen by ``outcome``. With
    ``auto_complete=False`` the session stays open until a test calls
    complete()/dismiss(), which is how single-flight behaviour is exercised.
"""

import asyncio
import logging
import uuid
from typing import Callable, List, Optional

from eventify_checkout.integrations.contracts.interfaces import (
    GatewayConfig,
    GatewayResponse,
    GatewaySession,
    PaymentGatewaySDK,
)

logger = logging.getLogger(__name__)


class MockGatewaySession(GatewaySession):
    def __init__(self, sdk: "MockGatewaySDK", config: GatewayConfig, on_success, on_close):
        self.sdk = sdk
        self.config = config
        self._on_success = on_success
        self._on_close = on_close
        self.opened = False
        self.finished = False

    def open(self) -> None:
        self.opened = True
        self.sdk.opened_sessions.append(self)
        logger.info("[GATEWAY MOCK] Session opened for %s (%d minor units)", self.config.reference, self.config.amount_minor_units)
        if self.sdk.auto_complete:
            # Callbacks fire later, like a real popup, never inside open().
            loop = asyncio.get_running_loop()
            if self.sdk.outcome == "success":
                loop.call_soon(self.complete)
            else:
                loop.call_soon(self.dismiss)

    def complete(self) -> None:
        if self.finished:
            return
        self.finished = True
        if self.sdk.on_charge is not None:
            self.sdk.on_charge(self.config.reference)
        self._on_success(
            GatewayResponse(
                reference=self.config.reference,
                status="success",
                transaction=uuid.uuid4().hex[:10],
                message="Approved",
            )
        )

    def dismiss(self) -> None:
        if self.finished:
            return
        self.finished = True
        self._on_close()


class MockGatewaySDK(PaymentGatewaySDK):
    def __init__(
        self,
        outcome: str = "success",
        auto_complete: bool = True,
        on_charge: Optional[Callable[[str], None]] = None,
    ):
        self.outcome = outcome
        self.auto_complete = auto_complete
        self.on_charge = on_charge
        self.configs: List[GatewayConfig] = []
        self.opened_sessions: List[MockGatewaySession] = []

    def setup(self, config, on_success, on_close) -> GatewaySession:
        self.configs.append(config)
        return MockGatewaySession(self, config, on_success, on_close)


def mock_sdk_loader(sdk: PaymentGatewaySDK, fail: bool = False, delay: float = 0.0):
    """Build an awaitable loader for GatewayBootstrapper that yields ``sdk``."""

    async def _load() -> PaymentGatewaySDK:
        if delay:
            await asyncio.sleep(delay)
        else:
            await asyncio.sleep(0)
        if fail:
            raise ConnectionError("mock gateway script failed to load")
        return sdk

    return _load
