"""
Real payment gateway SDK loader.

Fetches the gateway's inline checkout script over HTTP and wraps it as a
PaymentGatewaySDK. Rendering the gateway UI belongs to the hosting view: it
supplies a presenter that receives the script, the session payload and the
two callbacks, and must invoke exactly one of them.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional

import httpx

from eventify_checkout.checkout.errors import GatewayLoadError
from eventify_checkout.integrations.contracts.interfaces import (
    GatewayConfig,
    GatewayResponse,
    GatewaySession,
    PaymentGatewaySDK,
)

logger = logging.getLogger(__name__)

Presenter = Callable[[str, Dict[str, Any], Callable[[GatewayResponse], None], Callable[[], None]], None]


class HostedCheckoutSession(GatewaySession):
    def __init__(self, sdk: "HostedCheckoutSDK", config: GatewayConfig, on_success, on_close):
        self._sdk = sdk
        self._config = config
        self._on_success = on_success
        self._on_close = on_close

    def open(self) -> None:
        logger.info("Opening hosted checkout for reference=%s", self._config.reference)
        self._sdk.presenter(self._sdk.script_source, self._config.to_payload(), self._on_success, self._on_close)


class HostedCheckoutSDK(PaymentGatewaySDK):
    def __init__(self, script_source: str, presenter: Presenter):
        self.script_source = script_source
        self.presenter = presenter

    def setup(self, config, on_success, on_close) -> GatewaySession:
        return HostedCheckoutSession(self, config, on_success, on_close)


class HttpScriptLoader:
    """Awaitable SDK loader for GatewayBootstrapper."""

    def __init__(
        self,
        script_url: str,
        presenter: Presenter,
        timeout_seconds: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.script_url = script_url
        self.presenter = presenter
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    async def __call__(self) -> PaymentGatewaySDK:
        logger.info(f"Loading payment gateway script from {self.script_url}")
        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds, transport=self._transport) as client:
                response = await client.get(self.script_url)
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"HTTP error loading gateway script: {e.response.status_code}")
            raise GatewayLoadError(f"Gateway script returned HTTP {e.response.status_code}") from e
        except httpx.RequestError as e:
            logger.error(f"Request error loading gateway script: {e}")
            raise GatewayLoadError(f"Gateway script could not be fetched: {e}") from e

        if not response.text.strip():
            raise GatewayLoadError("Gateway script was empty")

        return HostedCheckoutSDK(response.text, self.presenter)
