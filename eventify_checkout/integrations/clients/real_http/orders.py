"""
Real storefront backend HTTP clients.

OrderInitializationClient creates the pending order and returns the
server-priced amount; VerificationClient re-reads the same order by reference
after the gateway redirect. Both convert every transport or parsing failure
into the checkout error taxonomy before it leaves this module.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from eventify_checkout.checkout.errors import (
    BadRequest,
    GenericServerError,
    InitializationError,
    NotFound,
    Unknown,
)
from eventify_checkout.integrations.contracts.interfaces import OrderInitResult
from eventify_checkout.integrations.contracts.orders import OrderInitRequest, mask_email
from eventify_checkout.integrations.policy.response_wrappers import (
    IntegrationResponseError,
    VerificationResponseModel,
    classify_initialization_failure,
    normalize_order_init_response,
    normalize_verification_response,
)

logger = logging.getLogger(__name__)


class _BackendClient:
    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        self.base_url = (base_url or "").rstrip("/")
        self.timeout_seconds = timeout_seconds
        self._transport = transport
        self._headers = {"Content-Type": "application/json", **(headers or {})}

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout_seconds, transport=self._transport, headers=self._headers)


class OrderInitializationClient(_BackendClient):
    def __init__(self, base_url: str, initialize_path: str = "/api/orders/initialize", **kwargs: Any) -> None:
        super().__init__(base_url, **kwargs)
        self.initialize_path = initialize_path

    async def initialize(self, request: OrderInitRequest) -> OrderInitResult:
        """Create a pending order. Raises an InitializationError subclass on any failure."""
        url = f"{self.base_url}{self.initialize_path}"
        logger.info(
            "Initializing order for %s (%d items) at %s",
            mask_email(request.email),
            len(request.items),
            url,
        )
        try:
            async with self._client() as client:
                response = await client.post(url, json=request.to_payload())
        except httpx.RequestError as exc:
            logger.error(f"Request error connecting to order initialization endpoint: {exc}")
            raise GenericServerError(f"Order initialization request failed: {exc}") from exc

        body = _json_body(response)

        if response.is_error:
            error = classify_initialization_failure(body, status_code=response.status_code)
            logger.error(
                "Order initialization rejected: status=%s kind=%s message=%s",
                response.status_code,
                error.kind,
                error,
            )
            raise error

        try:
            result = normalize_order_init_response(body)
        except InitializationError as exc:
            logger.error("Order initialization returned a failure body: kind=%s message=%s", exc.kind, exc)
            raise
        except IntegrationResponseError as exc:
            logger.error(f"Order initialization response did not match contract: {exc}")
            raise GenericServerError(str(exc), payload=exc.payload) from exc

        logger.info(
            "Pending order created: reference=%s amount_minor_units=%d",
            result.reference,
            result.amount_minor_units,
        )
        return result


class VerificationClient(_BackendClient):
    def __init__(self, base_url: str, verify_path: str = "/api/payments/verify", **kwargs: Any) -> None:
        super().__init__(base_url, **kwargs)
        self.verify_path = verify_path.rstrip("/")

    async def verify(self, reference: str) -> VerificationResponseModel:
        """
        Read the payment outcome for a reference. Safe to repeat.

        Raises NotFound (404), BadRequest (400) or Unknown (anything else that
        is not a parseable 2xx body).
        """
        url = f"{self.base_url}{self.verify_path}/{quote(reference, safe='')}"
        logger.info("Verifying payment reference=%s", reference)
        try:
            async with self._client() as client:
                response = await client.get(url)
        except httpx.RequestError as exc:
            logger.error(f"Request error connecting to verification endpoint: {exc}")
            raise Unknown(f"Verification request failed: {exc}") from exc

        body = _json_body(response)

        if response.status_code == 404:
            raise NotFound("Order not found", status_code=404, payload=body)
        if response.status_code == 400:
            raise BadRequest(str(body.get("message") or "Bad verification request"), status_code=400, payload=body)
        if response.is_error:
            logger.error(f"HTTP error from verification endpoint: {response.status_code} {response.text}")
            raise Unknown(f"Verification failed with HTTP {response.status_code}", status_code=response.status_code, payload=body)

        try:
            return normalize_verification_response(body)
        except IntegrationResponseError as exc:
            logger.error(f"Verification response did not match contract: {exc}")
            raise Unknown(str(exc), status_code=response.status_code, payload=exc.payload) from exc


def _json_body(response: httpx.Response) -> Dict[str, Any]:
    if not response.content:
        return {}
    try:
        data = response.json()
    except ValueError:
        return {"message": response.text}
    return data if isinstance(data, dict) else {"body": data}
