import json

import httpx
import pytest

from eventify_checkout.checkout.errors import GenericServerError, InventoryError, ValidationError
from eventify_checkout.checkout.order_intent import build_order_intent
from eventify_checkout.integrations.clients.real_http.orders import OrderInitializationClient


def _client(handler):
    return OrderInitializationClient("http://backend.test", transport=httpx.MockTransport(handler))


@pytest.fixture
def request_body(contact, vip_item):
    return build_order_intent(contact.email, [vip_item], contact)


@pytest.mark.asyncio
async def test_success_propagates_server_amount_and_reference(request_body):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            json={"status": "success", "data": {"reference": "PAY-123", "amount_minor_units": 500000, "order_id": "o1"}},
        )

    result = await _client(handler).initialize(request_body)

    assert result.reference == "PAY-123"
    assert result.amount_minor_units == 500000
    assert result.order_id == "o1"
    assert seen["url"] == "http://backend.test/api/orders/initialize"
    assert seen["body"]["items"] == [{"event_id": "E1", "tier_name": "VIP", "quantity": 2}]


@pytest.mark.asyncio
async def test_legacy_amount_kobo_field_is_accepted(request_body):
    def handler(request):
        return httpx.Response(200, json={"status": "success", "data": {"reference": "PAY-9", "amount_kobo": 215000}})

    result = await _client(handler).initialize(request_body)

    assert result.amount_minor_units == 215000


@pytest.mark.asyncio
async def test_http_200_with_error_status_fails_closed(request_body):
    def handler(request):
        return httpx.Response(200, json={"status": "error", "message": "Order processing failed"})

    with pytest.raises(GenericServerError):
        await _client(handler).initialize(request_body)


@pytest.mark.asyncio
async def test_stock_wording_is_inventory_error(request_body):
    def handler(request):
        return httpx.Response(
            400,
            json={
                "status": "error",
                "message": "Invalid order data or item out of stock",
                "details": "insufficient stock for Jazz - VIP: requested 2, only 1 available",
            },
        )

    with pytest.raises(InventoryError) as excinfo:
        await _client(handler).initialize(request_body)

    assert excinfo.value.payload["status_code"] == 400
    assert "no longer available" in excinfo.value.remediation


@pytest.mark.asyncio
async def test_not_found_wording_is_validation_error(request_body):
    def handler(request):
        return httpx.Response(400, json={"status": "error", "message": "ticket tier not found"})

    with pytest.raises(ValidationError):
        await _client(handler).initialize(request_body)


@pytest.mark.asyncio
async def test_transport_failure_is_generic_server_error(request_body):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(GenericServerError):
        await _client(handler).initialize(request_body)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "data",
    [
        {"reference": "PAY-1"},
        {"reference": "PAY-1", "amount_minor_units": 0},
        {"reference": "PAY-1", "amount_minor_units": 1234.5},
        {"amount_minor_units": 500},
    ],
)
async def test_malformed_success_body_is_generic_server_error(request_body, data):
    def handler(request):
        return httpx.Response(200, json={"status": "success", "data": data})

    with pytest.raises(GenericServerError):
        await _client(handler).initialize(request_body)


@pytest.mark.asyncio
async def test_non_json_error_page_is_generic_server_error(request_body):
    def handler(request):
        return httpx.Response(502, text="<html>Bad gateway</html>")

    with pytest.raises(GenericServerError):
        await _client(handler).initialize(request_body)
