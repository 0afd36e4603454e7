import httpx
import pytest

from eventify_checkout.checkout.errors import GatewayLoadError
from eventify_checkout.checkout.gateway_bootstrap import GatewayBootstrapper, GatewayEnvironment
from eventify_checkout.integrations.clients.real_http.gateway_script import HostedCheckoutSDK, HttpScriptLoader
from eventify_checkout.integrations.contracts.interfaces import GatewayConfig, GatewayResponse

SCRIPT_URL = "https://js.paystack.co/v1/inline.js"


def _loader(handler, presenter=None):
    return HttpScriptLoader(SCRIPT_URL, presenter or (lambda *a: None), transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_loader_returns_sdk_that_hands_session_to_presenter():
    shown = []

    def presenter(script, payload, on_success, on_close):
        shown.append((script, payload))
        on_success(GatewayResponse(reference=payload["ref"], status="success"))

    sdk = await _loader(lambda request: httpx.Response(200, text="window.PaystackPop = {};"), presenter)()
    assert isinstance(sdk, HostedCheckoutSDK)

    results = []
    config = GatewayConfig(
        public_key="pk_test",
        email="a@b.com",
        amount_minor_units=500000,
        reference="PAY-1",
        currency="NGN",
        channels=["card"],
        metadata={},
    )
    sdk.setup(config, results.append, lambda: results.append("closed")).open()

    assert shown[0][0] == "window.PaystackPop = {};"
    assert shown[0][1]["amount"] == 500000
    assert shown[0][1]["key"] == "pk_test"
    assert results[0].reference == "PAY-1"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "handler",
    [
        lambda request: httpx.Response(503, text="unavailable"),
        lambda request: httpx.Response(200, text="   "),
    ],
)
async def test_bad_script_responses_raise_load_error(handler):
    with pytest.raises(GatewayLoadError):
        await _loader(handler)()


@pytest.mark.asyncio
async def test_network_failure_marks_bootstrap_failed(notifier):
    def handler(request):
        raise httpx.ConnectError("blocked by content filter", request=request)

    boot = GatewayBootstrapper(GatewayEnvironment(), _loader(handler), notifier)
    boot.mount()

    with pytest.raises(GatewayLoadError):
        await boot.wait_ready()

    assert boot.state.value == "load_failed"
    assert notifier.kinds() == ["gateway_load"]
