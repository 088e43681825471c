"""Tests for the httpx integration."""

import httpx
import pytest

from x402_negotiate.http import PAYMENT_SIGNATURE_HEADER, WrapOptions, encode_payment_header
from x402_negotiate.http.clients import httpx_fetch, wrapHttpxWithPayment, x402AsyncTransport

from ..mocks import RecordingPaymentHandler, build_payment_required

URL = "https://example.com/api/locked"


def paywall(request: httpx.Request) -> httpx.Response:
    """Server stub: 402 until a PAYMENT-SIGNATURE header arrives."""
    if PAYMENT_SIGNATURE_HEADER in request.headers:
        return httpx.Response(200, json={"data": "paid"})
    return httpx.Response(
        402, headers={"PAYMENT-REQUIRED": encode_payment_header(build_payment_required())}
    )


class TestX402AsyncTransport:
    """Tests for x402AsyncTransport."""

    @pytest.mark.asyncio
    async def test_pays_through_inner_transport(self):
        handler = RecordingPaymentHandler()
        async with wrapHttpxWithPayment(
            WrapOptions(handlers=[handler]), transport=httpx.MockTransport(paywall)
        ) as client:
            response = await client.get(URL)

        assert response.status_code == 200
        assert response.json() == {"data": "paid"}
        assert len(handler.executed) == 1

    @pytest.mark.asyncio
    async def test_non_402_passes_through(self):
        handler = RecordingPaymentHandler()
        inner = httpx.MockTransport(lambda request: httpx.Response(204))
        transport = x402AsyncTransport(WrapOptions(handlers=[handler]), inner)

        async with httpx.AsyncClient(transport=transport) as client:
            response = await client.get(URL)

        assert response.status_code == 204
        assert handler.offered == []

    @pytest.mark.asyncio
    async def test_aclose_delegates(self):
        class ClosingTransport(httpx.AsyncBaseTransport):
            closed = False

            async def handle_async_request(self, request):
                return httpx.Response(200)

            async def aclose(self):
                self.closed = True

        inner = ClosingTransport()
        transport = x402AsyncTransport(WrapOptions(handlers=[]), inner)
        await transport.aclose()

        assert inner.closed


class TestHttpxFetch:
    """Tests for httpx_fetch."""

    @pytest.mark.asyncio
    async def test_sends_through_client(self):
        async with httpx.AsyncClient(transport=httpx.MockTransport(paywall)) as client:
            fetch = httpx_fetch(client)
            response = await fetch(client.build_request("GET", URL))

        assert response.status_code == 402
