"""Tests for HTTPFacilitatorClient."""

import json

import httpx
import pytest

from x402_negotiate import (
    AdapterInvariantError,
    CacheConfig,
    PaymentPayload,
    PaymentPayloadV1,
)
from x402_negotiate.http import FacilitatorConfig, HTTPFacilitatorClient
from x402_negotiate.schemas import FacilitatorResponseError

from ..mocks import build_payment_requirements, build_payment_requirements_v1, build_resource_info

FACILITATOR_URL = "https://facilitator.example.com/"


class RecordingFacilitator:
    """httpx.MockTransport handler scripted per path."""

    def __init__(self, responses: dict[str, httpx.Response]):
        self.responses = responses
        self.requests: list[tuple[str, dict | None]] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else None
        self.requests.append((request.url.path, body))
        return self.responses[request.url.path]


def build_client(facilitator: RecordingFacilitator, **kwargs) -> HTTPFacilitatorClient:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(facilitator))
    return HTTPFacilitatorClient(
        FacilitatorConfig(url=FACILITATOR_URL, http_client=http_client, **kwargs)
    )


def accepts_response() -> httpx.Response:
    return httpx.Response(
        200,
        json={"x402Version": 1, "accepts": [build_payment_requirements_v1().to_wire()]},
    )


class TestAccepts:
    """Tests for get_payment_required_response."""

    @pytest.mark.asyncio
    async def test_posts_v1_accepts_with_resource(self):
        facilitator = RecordingFacilitator({"/accepts": accepts_response()})
        client = build_client(facilitator)

        result = await client.get_payment_required_response(
            [{"scheme": "exact", "network": "base-sepolia"}], "https://example.com/api/locked"
        )

        path, body = facilitator.requests[0]
        assert path == "/accepts"
        assert body == {
            "x402Version": 1,
            "accepts": [
                {
                    "scheme": "exact",
                    "network": "base-sepolia",
                    "resource": "https://example.com/api/locked",
                }
            ],
        }
        assert result.accepts[0].max_amount_required == "1000"
        assert result.error is None

    @pytest.mark.asyncio
    async def test_same_accepts_object_is_cached(self):
        facilitator = RecordingFacilitator({"/accepts": accepts_response()})
        client = build_client(facilitator)
        accepts = [{"scheme": "exact", "network": "base-sepolia"}]

        first = await client.get_payment_required_response(accepts, "https://e.x/a")
        second = await client.get_payment_required_response(accepts, "https://e.x/a")

        assert first is second
        assert len(facilitator.requests) == 1

    @pytest.mark.asyncio
    async def test_equal_but_distinct_accepts_are_not_shared(self):
        facilitator = RecordingFacilitator({"/accepts": accepts_response()})
        client = build_client(facilitator)

        await client.get_payment_required_response([{"scheme": "exact"}], "https://e.x/a")
        await client.get_payment_required_response([{"scheme": "exact"}], "https://e.x/a")

        assert len(facilitator.requests) == 2

    @pytest.mark.asyncio
    async def test_cache_expires(self):
        facilitator = RecordingFacilitator({"/accepts": accepts_response()})
        client = build_client(facilitator, cache=CacheConfig(max_age=0))
        accepts = [{"scheme": "exact"}]

        await client.get_payment_required_response(accepts, "https://e.x/a")
        await client.get_payment_required_response(accepts, "https://e.x/a")

        assert len(facilitator.requests) == 2

    @pytest.mark.asyncio
    async def test_v2_accepts(self):
        facilitator = RecordingFacilitator(
            {
                "/accepts": httpx.Response(
                    200,
                    json={"x402Version": 2, "accepts": [build_payment_requirements().to_wire()]},
                )
            }
        )
        client = build_client(facilitator)

        result = await client.get_payment_required_response_v2(
            [build_payment_requirements()], build_resource_info()
        )

        assert facilitator.requests[0][1]["resource"] == build_resource_info().to_wire()
        assert result.resource == build_resource_info()
        assert result.accepts[0].amount == "1000"

    @pytest.mark.asyncio
    async def test_non_200_raises(self):
        facilitator = RecordingFacilitator({"/accepts": httpx.Response(400, json={"error": "x"})})
        client = build_client(facilitator)

        with pytest.raises(FacilitatorResponseError) as exc_info:
            await client.get_payment_required_response([], "https://e.x/a")

        assert exc_info.value.status_code == 400


class TestVerifySettle:
    """Tests for verify and settle."""

    @pytest.mark.asyncio
    async def test_settle_reconciles_legacy_response(self):
        facilitator = RecordingFacilitator(
            {"/settle": httpx.Response(200, json={"success": True, "txHash": "0x1", "networkId": "base"})}
        )
        client = build_client(facilitator)
        payload = PaymentPayloadV1(scheme="exact", network="base-sepolia", payload={"s": 1})

        result = await client.settle(payload, build_payment_requirements_v1())

        assert (result.success, result.transaction, result.network) == (True, "0x1", "base")
        body = facilitator.requests[0][1]
        assert body["x402Version"] == 1
        assert body["paymentPayload"] == payload.to_wire()
        assert body["paymentRequirements"] == build_payment_requirements_v1().to_wire()

    @pytest.mark.asyncio
    async def test_settle_success_without_transaction_raises(self):
        facilitator = RecordingFacilitator(
            {"/settle": httpx.Response(200, json={"success": True, "network": "base"})}
        )
        client = build_client(facilitator)
        payload = PaymentPayload(accepted=build_payment_requirements(), payload={})

        with pytest.raises(AdapterInvariantError):
            await client.settle(payload, build_payment_requirements())

    @pytest.mark.asyncio
    async def test_verify_v1_response(self):
        facilitator = RecordingFacilitator(
            {"/verify": httpx.Response(200, json={"isValid": False, "invalidReason": "expired", "payer": ""})}
        )
        client = build_client(facilitator)
        payload = PaymentPayloadV1(scheme="exact", network="base-sepolia", payload={})

        result = await client.verify(payload, build_payment_requirements_v1())

        assert result.is_valid is False
        assert result.invalid_reason == "expired"
        assert result.payer is None

    @pytest.mark.asyncio
    async def test_get_supported(self):
        facilitator = RecordingFacilitator(
            {
                "/supported": httpx.Response(
                    200,
                    json={"kinds": [{"x402Version": 2, "scheme": "exact", "network": "eip155:8453"}]},
                )
            }
        )
        async with build_client(facilitator) as client:
            supported = await client.get_supported()

        assert supported.kinds[0].network == "eip155:8453"
        assert supported.signers == {}
