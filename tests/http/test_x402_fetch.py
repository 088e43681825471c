"""Tests for the x402 fetch wrapper."""

import json
import logging

import httpx
import pytest

from x402_negotiate import (
    NoApplicablePayersError,
    PaymentRetryExhaustedError,
    PaymentValidationError,
)
from x402_negotiate.http import (
    PAYMENT_SIGNATURE_HEADER,
    X_PAYMENT_HEADER,
    WrapOptions,
    decode_payment_header,
    encode_payment_header,
    process_payment_required_response,
    response_feeder,
    wrap,
)

from ..mocks import (
    TEST_ASSET,
    RecordingPaymentHandler,
    build_payment_required,
    build_payment_requirements,
    build_payment_requirements_v1,
)

URL = "https://example.com/api/locked"

# =============================================================================
# Helpers
# =============================================================================


def build_v1_body() -> dict:
    return {
        "x402Version": 1,
        "accepts": [build_payment_requirements_v1().to_wire()],
        "error": "X-PAYMENT header is required",
    }


def make_402_v2(required=None) -> httpx.Response:
    required = required or build_payment_required()
    return httpx.Response(
        402, headers={"PAYMENT-REQUIRED": encode_payment_header(required)}, json={}
    )


def make_402_v1(body=None) -> httpx.Response:
    return httpx.Response(402, json=body or build_v1_body())


def make_200() -> httpx.Response:
    return httpx.Response(200, json={"data": "paid content"})


def build_request(method="GET", **kwargs) -> httpx.Request:
    return httpx.Request(method, URL, **kwargs)


class SleepRecorder:
    """Injected backoff sleep that records requested delays in seconds."""

    def __init__(self):
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


def build_options(handlers=None, **kwargs) -> WrapOptions:
    kwargs.setdefault("sleep", SleepRecorder())
    return WrapOptions(handlers=handlers or [RecordingPaymentHandler()], **kwargs)


# =============================================================================
# Negotiation
# =============================================================================


class TestNegotiation:
    """Tests for the 402 -> pay -> retry round trip."""

    @pytest.mark.asyncio
    async def test_non_402_passes_through(self):
        handler = RecordingPaymentHandler()
        feeder = response_feeder([make_200()])

        response = await wrap(feeder, build_options([handler]))(build_request())

        assert response.status_code == 200
        assert handler.offered == []
        assert len(feeder.requests) == 1

    @pytest.mark.asyncio
    async def test_v2_payment_uses_payment_signature_header(self):
        handler = RecordingPaymentHandler(payload={"signature": "0xsigned"})
        feeder = response_feeder([make_402_v2(), make_200()])

        response = await wrap(feeder, build_options([handler]))(build_request())

        assert response.status_code == 200
        paid = feeder.requests[1]
        assert X_PAYMENT_HEADER not in paid.headers
        payload = decode_payment_header(paid.headers[PAYMENT_SIGNATURE_HEADER])
        assert payload["x402Version"] == 2
        assert payload["accepted"] == build_payment_requirements().to_wire()
        assert payload["payload"] == {"signature": "0xsigned"}
        assert payload["resource"]["url"] == URL
        assert handler.contexts[0].x402_version == 2

    @pytest.mark.asyncio
    async def test_v1_payment_uses_x_payment_header(self):
        handler = RecordingPaymentHandler()
        feeder = response_feeder([make_402_v1(), make_200()])

        await wrap(feeder, build_options([handler]))(build_request())

        assert handler.offered[0][0].network == "eip155:84532"
        assert handler.contexts[0].x402_version == 1
        payload = decode_payment_header(feeder.requests[1].headers[X_PAYMENT_HEADER])
        assert payload == {
            "x402Version": 1,
            "scheme": "exact",
            "network": "base-sepolia",
            "asset": TEST_ASSET,
            "payload": {"signature": "0xmock"},
        }

    @pytest.mark.asyncio
    async def test_request_body_and_headers_preserved_on_retry(self):
        feeder = response_feeder([make_402_v2(), make_200()])
        request = build_request(
            "POST", json={"query": "weather"}, headers={"Authorization": "Bearer t"}
        )

        await wrap(feeder, build_options())(request)

        paid = feeder.requests[1]
        assert paid.method == "POST"
        assert json.loads(paid.content) == {"query": "weather"}
        assert paid.headers["Authorization"] == "Bearer t"
        assert PAYMENT_SIGNATURE_HEADER not in request.headers

    @pytest.mark.asyncio
    async def test_only_chosen_candidate_is_executed(self):
        first = RecordingPaymentHandler()
        second = RecordingPaymentHandler()
        feeder = response_feeder([make_402_v2(), make_200()])

        await wrap(feeder, build_options([first, second]))(build_request())

        assert len(first.offered) == 1
        assert len(second.offered) == 1
        assert len(first.executed) == 1
        assert second.executed == []

    @pytest.mark.asyncio
    async def test_async_payer_chooser(self):
        first = RecordingPaymentHandler()
        second = RecordingPaymentHandler(payload={"from": "second"})

        async def choose_last(candidates):
            return candidates[-1]

        feeder = response_feeder([make_402_v2(), make_200()])
        await wrap(feeder, build_options([first, second], payer_chooser=choose_last))(
            build_request()
        )

        assert first.executed == []
        payload = decode_payment_header(feeder.requests[1].headers[PAYMENT_SIGNATURE_HEADER])
        assert payload["payload"] == {"from": "second"}

    @pytest.mark.asyncio
    async def test_no_candidates_raises(self):
        handler = RecordingPaymentHandler(network="solana:other")
        feeder = response_feeder([make_402_v2()])

        with pytest.raises(NoApplicablePayersError, match="no applicable payers found"):
            await wrap(feeder, build_options([handler]))(build_request())

    @pytest.mark.asyncio
    async def test_failed_negotiation_closes_402(self):
        handler = RecordingPaymentHandler(network="solana:other")
        first = make_402_v2()
        feeder = response_feeder([first])

        with pytest.raises(NoApplicablePayersError):
            await wrap(feeder, build_options([handler]))(build_request())

        assert first.is_closed

    @pytest.mark.asyncio
    async def test_failing_exec_closes_402(self):
        class FailingHandler(RecordingPaymentHandler):
            def _exec_for(self, requirements):
                async def run():
                    raise RuntimeError("signer unavailable")

                return run

        first = make_402_v2()
        feeder = response_feeder([first])

        with pytest.raises(RuntimeError, match="signer unavailable"):
            await wrap(feeder, build_options([FailingHandler()]))(build_request())

        assert first.is_closed

    @pytest.mark.asyncio
    async def test_phase1_fetch_used_for_initial_request_only(self):
        phase1 = response_feeder([make_402_v2()])
        phase2 = response_feeder([make_200()])

        response = await wrap(phase2, build_options(phase1_fetch=phase1))(build_request())

        assert response.status_code == 200
        assert PAYMENT_SIGNATURE_HEADER not in phase1.requests[0].headers
        assert PAYMENT_SIGNATURE_HEADER in phase2.requests[0].headers

    @pytest.mark.asyncio
    async def test_malformed_402_body_raises_validation_error(self):
        feeder = response_feeder([httpx.Response(402, content=b"not json")])

        with pytest.raises(PaymentValidationError, match="couldn't parse payment required"):
            await wrap(feeder, build_options())(build_request())

    @pytest.mark.asyncio
    async def test_process_payment_required_response_directly(self):
        handler = RecordingPaymentHandler()

        prepared = await process_payment_required_response(
            build_request(), make_402_v2(), [handler]
        )

        assert prepared.header_name == PAYMENT_SIGNATURE_HEADER
        assert prepared.requirements.model_dump() == build_payment_requirements().model_dump()
        assert decode_payment_header(prepared.header_value) == prepared.payload.to_wire()


# =============================================================================
# Retry and Backoff
# =============================================================================


class TestRetry:
    """Tests for the retry loop."""

    @pytest.mark.asyncio
    async def test_backoff_single_wait_between_attempts(self):
        sleep = SleepRecorder()
        feeder = response_feeder([make_402_v2(), make_402_v2(), make_402_v2()])
        options = build_options(retry_count=1, initial_retry_delay=100, sleep=sleep)

        with pytest.raises(PaymentRetryExhaustedError):
            await wrap(feeder, options)(build_request())

        assert len(sleep.calls) == 1
        assert 0.1 <= sleep.calls[0] < 0.2
        assert len(feeder.requests) == 3

    @pytest.mark.asyncio
    async def test_default_retry_count_doubles_backoff(self):
        sleep = SleepRecorder()
        feeder = response_feeder([make_402_v2() for _ in range(4)])

        with pytest.raises(PaymentRetryExhaustedError) as exc_info:
            await wrap(feeder, build_options(sleep=sleep))(build_request())

        assert exc_info.value.attempts == 3
        assert sleep.calls == [0.1, 0.2]
        assert feeder.remaining == 0

    @pytest.mark.asyncio
    async def test_exhausted_error_carries_last_response(self):
        last = make_402_v2()
        feeder = response_feeder([make_402_v2(), last])

        with pytest.raises(PaymentRetryExhaustedError) as exc_info:
            await wrap(feeder, build_options(retry_count=0))(build_request())

        assert exc_info.value.response is last

    @pytest.mark.asyncio
    async def test_return_payment_failure_returns_original_402(self):
        sleep = SleepRecorder()
        body = build_v1_body()
        feeder = response_feeder([make_402_v1(body), make_402_v1(body)])
        options = build_options(retry_count=0, return_payment_failure=True, sleep=sleep)

        response = await wrap(feeder, options)(build_request())

        assert response.status_code == 402
        assert response.json() == body
        assert sleep.calls == []

    @pytest.mark.asyncio
    async def test_non_402_ends_retry_loop(self):
        sleep = SleepRecorder()
        feeder = response_feeder(
            [make_402_v2(), make_402_v2(), httpx.Response(500, json={"error": "x"})]
        )

        response = await wrap(feeder, build_options(sleep=sleep))(build_request())

        assert response.status_code == 500
        assert sleep.calls == [0.1]
        assert feeder.remaining == 0

    @pytest.mark.asyncio
    async def test_rejection_without_requirements_returns_402(self):
        sleep = SleepRecorder()
        rejected = httpx.Response(402, json={"error": "settlement failed"})
        feeder = response_feeder([make_402_v2(), rejected])
        options = build_options(retry_count=1, return_payment_failure=True, sleep=sleep)

        response = await wrap(feeder, options)(build_request())

        assert response is rejected
        assert response.json() == {"error": "settlement failed"}
        assert feeder.remaining == 0

    @pytest.mark.asyncio
    async def test_rejection_without_requirements_raises_with_response(self):
        rejected = httpx.Response(402, json={"error": "settlement failed"})
        feeder = response_feeder([make_402_v2(), rejected])

        with pytest.raises(PaymentRetryExhaustedError) as exc_info:
            await wrap(feeder, build_options(retry_count=2))(build_request())

        assert exc_info.value.response is rejected
        assert exc_info.value.attempts == 1
        assert len(feeder.requests) == 2

    @pytest.mark.asyncio
    async def test_renegotiates_from_latest_402(self):
        handler = RecordingPaymentHandler()
        cheaper = build_payment_required([build_payment_requirements(amount="500")])
        feeder = response_feeder([make_402_v2(), make_402_v2(cheaper), make_200()])

        await wrap(feeder, build_options([handler]))(build_request())

        assert [r.amount for r in handler.executed] == ["1000", "500"]

    def test_negative_retry_count_rejected(self):
        with pytest.raises(ValueError):
            WrapOptions(handlers=[], retry_count=-1)


class TestVerbose:
    """Verbose mode only changes log levels."""

    @pytest.mark.asyncio
    async def test_verbose_logs_at_info(self, caplog):
        feeder = response_feeder([make_402_v2(), make_200()])

        with caplog.at_level(logging.INFO, logger="x402_negotiate.http.x402_fetch"):
            response = await wrap(feeder, build_options(verbose=True))(build_request())

        assert response.status_code == 200
        assert any("negotiating attempt 1/3" in r.getMessage() for r in caplog.records)

    @pytest.mark.asyncio
    async def test_quiet_mode_logs_nothing_at_info(self, caplog):
        feeder = response_feeder([make_402_v2(), make_200()])

        with caplog.at_level(logging.INFO, logger="x402_negotiate.http.x402_fetch"):
            await wrap(feeder, build_options())(build_request())

        assert caplog.records == []
