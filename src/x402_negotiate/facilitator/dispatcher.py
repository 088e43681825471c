"""Routes facilitator requests across an ordered list of FacilitatorHandlers.

The dispatcher is framework-agnostic: each operation takes the decoded JSON
request body and returns a DispatchResult carrying the HTTP status and JSON
body to send. v1 requests are adapted to v2 before any handler sees them and
the handler's answer is adapted back, so handlers only ever speak v2.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Sequence

from pydantic import ValidationError

from ..adapters import (
    adapt_payload_v1_to_v2,
    adapt_requirements_v1_to_v2,
    adapt_requirements_v2_to_v1,
    adapt_settle_response_v2_to_v1,
    adapt_verify_response_v2_to_v1,
    extract_resource_info_v1,
)
from ..http.utils import decode_payment_payload_header
from ..interfaces import FacilitatorHandler, HandlerCapability, has_capability
from ..networks import NetworkTranslator, normalize_network_id, translate_network_to_legacy
from ..schemas import (
    PaymentPayload,
    PaymentRequired,
    PaymentRequiredV1Lenient,
    PaymentRequirements,
    PaymentValidationError,
    ResourceInfo,
    SettleRequestV1,
    SettleResponse,
    SupportedResponse,
    VerifyResponse,
    detect_version,
    parse_payment_payload,
    parse_payment_requirements,
)

logger = logging.getLogger(__name__)

NO_MATCHING_HANDLER = "no matching payment handler found"


@dataclass
class DispatchResult:
    """HTTP status and JSON body for one dispatched request."""

    status_code: int
    body: dict[str, Any]


@dataclass
class _PaymentRequest:
    x402_version: int
    requirements: PaymentRequirements
    payment: PaymentPayload
    to_wire_network: NetworkTranslator


def _restoring_translator(originals: Sequence[str]) -> NetworkTranslator:
    """Translate back to v1, preferring the exact network names the caller sent."""
    by_caip2 = {normalize_network_id(n): n for n in originals}

    def translate(network: str) -> str:
        return by_caip2.get(network, translate_network_to_legacy(network))

    return translate


def _require_object(body: Any) -> dict[str, Any]:
    if not isinstance(body, dict):
        raise PaymentValidationError("request body must be a JSON object")
    return body


class FacilitatorDispatcher:
    """Dispatches accepts, settle, verify and supported requests.

    Handler order is significant: for settle and verify the first handler to
    return a response wins. Handlers are called exactly once per request.

    Args:
        handlers: Facilitator handlers, in priority order.
        logger: Logger to use; defaults to this module's logger.
    """

    def __init__(
        self,
        handlers: Sequence[FacilitatorHandler],
        logger: logging.Logger | None = None,
    ) -> None:
        self._handlers = tuple(handlers)
        self._logger = logger if logger is not None else logging.getLogger(__name__)

    @property
    def handlers(self) -> tuple[FacilitatorHandler, ...]:
        return self._handlers

    # =========================================================================
    # Accepts
    # =========================================================================

    async def accepts(self, body: Any) -> DispatchResult:
        """Collect the requirements every handler can fulfil.

        All handlers are asked concurrently; results are concatenated in
        handler order.
        """
        try:
            data = _require_object(body)
            version = detect_version(data)
            if version == 1:
                required_v1 = PaymentRequiredV1Lenient.model_validate(data)
                resource = (
                    extract_resource_info_v1(required_v1.accepts[0])
                    if required_v1.accepts
                    else None
                )
                accepts = [
                    adapt_requirements_v1_to_v2(r, normalize_network_id)
                    for r in required_v1.accepts
                ]
                to_wire = _restoring_translator([r.network for r in required_v1.accepts])
            else:
                required = PaymentRequired.model_validate(data)
                resource = required.resource
                accepts = list(required.accepts)
        except ValidationError as e:
            summary = PaymentValidationError.from_pydantic(e).summary
            return self._invalid_accepts(f"couldn't parse required response: {summary}")
        except (PaymentValidationError, ValueError) as e:
            return self._invalid_accepts(f"couldn't parse required response: {e}")

        try:
            results = await asyncio.gather(
                *(handler.get_requirements(list(accepts), resource) for handler in self._handlers)
            )
        except Exception as e:
            self._logger.exception("get_requirements failed")
            return DispatchResult(500, {"error": str(e)})

        combined = [r for result in results for r in result]
        self._logger.debug(
            f"accepts: {len(accepts)} candidate(s) -> {len(combined)} requirement(s)"
        )

        if version == 1:
            resource_v1 = resource or ResourceInfo(url="")
            return DispatchResult(
                200,
                {
                    "x402Version": 1,
                    "accepts": [
                        adapt_requirements_v2_to_v1(r, resource_v1, to_wire).to_wire()
                        for r in combined
                    ],
                },
            )

        response_body: dict[str, Any] = {
            "x402Version": 2,
            "accepts": [r.to_wire() for r in combined],
        }
        if resource is not None:
            response_body["resource"] = resource.to_wire()
        return DispatchResult(200, response_body)

    def _invalid_accepts(self, message: str) -> DispatchResult:
        self._logger.warning(f"rejected accepts request: {message}")
        return DispatchResult(400, {"error": message})

    # =========================================================================
    # Settle / Verify
    # =========================================================================

    def _parse_payment_request(self, body: Any) -> _PaymentRequest:
        try:
            request = SettleRequestV1.model_validate(_require_object(body))
        except ValidationError as e:
            raise PaymentValidationError.from_pydantic(e, "couldn't validate request: ") from e

        try:
            if request.payment_header is not None:
                payment = decode_payment_payload_header(request.payment_header)
            else:
                payment = parse_payment_payload(request.payment_payload)
        except PaymentValidationError as e:
            raise PaymentValidationError(f"couldn't validate x402 payload: {e.summary}") from e
        except ValidationError as e:
            raise PaymentValidationError.from_pydantic(
                e, "couldn't validate x402 payload: "
            ) from e
        except ValueError as e:
            raise PaymentValidationError(f"couldn't validate x402 payload: {e}") from e

        version = payment.x402_version
        try:
            requirements = parse_payment_requirements(version, request.payment_requirements)
        except ValidationError as e:
            raise PaymentValidationError.from_pydantic(e, "couldn't validate request: ") from e

        if version == 1:
            return _PaymentRequest(
                x402_version=1,
                requirements=adapt_requirements_v1_to_v2(requirements, normalize_network_id),
                payment=adapt_payload_v1_to_v2(payment, requirements, normalize_network_id),
                to_wire_network=_restoring_translator([requirements.network]),
            )
        return _PaymentRequest(
            x402_version=2,
            requirements=requirements,
            payment=payment,
            to_wire_network=lambda network: network,
        )

    async def settle(self, body: Any) -> DispatchResult:
        """Settle a payment with the first handler that claims it.

        Returns 400 for malformed input or when no handler claims the
        payment, and 500 carrying the message when a handler raises.
        """
        try:
            request = self._parse_payment_request(body)
        except PaymentValidationError as e:
            self._logger.warning(f"rejected settle request: {e.summary}")
            return DispatchResult(400, {"success": False, "errorReason": e.summary})

        for handler in self._handlers:
            try:
                result = await handler.handle_settle(request.requirements, request.payment)
            except Exception as e:
                self._logger.exception(f"{type(handler).__name__}.handle_settle failed")
                return DispatchResult(500, {"success": False, "errorReason": str(e)})
            if result is None:
                continue
            self._logger.info(
                f"settle handled by {type(handler).__name__}: success={result.success}"
            )
            return DispatchResult(200, self._settle_body(request, result))

        self._logger.warning(
            f"settle: {NO_MATCHING_HANDLER} for scheme={request.requirements.scheme} "
            f"network={request.requirements.network}"
        )
        return DispatchResult(400, {"success": False, "errorReason": NO_MATCHING_HANDLER})

    async def verify(self, body: Any) -> DispatchResult:
        """Verify a payment with the first verify-capable handler that claims it."""
        try:
            request = self._parse_payment_request(body)
        except PaymentValidationError as e:
            self._logger.warning(f"rejected verify request: {e.summary}")
            return DispatchResult(400, {"isValid": False, "invalidReason": e.summary})

        for handler in self._handlers:
            if not has_capability(handler, HandlerCapability.VERIFY):
                continue
            try:
                result = await handler.handle_verify(request.requirements, request.payment)
            except Exception as e:
                self._logger.exception(f"{type(handler).__name__}.handle_verify failed")
                return DispatchResult(500, {"isValid": False, "invalidReason": str(e)})
            if result is None:
                continue
            return DispatchResult(200, self._verify_body(request, result))

        return DispatchResult(400, {"isValid": False, "invalidReason": NO_MATCHING_HANDLER})

    @staticmethod
    def _settle_body(request: _PaymentRequest, result: SettleResponse) -> dict[str, Any]:
        if request.x402_version == 1:
            return adapt_settle_response_v2_to_v1(result, request.to_wire_network).to_wire()
        return result.to_wire()

    @staticmethod
    def _verify_body(request: _PaymentRequest, result: VerifyResponse) -> dict[str, Any]:
        if request.x402_version == 1:
            return adapt_verify_response_v2_to_v1(result).to_wire()
        return result.to_wire()

    # =========================================================================
    # Supported
    # =========================================================================

    async def supported(self) -> DispatchResult:
        """Aggregate supported kinds and signers from capable handlers."""
        kind_sources = [
            h for h in self._handlers if has_capability(h, HandlerCapability.SUPPORTED)
        ]
        signer_sources = [
            h for h in self._handlers if has_capability(h, HandlerCapability.SIGNERS)
        ]
        try:
            kinds = await asyncio.gather(*(h.get_supported() for h in kind_sources))
            signer_maps = await asyncio.gather(*(h.get_signers() for h in signer_sources))
        except Exception as e:
            self._logger.exception("get_supported failed")
            return DispatchResult(500, {"error": str(e)})

        signers: dict[str, list[str]] = {}
        for signer_map in signer_maps:
            for family, addresses in signer_map.items():
                merged = signers.setdefault(family, [])
                merged.extend(a for a in addresses if a not in merged)

        response = SupportedResponse(
            kinds=[kind for batch in kinds for kind in batch],
            signers=signers,
        )
        return DispatchResult(200, response.to_wire())
