"""Bridging facilitator handlers written against v1 types."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..adapters import (
    adapt_payload_v2_to_v1,
    adapt_requirements_v1_to_v2,
    adapt_requirements_v2_to_v1,
    adapt_settle_response_legacy_to_v2,
    adapt_supported_kind_v1_to_v2,
    adapt_verify_response_v1_to_v2,
)
from ..interfaces import FacilitatorHandler, HandlerCapability
from ..networks import normalize_network_id, translate_network_to_legacy
from ..schemas import (
    PaymentPayload,
    PaymentPayloadV1,
    PaymentRequirements,
    PaymentRequirementsV1,
    ResourceInfo,
    SettleResponse,
    SettleResponseLegacy,
    SupportedKind,
    SupportedKindV1,
    VerifyResponse,
    VerifyResponseV1Lenient,
)

MISSING_RESOURCE = "v2 payment payload is missing resource context required for v1 adapter"


class LegacyFacilitatorHandler(ABC):
    """Facilitator handler using v1 types and the txHash/networkId settle shape.

    Wrap with ``adapt_handler_v1_to_v2`` to register it with a dispatcher.
    """

    @abstractmethod
    async def get_requirements(
        self,
        accepts: list[PaymentRequirementsV1],
    ) -> list[PaymentRequirementsV1]: ...

    @abstractmethod
    async def handle_settle(
        self,
        requirements: PaymentRequirementsV1,
        payment: PaymentPayloadV1,
    ) -> SettleResponseLegacy | None: ...

    async def handle_verify(
        self,
        requirements: PaymentRequirementsV1,
        payment: PaymentPayloadV1,
    ) -> VerifyResponseV1Lenient | None:
        raise NotImplementedError

    async def get_supported(self) -> list[SupportedKindV1]:
        raise NotImplementedError


def _overrides(handler: LegacyFacilitatorHandler, name: str) -> bool:
    return getattr(type(handler), name) is not getattr(LegacyFacilitatorHandler, name)


class _LegacyHandlerAdapter(FacilitatorHandler):
    def __init__(self, handler: LegacyFacilitatorHandler) -> None:
        self._handler = handler
        caps = set()
        if _overrides(handler, "handle_verify"):
            caps.add(HandlerCapability.VERIFY)
        if _overrides(handler, "get_supported"):
            caps.add(HandlerCapability.SUPPORTED)
        self._capabilities = frozenset(caps)

    def capabilities(self) -> frozenset[HandlerCapability]:
        return self._capabilities

    async def get_requirements(
        self,
        accepts: list[PaymentRequirements],
        resource: ResourceInfo | None = None,
    ) -> list[PaymentRequirements]:
        # Without resource context legacy handlers see an empty resource URL.
        fallback = resource or ResourceInfo(url="")
        accepts_v1 = [
            adapt_requirements_v2_to_v1(r, fallback, translate_network_to_legacy) for r in accepts
        ]
        results = await self._handler.get_requirements(accepts_v1)
        return [adapt_requirements_v1_to_v2(r, normalize_network_id) for r in results]

    def _to_v1(
        self,
        requirements: PaymentRequirements,
        payment: PaymentPayload,
    ) -> tuple[PaymentRequirementsV1, PaymentPayloadV1]:
        if payment.resource is None:
            raise ValueError(MISSING_RESOURCE)
        return (
            adapt_requirements_v2_to_v1(requirements, payment.resource, translate_network_to_legacy),
            adapt_payload_v2_to_v1(payment, translate_network_to_legacy),
        )

    async def handle_settle(
        self,
        requirements: PaymentRequirements,
        payment: PaymentPayload,
    ) -> SettleResponse | None:
        result = await self._handler.handle_settle(*self._to_v1(requirements, payment))
        if result is None:
            return None
        return adapt_settle_response_legacy_to_v2(result)

    async def handle_verify(
        self,
        requirements: PaymentRequirements,
        payment: PaymentPayload,
    ) -> VerifyResponse | None:
        result = await self._handler.handle_verify(*self._to_v1(requirements, payment))
        if result is None:
            return None
        return adapt_verify_response_v1_to_v2(result)

    async def get_supported(self) -> list[SupportedKind]:
        kinds = await self._handler.get_supported()
        return [adapt_supported_kind_v1_to_v2(k, normalize_network_id) for k in kinds]


def adapt_handler_v1_to_v2(handler: LegacyFacilitatorHandler) -> FacilitatorHandler:
    """Adapt a legacy v1 handler to the v2 FacilitatorHandler interface.

    Requirements reach the legacy handler with legacy network names and its
    results are normalized back to CAIP-2. Legacy settle responses must carry
    ``networkId``, and ``txHash`` when successful.

    Raises (from the adapted handler):
        ValueError: If a payment to settle or verify has no resource.
        AdapterInvariantError: If a legacy settle response is incomplete.
    """
    return _LegacyHandlerAdapter(handler)
