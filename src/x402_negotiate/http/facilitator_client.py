"""HTTP client for talking to a remote facilitator from a resource server."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

import httpx
from typing_extensions import Self

from ..adapters import adapt_settle_response_lenient_to_v2, adapt_verify_response_v1_to_v2
from ..cache import AgedLRUCache, CacheConfig
from ..schemas import (
    BaseX402Model,
    FacilitatorResponseError,
    PaymentPayload,
    PaymentPayloadV1,
    PaymentRequired,
    PaymentRequiredV1Lenient,
    PaymentRequirements,
    PaymentRequirementsV1,
    ResourceInfo,
    SettleResponse,
    SupportedResponse,
    VerifyResponse,
    VerifyResponseV1Lenient,
)

logger = logging.getLogger(__name__)

RelaxedRequirements = Mapping[str, Any] | BaseX402Model


# ============================================================================
# Configuration
# ============================================================================


@dataclass
class FacilitatorConfig:
    """Configuration for HTTPFacilitatorClient.

    Attributes:
        url: Facilitator base URL.
        timeout: Request timeout in seconds, used when the client owns its
            httpx.AsyncClient.
        http_client: Optional shared httpx.AsyncClient.
        cache: Sizing of the accepts cache.
        logger: Logger to use; defaults to this module's logger.
    """

    url: str
    timeout: float = 30.0
    http_client: httpx.AsyncClient | None = None
    cache: CacheConfig = field(default_factory=CacheConfig)
    logger: logging.Logger | None = None


def _to_dict(requirements: RelaxedRequirements) -> dict[str, Any]:
    if isinstance(requirements, BaseX402Model):
        return requirements.to_wire()
    return dict(requirements)


# ============================================================================
# HTTP Facilitator Client
# ============================================================================


class HTTPFacilitatorClient:
    """Async facilitator client.

    Resolves the full requirements to offer a client via ``/accepts``,
    memoized per accepts list and resource, and forwards payments to
    ``/verify`` and ``/settle``. Settlement responses are reconciled from any
    of the standard, legacy or lenient shapes into the v2 model.
    """

    def __init__(self, config: FacilitatorConfig) -> None:
        self._url = config.url.rstrip("/")
        self._timeout = config.timeout
        self._http_client = config.http_client
        self._owns_client = config.http_client is None
        self._logger = config.logger or logger
        # Keyed on the identity of the accepts list; entries hold the list
        # itself so a recycled id() is never mistaken for a hit.
        self._accepts_cache: AgedLRUCache[
            tuple[int, int, str], tuple[Sequence[Any], BaseX402Model]
        ] = AgedLRUCache.from_config(config.cache)

    @property
    def url(self) -> str:
        return self._url

    def _get_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self._timeout, follow_redirects=True)
        return self._http_client

    async def aclose(self) -> None:
        """Close the HTTP client if we own it."""
        if self._owns_client and self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    async def _post(self, operation: str, body: dict[str, Any]) -> Any:
        response = await self._get_client().post(f"{self._url}/{operation}", json=body)
        if response.status_code != 200:
            self._logger.error(
                f"Facilitator {operation} failed ({response.status_code}): {response.text}"
            )
            raise FacilitatorResponseError(operation, response.status_code, response.text)
        return response.json()

    # =========================================================================
    # Accepts
    # =========================================================================

    async def get_payment_required_response(
        self,
        accepts: Sequence[RelaxedRequirements],
        resource: str,
    ) -> PaymentRequiredV1Lenient:
        """Ask the facilitator to complete v1 requirements for a resource.

        Args:
            accepts: Partial requirements (at least scheme and network); each
                gets ``resource`` unless it already names one.
            resource: Resource URL.

        Returns:
            The facilitator's v1 402 body.

        Raises:
            FacilitatorResponseError: If the facilitator answers non-200.
        """
        key = (1, id(accepts), resource)
        cached = self._cached(key, accepts)
        if cached is not None:
            return cached

        body = {
            "x402Version": 1,
            "accepts": [{"resource": resource, **_to_dict(r)} for r in accepts],
        }
        result = PaymentRequiredV1Lenient.model_validate(await self._post("accepts", body))
        self._accepts_cache.put(key, (accepts, result))
        return result

    async def get_payment_required_response_v2(
        self,
        accepts: Sequence[RelaxedRequirements],
        resource: ResourceInfo,
    ) -> PaymentRequired:
        """Ask the facilitator to complete v2 requirements for a resource."""
        key = (2, id(accepts), resource.url)
        cached = self._cached(key, accepts)
        if cached is not None:
            return cached

        body = {
            "x402Version": 2,
            "resource": resource.to_wire(),
            "accepts": [_to_dict(r) for r in accepts],
        }
        data = await self._post("accepts", body)
        result = PaymentRequired.model_validate({"resource": resource.to_wire(), **data})
        self._accepts_cache.put(key, (accepts, result))
        return result

    def _cached(self, key: tuple[int, int, str], accepts: Sequence[Any]) -> Any:
        entry = self._accepts_cache.get(key)
        if entry is None or entry[0] is not accepts:
            return None
        self._logger.debug(f"accepts cache hit for {key[2]}")
        return entry[1]

    # =========================================================================
    # Verify / Settle
    # =========================================================================

    async def verify(
        self,
        payload: PaymentPayload | PaymentPayloadV1,
        requirements: PaymentRequirements | PaymentRequirementsV1,
    ) -> VerifyResponse:
        """Verify a payment with the facilitator.

        Raises:
            FacilitatorResponseError: If the facilitator answers non-200.
        """
        data = await self._post("verify", self._payment_body(payload, requirements))
        if payload.x402_version == 1:
            return adapt_verify_response_v1_to_v2(VerifyResponseV1Lenient.model_validate(data))
        return VerifyResponse.model_validate(data)

    async def settle(
        self,
        payload: PaymentPayload | PaymentPayloadV1,
        requirements: PaymentRequirements | PaymentRequirementsV1,
    ) -> SettleResponse:
        """Settle a payment with the facilitator.

        Raises:
            FacilitatorResponseError: If the facilitator answers non-200.
            AdapterInvariantError: If the response reports success without a
                transaction, or names no network.
        """
        data = await self._post("settle", self._payment_body(payload, requirements))
        return adapt_settle_response_lenient_to_v2(data)

    async def get_supported(self) -> SupportedResponse:
        response = await self._get_client().get(f"{self._url}/supported")
        if response.status_code != 200:
            raise FacilitatorResponseError("supported", response.status_code, response.text)
        return SupportedResponse.model_validate(response.json())

    @staticmethod
    def _payment_body(
        payload: PaymentPayload | PaymentPayloadV1,
        requirements: PaymentRequirements | PaymentRequirementsV1,
    ) -> dict[str, Any]:
        return {
            "x402Version": payload.x402_version,
            "paymentPayload": payload.to_wire(),
            "paymentRequirements": requirements.to_wire(),
        }
