"""x402 negotiation engine - protocol negotiation and v1/v2 adaptation.

Provides the client-side negotiate-then-pay fetch wrapper, the
facilitator-side handler dispatcher, requirement matching, and the adapter
layer translating between the v1 and v2 wire formats.

Quick Start:
    ```python
    from x402_negotiate.http import WrapOptions, wrap
    from x402_negotiate.http.clients import httpx_fetch

    # Client-side: pay for 402 responses
    fetch = wrap(httpx_fetch(client), WrapOptions(handlers=[my_payment_handler]))
    response = await fetch(client.build_request("GET", url))

    # Facilitator: dispatch across handlers
    from x402_negotiate.facilitator import create_app

    app = create_app([solana_handler, evm_handler])
    ```
"""

from .adapters import (
    adapt_payload_v1_to_v2,
    adapt_payload_v2_to_v1,
    adapt_payment_required_v1_to_v2,
    adapt_payment_required_v2_to_v1,
    adapt_requirements_v1_to_v2,
    adapt_requirements_v2_to_v1,
    adapt_settle_response_legacy_to_v2,
    adapt_settle_response_lenient_to_v2,
    adapt_settle_response_v1_to_v2,
    adapt_settle_response_v2_to_v1,
    adapt_settle_response_v2_to_v1_legacy,
    adapt_supported_kind_v1_to_v2,
    adapt_supported_kind_v2_to_v1,
    adapt_verify_response_v1_to_v2,
    adapt_verify_response_v2_to_v1,
    extract_resource_info_v1,
)
from .cache import AgedLRUCache, CacheConfig
from .interfaces import (
    DeferredPaymentExecer,
    FacilitatorHandler,
    HandlerCapability,
    PaymentExecer,
    PaymentExecResult,
    PaymentHandler,
    PaymentHandlerV1,
    RequestContext,
    adapt_payment_handler_v1_to_v2,
    adapt_payment_handler_v2_to_v1,
    has_capability,
)
from .matching import (
    RequirementsMatcher,
    find_matching_payment_requirements,
    generate_requirements_matcher,
)
from .networks import (
    NetworkTranslator,
    identity_network,
    normalize_network_id,
    translate_network_to_legacy,
)
from .schemas import (
    X402_VERSION,
    AdapterInvariantError,
    NoApplicablePayersError,
    PaymentPayload,
    PaymentPayloadV1,
    PaymentRequired,
    PaymentRequiredV1,
    PaymentRequirements,
    PaymentRequirementsV1,
    PaymentRetryExhaustedError,
    PaymentValidationError,
    ResourceInfo,
    SettleResponse,
    SettleResponseLegacy,
    SettleResponseLenient,
    SettleResponseV1,
    SupportedKind,
    SupportedKindV1,
    SupportedResponse,
    VerifyResponse,
    VerifyResponseV1,
    VerifyResponseV1Lenient,
    X402Error,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Adapters
    "adapt_requirements_v1_to_v2",
    "adapt_requirements_v2_to_v1",
    "extract_resource_info_v1",
    "adapt_payload_v1_to_v2",
    "adapt_payload_v2_to_v1",
    "adapt_payment_required_v1_to_v2",
    "adapt_payment_required_v2_to_v1",
    "adapt_verify_response_v1_to_v2",
    "adapt_verify_response_v2_to_v1",
    "adapt_settle_response_v1_to_v2",
    "adapt_settle_response_v2_to_v1",
    "adapt_settle_response_v2_to_v1_legacy",
    "adapt_settle_response_legacy_to_v2",
    "adapt_settle_response_lenient_to_v2",
    "adapt_supported_kind_v1_to_v2",
    "adapt_supported_kind_v2_to_v1",
    # Networks
    "NetworkTranslator",
    "identity_network",
    "normalize_network_id",
    "translate_network_to_legacy",
    # Matching
    "RequirementsMatcher",
    "generate_requirements_matcher",
    "find_matching_payment_requirements",
    # Cache
    "AgedLRUCache",
    "CacheConfig",
    # Interfaces
    "RequestContext",
    "PaymentExecResult",
    "PaymentExecer",
    "DeferredPaymentExecer",
    "PaymentHandler",
    "PaymentHandlerV1",
    "FacilitatorHandler",
    "HandlerCapability",
    "has_capability",
    "adapt_payment_handler_v1_to_v2",
    "adapt_payment_handler_v2_to_v1",
    # Types
    "X402_VERSION",
    "ResourceInfo",
    "PaymentRequirements",
    "PaymentRequired",
    "PaymentPayload",
    "VerifyResponse",
    "SettleResponse",
    "SupportedKind",
    "SupportedResponse",
    "PaymentRequirementsV1",
    "PaymentRequiredV1",
    "PaymentPayloadV1",
    "VerifyResponseV1",
    "VerifyResponseV1Lenient",
    "SettleResponseV1",
    "SettleResponseLegacy",
    "SettleResponseLenient",
    "SupportedKindV1",
    # Errors
    "X402Error",
    "PaymentValidationError",
    "AdapterInvariantError",
    "NoApplicablePayersError",
    "PaymentRetryExhaustedError",
]
