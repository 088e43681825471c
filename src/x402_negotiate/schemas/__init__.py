"""Wire models for the x402 v1 and v2 protocol formats."""

from .base import X402_VERSION, BaseX402Model, Network
from .errors import (
    AdapterInvariantError,
    FacilitatorResponseError,
    NoApplicablePayersError,
    PaymentRetryExhaustedError,
    PaymentValidationError,
    X402Error,
)
from .helpers import (
    detect_version,
    normalize_settle_response,
    parse_payment_payload,
    parse_payment_required,
    parse_payment_requirements,
)
from .payments import PaymentPayload, PaymentRequired, PaymentRequirements, ResourceInfo
from .responses import SettleResponse, SupportedKind, SupportedResponse, VerifyResponse
from .v1 import (
    PaymentPayloadV1,
    PaymentRequiredV1,
    PaymentRequiredV1Lenient,
    PaymentRequirementsV1,
    SettleRequestV1,
    SettleResponseLegacy,
    SettleResponseLenient,
    SettleResponseV1,
    SupportedKindV1,
    VerifyRequestV1,
    VerifyResponseV1,
    VerifyResponseV1Lenient,
)

__all__ = [
    # Base
    "X402_VERSION",
    "BaseX402Model",
    "Network",
    # V2
    "ResourceInfo",
    "PaymentRequirements",
    "PaymentRequired",
    "PaymentPayload",
    "VerifyResponse",
    "SettleResponse",
    "SupportedKind",
    "SupportedResponse",
    # V1
    "PaymentRequirementsV1",
    "PaymentRequiredV1",
    "PaymentRequiredV1Lenient",
    "PaymentPayloadV1",
    "VerifyRequestV1",
    "SettleRequestV1",
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
    "FacilitatorResponseError",
    # Helpers
    "detect_version",
    "parse_payment_payload",
    "parse_payment_requirements",
    "parse_payment_required",
    "normalize_settle_response",
]
