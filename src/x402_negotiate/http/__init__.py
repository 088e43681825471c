"""HTTP layer: wire headers, the client fetch wrapper and the facilitator client."""

from .constants import (
    PAYMENT_REQUIRED_HEADER,
    PAYMENT_RESPONSE_HEADER,
    PAYMENT_SIGNATURE_HEADER,
    X_PAYMENT_HEADER,
    X_PAYMENT_RESPONSE_HEADER,
)
from .facilitator_client import FacilitatorConfig, HTTPFacilitatorClient
from .mock import ResponseFeeder, response_feeder
from .utils import (
    decode_payment_header,
    decode_payment_payload_header,
    decode_payment_required_header,
    decode_payment_response_header,
    encode_payment_header,
    safe_base64_decode,
    safe_base64_encode,
)
from .x402_fetch import (
    Fetch,
    PreparedPayment,
    WrapOptions,
    choose_first_available,
    process_payment_required_response,
    wrap,
    x402Fetch,
)

__all__ = [
    # Headers
    "PAYMENT_SIGNATURE_HEADER",
    "PAYMENT_REQUIRED_HEADER",
    "PAYMENT_RESPONSE_HEADER",
    "X_PAYMENT_HEADER",
    "X_PAYMENT_RESPONSE_HEADER",
    # Encoding
    "safe_base64_encode",
    "safe_base64_decode",
    "encode_payment_header",
    "decode_payment_header",
    "decode_payment_payload_header",
    "decode_payment_required_header",
    "decode_payment_response_header",
    # Client
    "Fetch",
    "WrapOptions",
    "PreparedPayment",
    "choose_first_available",
    "process_payment_required_response",
    "wrap",
    "x402Fetch",
    # Facilitator client
    "FacilitatorConfig",
    "HTTPFacilitatorClient",
    # Testing
    "ResponseFeeder",
    "response_feeder",
]
