"""HTTP header names for the x402 wire formats."""

# V2 headers
PAYMENT_SIGNATURE_HEADER = "PAYMENT-SIGNATURE"
PAYMENT_REQUIRED_HEADER = "PAYMENT-REQUIRED"
PAYMENT_RESPONSE_HEADER = "PAYMENT-RESPONSE"

# V1 headers
X_PAYMENT_HEADER = "X-PAYMENT"
X_PAYMENT_RESPONSE_HEADER = "X-PAYMENT-RESPONSE"

PAYMENT_REQUIRED_STATUS = 402


def payment_header_name(x402_version: int) -> str:
    """Request header that carries a payment payload of the given version."""
    if x402_version == 2:
        return PAYMENT_SIGNATURE_HEADER
    if x402_version == 1:
        return X_PAYMENT_HEADER
    raise ValueError(f"Unsupported x402 version: {x402_version}")
