"""V1 legacy types.

V1 inlines the resource (URL, description, MIME type) on every requirement
and carries a flat scheme/network/asset on the payment payload. Settlement
responses exist in three shapes: the standard shape shared with v2, the legacy
``txHash``/``networkId`` shape, and a lenient union used when the origin of a
response is unknown.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import field_validator, model_validator

from .base import BaseX402Model, Network
from .payments import _validate_integer_string


class PaymentRequirementsV1(BaseX402Model):
    """V1 payment requirements (legacy).

    Attributes:
        scheme: Payment scheme identifier.
        network: Network identifier (legacy format, e.g., "base-sepolia").
        max_amount_required: Maximum amount in smallest unit.
        resource: Resource URL.
        description: Resource description (required key, may be empty).
        mime_type: MIME type (may be empty).
        pay_to: Recipient address.
        max_timeout_seconds: Maximum time for payment validity.
        asset: Asset address/identifier.
        extra: Additional scheme-specific data.
    """

    scheme: str
    network: Network
    max_amount_required: str
    resource: str
    description: str
    mime_type: str = ""
    pay_to: str
    max_timeout_seconds: int
    asset: str
    extra: dict[str, Any] | None = None

    @field_validator("max_amount_required")
    @classmethod
    def validate_max_amount_required(cls, v: str) -> str:
        return _validate_integer_string(v, "max_amount_required")

    def get_amount(self) -> str:
        """Get the payment amount (V1 uses 'maxAmountRequired' field)."""
        return self.max_amount_required


class PaymentRequiredV1(BaseX402Model):
    """V1 402 response body.

    Attributes:
        x402_version: Protocol version (always 1).
        accepts: Accepted payment requirements.
        error: Error message, empty when there is none.
    """

    x402_version: Literal[1] = 1
    accepts: list[PaymentRequirementsV1]
    error: str


class PaymentRequiredV1Lenient(BaseX402Model):
    """V1 402 response body as sent by servers that omit ``error``."""

    x402_version: Literal[1] = 1
    accepts: list[PaymentRequirementsV1]
    error: str | None = None


class PaymentPayloadV1(BaseX402Model):
    """V1 payment payload, carried base64-encoded in the X-PAYMENT header.

    Attributes:
        x402_version: Protocol version (always 1).
        scheme: Payment scheme identifier.
        network: Network identifier.
        asset: Optional asset; older clients omit it.
        payload: Opaque scheme-specific payment artifact.
    """

    x402_version: Literal[1] = 1
    scheme: str
    network: Network
    asset: str | None = None
    payload: dict[str, Any]

    def get_scheme(self) -> str:
        return self.scheme

    def get_network(self) -> str:
        return self.network

    def get_asset(self) -> str | None:
        return self.asset


class _PaymentRequestV1(BaseX402Model):
    x402_version: int | None = None
    payment_header: str | None = None
    payment_payload: dict[str, Any] | None = None
    payment_requirements: dict[str, Any]

    @model_validator(mode="after")
    def require_payment(self):
        if self.payment_header is None and self.payment_payload is None:
            raise ValueError("one of paymentHeader or paymentPayload is required")
        return self


class VerifyRequestV1(_PaymentRequestV1):
    """Body of a facilitator /verify request.

    The payment is carried either as the raw base64 header or as an already
    decoded payload; the header wins when both are present.
    """


class SettleRequestV1(_PaymentRequestV1):
    """Body of a facilitator /settle request; same shape as VerifyRequestV1."""


class VerifyResponseV1(BaseX402Model):
    is_valid: bool
    invalid_reason: str | None = None
    payer: str


class VerifyResponseV1Lenient(BaseX402Model):
    is_valid: bool
    invalid_reason: str | None = None
    payer: str | None = None


class SettleResponseV1(BaseX402Model):
    """V1 settlement response in the standard shape (field names shared with v2)."""

    success: bool
    error_reason: str | None = None
    transaction: str
    network: Network
    payer: str


class SettleResponseLegacy(BaseX402Model):
    """V1 settlement response as produced by early facilitators.

    Attributes:
        success: Whether settlement succeeded.
        error: Error message on failure.
        tx_hash: Transaction hash, null when nothing was broadcast.
        network_id: Network identifier, may be null.
        payer: Payer address, if known.
    """

    success: bool
    error: str | None = None
    tx_hash: str | None
    network_id: Network | None
    payer: str | None = None


class SettleResponseLenient(BaseX402Model):
    """Union of the standard and legacy settlement shapes; every field is optional."""

    success: bool
    error_reason: str | None = None
    error: str | None = None
    transaction: str | None = None
    tx_hash: str | None = None
    network: Network | None = None
    network_id: Network | None = None
    payer: str | None = None


class SupportedKindV1(BaseX402Model):
    x402_version: Literal[1] = 1
    scheme: str
    network: Network
    extra: dict[str, Any] | None = None
