"""V2 payment types: requirements, 402 responses and payloads."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import field_validator

from .base import BaseX402Model, Network


def _validate_integer_string(value: str, field: str) -> str:
    if not (value.isascii() and value.isdigit()):
        raise ValueError(f"{field} must be an integer encoded as a string")
    return value


class ResourceInfo(BaseX402Model):
    """Describes the resource a payment is made against.

    Attributes:
        url: Resource URL.
        description: Optional human-readable description.
        mime_type: Optional MIME type of the resource.
    """

    url: str
    description: str | None = None
    mime_type: str | None = None


class PaymentRequirements(BaseX402Model):
    """V2 payment requirements: one offered set of payment terms.

    Attributes:
        scheme: Payment scheme identifier (e.g., "exact").
        network: CAIP-2 network identifier.
        asset: Asset address/identifier.
        amount: Amount in smallest unit, as an integer string.
        pay_to: Recipient address.
        max_timeout_seconds: Maximum time for payment validity.
        extra: Optional scheme-specific data.
    """

    scheme: str
    network: Network
    asset: str
    amount: str
    pay_to: str
    max_timeout_seconds: int
    extra: dict[str, Any] | None = None

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v: str) -> str:
        return _validate_integer_string(v, "amount")


class PaymentRequired(BaseX402Model):
    """V2 402 response, carried base64-encoded in the PAYMENT-REQUIRED header.

    Attributes:
        x402_version: Protocol version (always 2).
        error: Optional error message.
        resource: Resource shared by every entry in ``accepts``.
        accepts: Offered payment requirements.
        extensions: Optional protocol extensions.
    """

    x402_version: Literal[2] = 2
    error: str | None = None
    resource: ResourceInfo | None = None
    accepts: list[PaymentRequirements]
    extensions: dict[str, Any] | None = None


class PaymentPayload(BaseX402Model):
    """V2 payment payload, carried base64-encoded in the PAYMENT-SIGNATURE header.

    Attributes:
        x402_version: Protocol version (always 2).
        payload: Opaque scheme-specific payment artifact.
        accepted: The chosen requirements, echoed back.
        resource: Resource the payment was made against, if known.
        extensions: Optional protocol extensions.
    """

    x402_version: Literal[2] = 2
    payload: dict[str, Any]
    accepted: PaymentRequirements
    resource: ResourceInfo | None = None
    extensions: dict[str, Any] | None = None

    def get_scheme(self) -> str:
        return self.accepted.scheme

    def get_network(self) -> str:
        return self.accepted.network

    def get_asset(self) -> str | None:
        return self.accepted.asset
