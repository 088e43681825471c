"""V2 facilitator response types."""

from __future__ import annotations

from typing import Any

from pydantic import Field

from .base import BaseX402Model, Network


class VerifyResponse(BaseX402Model):
    """Response from payment verification.

    Attributes:
        is_valid: Whether the payment is valid.
        invalid_reason: Reason for invalidity (if not valid).
        payer: The payer's address, if known.
    """

    is_valid: bool
    invalid_reason: str | None = None
    payer: str | None = None


class SettleResponse(BaseX402Model):
    """Response from payment settlement.

    Attributes:
        success: Whether settlement was successful.
        error_reason: Reason for failure (if not successful).
        payer: The payer's address, if known.
        transaction: Transaction identifier, empty for a failed settlement.
        network: Network where settlement occurred.
        extensions: Optional protocol extensions.
    """

    success: bool
    error_reason: str | None = None
    payer: str | None = None
    transaction: str
    network: Network
    extensions: dict[str, Any] | None = None


class SupportedKind(BaseX402Model):
    """One scheme/network combination a facilitator can handle.

    Attributes:
        x402_version: Protocol version for this kind.
        scheme: Payment scheme identifier.
        network: Network identifier.
        extra: Additional scheme-specific data.
    """

    x402_version: int
    scheme: str
    network: Network
    extra: dict[str, Any] | None = None


class SupportedResponse(BaseX402Model):
    """Response describing what a facilitator supports.

    Attributes:
        kinds: Supported payment kinds.
        extensions: Supported extension keys.
        signers: Signer addresses keyed by CAIP family (e.g., "eip155:*").
    """

    kinds: list[SupportedKind]
    extensions: list[str] = Field(default_factory=list)
    signers: dict[str, list[str]] = Field(default_factory=dict)
