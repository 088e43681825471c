"""Version detection, parsing and normalization helpers."""

from __future__ import annotations

import json
from typing import Any

from .payments import PaymentPayload, PaymentRequired, PaymentRequirements
from .v1 import (
    PaymentPayloadV1,
    PaymentRequiredV1Lenient,
    PaymentRequirementsV1,
    SettleResponseLenient,
    SettleResponseV1,
)


def _as_dict(data: str | bytes | dict[str, Any]) -> dict[str, Any]:
    if isinstance(data, (str, bytes)):
        data = json.loads(data)
    if not isinstance(data, dict):
        raise ValueError("expected a JSON object")
    return data


def detect_version(data: str | bytes | dict[str, Any]) -> int:
    """Detect the protocol version from a payload or 402 response.

    Args:
        data: JSON string, bytes or parsed dict.

    Returns:
        1 or 2.

    Raises:
        ValueError: If the version is missing or unsupported.
    """
    version = _as_dict(data).get("x402Version")
    if version is None:
        raise ValueError("missing x402Version")
    if version not in (1, 2):
        raise ValueError(f"unsupported x402Version: {version}")
    return version


def parse_payment_payload(
    data: str | bytes | dict[str, Any],
) -> PaymentPayload | PaymentPayloadV1:
    """Parse a payment payload into the model for its version."""
    data = _as_dict(data)
    if detect_version(data) == 1:
        return PaymentPayloadV1.model_validate(data)
    return PaymentPayload.model_validate(data)


def parse_payment_requirements(
    version: int,
    data: dict[str, Any],
) -> PaymentRequirements | PaymentRequirementsV1:
    """Parse requirements using the version of the payload they accompany."""
    if version == 1:
        return PaymentRequirementsV1.model_validate(data)
    return PaymentRequirements.model_validate(data)


def parse_payment_required(
    data: str | bytes | dict[str, Any],
) -> PaymentRequired | PaymentRequiredV1Lenient:
    """Parse a 402 response body or decoded PAYMENT-REQUIRED header."""
    data = _as_dict(data)
    if detect_version(data) == 1:
        return PaymentRequiredV1Lenient.model_validate(data)
    return PaymentRequired.model_validate(data)


def normalize_settle_response(response: SettleResponseLenient) -> SettleResponseV1:
    """Project a lenient settlement response onto the standard shape for display.

    Missing values become empty strings. Use the adapters instead wherever a
    successful settlement must be backed by a real transaction id.
    """
    return SettleResponseV1(
        success=response.success,
        error_reason=response.error_reason if response.error_reason is not None else response.error,
        transaction=response.transaction or response.tx_hash or "",
        network=response.network or response.network_id or "",
        payer=response.payer or "",
    )
