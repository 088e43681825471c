"""HTTP utility functions for encoding/decoding x402 headers."""

from __future__ import annotations

import base64
import binascii
import json
from typing import Any

from pydantic import ValidationError

from ..adapters import adapt_settle_response_lenient_to_v2
from ..schemas import (
    BaseX402Model,
    PaymentPayload,
    PaymentPayloadV1,
    PaymentRequired,
    PaymentRequiredV1Lenient,
    PaymentValidationError,
    SettleResponse,
    parse_payment_payload,
    parse_payment_required,
)


def safe_base64_encode(data: str) -> str:
    """Base64 encode a string safely."""
    return base64.b64encode(data.encode("utf-8")).decode("utf-8")


def safe_base64_decode(data: str) -> str:
    """Base64 decode a string, rejecting characters outside the alphabet.

    Raises:
        PaymentValidationError: If the value is not valid base64 or not UTF-8.
    """
    try:
        return base64.b64decode(data.encode("utf-8"), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeError) as e:
        raise PaymentValidationError(f"invalid base64 header: {e}") from e


def encode_payment_header(model: BaseX402Model) -> str:
    """Encode any wire model as a base64(JSON) header value."""
    return safe_base64_encode(json.dumps(model.to_wire(), separators=(",", ":")))


def decode_payment_header(header_value: str) -> dict[str, Any]:
    """Decode a base64(JSON) header value into a dict.

    Raises:
        PaymentValidationError: If the value is not base64-encoded JSON object.
    """
    json_str = safe_base64_decode(header_value.strip())
    try:
        data = json.loads(json_str)
    except json.JSONDecodeError as e:
        raise PaymentValidationError(f"invalid JSON in header: {e.msg}") from e
    if not isinstance(data, dict):
        raise PaymentValidationError("header must encode a JSON object")
    return data


def decode_payment_payload_header(header_value: str) -> PaymentPayload | PaymentPayloadV1:
    """Decode an X-PAYMENT or PAYMENT-SIGNATURE header into a versioned payload."""
    data = decode_payment_header(header_value)
    try:
        return parse_payment_payload(data)
    except ValidationError as e:
        raise PaymentValidationError.from_pydantic(e, "invalid payment payload: ") from e
    except ValueError as e:
        raise PaymentValidationError(f"invalid payment payload: {e}") from e


def decode_payment_required_header(
    header_value: str,
) -> PaymentRequired | PaymentRequiredV1Lenient:
    """Decode a PAYMENT-REQUIRED header."""
    data = decode_payment_header(header_value)
    try:
        return parse_payment_required(data)
    except ValidationError as e:
        raise PaymentValidationError.from_pydantic(e, "invalid payment required: ") from e
    except ValueError as e:
        raise PaymentValidationError(f"invalid payment required: {e}") from e


def decode_payment_response_header(header_value: str) -> SettleResponse:
    """Decode a PAYMENT-RESPONSE or X-PAYMENT-RESPONSE header.

    Both the standard and legacy settlement shapes are accepted.
    """
    data = decode_payment_header(header_value)
    try:
        return adapt_settle_response_lenient_to_v2(data)
    except ValidationError as e:
        raise PaymentValidationError.from_pydantic(e, "invalid payment response: ") from e
