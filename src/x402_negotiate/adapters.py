"""Bidirectional v1 <-> v2 adapters.

Every function here is pure: it returns a new model and never mutates its
input. Network identifiers are passed through a caller-supplied
``NetworkTranslator`` (see ``networks``); where the translator is optional,
omitting it leaves the network unchanged.
"""

from __future__ import annotations

import warnings
from typing import Any, Mapping

from .networks import NetworkTranslator
from .schemas import (
    AdapterInvariantError,
    PaymentPayload,
    PaymentPayloadV1,
    PaymentRequired,
    PaymentRequiredV1,
    PaymentRequiredV1Lenient,
    PaymentRequirements,
    PaymentRequirementsV1,
    ResourceInfo,
    SettleResponse,
    SettleResponseLegacy,
    SettleResponseLenient,
    SettleResponseV1,
    SupportedKind,
    SupportedKindV1,
    VerifyResponse,
    VerifyResponseV1,
    VerifyResponseV1Lenient,
)


def _translate(network: str, translate: NetworkTranslator | None) -> str:
    return translate(network) if translate is not None else network


def _copy_extra(extra: dict[str, Any] | None) -> dict[str, Any]:
    # Only emit the key when the source carries it.
    return {"extra": dict(extra)} if extra is not None else {}


# ============================================================================
# Requirements
# ============================================================================


def adapt_requirements_v1_to_v2(
    requirements: PaymentRequirementsV1,
    translate: NetworkTranslator,
) -> PaymentRequirements:
    """Convert v1 requirements to v2.

    ``resource``, ``description`` and ``mime_type`` are dropped; use
    ``extract_resource_info_v1`` to carry them separately.
    """
    return PaymentRequirements(
        scheme=requirements.scheme,
        network=translate(requirements.network),
        asset=requirements.asset,
        amount=requirements.max_amount_required,
        pay_to=requirements.pay_to,
        max_timeout_seconds=requirements.max_timeout_seconds,
        **_copy_extra(requirements.extra),
    )


def adapt_requirements_v2_to_v1(
    requirements: PaymentRequirements,
    resource: ResourceInfo,
    translate: NetworkTranslator | None = None,
) -> PaymentRequirementsV1:
    """Convert v2 requirements to v1, inlining the shared resource.

    v1 requires the description and MIME type keys, so they default to "".
    """
    return PaymentRequirementsV1(
        scheme=requirements.scheme,
        network=_translate(requirements.network, translate),
        max_amount_required=requirements.amount,
        resource=resource.url,
        description=resource.description if resource.description is not None else "",
        mime_type=resource.mime_type if resource.mime_type is not None else "",
        pay_to=requirements.pay_to,
        max_timeout_seconds=requirements.max_timeout_seconds,
        asset=requirements.asset,
        **_copy_extra(requirements.extra),
    )


def extract_resource_info_v1(requirements: PaymentRequirementsV1) -> ResourceInfo:
    """Pull the inlined resource out of v1 requirements.

    Empty description or MIME type values are omitted, not carried as "".
    """
    info: dict[str, str] = {"url": requirements.resource}
    if requirements.description:
        info["description"] = requirements.description
    if requirements.mime_type:
        info["mime_type"] = requirements.mime_type
    return ResourceInfo(**info)


# ============================================================================
# Payloads
# ============================================================================


def adapt_payload_v1_to_v2(
    payload: PaymentPayloadV1,
    requirements: PaymentRequirementsV1,
    translate: NetworkTranslator,
) -> PaymentPayload:
    """Convert a v1 payload to v2, using the requirements it was made against."""
    return PaymentPayload(
        accepted=adapt_requirements_v1_to_v2(requirements, translate),
        payload=dict(payload.payload),
        resource=extract_resource_info_v1(requirements),
    )


def adapt_payload_v2_to_v1(
    payload: PaymentPayload,
    translate: NetworkTranslator | None = None,
) -> PaymentPayloadV1:
    """Flatten a v2 payload for a v1 server."""
    return PaymentPayloadV1(
        scheme=payload.accepted.scheme,
        network=_translate(payload.accepted.network, translate),
        asset=payload.accepted.asset,
        payload=dict(payload.payload),
    )


# ============================================================================
# 402 responses
# ============================================================================


def adapt_payment_required_v1_to_v2(
    response: PaymentRequiredV1 | PaymentRequiredV1Lenient,
    resource_url: str,
    translate: NetworkTranslator,
) -> PaymentRequired:
    """Convert a v1 402 body to v2.

    The shared resource takes its description and MIME type from the first
    accept only, so heterogeneous lists lose per-entry resource details.
    """
    resource: dict[str, str] = {"url": resource_url}
    if response.accepts:
        first = response.accepts[0]
        if first.description:
            resource["description"] = first.description
        if first.mime_type:
            resource["mime_type"] = first.mime_type

    fields: dict[str, Any] = {}
    if response.error:
        fields["error"] = response.error

    return PaymentRequired(
        resource=ResourceInfo(**resource),
        accepts=[adapt_requirements_v1_to_v2(r, translate) for r in response.accepts],
        **fields,
    )


def adapt_payment_required_v2_to_v1(
    response: PaymentRequired,
    translate: NetworkTranslator | None = None,
) -> PaymentRequiredV1:
    """Convert a v2 402 response to a v1 body; every accept gets the shared resource."""
    resource = response.resource or ResourceInfo(url="")
    return PaymentRequiredV1(
        accepts=[adapt_requirements_v2_to_v1(r, resource, translate) for r in response.accepts],
        error=response.error if response.error is not None else "",
    )


# ============================================================================
# Verify responses
# ============================================================================


def adapt_verify_response_v2_to_v1(response: VerifyResponse) -> VerifyResponseV1:
    return VerifyResponseV1(
        is_valid=response.is_valid,
        invalid_reason=response.invalid_reason,
        payer=response.payer if response.payer is not None else "",
    )


def adapt_verify_response_v1_to_v2(
    response: VerifyResponseV1 | VerifyResponseV1Lenient,
) -> VerifyResponse:
    return VerifyResponse(
        is_valid=response.is_valid,
        invalid_reason=response.invalid_reason,
        payer=response.payer or None,
    )


# ============================================================================
# Settle responses
# ============================================================================


def adapt_settle_response_v2_to_v1(
    response: SettleResponse,
    translate: NetworkTranslator | None = None,
) -> SettleResponseV1:
    """v2 and standard v1 share field names; only the network is translated."""
    return SettleResponseV1(
        success=response.success,
        error_reason=response.error_reason,
        transaction=response.transaction,
        network=_translate(response.network, translate),
        payer=response.payer if response.payer is not None else "",
    )


def adapt_settle_response_v2_to_v1_legacy(
    response: SettleResponse,
    translate: NetworkTranslator | None = None,
) -> SettleResponseLegacy:
    """Convert to the legacy txHash/networkId shape.

    Deprecated: only early v1 clients read this shape. Use
    ``adapt_settle_response_v2_to_v1``.
    """
    warnings.warn(
        "adapt_settle_response_v2_to_v1_legacy is deprecated, use adapt_settle_response_v2_to_v1",
        DeprecationWarning,
        stacklevel=2,
    )
    return SettleResponseLegacy(
        success=response.success,
        error=response.error_reason,
        tx_hash=response.transaction,
        network_id=_translate(response.network, translate),
        payer=response.payer,
    )


def _first_not_none(*values: str | None) -> str | None:
    for value in values:
        if value is not None:
            return value
    return None


def adapt_settle_response_v1_to_v2(
    response: SettleResponseLenient | SettleResponseV1 | SettleResponseLegacy,
) -> SettleResponse:
    """Reconcile a settlement response of unknown v1 shape into v2.

    Raises:
        AdapterInvariantError: If no network can be resolved, or if the
            response reports success without a transaction id.
    """
    lenient = SettleResponseLenient.model_validate(response, from_attributes=True)
    network = _first_not_none(lenient.network, lenient.network_id)
    transaction = _first_not_none(lenient.transaction, lenient.tx_hash)

    if network is None:
        raise AdapterInvariantError("v1 settle response is missing network")
    if lenient.success and transaction is None:
        raise AdapterInvariantError(
            "v1 settle response has success: true but missing transaction"
        )

    return SettleResponse(
        success=lenient.success,
        error_reason=_first_not_none(lenient.error_reason, lenient.error),
        payer=lenient.payer or None,
        # A failed settlement may legitimately have broadcast nothing.
        transaction=transaction if transaction is not None else "",
        network=network,
    )


def adapt_settle_response_legacy_to_v2(response: SettleResponseLegacy) -> SettleResponse:
    """Convert a response known to be legacy-shaped.

    Raises:
        AdapterInvariantError: If ``network_id`` is missing, or if ``tx_hash``
            is missing on a successful settlement.
    """
    if response.network_id is None:
        raise AdapterInvariantError("legacy v1 settle response is missing networkId")
    if response.success and response.tx_hash is None:
        raise AdapterInvariantError(
            "legacy v1 settle response has success: true but missing txHash"
        )
    return SettleResponse(
        success=response.success,
        error_reason=response.error,
        payer=response.payer or None,
        transaction=response.tx_hash if response.tx_hash is not None else "",
        network=response.network_id,
    )


def adapt_settle_response_lenient_to_v2(data: Mapping[str, Any]) -> SettleResponse:
    """Validate a raw settlement body of unknown origin and convert it to v2."""
    return adapt_settle_response_v1_to_v2(SettleResponseLenient.model_validate(data))


# ============================================================================
# Supported kinds
# ============================================================================


def adapt_supported_kind_v1_to_v2(
    kind: SupportedKindV1,
    translate: NetworkTranslator,
) -> SupportedKind:
    return SupportedKind(
        x402_version=2,
        scheme=kind.scheme,
        network=translate(kind.network),
        **_copy_extra(kind.extra),
    )


def adapt_supported_kind_v2_to_v1(
    kind: SupportedKind,
    translate: NetworkTranslator | None = None,
) -> SupportedKindV1:
    return SupportedKindV1(
        scheme=kind.scheme,
        network=_translate(kind.network, translate),
        **_copy_extra(kind.extra),
    )
