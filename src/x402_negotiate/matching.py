"""Requirement matching on the capability side and the response side."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Sequence, TypeVar

from .schemas import (
    PaymentPayload,
    PaymentPayloadV1,
    PaymentRequirements,
    PaymentRequirementsV1,
)

logger = logging.getLogger(__name__)

RequirementsT = TypeVar("RequirementsT", PaymentRequirements, PaymentRequirementsV1)


def _field(requirements: Any, name: str) -> Any:
    if isinstance(requirements, Mapping):
        return requirements.get(name)
    return getattr(requirements, name, None)


def _lowered(values: str | Iterable[str]) -> frozenset[str]:
    if isinstance(values, str):
        values = [values]
    return frozenset(v.lower() for v in values)


# ============================================================================
# Capability-side matcher
# ============================================================================


@dataclass(frozen=True)
class RequirementsMatcher:
    """Case-insensitive predicate over (scheme, network[, asset]).

    Each field accepts a set of literal values so that one handler can speak
    for several aliases of the same network.
    """

    schemes: frozenset[str]
    networks: frozenset[str]
    assets: frozenset[str] | None = None

    def is_matching_requirement(self, requirements: Any) -> bool:
        """Check a v1/v2 requirements model or a mapping with the same keys."""
        scheme = _field(requirements, "scheme")
        network = _field(requirements, "network")
        if not isinstance(scheme, str) or scheme.lower() not in self.schemes:
            return False
        if not isinstance(network, str) or network.lower() not in self.networks:
            return False
        if self.assets is None:
            return True
        asset = _field(requirements, "asset")
        return isinstance(asset, str) and asset.lower() in self.assets

    def filter(self, accepts: Iterable[RequirementsT]) -> list[RequirementsT]:
        return [r for r in accepts if self.is_matching_requirement(r)]

    __call__ = is_matching_requirement


def generate_requirements_matcher(
    schemes: str | Iterable[str],
    networks: str | Iterable[str],
    assets: str | Iterable[str] | None = None,
) -> RequirementsMatcher:
    """Build a matcher; comparison is exact after lowercasing.

    Args:
        schemes: Scheme name(s) to accept.
        networks: Network identifier(s) to accept.
        assets: Asset identifier(s) to accept. When omitted, any asset matches.

    Returns:
        RequirementsMatcher for the given literals.
    """
    return RequirementsMatcher(
        schemes=_lowered(schemes),
        networks=_lowered(networks),
        assets=_lowered(assets) if assets is not None else None,
    )


# ============================================================================
# Response-side matcher
# ============================================================================


def find_matching_payment_requirements(
    accepts: Sequence[RequirementsT],
    payload: PaymentPayload | PaymentPayloadV1,
    log: logging.Logger | None = None,
) -> RequirementsT | None:
    """Find the offered requirements a submitted payment was made against.

    Matches on (network, scheme, asset) when the payload names an asset, and
    on (network, scheme) otherwise for clients that omit it. When several
    offers match, the ambiguity is logged and the first one in list order is
    returned.

    Args:
        accepts: Requirements previously offered to the client.
        payload: The client's v1 or v2 payment payload.
        log: Logger for the ambiguity warning; defaults to this module's logger.

    Returns:
        The first matching requirements, or None.
    """
    log = log or logger
    scheme = payload.get_scheme()
    network = payload.get_network()
    asset = payload.get_asset()

    if asset is not None:
        matches = [
            r
            for r in accepts
            if r.network == network and r.scheme == scheme and r.asset == asset
        ]
    else:
        matches = [r for r in accepts if r.network == network and r.scheme == scheme]

    if len(matches) > 1:
        log.warning(
            f"found {len(matches)} ambiguous matching requirements for "
            f"scheme={scheme} network={network}, using the first"
        )
    return matches[0] if matches else None
