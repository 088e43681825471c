"""Tests for network identifier translation."""

import pytest

from x402_negotiate import normalize_network_id, translate_network_to_legacy
from x402_negotiate.networks import SOLANA_DEVNET_CAIP2, SOLANA_MAINNET_CAIP2


@pytest.mark.parametrize(
    "legacy, caip2",
    [
        ("base", "eip155:8453"),
        ("base-sepolia", "eip155:84532"),
        ("polygon-amoy", "eip155:80002"),
        ("solana", SOLANA_MAINNET_CAIP2),
        ("solana-devnet", SOLANA_DEVNET_CAIP2),
    ],
)
def test_known_names_translate_both_ways(legacy, caip2):
    assert normalize_network_id(legacy) == caip2
    assert translate_network_to_legacy(caip2) == legacy


@pytest.mark.parametrize("network", ["eip155:999999", "cosmos:hub", "unknown-net", ""])
def test_unknown_values_pass_through(network):
    assert normalize_network_id(network) == network
    assert translate_network_to_legacy(network) == network


def test_normalize_is_idempotent():
    assert normalize_network_id(normalize_network_id("base")) == "eip155:8453"
