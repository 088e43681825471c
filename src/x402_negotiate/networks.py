"""Translation between legacy v1 network names and CAIP-2 identifiers."""

from typing import Callable

NetworkTranslator = Callable[[str], str]

# Legacy v1 EVM network name -> chain ID
EVM_LEGACY_CHAIN_IDS: dict[str, int] = {
    "base": 8453,
    "base-sepolia": 84532,
    "ethereum": 1,
    "polygon": 137,
    "polygon-amoy": 80002,
    "avalanche": 43114,
    "avalanche-fuji": 43113,
    "abstract": 2741,
    "abstract-testnet": 11124,
    "iotex": 4689,
    "sei": 1329,
    "sei-testnet": 713715,
    "peaq": 3338,
    "story": 1513,
    "educhain": 656476,
    "skale-base-sepolia": 1444673419,
    "megaeth": 4326,
    "monad": 143,
}

SOLANA_MAINNET_CAIP2 = "solana:5eykt4UsFv8P8NJdTREpY1vzqKqZKvdp"
SOLANA_DEVNET_CAIP2 = "solana:EtWTRABZaYq6iMfeYKouRu166VU2xqa1"
SOLANA_TESTNET_CAIP2 = "solana:4uhcVJyU9pJkvQyS88uRDiswHXSCkY3z"

# Legacy v1 Solana network name -> CAIP-2
SOLANA_LEGACY_NETWORKS: dict[str, str] = {
    "solana": SOLANA_MAINNET_CAIP2,
    "solana-devnet": SOLANA_DEVNET_CAIP2,
    "solana-testnet": SOLANA_TESTNET_CAIP2,
}

_LEGACY_TO_CAIP2: dict[str, str] = {
    **{name: f"eip155:{chain_id}" for name, chain_id in EVM_LEGACY_CHAIN_IDS.items()},
    **SOLANA_LEGACY_NETWORKS,
}
_CAIP2_TO_LEGACY: dict[str, str] = {v: k for k, v in _LEGACY_TO_CAIP2.items()}


def normalize_network_id(network: str) -> str:
    """Map a legacy v1 network name to its CAIP-2 identifier.

    Unknown names and values already in CAIP-2 form pass through unchanged.
    """
    return _LEGACY_TO_CAIP2.get(network, network)


def translate_network_to_legacy(network: str) -> str:
    """Map a CAIP-2 identifier back to its legacy v1 name, when one exists."""
    return _CAIP2_TO_LEGACY.get(network, network)


def identity_network(network: str) -> str:
    return network
