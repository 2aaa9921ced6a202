"""
Network Configuration for FundMe Deployments

NETWORKS describes how to reach each network by name; NETWORK_CONFIG is the
static chain-id indexed table of price feeds consulted for every network that
is not a development chain.

Environment variables:
- ALGOD_SERVER / ALGOD_TOKEN: override the node for the selected network
- INDEXER_SERVER: override the indexer for the selected network
- MAINNET_ALGO_USD_PRICE_FEED: price feed app ID on MainNet
- TESTNET_ALGO_USD_PRICE_FEED: price feed app ID on TestNet
"""

import os
from dataclasses import dataclass
from typing import Union

from dotenv import load_dotenv

from scripts.errors import ConfigurationError

load_dotenv()


# MockV3Aggregator create arguments
DECIMALS = 8
INITIAL_PRICE = 200000000000  # 2000.00000000 USD

# LocalNet has no registered chain ID; 416001-416003 are the public networks
LOCALNET_CHAIN_ID = 1337
MAINNET_CHAIN_ID = 416001
TESTNET_CHAIN_ID = 416002

DEVELOPMENT_CHAINS = frozenset({LOCALNET_CHAIN_ID})


@dataclass(frozen=True)
class NetworkEntry:
    name: str
    algo_usd_price_feed: int
    block_confirmations: int = 4


NETWORK_CONFIG = {
    MAINNET_CHAIN_ID: NetworkEntry(
        name="mainnet",
        algo_usd_price_feed=int(os.getenv("MAINNET_ALGO_USD_PRICE_FEED") or 0),
    ),
    TESTNET_CHAIN_ID: NetworkEntry(
        name="testnet",
        algo_usd_price_feed=int(os.getenv("TESTNET_ALGO_USD_PRICE_FEED") or 0),
    ),
}

NETWORKS = {
    "localnet": {
        "chain_id": LOCALNET_CHAIN_ID,
        "algod_server": "http://localhost:4001",
        "algod_token": "a" * 64,
        "indexer_server": "http://localhost:8980",
    },
    "testnet": {
        "chain_id": TESTNET_CHAIN_ID,
        "algod_server": "https://testnet-api.algonode.cloud",
        "algod_token": "",
        "indexer_server": "https://testnet-idx.algonode.cloud",
    },
    "mainnet": {
        "chain_id": MAINNET_CHAIN_ID,
        "algod_server": "https://mainnet-api.algonode.cloud",
        "algod_token": "",
        "indexer_server": "https://mainnet-idx.algonode.cloud",
    },
}


@dataclass(frozen=True)
class LocalSimulator:
    """Disposable development chain; price feed is a freshly deployed mock."""

    chain_id: int
    name: str = "localnet"
    block_confirmations: int = 1

    @property
    def is_development(self) -> bool:
        return True


@dataclass(frozen=True)
class NamedNetwork:
    """Persistent network with a configured price feed."""

    chain_id: int
    entry: NetworkEntry

    @property
    def name(self) -> str:
        return self.entry.name

    @property
    def block_confirmations(self) -> int:
        return self.entry.block_confirmations

    @property
    def is_development(self) -> bool:
        return False


Network = Union[LocalSimulator, NamedNetwork]


def select_network(
    chain_id: int,
    network_config: dict = None,
    development_chains: frozenset = DEVELOPMENT_CHAINS,
) -> Network:
    """
    Decide how a deployment on chain_id gets its price feed.

    Args:
        chain_id: Target chain ID
        network_config: Chain ID -> NetworkEntry table (default NETWORK_CONFIG)
        development_chains: Chain IDs running a disposable local network

    Returns:
        LocalSimulator or NamedNetwork

    Raises:
        ConfigurationError: chain_id is not a development chain and has no
            usable entry in the table
    """
    if network_config is None:
        network_config = NETWORK_CONFIG

    if chain_id in development_chains:
        return LocalSimulator(chain_id=chain_id)

    entry = network_config.get(chain_id)
    if entry is None:
        raise ConfigurationError(f"No network configuration for chain ID {chain_id}")
    if not entry.algo_usd_price_feed:
        raise ConfigurationError(
            f"No ALGO/USD price feed configured for {entry.name} (chain ID {chain_id})"
        )

    return NamedNetwork(chain_id=chain_id, entry=entry)


def get_network_settings(name: str) -> dict:
    """
    Connection settings for a network name, with ALGOD_* and INDEXER_SERVER overrides applied.

    Raises:
        ConfigurationError: Unknown network name
    """
    if name not in NETWORKS:
        raise ConfigurationError(
            f"Unknown network '{name}' (expected one of: {', '.join(NETWORKS)})"
        )

    settings = dict(NETWORKS[name])
    settings["algod_server"] = os.getenv("ALGOD_SERVER", settings["algod_server"])
    settings["algod_token"] = os.getenv("ALGOD_TOKEN", settings["algod_token"])
    settings["indexer_server"] = os.getenv("INDEXER_SERVER", settings["indexer_server"])
    return settings
