"""
Network configuration for the B3trRound harness.

One immutable ``NetworkConfig`` per supported network. The table is built
once at import time and handed to the client explicitly; nothing reads it
as ambient state after ``load_network`` returns.

The configured endpoints are VeChain Thor REST nodes and are spoken to with
the Thor transport. A node behind an Ethereum JSON-RPC proxy can be used by
setting both B3TR_RPC_URL and B3TR_RPC_PROTOCOL=jsonrpc.

Environment overrides (optional):
  B3TR_RPC_URL      - node endpoint for the selected network
  B3TR_RPC_PROTOCOL - "thor" (default) or "jsonrpc"
  B3TR_RPC_TIMEOUT  - per-request timeout in seconds (default: 30)
  B3TR_TX_TIMEOUT   - receipt wait timeout in seconds (default: 120)
  B3TR_ENV_FILE     - .env file to load (default: ./.env)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional

from dotenv import load_dotenv

from .chain.tx import PROTOCOLS, THOR
from .errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_NETWORK = "local-development"
DEFAULT_DERIVATION_PATH = "m/44'/818'/0'/0"
DEFAULT_GAS_LIMIT = 10_000_000
DEFAULT_RPC_TIMEOUT = 30.0
DEFAULT_TX_TIMEOUT = 120.0


@dataclass(frozen=True)
class DependencyAddresses:
    """Addresses passed to ``B3trRound.initialize``."""

    x_allocation_pool: str
    x_allocation_voting: str
    x2_earn_apps: str
    emissions: str

    def as_initialize_args(self) -> list[str]:
        # Order matches initialize(xAllocationPool, xAllocationVoting, x2EarnApps, emissions)
        return [
            self.x_allocation_pool,
            self.x_allocation_voting,
            self.x2_earn_apps,
            self.emissions,
        ]


@dataclass(frozen=True)
class NetworkConfig:
    name: str
    contract_address: str
    rpc_url: str
    dependencies: DependencyAddresses
    mnemonic_env: str
    chain_id: Optional[int] = None
    derivation_path: str = DEFAULT_DERIVATION_PATH
    gas_limit: int = DEFAULT_GAS_LIMIT
    rpc_timeout: float = DEFAULT_RPC_TIMEOUT
    tx_timeout: float = DEFAULT_TX_TIMEOUT
    protocol: str = THOR


NETWORKS: Mapping[str, NetworkConfig] = MappingProxyType(
    {
        "mainnet": NetworkConfig(
            name="mainnet",
            contract_address="0x0000000000000000000000000000000000000000",
            rpc_url="https://mainnet.vechain.org",
            mnemonic_env="MAINNET_MNEMONIC",
            dependencies=DependencyAddresses(
                x_allocation_pool="0x6Bee7DDab6c99d5B2Af0554EaEA484CE18F52631",
                x_allocation_voting="0x89A00Bb0947a30FF95BEeF77a66AEdE3842Fe5B7",
                x2_earn_apps="0x8392B7CCc763dB03b47afcD8E8f5e24F9cf0554D",
                emissions="0xDf94739bd169C84fe6478D8420Bb807F1f47b135",
            ),
        ),
        "testnet": NetworkConfig(
            name="testnet",
            contract_address="0x3aaeCeb6702A5D3999399437B601e8D04d70dD6E",
            rpc_url="https://testnet.vechain.org",
            chain_id=100010,
            mnemonic_env="TESTNET_MNEMONIC",
            dependencies=DependencyAddresses(
                x_allocation_pool="0x6f7b4bc19b4dc99005b473b9c45ce2815bbe7533",
                x_allocation_voting="0x8800592c463f0b21ae08732559ee8e146db1d7b2",
                x2_earn_apps="0x0b54a094b877a25bdc95b4431eaa1e2206b1ddfe",
                emissions="0x66898f98409db20ed6a1bf0021334b7897eb0688",
            ),
        ),
        "local-development": NetworkConfig(
            name="local-development",
            contract_address="0xe32f25c825b8515ade62541cf6cc195c0e211855",
            rpc_url="http://localhost:8669",
            mnemonic_env="MNEMONIC",
            dependencies=DependencyAddresses(
                x_allocation_pool="0x1a98db0a37b040c00be156ef2fc81983f65a7fbc",
                x_allocation_voting="0xe5b2794c12432459d1a2739d7020e75a54caa930",
                x2_earn_apps="0x5a08024dccf4bd6a77a22e9fad2e7da3c307b01e",
                emissions="0x475936657ed1c6da36880218662fd6feb362fe3c",
            ),
        ),
    }
)


def get_contract_address(network: str) -> str:
    """Return the deployed B3trRound proxy address for ``network``."""
    config = NETWORKS.get(network)
    if config is None:
        raise ConfigurationError(
            f"no contract address configured for network: {network}"
        )
    return config.contract_address


def load_network(network: str, env: Optional[Mapping[str, str]] = None) -> NetworkConfig:
    """
    Resolve ``network`` to its configuration.

    Args:
        network: One of ``mainnet``, ``testnet``, ``local-development``
        env: Environment to read overrides from (default: os.environ)

    Returns:
        NetworkConfig with endpoint, protocol and timeout overrides applied

    Raises:
        ConfigurationError: If the network is unknown or an override is malformed
    """
    env = os.environ if env is None else env
    get_contract_address(network)
    config = NETWORKS[network]

    overrides: dict = {}
    rpc_url = env.get("B3TR_RPC_URL")
    if rpc_url:
        overrides["rpc_url"] = rpc_url
    protocol = env.get("B3TR_RPC_PROTOCOL")
    if protocol:
        if protocol not in PROTOCOLS:
            raise ConfigurationError(
                f"B3TR_RPC_PROTOCOL must be one of {', '.join(PROTOCOLS)}, got {protocol!r}"
            )
        overrides["protocol"] = protocol
    for key, field_name in (
        ("B3TR_RPC_TIMEOUT", "rpc_timeout"),
        ("B3TR_TX_TIMEOUT", "tx_timeout"),
    ):
        raw = env.get(key)
        if not raw:
            continue
        try:
            value = float(raw)
        except ValueError:
            raise ConfigurationError(f"{key} must be a number of seconds, got {raw!r}")
        if value <= 0:
            raise ConfigurationError(f"{key} must be positive, got {raw!r}")
        overrides[field_name] = value

    if overrides:
        logger.debug("Network %s overrides: %s", network, sorted(overrides))
        config = replace(config, **overrides)
    return config


def load_env_file(path: Optional[Path] = None) -> Optional[Path]:
    """
    Load a .env file into the process environment.

    Existing environment variables win over values in the file.

    Returns:
        The path that was loaded, or None if no file was found
    """
    if path is None:
        configured = os.environ.get("B3TR_ENV_FILE")
        path = Path(configured) if configured else Path.cwd() / ".env"
    if not path.exists():
        return None
    load_dotenv(path, override=False)
    logger.debug("Loaded environment from %s", path)
    return path
