"""
Deploy B3trRound behind an ERC1967 (UUPS) proxy.

Flow:
1. Deploy the B3trRound implementation
2. Encode initialize(xAllocationPool, xAllocationVoting, x2EarnApps, emissions)
3. Deploy ERC1967Proxy(implementation, initData); initialize runs exactly
   once, inside the proxy constructor

Bytecode comes from Hardhat artifacts; see ``chain.abi.find_artifacts_dir``.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional

import httpx
from eth_abi.exceptions import EncodingError
from eth_account.signers.local import LocalAccount
from eth_utils import is_hex_address, to_checksum_address

from .chain.abi import b3tr_round_abi
from .chain.rpc import RpcError, encode_function_call
from .chain.tx import ChainTarget, TxResult, creation_code, deploy_bytecode
from .config import DependencyAddresses, NetworkConfig
from .errors import ConfigurationError, RemoteWriteError, TransactionRevertedError

logger = logging.getLogger(__name__)

IMPLEMENTATION_CONTRACT = "B3trRound"
PROXY_CONTRACT = "ERC1967Proxy"
VERIFY_MOCK_CONTRACT = "VetDomainsVerifyMock"
IGNITION_MODULE = "B3trRoundModule"

# Ignition parameter name -> DependencyAddresses field
_IGNITION_PARAMETERS = {
    "xAllocationPoolAddress": "x_allocation_pool",
    "xAllocationVotingAddress": "x_allocation_voting",
    "x2EarnAppsAddress": "x2_earn_apps",
    "emissionsAddress": "emissions",
}


@dataclass(frozen=True)
class DeploymentResult:
    implementation_address: str
    proxy_address: str
    implementation_tx: str
    proxy_tx: str


def _deploy(
    contract_name: str,
    account: LocalAccount,
    target: ChainTarget,
    constructor_args: Optional[list] = None,
) -> TxResult:
    try:
        deploy_data = creation_code(contract_name, constructor_args)
    except (FileNotFoundError, ValueError, EncodingError) as exc:
        raise ConfigurationError(str(exc), operation=f"deploy {contract_name}") from exc

    # Anything past this point comes from the node
    try:
        result = deploy_bytecode(deploy_data, account, target, label=contract_name)
    except (RpcError, httpx.HTTPError, TimeoutError, ValueError) as exc:
        raise RemoteWriteError(
            f"Deployment failed: {exc}", operation=f"deploy {contract_name}"
        ) from exc

    if not result.succeeded:
        raise TransactionRevertedError(
            "Deployment reverted", tx_hash=result.tx_hash, operation=f"deploy {contract_name}"
        )
    if not result.contract_address:
        raise RemoteWriteError(
            f"Receipt for {result.tx_hash} has no contract address",
            operation=f"deploy {contract_name}",
        )
    return result


def encode_initialize(dependencies: DependencyAddresses) -> bytes:
    """Calldata for ``B3trRound.initialize`` with the four dependency addresses."""
    for name, value in vars(dependencies).items():
        if not is_hex_address(value):
            raise ConfigurationError(f"{name} is not a valid address: {value!r}")
    args = [to_checksum_address(a) for a in dependencies.as_initialize_args()]
    calldata = encode_function_call(b3tr_round_abi(), "initialize", args)
    return bytes.fromhex(calldata[2:])


def deploy_and_initialize(
    network: NetworkConfig,
    account: LocalAccount,
    dependencies: Optional[DependencyAddresses] = None,
) -> DeploymentResult:
    """
    Deploy the implementation and a proxy initialized with ``dependencies``.

    Args:
        network: Target network
        account: Deployer account (pays gas)
        dependencies: Addresses for initialize (default: the network's table)

    Returns:
        DeploymentResult; the proxy address is the one operators use
    """
    dependencies = dependencies or network.dependencies
    target = ChainTarget.from_network(network)
    init_data = encode_initialize(dependencies)

    implementation = _deploy(IMPLEMENTATION_CONTRACT, account, target)
    logger.info("Implementation deployed to %s", implementation.contract_address)

    proxy = _deploy(
        PROXY_CONTRACT,
        account,
        target,
        constructor_args=[to_checksum_address(implementation.contract_address), init_data],
    )
    logger.info("Proxy deployed to %s", proxy.contract_address)

    return DeploymentResult(
        implementation_address=implementation.contract_address,
        proxy_address=proxy.contract_address,
        implementation_tx=implementation.tx_hash,
        proxy_tx=proxy.tx_hash,
    )


def deploy_verify_mock(network: NetworkConfig, account: LocalAccount) -> TxResult:
    """Deploy VetDomainsVerifyMock (no constructor arguments)."""
    return _deploy(VERIFY_MOCK_CONTRACT, account, ChainTarget.from_network(network))


def load_ignition_parameters(
    path: Path,
    defaults: DependencyAddresses,
) -> DependencyAddresses:
    """
    Apply an Ignition parameters file on top of ``defaults``.

    Format: ``{"B3trRoundModule": {"xAllocationPoolAddress": "0x..", ...}}``.
    Missing parameters keep their default.
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigurationError(f"Cannot read parameters file {path}: {exc}") from exc

    module = data.get(IGNITION_MODULE, {}) if isinstance(data, dict) else None
    if not isinstance(module, dict):
        raise ConfigurationError(f"{path}: '{IGNITION_MODULE}' must be an object")

    unknown = sorted(set(module) - set(_IGNITION_PARAMETERS))
    if unknown:
        raise ConfigurationError(f"{path}: unknown parameters {', '.join(unknown)}")

    overrides = {_IGNITION_PARAMETERS[k]: v for k, v in module.items()}
    return replace(defaults, **overrides)
