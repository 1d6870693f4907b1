__all__ = [
    # Configuration
    "NETWORKS",
    "DependencyAddresses",
    "NetworkConfig",
    "get_contract_address",
    "load_network",
    # Client
    "RoundClient",
    "ContractDependencies",
    "UnclaimedAllocations",
    # Deployment
    "DeploymentResult",
    "deploy_and_initialize",
    # Signing
    "load_signing_key",
    # Errors
    "B3trRoundError",
    "ConfigurationError",
    "RemoteReadError",
    "RemoteWriteError",
    "TransactionRevertedError",
]

from .config import (
    NETWORKS,
    DependencyAddresses,
    NetworkConfig,
    get_contract_address,
    load_network,
)
from .client import ContractDependencies, RoundClient, UnclaimedAllocations
from .deploy import DeploymentResult, deploy_and_initialize
from .signer import load_signing_key
from .errors import (
    B3trRoundError,
    ConfigurationError,
    RemoteReadError,
    RemoteWriteError,
    TransactionRevertedError,
)
