"""
Signing key management.

State-changing commands sign with an account derived from the network's
mnemonic (``MNEMONIC``, ``TESTNET_MNEMONIC`` or ``MAINNET_MNEMONIC``) at
``m/44'/818'/0'/0/<index>``, the VeChain BIP-44 coin type. A raw
``PRIVATE_KEY`` is accepted when no mnemonic is set.

Secrets are read once per invocation and never printed; only the derived
address is shown.
"""

from __future__ import annotations

import os
from typing import Mapping, Optional

from eth_account import Account
from eth_account.signers.local import LocalAccount

from .config import NetworkConfig
from .errors import ConfigurationError

Account.enable_unaudited_hdwallet_features()


def derivation_path(network: NetworkConfig, index: int = 0) -> str:
    return f"{network.derivation_path}/{index}"


def load_signing_key(
    network: NetworkConfig,
    env: Optional[Mapping[str, str]] = None,
) -> LocalAccount:
    """
    Load the signing account for ``network``.

    Args:
        network: Selected network configuration
        env: Environment to read credentials from (default: os.environ)

    Returns:
        LocalAccount for signing transactions

    Raises:
        ConfigurationError: If no credential is configured or it is malformed
    """
    env = os.environ if env is None else env

    raw_index = env.get("B3TR_ACCOUNT_INDEX", "0")
    try:
        index = int(raw_index)
    except ValueError:
        raise ConfigurationError(f"B3TR_ACCOUNT_INDEX must be an integer, got {raw_index!r}")
    if index < 0:
        raise ConfigurationError(f"B3TR_ACCOUNT_INDEX must be >= 0, got {index}")

    mnemonic = env.get(network.mnemonic_env, "").strip()
    if mnemonic:
        try:
            return Account.from_mnemonic(mnemonic, account_path=derivation_path(network, index))
        except Exception as exc:
            # The message never includes the mnemonic itself.
            raise ConfigurationError(
                f"{network.mnemonic_env} is not a valid mnemonic: {type(exc).__name__}"
            ) from None

    private_key = env.get("PRIVATE_KEY", "").strip()
    if private_key:
        if not private_key.startswith("0x"):
            private_key = "0x" + private_key
        try:
            return Account.from_key(private_key)
        except Exception as exc:
            raise ConfigurationError(
                f"PRIVATE_KEY is not a valid private key: {type(exc).__name__}"
            ) from None

    raise ConfigurationError(
        f"No signing credentials for network {network.name}. "
        f"Set {network.mnemonic_env} (or PRIVATE_KEY) in the environment or .env"
    )
