"""
Transaction Builder - Build, sign, and send transactions.

Uses eth-account for signing. Thor networks go through the REST client in
``chain.thor``; endpoints behind a JSON-RPC proxy go through ``chain.rpc``.
Gas is paid by the signing account.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from eth_abi import encode
from eth_account.signers.local import LocalAccount
from eth_utils import to_checksum_address

from . import thor
from .abi import find_entry, load_abi, load_bytecode
from .rpc import (
    DEFAULT_TIMEOUT,
    encode_function_call,
    get_chain_id,
    get_gas_price,
    get_nonce,
    send_raw_transaction,
    wait_for_receipt,
)
from .rpc import read_contract as rpc_read_contract

logger = logging.getLogger(__name__)

THOR = "thor"
JSON_RPC = "jsonrpc"
PROTOCOLS = (THOR, JSON_RPC)


@dataclass
class TxResult:
    tx_hash: str
    receipt: Optional[dict] = None
    status: Optional[int] = None
    contract_address: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status == 1


@dataclass(frozen=True)
class ChainTarget:
    """Where and how to send: endpoint, protocol, chain id, gas and timeouts."""

    rpc_url: str
    gas_limit: int
    chain_id: Optional[int] = None
    rpc_timeout: float = DEFAULT_TIMEOUT
    tx_timeout: float = 120.0
    protocol: str = THOR

    @classmethod
    def from_network(cls, network: Any) -> "ChainTarget":
        """Build from a NetworkConfig (or anything with the same fields)."""
        return cls(
            rpc_url=network.rpc_url,
            gas_limit=network.gas_limit,
            chain_id=network.chain_id,
            rpc_timeout=network.rpc_timeout,
            tx_timeout=network.tx_timeout,
            protocol=network.protocol,
        )


def read_contract(
    contract_address: str,
    function_name: str,
    abi: list,
    target: ChainTarget,
    args: Optional[list] = None,
) -> Any:
    """Read a view function over the target's protocol."""
    reader = thor.read_contract if target.protocol == THOR else rpc_read_contract
    return reader(
        contract_address,
        function_name,
        abi,
        target.rpc_url,
        args=args,
        timeout=target.rpc_timeout,
    )


# ---------------------------------------------------------------- JSON-RPC


def _base_tx(account: LocalAccount, target: ChainTarget, gas_limit: Optional[int]) -> dict:
    chain_id = target.chain_id
    if chain_id is None:
        chain_id = get_chain_id(target.rpc_url, timeout=target.rpc_timeout)
    return {
        "value": 0,
        "nonce": get_nonce(account.address, target.rpc_url, timeout=target.rpc_timeout),
        "gas": gas_limit or target.gas_limit,
        "gasPrice": get_gas_price(target.rpc_url, timeout=target.rpc_timeout),
        "chainId": chain_id,
    }


def build_contract_tx(
    contract_address: str,
    function_name: str,
    args: list,
    abi: list,
    account: LocalAccount,
    target: ChainTarget,
    gas_limit: Optional[int] = None,
) -> dict:
    """
    Build a contract call transaction (unsigned, JSON-RPC).

    Returns:
        Unsigned legacy transaction dict
    """
    data = encode_function_call(abi, function_name, args)
    tx = _base_tx(account, target, gas_limit)
    tx["to"] = to_checksum_address(contract_address)
    tx["data"] = data
    return tx


def sign_and_send(
    tx: dict,
    account: LocalAccount,
    target: ChainTarget,
    wait: bool = True,
) -> TxResult:
    """
    Sign a JSON-RPC transaction and send it.

    Args:
        tx: Unsigned transaction dict
        account: Signing account
        target: Endpoint and timeouts
        wait: Whether to wait for the receipt

    Returns:
        TxResult with tx_hash and, when waited on, receipt and status
    """
    signed = account.sign_transaction(tx)
    raw_tx = "0x" + bytes(signed.raw_transaction).hex()

    tx_hash = send_raw_transaction(raw_tx, target.rpc_url, timeout=target.rpc_timeout)
    logger.info("Submitted transaction %s", tx_hash)
    result = TxResult(tx_hash=tx_hash)

    if wait:
        receipt = wait_for_receipt(
            tx_hash,
            target.rpc_url,
            timeout=target.tx_timeout,
            request_timeout=target.rpc_timeout,
        )
        result.receipt = receipt
        result.status = int(receipt.get("status", "0x0"), 16)
        result.contract_address = receipt.get("contractAddress")

    return result


# -------------------------------------------------------------------- Thor


def send_thor_clause(
    to: Optional[str],
    data: str,
    account: LocalAccount,
    target: ChainTarget,
    gas_limit: Optional[int] = None,
    wait: bool = True,
) -> TxResult:
    """
    Build, sign and submit a single-clause Thor transaction.

    A reverted receipt maps to status 0; ``to=None`` deploys ``data``.
    """
    tx = thor.build_transaction(
        to,
        data,
        chain_tag=thor.get_chain_tag(target.rpc_url, timeout=target.rpc_timeout),
        block_ref=thor.get_block_ref(target.rpc_url, timeout=target.rpc_timeout),
        gas=gas_limit or target.gas_limit,
    )
    raw_tx = thor.sign_transaction(tx, account)

    tx_id = thor.send_raw_transaction(raw_tx, target.rpc_url, timeout=target.rpc_timeout)
    logger.info("Submitted transaction %s", tx_id)
    result = TxResult(tx_hash=tx_id)

    if wait:
        receipt = thor.wait_for_receipt(
            tx_id,
            target.rpc_url,
            timeout=target.tx_timeout,
            request_timeout=target.rpc_timeout,
        )
        result.receipt = receipt
        result.status = 0 if receipt.get("reverted") else 1
        outputs = receipt.get("outputs") or []
        if outputs:
            result.contract_address = outputs[0].get("contractAddress")

    return result


# ------------------------------------------------------------------ common


def send_contract_tx(
    contract_address: str,
    function_name: str,
    args: list,
    abi: list,
    account: LocalAccount,
    target: ChainTarget,
    gas_limit: Optional[int] = None,
    wait: bool = True,
) -> TxResult:
    """Build, sign, and send a contract call transaction."""
    if target.protocol == THOR:
        data = encode_function_call(abi, function_name, args)
        return send_thor_clause(
            to_checksum_address(contract_address), data, account, target, gas_limit, wait
        )

    tx = build_contract_tx(
        contract_address=contract_address,
        function_name=function_name,
        args=args,
        abi=abi,
        account=account,
        target=target,
        gas_limit=gas_limit,
    )
    return sign_and_send(tx, account, target, wait=wait)


def creation_code(contract_name: str, constructor_args: Optional[list] = None) -> str:
    """
    Artifact bytecode with ABI-encoded constructor arguments appended.

    Raises:
        FileNotFoundError: If no artifact exists for ``contract_name``
        ValueError: If the artifact has no bytecode or constructor
    """
    deploy_data = load_bytecode(contract_name)

    if constructor_args:
        constructor = find_entry(load_abi(contract_name), contract_name, "constructor")
        input_types = [inp["type"] for inp in constructor.get("inputs", [])]
        deploy_data += encode(input_types, constructor_args).hex()

    return deploy_data


def deploy_bytecode(
    deploy_data: str,
    account: LocalAccount,
    target: ChainTarget,
    gas_limit: Optional[int] = None,
    label: str = "contract",
) -> TxResult:
    """
    Send a creation transaction, wait, and read the deployed address
    from the receipt.
    """
    logger.info("Deploying %s from %s", label, account.address)

    if target.protocol == THOR:
        return send_thor_clause(None, deploy_data, account, target, gas_limit, wait=True)

    tx = _base_tx(account, target, gas_limit)
    tx["data"] = deploy_data
    return sign_and_send(tx, account, target, wait=True)
