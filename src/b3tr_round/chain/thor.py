"""
Thor REST Client.

VeChain nodes serve a REST API instead of Ethereum JSON-RPC:
  POST /accounts/*                 - simulate clauses (contract reads)
  POST /transactions               - submit a signed transaction
  GET  /transactions/{id}/receipt  - receipt, null until packed into a block
  GET  /blocks/0, /blocks/best     - chain tag and block reference

Transactions use the Thor wire format: an RLP body signed over its
blake2b-256 hash with a recoverable secp256k1 signature.
"""

from __future__ import annotations

import hashlib
import logging
import secrets
import time
from typing import Any, Optional

import httpx
import rlp
from eth_account.signers.local import LocalAccount
from eth_keys import keys

from .rpc import DEFAULT_TIMEOUT, RpcError, decode_function_result, encode_function_call

logger = logging.getLogger(__name__)

# Blocks after blockRef during which the transaction may be packed
DEFAULT_EXPIRATION = 32
DEFAULT_GAS_PRICE_COEF = 0


def thor_request(
    method: str,
    path: str,
    rpc_url: str,
    payload: Any = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> Any:
    """
    Make a Thor REST request.

    Raises:
        RpcError: If the node rejects the request (4xx, body carries the reason)
        httpx.HTTPError: If the endpoint is unreachable or answers 5xx
    """
    url = rpc_url.rstrip("/") + path
    logger.debug("Thor %s %s", method, url)

    with httpx.Client(timeout=timeout) as client:
        response = client.request(method, url, json=payload)
        if 400 <= response.status_code < 500:
            raise RpcError(
                f"Thor {method} {path} rejected: {response.text.strip()}",
                code=response.status_code,
            )
        response.raise_for_status()
        return response.json()


def call_contract(
    contract_address: str,
    calldata: str,
    rpc_url: str,
    timeout: float = DEFAULT_TIMEOUT,
) -> str:
    """Simulate one clause against the best block and return its output data."""
    outputs = thor_request(
        "POST",
        "/accounts/*",
        rpc_url,
        {"clauses": [{"to": contract_address, "value": "0x0", "data": calldata}]},
        timeout=timeout,
    )
    if not outputs:
        raise RpcError(f"No clause output from {contract_address}")

    output = outputs[0]
    if output.get("reverted"):
        raise RpcError(
            f"execution reverted: {output.get('vmError') or 'no reason given'}",
            data=output.get("data"),
        )
    return output.get("data") or "0x"


def read_contract(
    contract_address: str,
    function_name: str,
    abi: list,
    rpc_url: str,
    args: Optional[list] = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> Any:
    """Read from a smart contract through ``/accounts/*``."""
    calldata = encode_function_call(abi, function_name, args or [])
    result = call_contract(contract_address, calldata, rpc_url, timeout=timeout)

    if result == "0x":
        raise RpcError(
            f"Empty result from {function_name}; is a contract deployed at {contract_address}?"
        )

    return decode_function_result(abi, function_name, result)


def get_chain_tag(rpc_url: str, timeout: float = DEFAULT_TIMEOUT) -> int:
    """Last byte of the genesis block id."""
    genesis = thor_request("GET", "/blocks/0", rpc_url, timeout=timeout)
    return int(genesis["id"][-2:], 16)


def get_block_ref(rpc_url: str, timeout: float = DEFAULT_TIMEOUT) -> int:
    """First 8 bytes of the best block id."""
    best = thor_request("GET", "/blocks/best", rpc_url, timeout=timeout)
    return int(best["id"][2:18], 16)


def build_transaction(
    to: Optional[str],
    data: str,
    chain_tag: int,
    block_ref: int,
    gas: int,
    expiration: int = DEFAULT_EXPIRATION,
    gas_price_coef: int = DEFAULT_GAS_PRICE_COEF,
    nonce: Optional[int] = None,
) -> dict:
    """
    Build an unsigned single-clause Thor transaction.

    ``to=None`` makes a contract creation clause.
    """
    return {
        "chainTag": chain_tag,
        "blockRef": block_ref,
        "expiration": expiration,
        "clauses": [{"to": to, "value": 0, "data": data}],
        "gasPriceCoef": gas_price_coef,
        "gas": gas,
        "dependsOn": None,
        "nonce": secrets.randbits(64) if nonce is None else nonce,
    }


def _hex_bytes(value: Optional[str]) -> bytes:
    if not value:
        return b""
    return bytes.fromhex(value[2:] if value.startswith("0x") else value)


def _rlp_fields(tx: dict) -> list:
    # Numeric zero and absent blobs both encode as empty strings
    clauses = [[_hex_bytes(c["to"]), c["value"], _hex_bytes(c["data"])] for c in tx["clauses"]]
    return [
        tx["chainTag"],
        tx["blockRef"],
        tx["expiration"],
        clauses,
        tx["gasPriceCoef"],
        tx["gas"],
        _hex_bytes(tx["dependsOn"]),
        tx["nonce"],
        [],  # reserved
    ]


def signing_hash(tx: dict) -> bytes:
    return hashlib.blake2b(rlp.encode(_rlp_fields(tx)), digest_size=32).digest()


def sign_transaction(tx: dict, account: LocalAccount) -> str:
    """
    Sign a Thor transaction.

    Returns:
        0x-prefixed hex of the RLP-encoded signed transaction
    """
    signature = keys.PrivateKey(bytes(account.key)).sign_msg_hash(signing_hash(tx))
    return "0x" + rlp.encode(_rlp_fields(tx) + [signature.to_bytes()]).hex()


def send_raw_transaction(raw_tx: str, rpc_url: str, timeout: float = DEFAULT_TIMEOUT) -> str:
    """
    Submit a signed transaction.

    Returns:
        Transaction id (0x-prefixed hex)
    """
    return thor_request("POST", "/transactions", rpc_url, {"raw": raw_tx}, timeout=timeout)["id"]


def wait_for_receipt(
    tx_id: str,
    rpc_url: str,
    timeout: float = 120.0,
    poll_interval: float = 2.0,
    request_timeout: float = DEFAULT_TIMEOUT,
) -> dict:
    """
    Wait until the transaction is packed into a block.

    Raises:
        TimeoutError: If no receipt appears within timeout
    """
    deadline = time.monotonic() + timeout
    while True:
        receipt = thor_request(
            "GET", f"/transactions/{tx_id}/receipt", rpc_url, timeout=request_timeout
        )
        if receipt is not None:
            logger.debug(
                "Receipt for %s in block %s", tx_id, (receipt.get("meta") or {}).get("blockNumber")
            )
            return receipt
        if time.monotonic() + poll_interval > deadline:
            break
        time.sleep(poll_interval)

    raise TimeoutError(f"Transaction {tx_id} not confirmed within {timeout:g}s")
