"""
JSON-RPC Client.

Lightweight alternative to web3.py: uses httpx for HTTP + eth-abi for encoding.
Supports read-only contract calls, nonce/gas queries, raw transaction
submission and receipt polling. Every request is bounded by a timeout.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Optional

import httpx
from eth_abi import decode, encode
from eth_utils import keccak

from .abi import find_entry

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class RpcError(RuntimeError):
    """JSON-RPC level failure (the node answered with an error object)."""

    def __init__(self, message: str, code: Optional[int] = None, data: Any = None) -> None:
        self.code = code
        self.data = data
        super().__init__(message)


def rpc_call(
    method: str,
    params: list,
    rpc_url: str,
    timeout: float = DEFAULT_TIMEOUT,
) -> Any:
    """
    Make a JSON-RPC call.

    Args:
        method: RPC method name (e.g., "eth_call")
        params: RPC parameters
        rpc_url: RPC endpoint URL
        timeout: Request timeout in seconds

    Returns:
        Result field from the RPC response

    Raises:
        RpcError: If the node returns an error object
        httpx.HTTPError: If the endpoint is unreachable or answers non-2xx
    """
    payload = {
        "jsonrpc": "2.0",
        "method": method,
        "params": params,
        "id": 1,
    }
    logger.debug("RPC %s -> %s", method, rpc_url)

    with httpx.Client(timeout=timeout) as client:
        response = client.post(rpc_url, json=payload)
        response.raise_for_status()
        data = response.json()

    if "error" in data:
        error = data["error"] or {}
        message = error.get("message", str(error)) if isinstance(error, dict) else str(error)
        code = error.get("code") if isinstance(error, dict) else None
        raise RpcError(
            f"RPC error: {message}",
            code=code,
            data=error.get("data") if isinstance(error, dict) else None,
        )

    return data.get("result")


def function_selector(function_name: str, input_types: list[str]) -> bytes:
    # NOTE: Keccak-256 != SHA3-256 (NIST). Never use hashlib.sha3_256 here.
    sig = f"{function_name}({','.join(input_types)})"
    return keccak(text=sig)[:4]


def encode_function_call(abi: list, function_name: str, args: list) -> str:
    """
    ABI-encode a function call.

    Returns:
        0x-prefixed hex encoded calldata
    """
    func = find_entry(abi, function_name)
    input_types = [inp["type"] for inp in func.get("inputs", [])]
    if len(args) != len(input_types):
        raise ValueError(
            f"{function_name} expects {len(input_types)} argument(s), got {len(args)}"
        )

    selector = function_selector(function_name, input_types)
    encoded_args = encode(input_types, args) if args else b""
    return "0x" + selector.hex() + encoded_args.hex()


def decode_function_result(abi: list, function_name: str, data: str) -> Any:
    """
    ABI-decode a function call result.

    Returns:
        Decoded result (single value, or tuple for multiple outputs)
    """
    func = find_entry(abi, function_name)
    output_types = [out["type"] for out in func.get("outputs", [])]
    if not output_types:
        return None

    raw = bytes.fromhex(data[2:] if data.startswith("0x") else data)
    decoded = decode(output_types, raw)

    if len(decoded) == 1:
        return decoded[0]
    return decoded


def read_contract(
    contract_address: str,
    function_name: str,
    abi: list,
    rpc_url: str,
    args: Optional[list] = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> Any:
    """
    Read from a smart contract (eth_call against the latest block).

    Raises:
        RpcError: On revert or when no contract code answers at the address
        httpx.HTTPError: On transport failure
    """
    calldata = encode_function_call(abi, function_name, args or [])

    result = rpc_call(
        "eth_call",
        [{"to": contract_address, "data": calldata}, "latest"],
        rpc_url=rpc_url,
        timeout=timeout,
    )

    if result is None or result == "0x":
        raise RpcError(
            f"Empty result from {function_name}; is a contract deployed at {contract_address}?"
        )

    return decode_function_result(abi, function_name, result)


def get_chain_id(rpc_url: str, timeout: float = DEFAULT_TIMEOUT) -> int:
    return int(rpc_call("eth_chainId", [], rpc_url=rpc_url, timeout=timeout), 16)


def get_nonce(address: str, rpc_url: str, timeout: float = DEFAULT_TIMEOUT) -> int:
    """Get the pending transaction count for an address."""
    result = rpc_call(
        "eth_getTransactionCount", [address, "pending"], rpc_url=rpc_url, timeout=timeout
    )
    return int(result, 16)


def get_gas_price(rpc_url: str, timeout: float = DEFAULT_TIMEOUT) -> int:
    return int(rpc_call("eth_gasPrice", [], rpc_url=rpc_url, timeout=timeout), 16)


def send_raw_transaction(raw_tx: str, rpc_url: str, timeout: float = DEFAULT_TIMEOUT) -> str:
    """
    Send a signed raw transaction.

    Returns:
        Transaction hash (0x-prefixed hex)
    """
    return rpc_call("eth_sendRawTransaction", [raw_tx], rpc_url=rpc_url, timeout=timeout)


def wait_for_receipt(
    tx_hash: str,
    rpc_url: str,
    timeout: float = 120.0,
    poll_interval: float = 2.0,
    request_timeout: float = DEFAULT_TIMEOUT,
) -> dict:
    """
    Wait for a transaction receipt.

    Args:
        tx_hash: Transaction hash
        rpc_url: RPC endpoint URL
        timeout: Maximum wait time in seconds
        poll_interval: Polling interval in seconds
        request_timeout: Timeout for each individual poll

    Returns:
        Transaction receipt dict

    Raises:
        TimeoutError: If receipt not found within timeout
    """
    deadline = time.monotonic() + timeout
    while True:
        receipt = rpc_call(
            "eth_getTransactionReceipt", [tx_hash], rpc_url=rpc_url, timeout=request_timeout
        )
        if receipt is not None:
            logger.debug("Receipt for %s in block %s", tx_hash, receipt.get("blockNumber"))
            return receipt
        if time.monotonic() + poll_interval > deadline:
            break
        time.sleep(poll_interval)

    raise TimeoutError(f"Transaction {tx_hash} not confirmed within {timeout:g}s")
