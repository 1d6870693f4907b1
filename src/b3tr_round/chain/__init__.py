"""
Chain - node transports, ABI loading and transaction signing.

Uses httpx + eth-account + eth-abi instead of the heavyweight web3.py.
Two transports:
- thor:    VeChain Thor REST API (/accounts/*, /transactions); the default
- jsonrpc: Ethereum JSON-RPC (eth_call, eth_sendRawTransaction), for nodes
           fronted by a JSON-RPC proxy
"""
