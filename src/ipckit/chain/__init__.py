"""
Chain - on-chain interaction layer for ipckit.

Async JSON-RPC transport, typed eth_* stubs, contract artifacts and ABI
encoding, nonce tracking, transaction building/broadcast, receipt polling
and log decoding.

Uses httpx + eth-account + eth-abi instead of the heavyweight web3.py.
"""
