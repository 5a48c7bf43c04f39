"""
Commands - click command implementations for the ipckit CLI.

- mnid:     Encode, decode and check MNID addresses
- chain:    Networks, nonces, receipts and transaction history
- identity: Create an identity and look up registered profiles
"""
