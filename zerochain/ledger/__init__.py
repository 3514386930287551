"""
Zerochain Ledger Access
"""

from zerochain.ledger.client import (
    LedgerClient,
    HttpLedgerClient,
    storage_key,
    hexstr_to_bytes,
    hexstr_to_u64,
    fetch_transaction_base_fee,
)

__all__ = [
    "LedgerClient",
    "HttpLedgerClient",
    "storage_key",
    "hexstr_to_bytes",
    "hexstr_to_u64",
    "fetch_transaction_base_fee",
]
