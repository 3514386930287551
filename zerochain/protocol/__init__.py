"""
Zerochain Transfer Protocol

Balance queries and the transaction builder.
"""

from zerochain.protocol.balance import BalanceQueryResult, get_balance
from zerochain.protocol.builder import (
    BuilderState,
    TransactionBuilder,
    build_transfer,
)

__all__ = [
    # Balance
    "BalanceQueryResult",
    "get_balance",
    # Builder
    "BuilderState",
    "TransactionBuilder",
    "build_transfer",
]
