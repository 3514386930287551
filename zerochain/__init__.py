"""
Zerochain Confidential Transfer Client

Hides transferred amounts and account balances on the ledger: values
travel as ciphertexts under the parties' encryption keys, bound to a
proof that the transfer conserves value.
"""

__version__ = "0.1.0"
__author__ = "Zerochain Team"

from zerochain.constants import PARAMS, ProtocolParams
from zerochain.errors import ZerochainError

__all__ = [
    "PARAMS",
    "ProtocolParams",
    "ZerochainError",
    "__version__",
]
