"""
Zerochain Balance Query

Fetches an account's encrypted balance and pending transfer from the
ledger and opens both with the account's decryption key.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Optional

from zerochain.constants import (
    PARAMS,
    ProtocolParams,
    CONF_TRANSFER_MODULE,
    ENCRYPTED_BALANCE_KEY,
    PENDING_TRANSFER_KEY,
)
from zerochain.core.elgamal import Ciphertext, decrypt
from zerochain.core.keys import DecryptionKey, derive_encryption_key
from zerochain.errors import CodecError, DecryptionFailureError, MalformedResponseError
from zerochain.ledger.client import LedgerClient, hexstr_to_bytes

logger = logging.getLogger(__name__)

# Storage values that mean "nothing stored yet"
EMPTY_STORAGE_VALUES = frozenset({"", "0x", "0x00"})


@dataclass(frozen=True)
class BalanceQueryResult:
    """Read-only snapshot of one account."""
    decrypted_balance: int
    decrypted_pending_transfer: int
    encrypted_balance: bytes
    pending_transfer: bytes

    @property
    def encrypted_balance_str(self) -> str:
        return "0x" + self.encrypted_balance.hex()

    @property
    def pending_transfer_str(self) -> str:
        return "0x" + self.pending_transfer.hex()

    @property
    def balance_ciphertext(self) -> Optional[Ciphertext]:
        """The on-chain balance as a Ciphertext, None for an empty account."""
        if not self.encrypted_balance:
            return None
        return Ciphertext.from_bytes(self.encrypted_balance)


def _open(
    item: str,
    raw: Optional[str],
    decryption_key: DecryptionKey,
    params: ProtocolParams,
) -> tuple[int, bytes]:
    if raw is None or raw in EMPTY_STORAGE_VALUES:
        return 0, b""
    try:
        data = hexstr_to_bytes(raw)
        return decrypt(Ciphertext.from_bytes(data), decryption_key, params), data
    except (CodecError, MalformedResponseError) as e:
        raise DecryptionFailureError(item, e.message) from e


def get_balance(
    decryption_key: DecryptionKey,
    ledger_read: LedgerClient,
    params: ProtocolParams = PARAMS,
) -> BalanceQueryResult:
    """
    Query and decrypt an account's balance.

    Args:
        decryption_key: Account decryption key (never sent anywhere)
        ledger_read: Ledger collaborator

    Returns:
        BalanceQueryResult

    Raises:
        LedgerUnavailableError: Storage could not be fetched
        DecryptionFailureError: Stored bytes do not open under this key
    """
    address = derive_encryption_key(decryption_key)

    raw_balance = ledger_read.get_storage(CONF_TRANSFER_MODULE, ENCRYPTED_BALANCE_KEY, address.data)
    raw_pending = ledger_read.get_storage(CONF_TRANSFER_MODULE, PENDING_TRANSFER_KEY, address.data)

    balance, balance_bytes = _open(ENCRYPTED_BALANCE_KEY, raw_balance, decryption_key, params)
    pending, pending_bytes = _open(PENDING_TRANSFER_KEY, raw_pending, decryption_key, params)

    logger.debug(f"Fetched balance for {address.hex()[:16]}...")

    return BalanceQueryResult(
        decrypted_balance=balance,
        decrypted_pending_transfer=pending,
        encrypted_balance=balance_bytes,
        pending_transfer=pending_bytes,
    )
