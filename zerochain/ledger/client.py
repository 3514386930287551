"""
Zerochain Ledger Client

Read/submit surface of the ledger node. The protocol/balance code only
depends on the LedgerClient protocol; HttpLedgerClient is the JSON-RPC
implementation over httpx.

No retry loops: every failure is surfaced to the caller.
"""

from __future__ import annotations
import itertools
import logging
from typing import Any, Optional, Protocol, runtime_checkable

import httpx

from zerochain.constants import (
    CONF_TRANSFER_MODULE,
    TRANSACTION_BASE_FEE_KEY,
    DEFAULT_NODE_URL,
    DEFAULT_RPC_TIMEOUT_SEC,
    LITTLE_ENDIAN,
)
from zerochain.crypto.hash import blake2_256, twox_128
from zerochain.errors import (
    LedgerUnavailableError,
    MalformedResponseError,
    SubmissionRejectedError,
)

logger = logging.getLogger(__name__)


@runtime_checkable
class LedgerClient(Protocol):
    """Ledger node seen from a wallet."""

    def get_storage(self, module: str, key: str, param: Optional[bytes] = None) -> Optional[str]:
        """
        Read a storage item.

        Returns:
            0x-prefixed hex string, or None if the item is unset

        Raises:
            TransportError: Node unreachable or response malformed
        """
        ...

    def submit(self, extrinsic: bytes) -> str:
        """
        Submit a signed transaction.

        Returns:
            Ledger acknowledgement (transaction hash)

        Raises:
            TransportError: Node unreachable or transaction rejected
        """
        ...


def storage_key(module: str, key: str, param: Optional[bytes] = None) -> str:
    """
    Storage key of "Module Item", 0x-prefixed.

    Plain values hash the name with twox128. Map entries hash the name
    followed by the map key with BLAKE2b-256.
    """
    prefix = f"{module} {key}".encode()
    if param is None:
        return "0x" + twox_128(prefix).hex()
    return "0x" + blake2_256(prefix + param).hex()


def hexstr_to_bytes(value: str) -> bytes:
    """Decode a 0x-prefixed hex string."""
    try:
        return bytes.fromhex(value.removeprefix("0x"))
    except (AttributeError, ValueError) as e:
        raise MalformedResponseError("state_getStorage", f"not a hex string: {value!r}") from e


def hexstr_to_u64(value: str) -> int:
    """Decode a SCALE little-endian u64 from storage hex."""
    data = hexstr_to_bytes(value)
    if len(data) > 8:
        raise MalformedResponseError("state_getStorage", f"u64 too long: {len(data)} bytes")
    return int.from_bytes(data, LITTLE_ENDIAN)


def fetch_transaction_base_fee(ledger: LedgerClient) -> int:
    """Read ConfTransfer.TransactionBaseFee."""
    value = ledger.get_storage(CONF_TRANSFER_MODULE, TRANSACTION_BASE_FEE_KEY)
    if value is None:
        raise MalformedResponseError("state_getStorage", "TransactionBaseFee is not set")
    fee = hexstr_to_u64(value)
    logger.debug(f"Transaction base fee: {fee}")
    return fee


class HttpLedgerClient:
    """
    JSON-RPC ledger client.

    Args:
        url: Node RPC endpoint
        timeout: Request timeout in seconds
        transport: Optional httpx transport (tests pass httpx.MockTransport)
    """

    def __init__(
        self,
        url: str = DEFAULT_NODE_URL,
        timeout: float = DEFAULT_RPC_TIMEOUT_SEC,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.url = url
        self._client = httpx.Client(timeout=timeout, transport=transport)
        self._ids = itertools.count(1)

    def __enter__(self) -> HttpLedgerClient:
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def _call(self, method: str, params: list) -> Any:
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params,
            "id": next(self._ids),
        }
        try:
            response = self._client.post(self.url, json=payload)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning(f"{method} to {self.url} failed: {e}")
            raise LedgerUnavailableError(self.url, str(e)) from e

        try:
            body = response.json()
        except ValueError as e:
            raise MalformedResponseError(method, f"invalid JSON: {e}") from e

        if not isinstance(body, dict):
            raise MalformedResponseError(method, "response is not an object")
        return body

    def get_storage(self, module: str, key: str, param: Optional[bytes] = None) -> Optional[str]:
        method = "state_getStorage"
        body = self._call(method, [storage_key(module, key, param)])

        if "error" in body:
            raise MalformedResponseError(method, str(body["error"]))
        result = body.get("result")
        if result is not None and not isinstance(result, str):
            raise MalformedResponseError(method, f"unexpected result type {type(result).__name__}")
        return result

    def submit(self, extrinsic: bytes) -> str:
        method = "author_submitExtrinsic"
        body = self._call(method, ["0x" + extrinsic.hex()])

        if "error" in body:
            error = body["error"]
            message = error.get("message", str(error)) if isinstance(error, dict) else str(error)
            raise SubmissionRejectedError(message)
        result = body.get("result")
        if not isinstance(result, str):
            raise MalformedResponseError(method, "missing transaction hash")

        logger.info(f"Submitted extrinsic {result}")
        return result
