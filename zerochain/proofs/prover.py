"""
Zerochain Proof Capability

The constraint system is external. The builder talks to it through the
Prover protocol below, handing over the public inputs and the private
witness of one confidential transfer. The relation a backend must prove:

    (a) the spending key behind address_sender also opens rvk
    (b) enc_amount_sender and enc_amount_recipient encrypt the same
        amount under their keys, with randomness derived from alpha
    (c) amount + fee <= the value inside enc_balance
    (d) remaining_balance = balance - amount - fee, inside the value domain
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol, Union, runtime_checkable

from zerochain.core.elgamal import Ciphertext
from zerochain.core.keys import EncryptionKey, SpendingKey
from zerochain.errors import InvalidProofParametersError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProvingKey:
    """Opaque proving parameters produced by the one-time setup."""
    data: bytes = field(repr=False)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> ProvingKey:
        return cls(_read_blob(path, "proving key"))

    def to_file(self, path: Union[str, Path]) -> None:
        _write_blob(path, self.data, "proving key")


@dataclass(frozen=True)
class VerifyingKey:
    """Opaque verifying parameters produced by the one-time setup."""
    data: bytes = field(repr=False)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> VerifyingKey:
        return cls(_read_blob(path, "verifying key"))

    def to_file(self, path: Union[str, Path]) -> None:
        _write_blob(path, self.data, "verifying key")


def _read_blob(path: Union[str, Path], what: str) -> bytes:
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise InvalidProofParametersError(f"couldn't read {what} {path}: {e}") from e
    logger.info(f"Loaded {what} from {path} ({len(data)} bytes)")
    return data


def _write_blob(path: Union[str, Path], data: bytes, what: str) -> None:
    path = Path(path)
    try:
        path.write_bytes(data)
    except OSError as e:
        raise InvalidProofParametersError(f"couldn't write {what} {path}: {e}") from e
    logger.info(f"Wrote {what} to {path}")


@dataclass(frozen=True)
class PublicInputs:
    """Values the ledger sees and the proof is bound to."""
    address_sender: EncryptionKey
    address_recipient: EncryptionKey
    enc_amount_sender: Ciphertext
    enc_amount_recipient: Ciphertext
    enc_fee: Ciphertext
    enc_balance: Ciphertext
    rvk: bytes

    def serialize(self) -> bytes:
        return b"".join([
            self.address_sender.data,
            self.address_recipient.data,
            self.enc_amount_sender.to_bytes(),
            self.enc_amount_recipient.to_bytes(),
            self.enc_fee.to_bytes(),
            self.enc_balance.to_bytes(),
            self.rvk,
        ])


@dataclass(frozen=True)
class PrivateWitness:
    """Secrets known only to the sender."""
    spending_key: SpendingKey = field(repr=False)
    alpha: bytes = field(repr=False)
    amount: int = field(repr=False)
    fee: int = field(repr=False)
    remaining_balance: int = field(repr=False)


@runtime_checkable
class Prover(Protocol):
    """Proof system backend."""

    def generate_proof(
        self,
        public_inputs: PublicInputs,
        witness: PrivateWitness,
        proving_key: ProvingKey,
    ) -> bytes:
        """
        Prove the transfer relation.

        Raises:
            ProofGenerationError: The witness does not satisfy the relation
            InvalidProofParametersError: The proving key is unusable
        """
        ...

    def verify(
        self,
        proof: bytes,
        public_inputs: PublicInputs,
        verifying_key: VerifyingKey,
    ) -> bool:
        ...
