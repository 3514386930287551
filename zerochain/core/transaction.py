"""
Zerochain Confidential Transaction

Binary layout (all fixed size, 408 bytes):

    proof                 192
    address_sender         32
    address_recipient      32
    enc_amount_sender      40
    enc_amount_recipient   40
    enc_fee                40
    rvk                    32

rsk never leaves the process; it only signs the encoded body. The
ledger checks the signature against rvk.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional

from zerochain.constants import (
    PARAMS,
    ProtocolParams,
    PROOF_SIZE,
    POINT_SIZE,
    SCALAR_SIZE,
    CIPHERTEXT_SIZE,
    SIGNATURE_SIZE,
    CURVE_ORDER,
)
from zerochain.core.elgamal import Ciphertext
from zerochain.core.keys import EncryptionKey
from zerochain.crypto.curve import Ed25519Point, scalar_to_int
from zerochain.crypto.random import RandomSource
from zerochain.errors import (
    CodecError,
    CryptoError,
    InvalidSignatureError,
    TransactionFormatError,
)

TRANSACTION_SIZE = PROOF_SIZE + 2 * POINT_SIZE + 3 * CIPHERTEXT_SIZE + POINT_SIZE


@dataclass(frozen=True)
class Transaction:
    """Ledger-ready confidential transfer."""
    proof: bytes
    address_sender: EncryptionKey
    address_recipient: EncryptionKey
    enc_amount_sender: Ciphertext
    enc_amount_recipient: Ciphertext
    enc_fee: Ciphertext
    rvk: bytes
    rsk: Optional[bytes] = field(default=None, repr=False)

    def __post_init__(self):
        if len(self.proof) != PROOF_SIZE:
            raise TransactionFormatError(f"proof must be {PROOF_SIZE} bytes, got {len(self.proof)}")
        if not Ed25519Point.is_valid_point(self.rvk):
            raise TransactionFormatError("rvk is not a valid point")
        if self.rsk is not None and len(self.rsk) != SCALAR_SIZE:
            raise TransactionFormatError(f"rsk must be {SCALAR_SIZE} bytes")

    def encode(self) -> bytes:
        """Serialize the public body (rsk excluded)."""
        return b"".join([
            self.proof,
            self.address_sender.data,
            self.address_recipient.data,
            self.enc_amount_sender.to_bytes(),
            self.enc_amount_recipient.to_bytes(),
            self.enc_fee.to_bytes(),
            self.rvk,
        ])

    @classmethod
    def decode(cls, data: bytes) -> Transaction:
        """Parse a public body; the result carries no rsk."""
        if len(data) != TRANSACTION_SIZE:
            raise TransactionFormatError(f"expected {TRANSACTION_SIZE} bytes, got {len(data)}")

        offset = 0

        def take(n: int) -> bytes:
            nonlocal offset
            chunk = data[offset:offset + n]
            offset += n
            return bytes(chunk)

        try:
            return cls(
                proof=take(PROOF_SIZE),
                address_sender=EncryptionKey(take(POINT_SIZE)),
                address_recipient=EncryptionKey(take(POINT_SIZE)),
                enc_amount_sender=Ciphertext.from_bytes(take(CIPHERTEXT_SIZE)),
                enc_amount_recipient=Ciphertext.from_bytes(take(CIPHERTEXT_SIZE)),
                enc_fee=Ciphertext.from_bytes(take(CIPHERTEXT_SIZE)),
                rvk=take(POINT_SIZE),
            )
        except (CodecError, CryptoError) as e:
            raise TransactionFormatError(e.message) from e

    def sign(self, rng: RandomSource, params: ProtocolParams = PARAMS) -> bytes:
        """Sign the encoded body with rsk."""
        if self.rsk is None:
            raise InvalidSignatureError("transaction has no rsk to sign with")
        return sign_message(self.rsk, self.rvk, self.encode(), rng, params)

    def to_extrinsic(self, rng: RandomSource, params: ProtocolParams = PARAMS) -> bytes:
        """Encoded body followed by its rvk signature."""
        return self.encode() + self.sign(rng, params)

    def to_dict(self) -> dict:
        """Hex view of the public fields."""
        return {
            "proof": self.proof.hex(),
            "address_sender": self.address_sender.hex(),
            "address_recipient": self.address_recipient.hex(),
            "enc_amount_sender": self.enc_amount_sender.hex(),
            "enc_amount_recipient": self.enc_amount_recipient.hex(),
            "enc_fee": self.enc_fee.hex(),
            "rvk": self.rvk.hex(),
        }


def _challenge(r_point: bytes, rvk: bytes, message: bytes, params: ProtocolParams) -> bytes:
    return Ed25519Point.hash_to_scalar(params.signature_personalization, r_point + rvk + message)


def sign_message(
    rsk: bytes,
    rvk: bytes,
    message: bytes,
    rng: RandomSource,
    params: ProtocolParams = PARAMS,
) -> bytes:
    """
    Schnorr signature under the randomized key.

    Returns:
        R || s (64 bytes) with s = k + H(R || rvk || m) * rsk
    """
    nonce = Ed25519Point.hash_to_scalar(
        params.signature_personalization, rng.random_bytes(32) + rsk + message
    )
    r_point = Ed25519Point.scalarmult_base(nonce)
    c = _challenge(r_point, rvk, message, params)
    s = Ed25519Point.scalar_add(nonce, Ed25519Point.scalar_mul(c, rsk))
    return r_point + s


def verify_signature(
    rvk: bytes,
    message: bytes,
    signature: bytes,
    params: ProtocolParams = PARAMS,
) -> bool:
    """Check s * B == R + H(R || rvk || m) * rvk."""
    if len(signature) != SIGNATURE_SIZE:
        return False
    r_point, s = signature[:POINT_SIZE], signature[POINT_SIZE:]
    if not Ed25519Point.is_valid_point(r_point) or not Ed25519Point.is_valid_point(rvk):
        return False
    if scalar_to_int(s) >= CURVE_ORDER:
        return False

    c = _challenge(r_point, rvk, message, params)
    try:
        lhs = Ed25519Point.scalarmult_base(s)
        rhs = Ed25519Point.point_add(r_point, Ed25519Point.scalarmult(c, rvk))
    except CryptoError:
        return False
    return lhs == rhs
