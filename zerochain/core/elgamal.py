"""
Zerochain Balance Codec

Hashed ElGamal over the Ed25519 prime-order subgroup:

    R = r * B                          randomness commitment (32 bytes)
    S = r * EK = dk * R                shared point
    c = value + KDF(S || EK) mod 2^64  masked value (8 bytes)

Ciphertext wire form is c (little-endian) || R, CIPHERTEXT_SIZE bytes.
The layout is not additively homomorphic: adding two masked values also
adds their keystreams, so the sum does not decrypt. Balance updates go
through the proof witness, never through arithmetic on ciphertexts.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Optional, Union

from zerochain.constants import PARAMS, ProtocolParams, CIPHERTEXT_SIZE, V_SIZE, R_SIZE, LITTLE_ENDIAN
from zerochain.core.keys import DecryptionKey, EncryptionKey, derive_encryption_key
from zerochain.crypto.curve import Ed25519Point
from zerochain.crypto.hash import blake2s_personal
from zerochain.errors import (
    CiphertextFormatError,
    DecodeError,
    InvalidAmountError,
    KeyDerivationError,
)

logger = logging.getLogger(__name__)

VALUE_MODULUS = 1 << (8 * V_SIZE)


@dataclass(frozen=True, slots=True)
class Ciphertext:
    """
    Encryption of one value under one EncryptionKey.

    SIZE: 40 bytes
    SERIALIZATION: masked_value (8, LE) || commitment (32)
    """
    masked_value: bytes
    commitment: bytes

    def __post_init__(self):
        if len(self.masked_value) != V_SIZE:
            raise CiphertextFormatError(f"value slot must be {V_SIZE} bytes, got {len(self.masked_value)}")
        if len(self.commitment) != R_SIZE:
            raise CiphertextFormatError(f"commitment must be {R_SIZE} bytes, got {len(self.commitment)}")
        if not Ed25519Point.is_valid_point(self.commitment):
            raise CiphertextFormatError("commitment is not in the prime-order subgroup")

    def __bytes__(self) -> bytes:
        return self.to_bytes()

    def __repr__(self) -> str:
        return f"Ciphertext({self.to_bytes().hex()[:16]}...)"

    def to_bytes(self) -> bytes:
        return self.masked_value + self.commitment

    def hex(self) -> str:
        return self.to_bytes().hex()

    @classmethod
    def from_bytes(cls, data: bytes) -> Ciphertext:
        if len(data) != CIPHERTEXT_SIZE:
            raise CiphertextFormatError(f"expected {CIPHERTEXT_SIZE} bytes, got {len(data)}")
        return cls(masked_value=bytes(data[:V_SIZE]), commitment=bytes(data[V_SIZE:]))

    @classmethod
    def from_hex(cls, hex_string: str) -> Ciphertext:
        try:
            data = bytes.fromhex(hex_string.removeprefix("0x"))
        except ValueError as e:
            raise CiphertextFormatError(f"not hex: {e}") from e
        return cls.from_bytes(data)


def _keystream(shared: bytes, encryption_key: EncryptionKey, params: ProtocolParams) -> int:
    mask = blake2s_personal(params.kdf_personalization, shared, encryption_key.data, digest_size=V_SIZE)
    return int.from_bytes(mask, LITTLE_ENDIAN)


def encrypt(
    value: int,
    randomness: bytes,
    encryption_key: EncryptionKey,
    params: ProtocolParams = PARAMS,
) -> Ciphertext:
    """
    Encrypt a value to an encryption key.

    Args:
        value: Plaintext in [0, 2^value_bits)
        randomness: Non-zero scalar, fresh per ciphertext unless the
            caller links ciphertexts on purpose
        encryption_key: Recipient address

    Returns:
        Ciphertext
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidAmountError("value", value, "must be an integer")
    if not 0 <= value <= params.max_value:
        raise InvalidAmountError("value", value, f"outside [0, {params.max_value}]")
    if len(randomness) != R_SIZE or Ed25519Point.scalar_is_zero(randomness):
        raise KeyDerivationError("randomness must be a non-zero 32-byte scalar")

    commitment = Ed25519Point.scalarmult_base(randomness)
    shared = Ed25519Point.scalarmult(randomness, encryption_key.data)
    masked = (value + _keystream(shared, encryption_key, params)) % VALUE_MODULUS

    return Ciphertext(
        masked_value=masked.to_bytes(V_SIZE, LITTLE_ENDIAN),
        commitment=commitment,
    )


def decrypt(
    ciphertext: Union[Ciphertext, bytes],
    decryption_key: DecryptionKey,
    params: ProtocolParams = PARAMS,
    max_value: Optional[int] = None,
) -> int:
    """
    Recover the plaintext value.

    The unmasked value is accepted only if it falls inside the value
    domain [0, min(max_value, 2^value_bits - 1)]. A ciphertext for
    another key unmasks to a uniformly random 64-bit integer and is
    rejected with probability 1 - 2^-32.

    Raises:
        DecodeError: No value of the domain matches
        CiphertextFormatError: Bytes are not a ciphertext
    """
    if not isinstance(ciphertext, Ciphertext):
        ciphertext = Ciphertext.from_bytes(ciphertext)

    bound = params.max_value if max_value is None else min(max_value, params.max_value)

    encryption_key = derive_encryption_key(decryption_key)
    shared = Ed25519Point.scalarmult(decryption_key.data, ciphertext.commitment)
    masked = int.from_bytes(ciphertext.masked_value, LITTLE_ENDIAN)
    value = (masked - _keystream(shared, encryption_key, params)) % VALUE_MODULUS

    if value > bound:
        logger.debug("Ciphertext did not open to a value in the domain")
        raise DecodeError(f"no value in [0, {bound}] matches (wrong key or corrupted bytes)")

    return value
