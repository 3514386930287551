"""
Zerochain Key Hierarchy

    SpendingKey --KDF--> ProofGenerationKey (ak, nsk)
                --CRH_ivk--> DecryptionKey (dk)
                --[dk]B--> EncryptionKey (address)

Every step is a pure function of its input; none can be inverted
without solving a discrete logarithm or inverting BLAKE2.
"""

from __future__ import annotations
from dataclasses import dataclass
from functools import lru_cache
from typing import Tuple

from zerochain.constants import PARAMS, ProtocolParams, SEED_SIZE, SCALAR_SIZE, POINT_SIZE, CURVE_ORDER
from zerochain.crypto.curve import Ed25519Point, scalar_to_int
from zerochain.crypto.hash import blake2s_personal
from zerochain.errors import KeyDerivationError, InvalidPointError

# Domain bytes appended inside the KDF / diversification hashes
KDF_INDEX_ASK = 0x00
KDF_INDEX_NSK = 0x01

RANDOMNESS_INDEX_AMOUNT = 0x01
RANDOMNESS_INDEX_FEE = 0x02

NULLIFIER_GENERATOR_SEED = b"Zerochain_nullifier_key_generator"


def _check_length(name: str, data: bytes, size: int) -> None:
    if not isinstance(data, (bytes, bytearray)):
        raise KeyDerivationError(f"{name} must be bytes, got {type(data).__name__}")
    if len(data) != size:
        raise KeyDerivationError(f"{name} must be {size} bytes, got {len(data)}")


@dataclass(frozen=True, slots=True)
class SpendingKey:
    """
    Root secret of an account.

    SIZE: 32 bytes
    """
    data: bytes

    def __post_init__(self):
        _check_length("SpendingKey", self.data, SEED_SIZE)

    def __repr__(self) -> str:
        return "SpendingKey(<secret>)"

    @classmethod
    def from_seed(cls, seed: bytes) -> SpendingKey:
        return cls(bytes(seed))

    @classmethod
    def from_hex(cls, hex_string: str) -> SpendingKey:
        return cls(bytes.fromhex(hex_string.removeprefix("0x")))


@dataclass(frozen=True, slots=True)
class ProofGenerationKey:
    """
    Authorizing key ak = ask * B and nullifier secret nsk.

    Given to a prover so it can construct proofs without the spending key.
    """
    ak: bytes
    nsk: bytes

    def __post_init__(self):
        _check_length("ak", self.ak, POINT_SIZE)
        _check_length("nsk", self.nsk, SCALAR_SIZE)

    def __repr__(self) -> str:
        return f"ProofGenerationKey(ak={self.ak.hex()[:16]}..., nsk=<secret>)"


@dataclass(frozen=True, slots=True)
class DecryptionKey:
    """
    Scalar that opens ciphertexts addressed to the matching EncryptionKey.

    SIZE: 32 bytes, little-endian, below the group order
    """
    data: bytes

    def __post_init__(self):
        _check_length("DecryptionKey", self.data, SCALAR_SIZE)
        value = scalar_to_int(self.data)
        if value == 0 or value >= CURVE_ORDER:
            raise KeyDerivationError("DecryptionKey must be a non-zero canonical scalar")

    def __repr__(self) -> str:
        return "DecryptionKey(<secret>)"

    def __bytes__(self) -> bytes:
        return self.data

    @classmethod
    def from_hex(cls, hex_string: str) -> DecryptionKey:
        try:
            return cls(bytes.fromhex(hex_string.removeprefix("0x")))
        except ValueError as e:
            raise KeyDerivationError(f"DecryptionKey is not hex: {e}") from e


@dataclass(frozen=True, slots=True)
class EncryptionKey:
    """
    Public address: dk * B.

    SIZE: 32 bytes (compressed Ed25519 point)
    """
    data: bytes

    def __post_init__(self):
        if not isinstance(self.data, (bytes, bytearray)) or len(self.data) != POINT_SIZE:
            raise InvalidPointError(f"EncryptionKey must be {POINT_SIZE} bytes")
        if not Ed25519Point.is_valid_point(self.data):
            raise InvalidPointError("EncryptionKey is not in the prime-order subgroup")

    def __bytes__(self) -> bytes:
        return self.data

    def __repr__(self) -> str:
        return f"EncryptionKey({self.data.hex()[:16]}...)"

    def hex(self) -> str:
        return self.data.hex()

    @classmethod
    def from_hex(cls, hex_string: str) -> EncryptionKey:
        try:
            return cls(bytes.fromhex(hex_string.removeprefix("0x")))
        except ValueError as e:
            raise InvalidPointError(f"EncryptionKey is not hex: {e}") from e


@lru_cache(maxsize=None)
def nullifier_generator(params: ProtocolParams = PARAMS) -> bytes:
    """Fixed generator for nk = nsk * G_nk, independent of B."""
    return Ed25519Point.hash_to_point(
        params.key_diversification_personalization, NULLIFIER_GENERATOR_SEED
    )


def expand_spending_key(spending_key: SpendingKey, params: ProtocolParams = PARAMS) -> Tuple[bytes, bytes]:
    """Expand the seed into (ask, nsk)."""
    if not isinstance(spending_key, SpendingKey):
        raise KeyDerivationError(f"expected SpendingKey, got {type(spending_key).__name__}")
    kdf = params.kdf_personalization
    ask = Ed25519Point.hash_to_scalar(kdf, spending_key.data + bytes([KDF_INDEX_ASK]))
    nsk = Ed25519Point.hash_to_scalar(kdf, spending_key.data + bytes([KDF_INDEX_NSK]))
    return ask, nsk


def derive_proof_generation_key(
    spending_key: SpendingKey,
    params: ProtocolParams = PARAMS,
) -> ProofGenerationKey:
    ask, nsk = expand_spending_key(spending_key, params)
    return ProofGenerationKey(ak=Ed25519Point.scalarmult_base(ask), nsk=nsk)


def derive_decryption_key(
    proof_generation_key: ProofGenerationKey,
    params: ProtocolParams = PARAMS,
) -> DecryptionKey:
    """
    dk = CRH_ivk(ak || nk), truncated to 251 bits.

    Truncation keeps dk below the group order so every output is a
    canonical scalar.
    """
    if not isinstance(proof_generation_key, ProofGenerationKey):
        raise KeyDerivationError(
            f"expected ProofGenerationKey, got {type(proof_generation_key).__name__}"
        )
    nk = Ed25519Point.scalarmult(proof_generation_key.nsk, nullifier_generator(params))
    digest = bytearray(blake2s_personal(params.crh_ivk_personalization, proof_generation_key.ak, nk))
    digest[31] &= 0b0000_0111
    if not any(digest):
        raise KeyDerivationError("CRH_ivk produced a zero key")
    return DecryptionKey(bytes(digest))


def derive_encryption_key(decryption_key: DecryptionKey) -> EncryptionKey:
    if not isinstance(decryption_key, DecryptionKey):
        raise KeyDerivationError(f"expected DecryptionKey, got {type(decryption_key).__name__}")
    return EncryptionKey(Ed25519Point.scalarmult_base(decryption_key.data))


def derive_ciphertext_randomness(alpha: bytes, index: int, params: ProtocolParams = PARAMS) -> bytes:
    """Diversify alpha into the randomness of one ciphertext role."""
    _check_length("alpha", alpha, SCALAR_SIZE)
    return Ed25519Point.hash_to_scalar(
        params.key_diversification_personalization, alpha + bytes([index])
    )


def randomize_signing_key(
    spending_key: SpendingKey,
    alpha: bytes,
    params: ProtocolParams = PARAMS,
) -> Tuple[bytes, bytes]:
    """
    Blind the spend authority with alpha.

    Returns:
        (rsk, rvk) with rsk = ask + alpha and rvk = rsk * B = ak + alpha * B
    """
    _check_length("alpha", alpha, SCALAR_SIZE)
    ask, _ = expand_spending_key(spending_key, params)
    rsk = Ed25519Point.scalar_add(ask, alpha)
    return rsk, Ed25519Point.scalarmult_base(rsk)


@dataclass(frozen=True)
class Keys:
    """All keys of one account, derived from a seed."""
    spending_key: SpendingKey
    proof_generation_key: ProofGenerationKey
    decryption_key: DecryptionKey
    encryption_key: EncryptionKey

    @classmethod
    def from_spending_key(cls, spending_key: SpendingKey, params: ProtocolParams = PARAMS) -> Keys:
        pgk = derive_proof_generation_key(spending_key, params)
        dk = derive_decryption_key(pgk, params)
        return cls(
            spending_key=spending_key,
            proof_generation_key=pgk,
            decryption_key=dk,
            encryption_key=derive_encryption_key(dk),
        )

    @classmethod
    def from_seed(cls, seed: bytes, params: ProtocolParams = PARAMS) -> Keys:
        return cls.from_spending_key(SpendingKey.from_seed(seed), params)
