"""
Zerochain Ed25519 Group Operations

Thin wrappers around libsodium (via nacl.bindings) for the prime-order
subgroup of Ed25519. Points are 32-byte compressed encodings, scalars
are 32-byte little-endian integers reduced mod L.
"""

from __future__ import annotations
import struct

import nacl.bindings
import nacl.exceptions

from zerochain.constants import CURVE_ORDER, POINT_SIZE, SCALAR_SIZE, LITTLE_ENDIAN
from zerochain.crypto.hash import blake2b_personal
from zerochain.errors import InvalidPointError, KeyDerivationError


class Ed25519Point:
    """
    Ed25519 elliptic curve point operations using libsodium.

    Every failure from the library is re-raised as a protocol error;
    nothing falls back to local arithmetic.
    """

    POINT_SIZE = POINT_SIZE
    SCALAR_SIZE = SCALAR_SIZE

    @staticmethod
    def is_valid_point(point: bytes) -> bool:
        """Check canonical encoding, curve membership and main subgroup."""
        if not isinstance(point, (bytes, bytearray)) or len(point) != POINT_SIZE:
            return False
        return nacl.bindings.crypto_core_ed25519_is_valid_point(bytes(point))

    @staticmethod
    def scalar_reduce(wide: bytes) -> bytes:
        """Reduce a 64-byte value to a scalar mod L."""
        if len(wide) != 64:
            raise KeyDerivationError(f"scalar reduction needs 64 bytes, got {len(wide)}")
        return nacl.bindings.crypto_core_ed25519_scalar_reduce(wide)

    @staticmethod
    def scalar_add(a: bytes, b: bytes) -> bytes:
        """Add two scalars mod L."""
        return nacl.bindings.crypto_core_ed25519_scalar_add(a, b)

    @staticmethod
    def scalar_mul(a: bytes, b: bytes) -> bytes:
        """Multiply two scalars mod L."""
        return nacl.bindings.crypto_core_ed25519_scalar_mul(a, b)

    @staticmethod
    def scalar_is_zero(s: bytes) -> bool:
        return int.from_bytes(s, LITTLE_ENDIAN) % CURVE_ORDER == 0

    @staticmethod
    def point_add(p: bytes, q: bytes) -> bytes:
        """Add two Ed25519 points."""
        try:
            return nacl.bindings.crypto_core_ed25519_add(p, q)
        except nacl.exceptions.CryptoError as e:
            raise InvalidPointError(f"point addition failed: {e}") from e

    @staticmethod
    def scalarmult_base(scalar: bytes) -> bytes:
        """Scalar multiplication with base point: s * B."""
        try:
            return nacl.bindings.crypto_scalarmult_ed25519_base_noclamp(scalar)
        except nacl.exceptions.CryptoError as e:
            raise InvalidPointError(f"base point multiplication failed: {e}") from e

    @staticmethod
    def scalarmult(scalar: bytes, point: bytes) -> bytes:
        """Scalar multiplication: s * P."""
        if Ed25519Point.scalar_is_zero(scalar):
            raise InvalidPointError("zero scalar yields the identity")
        try:
            return nacl.bindings.crypto_scalarmult_ed25519_noclamp(scalar, point)
        except nacl.exceptions.CryptoError as e:
            raise InvalidPointError(f"scalar multiplication failed: {e}") from e

    @staticmethod
    def hash_to_scalar(personalization: bytes, data: bytes) -> bytes:
        """Hash data to a scalar using personalized BLAKE2b-512 and reduction."""
        return Ed25519Point.scalar_reduce(blake2b_personal(personalization, data, digest_size=64))

    @staticmethod
    def hash_to_point(personalization: bytes, data: bytes) -> bytes:
        """
        Hash data to a point of the prime-order subgroup.

        Uses try-and-increment; libsodium's validity check already
        rejects points outside the main subgroup.
        """
        for counter in range(256):
            candidate = blake2b_personal(
                personalization, data + struct.pack('<B', counter), digest_size=32
            )
            if Ed25519Point.is_valid_point(candidate):
                return candidate

        raise InvalidPointError("hash to point failed after 256 attempts")


def scalar_to_int(s: bytes) -> int:
    return int.from_bytes(s, LITTLE_ENDIAN)


def int_to_scalar(n: int) -> bytes:
    return (n % CURVE_ORDER).to_bytes(SCALAR_SIZE, LITTLE_ENDIAN)
