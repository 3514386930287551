"""
Zerochain Primitive Tests
"""

import hashlib

import pytest

from zerochain.constants import CURVE_ORDER, PARAMS
from zerochain.crypto.curve import Ed25519Point, int_to_scalar, scalar_to_int
from zerochain.crypto.hash import blake2s_personal, blake2b_personal, blake2_256, twox_128
from zerochain.crypto.random import SystemRandom, random_scalar
from zerochain.errors import InvalidPointError, KeyDerivationError


class TestHash:
    """Tests for personalized BLAKE2."""

    def test_blake2s_matches_hashlib(self):
        expected = hashlib.blake2s(b"ab", person=b"zech_KDF").digest()
        assert blake2s_personal(b"zech_KDF", b"a", b"b") == expected

    def test_personalization_separates_domains(self):
        assert blake2s_personal(b"zech_KDF", b"x") != blake2s_personal(b"zech_ivk", b"x")

    def test_blake2b_key(self):
        assert blake2b_personal(b"zechMIMC", b"x", key=b"k1") != blake2b_personal(b"zechMIMC", b"x", key=b"k2")

    def test_blake2_256(self):
        assert blake2_256(b"") == hashlib.blake2b(b"", digest_size=32).digest()

    def test_twox_128(self):
        assert twox_128(b"Sudo Key").hex() == "50a63a871aced22e88ee6466fe5aa5d9"
        assert twox_128(b"")[:8].hex() == "99e9d85137db46ef"


class TestCurve:
    """Tests for Ed25519 group wrappers."""

    def test_hash_to_point_is_valid(self):
        point = Ed25519Point.hash_to_point(PARAMS.key_diversification_personalization, b"seed")
        assert Ed25519Point.is_valid_point(point)
        assert point == Ed25519Point.hash_to_point(PARAMS.key_diversification_personalization, b"seed")

    def test_hash_to_scalar_is_reduced(self):
        s = Ed25519Point.hash_to_scalar(PARAMS.kdf_personalization, b"data")
        assert scalar_to_int(s) < CURVE_ORDER

    def test_scalar_arithmetic(self):
        a, b = int_to_scalar(5), int_to_scalar(7)
        assert scalar_to_int(Ed25519Point.scalar_add(a, b)) == 12
        assert scalar_to_int(Ed25519Point.scalar_mul(a, b)) == 35

    def test_distributivity(self):
        """(a + b) * B == a * B + b * B"""
        a, b = int_to_scalar(11), int_to_scalar(13)
        lhs = Ed25519Point.scalarmult_base(Ed25519Point.scalar_add(a, b))
        rhs = Ed25519Point.point_add(Ed25519Point.scalarmult_base(a), Ed25519Point.scalarmult_base(b))
        assert lhs == rhs

    def test_zero_scalar_rejected(self):
        base = Ed25519Point.scalarmult_base(int_to_scalar(1))
        with pytest.raises(InvalidPointError):
            Ed25519Point.scalarmult(bytes(32), base)

    def test_invalid_point_rejected(self):
        assert not Ed25519Point.is_valid_point(b"\xff" * 32)
        assert not Ed25519Point.is_valid_point(b"\x01" * 31)
        with pytest.raises(InvalidPointError):
            Ed25519Point.scalarmult(int_to_scalar(3), b"\xff" * 32)

    def test_scalar_reduce_length(self):
        with pytest.raises(KeyDerivationError):
            Ed25519Point.scalar_reduce(b"\x01" * 32)


class TestRandom:
    """Tests for randomness sources."""

    def test_system_random_length(self):
        assert len(SystemRandom().random_bytes(48)) == 48

    def test_random_scalar_nonzero(self, rng):
        for _ in range(8):
            s = random_scalar(rng)
            assert 0 < scalar_to_int(s) < CURVE_ORDER

    def test_random_scalar_skips_zero(self):
        class ZeroFirst:
            def __init__(self):
                self.calls = 0

            def random_bytes(self, n):
                self.calls += 1
                return bytes(n) if self.calls == 1 else b"\x01" * n

        source = ZeroFirst()
        assert not Ed25519Point.scalar_is_zero(random_scalar(source))
        assert source.calls == 2
