"""
Zerochain Randomness Sources

Ciphertext randomness and the per-transfer alpha are drawn through a
RandomSource so callers can inject their own CSPRNG.
"""

from __future__ import annotations
import secrets
import threading
from typing import Protocol, runtime_checkable

from zerochain.crypto.curve import Ed25519Point


@runtime_checkable
class RandomSource(Protocol):
    """Cryptographically secure byte source."""

    def random_bytes(self, n: int) -> bytes:
        ...


class SystemRandom:
    """
    OS CSPRNG via the secrets module.

    Draws are serialized so one instance can be shared between
    concurrent builders.
    """

    def __init__(self):
        self._lock = threading.Lock()

    def random_bytes(self, n: int) -> bytes:
        with self._lock:
            return secrets.token_bytes(n)


def random_scalar(rng: RandomSource) -> bytes:
    """Draw a uniformly distributed non-zero scalar mod L."""
    while True:
        s = Ed25519Point.scalar_reduce(rng.random_bytes(64))
        if not Ed25519Point.scalar_is_zero(s):
            return s
