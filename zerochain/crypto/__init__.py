"""
Zerochain Cryptographic Primitives
"""

from zerochain.crypto.hash import blake2s_personal, blake2b_personal, blake2_256
from zerochain.crypto.curve import Ed25519Point, scalar_to_int, int_to_scalar
from zerochain.crypto.random import RandomSource, SystemRandom, random_scalar

__all__ = [
    # Hash functions
    "blake2s_personal",
    "blake2b_personal",
    "blake2_256",
    # Curve
    "Ed25519Point",
    "scalar_to_int",
    "int_to_scalar",
    # Randomness
    "RandomSource",
    "SystemRandom",
    "random_scalar",
]
