"""
Zerochain Hash Functions

Personalized BLAKE2 per RFC 7693. Every protocol use of a hash carries
one of the 8-byte personalizations from zerochain.constants. Ledger
storage keys use the unpersonalized BLAKE2b-256 and twox128 hashes.
"""

from __future__ import annotations
import hashlib
from typing import Union

import xxhash

BytesLike = Union[bytes, bytearray, memoryview]


def blake2s_personal(personalization: bytes, *data: BytesLike, digest_size: int = 32) -> bytes:
    """
    BLAKE2s with an 8-byte personalization.

    Args:
        personalization: Domain separation tag (exactly 8 bytes)
        data: Inputs, hashed in order
        digest_size: Output length in bytes (max 32)

    Returns:
        bytes: Digest
    """
    hasher = hashlib.blake2s(digest_size=digest_size, person=personalization)
    for chunk in data:
        hasher.update(chunk)
    return hasher.digest()


def blake2b_personal(
    personalization: bytes,
    *data: BytesLike,
    digest_size: int = 64,
    key: bytes = b"",
) -> bytes:
    """
    BLAKE2b with a personalization and optional key.

    Args:
        personalization: Domain separation tag (up to 16 bytes)
        data: Inputs, hashed in order
        digest_size: Output length in bytes (max 64)
        key: Optional MAC key (max 64 bytes)

    Returns:
        bytes: Digest
    """
    hasher = hashlib.blake2b(digest_size=digest_size, person=personalization, key=key)
    for chunk in data:
        hasher.update(chunk)
    return hasher.digest()


def blake2_256(data: BytesLike) -> bytes:
    """Unpersonalized BLAKE2b-256, as used for ledger storage keys."""
    return hashlib.blake2b(data, digest_size=32).digest()


def twox_128(data: BytesLike) -> bytes:
    """
    XXHash64 under seeds 0 and 1, concatenated little-endian.

    Used for ledger storage keys of plain (non-map) items.
    """
    data = bytes(data)
    return b"".join(
        xxhash.xxh64(data, seed=seed).intdigest().to_bytes(8, "little")
        for seed in (0, 1)
    )
