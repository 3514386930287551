"""
Zerochain Test Fixtures
"""

import hashlib
from typing import Dict, List, Optional, Tuple

import pytest

from zerochain.constants import ALICE_SEED, BOB_SEED
from zerochain.core.elgamal import Ciphertext, encrypt
from zerochain.core.keys import Keys
from zerochain.crypto.random import random_scalar
from zerochain.ledger.client import storage_key
from zerochain.proofs.prover import ProvingKey, VerifyingKey
from zerochain.proofs.transcript import TranscriptProver, setup


class DeterministicRandom:
    """BLAKE2b counter-mode byte stream; reproducible RandomSource for tests."""

    def __init__(self, seed: bytes = b"zerochain-tests"):
        self.seed = seed
        self.counter = 0
        self.draws = 0

    def random_bytes(self, n: int) -> bytes:
        out = b""
        while len(out) < n:
            out += hashlib.blake2b(
                self.seed + self.counter.to_bytes(8, "little"), digest_size=64
            ).digest()
            self.counter += 1
        self.draws += 1
        return out[:n]


class FakeLedger:
    """In-memory LedgerClient."""

    def __init__(self):
        self.storage: Dict[str, str] = {}
        self.submitted: List[bytes] = []
        self.reads: List[Tuple[str, str, Optional[bytes]]] = []

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return None

    def set_storage(self, module: str, key: str, param: Optional[bytes], value: str) -> None:
        self.storage[storage_key(module, key, param)] = value

    def get_storage(self, module: str, key: str, param: Optional[bytes] = None) -> Optional[str]:
        self.reads.append((module, key, param))
        return self.storage.get(storage_key(module, key, param))

    def submit(self, extrinsic: bytes) -> str:
        self.submitted.append(extrinsic)
        return "0x" + hashlib.blake2b(extrinsic, digest_size=32).hexdigest()


class SpyProver(TranscriptProver):
    """Transcript backend that records every call."""

    def __init__(self):
        super().__init__()
        self.proof_calls = []
        self.verify_calls = 0

    def generate_proof(self, public_inputs, witness, proving_key):
        self.proof_calls.append((public_inputs, witness))
        return super().generate_proof(public_inputs, witness, proving_key)

    def verify(self, proof, public_inputs, verifying_key):
        self.verify_calls += 1
        return super().verify(proof, public_inputs, verifying_key)


@pytest.fixture
def rng() -> DeterministicRandom:
    """Reproducible randomness."""
    return DeterministicRandom()


@pytest.fixture
def make_rng():
    """Factory for independent reproducible streams."""
    return DeterministicRandom


@pytest.fixture(scope="session")
def alice() -> Keys:
    """Keys of the fixed Alice account."""
    return Keys.from_seed(ALICE_SEED)


@pytest.fixture(scope="session")
def bob() -> Keys:
    """Keys of the fixed Bob account."""
    return Keys.from_seed(BOB_SEED)


@pytest.fixture(scope="session")
def proof_keys() -> Tuple[ProvingKey, VerifyingKey]:
    """Transcript proving/verifying key pair."""
    return setup(DeterministicRandom(b"proof-params"))


@pytest.fixture
def spy_prover() -> SpyProver:
    return SpyProver()


@pytest.fixture
def alice_balance(alice, rng) -> Ciphertext:
    """Alice's on-chain balance of 100."""
    return encrypt(100, random_scalar(rng), alice.encryption_key)


@pytest.fixture
def ledger() -> FakeLedger:
    return FakeLedger()
