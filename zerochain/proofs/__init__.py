"""
Zerochain Proof System Interface
"""

from zerochain.proofs.prover import (
    Prover,
    ProvingKey,
    VerifyingKey,
    PublicInputs,
    PrivateWitness,
)
from zerochain.proofs.transcript import TranscriptProver, setup

__all__ = [
    "Prover",
    "ProvingKey",
    "VerifyingKey",
    "PublicInputs",
    "PrivateWitness",
    "TranscriptProver",
    "setup",
]
