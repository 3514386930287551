"""
Zerochain Transcript Prover

DEVELOPMENT BACKEND - NOT ZERO-KNOWLEDGE, NOT SOUND AGAINST KEY HOLDERS.

Checks the transfer relation in the clear against the witness and, if it
holds, emits a keyed BLAKE2b transcript of the public inputs shaped like
a Groth16 proof. Proving and verifying keys share one MAC secret, so
anyone holding the verifying key can forge proofs. Use it for local
networks and tests; production deployments plug a real SNARK backend
into the Prover protocol.
"""

from __future__ import annotations
import hmac
import logging
import struct
from typing import Optional, Tuple

from zerochain.constants import PARAMS, ProtocolParams, PROOF_SIZE
from zerochain.core.elgamal import encrypt, decrypt
from zerochain.core.keys import (
    Keys,
    RANDOMNESS_INDEX_AMOUNT,
    RANDOMNESS_INDEX_FEE,
    derive_ciphertext_randomness,
    randomize_signing_key,
)
from zerochain.crypto.hash import blake2b_personal
from zerochain.crypto.random import RandomSource, SystemRandom
from zerochain.errors import (
    CodecError,
    InvalidProofParametersError,
    ProofGenerationError,
)
from zerochain.proofs.prover import ProvingKey, VerifyingKey, PublicInputs, PrivateWitness

logger = logging.getLogger(__name__)

KEY_MAGIC = b"ZCTP"
KEY_VERSION = 1
MAC_KEY_SIZE = 32
KEY_BLOB_SIZE = len(KEY_MAGIC) + 1 + MAC_KEY_SIZE


def setup(rng: Optional[RandomSource] = None) -> Tuple[ProvingKey, VerifyingKey]:
    """Generate a fresh proving/verifying key pair."""
    rng = rng or SystemRandom()
    blob = KEY_MAGIC + bytes([KEY_VERSION]) + rng.random_bytes(MAC_KEY_SIZE)
    logger.warning("Generated transcript proof parameters; these are not zero-knowledge")
    return ProvingKey(blob), VerifyingKey(blob)


def _mac_key(blob: bytes) -> bytes:
    if len(blob) != KEY_BLOB_SIZE or not blob.startswith(KEY_MAGIC):
        raise InvalidProofParametersError("not a transcript key blob")
    if blob[len(KEY_MAGIC)] != KEY_VERSION:
        raise InvalidProofParametersError(f"unsupported key version {blob[len(KEY_MAGIC)]}")
    return blob[len(KEY_MAGIC) + 1:]


class TranscriptProver:
    """Prover backend that checks the relation and MACs the public inputs."""

    def __init__(self, params: ProtocolParams = PARAMS):
        self.params = params

    def _transcript(self, mac_key: bytes, public_inputs: PublicInputs) -> bytes:
        hash_config = self.params.hash
        header = hash_config.seed + struct.pack('<IQ', hash_config.rounds, hash_config.exponent)
        body = public_inputs.serialize()

        blocks = []
        for counter in range(PROOF_SIZE // 64):
            blocks.append(blake2b_personal(
                self.params.mimc_personalization,
                header,
                bytes([counter]),
                body,
                digest_size=64,
                key=mac_key,
            ))
        return b"".join(blocks)

    def check_relation(self, public_inputs: PublicInputs, witness: PrivateWitness) -> None:
        """Raise ProofGenerationError unless the witness satisfies the relation."""
        params = self.params
        keys = Keys.from_spending_key(witness.spending_key, params)

        # (a) key knowledge
        if keys.encryption_key != public_inputs.address_sender:
            raise ProofGenerationError("spending key does not own the sender address")
        _, rvk = randomize_signing_key(witness.spending_key, witness.alpha, params)
        if rvk != public_inputs.rvk:
            raise ProofGenerationError("rvk is not the spending key blinded by alpha")

        # (b) equal amounts under both keys, fee under the sender key
        r_amount = derive_ciphertext_randomness(witness.alpha, RANDOMNESS_INDEX_AMOUNT, params)
        r_fee = derive_ciphertext_randomness(witness.alpha, RANDOMNESS_INDEX_FEE, params)
        expected = (
            (public_inputs.enc_amount_sender, witness.amount, r_amount, public_inputs.address_sender),
            (public_inputs.enc_amount_recipient, witness.amount, r_amount, public_inputs.address_recipient),
            (public_inputs.enc_fee, witness.fee, r_fee, public_inputs.address_sender),
        )
        for ciphertext, value, randomness, key in expected:
            if encrypt(value, randomness, key, params) != ciphertext:
                raise ProofGenerationError("ciphertext does not match the witness")

        # (c) balance covers amount and fee
        try:
            balance = decrypt(public_inputs.enc_balance, keys.decryption_key, params)
        except CodecError as e:
            raise ProofGenerationError(f"balance does not open under the sender key: {e.message}") from e
        if witness.amount + witness.fee > balance:
            raise ProofGenerationError("amount and fee exceed the committed balance")

        # (d) remaining balance
        if witness.remaining_balance != balance - witness.amount - witness.fee:
            raise ProofGenerationError("remaining balance is inconsistent")
        if not 0 <= witness.remaining_balance <= params.max_value:
            raise ProofGenerationError("remaining balance is outside the value domain")

    def generate_proof(
        self,
        public_inputs: PublicInputs,
        witness: PrivateWitness,
        proving_key: ProvingKey,
    ) -> bytes:
        mac_key = _mac_key(proving_key.data)
        self.check_relation(public_inputs, witness)
        return self._transcript(mac_key, public_inputs)

    def verify(
        self,
        proof: bytes,
        public_inputs: PublicInputs,
        verifying_key: VerifyingKey,
    ) -> bool:
        mac_key = _mac_key(verifying_key.data)
        if len(proof) != PROOF_SIZE:
            return False
        return hmac.compare_digest(proof, self._transcript(mac_key, public_inputs))
