"""
Zerochain Transaction Builder

State machine for one confidential transfer:

    INITIALIZED -> PARAMS_LOADED -> BALANCE_VALIDATED -> PROOF_GENERATED
                -> READY -> SUBMITTED

Any failure moves the builder to FAILED and discards alpha, the
ciphertexts and the randomized keys. A builder is single-use: a retry
needs a new builder, which draws a new alpha.
"""

from __future__ import annotations
import logging
from contextlib import contextmanager
from enum import Enum
from typing import Iterator, Optional, Union

from zerochain.constants import PARAMS, ProtocolParams
from zerochain.core.elgamal import Ciphertext, encrypt, decrypt
from zerochain.core.keys import (
    EncryptionKey,
    Keys,
    SpendingKey,
    RANDOMNESS_INDEX_AMOUNT,
    RANDOMNESS_INDEX_FEE,
    derive_ciphertext_randomness,
    randomize_signing_key,
)
from zerochain.core.transaction import Transaction
from zerochain.crypto.random import RandomSource, SystemRandom, random_scalar
from zerochain.errors import (
    InsufficientBalanceError,
    InvalidAmountError,
    InvalidProofParametersError,
    InvalidStateError,
    ProofVerificationError,
    ZeroAmountError,
)
from zerochain.ledger.client import LedgerClient
from zerochain.proofs.prover import Prover, ProvingKey, VerifyingKey, PublicInputs, PrivateWitness
from zerochain.proofs.transcript import TranscriptProver

logger = logging.getLogger(__name__)


class BuilderState(Enum):
    INITIALIZED = "initialized"
    PARAMS_LOADED = "params_loaded"
    BALANCE_VALIDATED = "balance_validated"
    PROOF_GENERATED = "proof_generated"
    READY = "ready"
    SUBMITTED = "submitted"
    FAILED = "failed"


def check_value(name: str, value: int, params: ProtocolParams = PARAMS) -> int:
    """Validate an amount/fee as an unsigned integer of the value width."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidAmountError(name, value, "must be an integer")
    if value < 0:
        raise InvalidAmountError(name, value, "must not be negative")
    if value > params.max_value:
        raise InvalidAmountError(name, value, f"exceeds {params.max_value}")
    return value


class TransactionBuilder:
    """
    Builds one confidential transfer.

    Args:
        prover: Proof backend (defaults to the transcript backend)
        rng: CSPRNG for alpha and the extrinsic signature
        params: Protocol parameters
    """

    def __init__(
        self,
        prover: Optional[Prover] = None,
        rng: Optional[RandomSource] = None,
        params: ProtocolParams = PARAMS,
    ):
        self.params = params
        self.prover = prover or TranscriptProver(params)
        self.rng = rng or SystemRandom()
        self.state = BuilderState.INITIALIZED

        self._proving_key: Optional[ProvingKey] = None
        self._verifying_key: Optional[VerifyingKey] = None
        self._keys: Optional[Keys] = None
        self._old_balance: Optional[Ciphertext] = None
        self._amount = 0
        self._fee = 0
        self._remaining_balance: Optional[int] = None
        self._public_inputs: Optional[PublicInputs] = None
        self._proof: Optional[bytes] = None
        self._rsk: Optional[bytes] = None
        self.transaction: Optional[Transaction] = None

    @property
    def remaining_balance(self) -> Optional[int]:
        """Balance left after the transfer, known once the balance is validated."""
        return self._remaining_balance

    @contextmanager
    def _transition(self, expected: BuilderState, target: BuilderState) -> Iterator[None]:
        if self.state is not expected:
            raise InvalidStateError(self.state.value, expected.value)
        try:
            yield
        except Exception as e:
            self._fail(e)
            raise
        self.state = target
        logger.debug(f"Builder state -> {target.value}")

    def _fail(self, error: Exception) -> None:
        logger.warning(f"Transfer construction failed in state {self.state.value}: {error}")
        self.state = BuilderState.FAILED
        self._keys = None
        self._old_balance = None
        self._remaining_balance = None
        self._public_inputs = None
        self._proof = None
        self._rsk = None
        self.transaction = None

    # -------------------------------------------------------------------------
    # Steps
    # -------------------------------------------------------------------------

    def load_params(self, proving_key: ProvingKey, verifying_key: VerifyingKey) -> None:
        with self._transition(BuilderState.INITIALIZED, BuilderState.PARAMS_LOADED):
            if not isinstance(proving_key, ProvingKey):
                raise InvalidProofParametersError("proving key has the wrong type")
            if not isinstance(verifying_key, VerifyingKey):
                raise InvalidProofParametersError("verifying key has the wrong type")
            self._proving_key = proving_key
            self._verifying_key = verifying_key

    def validate_balance(
        self,
        amount: int,
        fee: int,
        old_encrypted_balance: Union[Ciphertext, bytes],
        spending_key: SpendingKey,
    ) -> int:
        """
        Open the current balance and check it covers amount + fee.

        Returns:
            Remaining balance

        Raises:
            InsufficientBalanceError: amount + fee > balance
        """
        with self._transition(BuilderState.PARAMS_LOADED, BuilderState.BALANCE_VALIDATED):
            check_value("amount", amount, self.params)
            if amount == 0:
                raise ZeroAmountError()
            check_value("fee", fee, self.params)

            keys = Keys.from_spending_key(spending_key, self.params)
            if not isinstance(old_encrypted_balance, Ciphertext):
                old_encrypted_balance = Ciphertext.from_bytes(old_encrypted_balance)
            balance = decrypt(old_encrypted_balance, keys.decryption_key, self.params)

            if amount + fee > balance:
                raise InsufficientBalanceError(balance, amount + fee)

            self._remaining_balance = check_value(
                "remaining balance", balance - amount - fee, self.params
            )
            self._keys = keys
            self._old_balance = old_encrypted_balance
            self._amount = amount
            self._fee = fee

        return self._remaining_balance

    def generate_proof(self, recipient_encryption_key: Union[EncryptionKey, bytes]) -> bytes:
        """
        Encrypt amount and fee, randomize the signing key and prove.

        Raises:
            ProofGenerationError: The backend rejected the witness
            ProofVerificationError: The proof does not verify under the
                verifying key
        """
        with self._transition(BuilderState.BALANCE_VALIDATED, BuilderState.PROOF_GENERATED):
            if not isinstance(recipient_encryption_key, EncryptionKey):
                recipient_encryption_key = EncryptionKey(bytes(recipient_encryption_key))

            keys = self._keys
            alpha = random_scalar(self.rng)

            r_amount = derive_ciphertext_randomness(alpha, RANDOMNESS_INDEX_AMOUNT, self.params)
            r_fee = derive_ciphertext_randomness(alpha, RANDOMNESS_INDEX_FEE, self.params)

            enc_amount_sender = encrypt(self._amount, r_amount, keys.encryption_key, self.params)
            enc_amount_recipient = encrypt(self._amount, r_amount, recipient_encryption_key, self.params)
            enc_fee = encrypt(self._fee, r_fee, keys.encryption_key, self.params)

            rsk, rvk = randomize_signing_key(keys.spending_key, alpha, self.params)

            public_inputs = PublicInputs(
                address_sender=keys.encryption_key,
                address_recipient=recipient_encryption_key,
                enc_amount_sender=enc_amount_sender,
                enc_amount_recipient=enc_amount_recipient,
                enc_fee=enc_fee,
                enc_balance=self._old_balance,
                rvk=rvk,
            )
            witness = PrivateWitness(
                spending_key=keys.spending_key,
                alpha=alpha,
                amount=self._amount,
                fee=self._fee,
                remaining_balance=self._remaining_balance,
            )

            logger.info("Computing zk proof...")
            proof = self.prover.generate_proof(public_inputs, witness, self._proving_key)
            if not self.prover.verify(proof, public_inputs, self._verifying_key):
                raise ProofVerificationError("generated proof does not verify")

            self._public_inputs = public_inputs
            self._proof = proof
            self._rsk = rsk

        return self._proof

    def assemble(self) -> Transaction:
        with self._transition(BuilderState.PROOF_GENERATED, BuilderState.READY):
            public = self._public_inputs
            self.transaction = Transaction(
                proof=self._proof,
                address_sender=public.address_sender,
                address_recipient=public.address_recipient,
                enc_amount_sender=public.enc_amount_sender,
                enc_amount_recipient=public.enc_amount_recipient,
                enc_fee=public.enc_fee,
                rvk=public.rvk,
                rsk=self._rsk,
            )
        return self.transaction

    def submit(self, ledger: LedgerClient) -> str:
        """Sign with rsk and hand the transaction to the ledger."""
        with self._transition(BuilderState.READY, BuilderState.SUBMITTED):
            logger.info("Start submitting a transaction to the ledger...")
            ack = ledger.submit(self.transaction.to_extrinsic(self.rng, self.params))
        return ack

    def build_transfer(
        self,
        amount: int,
        fee: int,
        old_encrypted_balance: Union[Ciphertext, bytes],
        spending_key: SpendingKey,
        recipient_encryption_key: Union[EncryptionKey, bytes],
        proving_key: ProvingKey,
        verifying_key: VerifyingKey,
    ) -> Transaction:
        """Run every step up to READY."""
        self.load_params(proving_key, verifying_key)
        self.validate_balance(amount, fee, old_encrypted_balance, spending_key)
        self.generate_proof(recipient_encryption_key)
        return self.assemble()


def build_transfer(
    amount: int,
    fee: int,
    old_encrypted_balance: Union[Ciphertext, bytes],
    spending_key: SpendingKey,
    recipient_encryption_key: Union[EncryptionKey, bytes],
    proving_key: ProvingKey,
    verifying_key: VerifyingKey,
    rng: Optional[RandomSource] = None,
    prover: Optional[Prover] = None,
    params: ProtocolParams = PARAMS,
) -> Transaction:
    """
    Build a confidential transfer with a fresh builder.

    Args:
        amount: Value to send
        fee: Ledger fee, charged to the sender
        old_encrypted_balance: Sender's current on-chain balance
        spending_key: Sender's root secret
        recipient_encryption_key: Recipient address
        proving_key: Proof parameters
        verifying_key: Proof parameters
        rng: CSPRNG (system source by default)
        prover: Proof backend

    Returns:
        Transaction ready for submission
    """
    builder = TransactionBuilder(prover=prover, rng=rng, params=params)
    return builder.build_transfer(
        amount,
        fee,
        old_encrypted_balance,
        spending_key,
        recipient_encryption_key,
        proving_key,
        verifying_key,
    )
