"""
Zerochain Transaction Builder Tests
"""

import pytest

import zerochain.protocol.builder as builder_module
from zerochain.core.elgamal import decrypt, encrypt
from zerochain.core.transaction import TRANSACTION_SIZE, verify_signature
from zerochain.crypto.random import random_scalar
from zerochain.errors import (
    DecodeError,
    InsufficientBalanceError,
    InvalidAmountError,
    InvalidProofParametersError,
    InvalidStateError,
    ProofGenerationError,
    ProofVerificationError,
    SubmissionRejectedError,
    ZeroAmountError,
)
from zerochain.protocol.builder import BuilderState, TransactionBuilder, build_transfer


@pytest.fixture
def builder(spy_prover, rng) -> TransactionBuilder:
    return TransactionBuilder(prover=spy_prover, rng=rng)


@pytest.fixture
def loaded(builder, proof_keys) -> TransactionBuilder:
    """Builder with parameters loaded."""
    builder.load_params(*proof_keys)
    return builder


class RejectingProver:
    def generate_proof(self, public_inputs, witness, proving_key):
        raise ProofGenerationError("witness rejected")

    def verify(self, proof, public_inputs, verifying_key):
        return False


class NonVerifyingProver:
    def generate_proof(self, public_inputs, witness, proving_key):
        return b"\x00" * 192

    def verify(self, proof, public_inputs, verifying_key):
        return False


class RejectingLedger:
    def get_storage(self, module, key, param=None):
        return None

    def submit(self, extrinsic):
        raise SubmissionRejectedError("bad signature")


class TestEndToEnd:
    """Alice sends 10 to Bob with fee 1 from a balance of 100."""

    def test_transfer(self, alice, bob, alice_balance, builder, proof_keys, ledger):
        tx = builder.build_transfer(
            10, 1, alice_balance, alice.spending_key, bob.encryption_key,
            *proof_keys,
        )

        assert builder.state is BuilderState.READY
        assert builder.remaining_balance == 89

        assert tx.address_sender == alice.encryption_key
        assert tx.address_recipient == bob.encryption_key
        assert decrypt(tx.enc_amount_sender, alice.decryption_key) == 10
        assert decrypt(tx.enc_amount_recipient, bob.decryption_key) == 10
        assert decrypt(tx.enc_fee, alice.decryption_key) == 1

        tx_hash = builder.submit(ledger)
        assert builder.state is BuilderState.SUBMITTED
        assert tx_hash.startswith("0x")
        assert len(ledger.submitted) == 1

        extrinsic = ledger.submitted[0]
        assert extrinsic[:TRANSACTION_SIZE] == tx.encode()
        assert verify_signature(tx.rvk, extrinsic[:TRANSACTION_SIZE], extrinsic[TRANSACTION_SIZE:])

    def test_proof_verifies(self, alice, bob, alice_balance, builder, spy_prover, proof_keys):
        builder.build_transfer(
            10, 1, alice_balance, alice.spending_key, bob.encryption_key, *proof_keys
        )
        assert len(spy_prover.proof_calls) == 1
        assert spy_prover.verify_calls == 1

    def test_module_level_build_transfer(self, alice, bob, alice_balance, proof_keys, rng):
        tx = build_transfer(
            10, 1, alice_balance, alice.spending_key, bob.encryption_key,
            *proof_keys, rng=rng,
        )
        assert decrypt(tx.enc_amount_recipient, bob.decryption_key) == 10

    def test_recipient_as_bytes(self, alice, bob, alice_balance, loaded):
        loaded.validate_balance(10, 1, alice_balance.to_bytes(), alice.spending_key)
        loaded.generate_proof(bob.encryption_key.data)
        tx = loaded.assemble()
        assert tx.address_recipient == bob.encryption_key

    def test_spend_entire_balance(self, alice, bob, alice_balance, loaded):
        assert loaded.validate_balance(99, 1, alice_balance, alice.spending_key) == 0


class TestConservation:
    """The witness conserves value."""

    @pytest.mark.parametrize("amount,fee", [(10, 1), (1, 0), (50, 50), (99, 1)])
    def test_witness_balances(self, alice, bob, alice_balance, builder, proof_keys, spy_prover, amount, fee):
        builder.build_transfer(
            amount, fee, alice_balance, alice.spending_key, bob.encryption_key,
            *proof_keys,
        )
        _, witness = spy_prover.proof_calls[0]
        assert witness.amount == amount
        assert witness.fee == fee
        assert witness.remaining_balance == 100 - amount - fee
        assert witness.amount + witness.fee + witness.remaining_balance == 100

    def test_amounts_share_randomness(self, alice, bob, alice_balance, builder, proof_keys):
        tx = builder.build_transfer(
            10, 1, alice_balance, alice.spending_key, bob.encryption_key,
            *proof_keys,
        )
        assert tx.enc_amount_sender.commitment == tx.enc_amount_recipient.commitment
        assert tx.enc_fee.commitment != tx.enc_amount_sender.commitment


class TestRejection:
    """Insufficient balance stops before any cryptographic work."""

    def test_insufficient_balance(self, alice, bob, alice_balance, loaded, spy_prover, rng, monkeypatch):
        encrypt_calls = []

        def spy_encrypt(*args, **kwargs):
            encrypt_calls.append(args)
            return encrypt(*args, **kwargs)

        monkeypatch.setattr(builder_module, "encrypt", spy_encrypt)
        draws_before = rng.draws

        with pytest.raises(InsufficientBalanceError) as exc_info:
            loaded.validate_balance(100, 1, alice_balance, alice.spending_key)

        assert exc_info.value.details == {"balance": 100, "required": 101}
        assert loaded.state is BuilderState.FAILED
        assert encrypt_calls == []
        assert spy_prover.proof_calls == []
        assert rng.draws == draws_before

    def test_later_steps_refused_after_failure(self, alice, bob, alice_balance, loaded):
        with pytest.raises(InsufficientBalanceError):
            loaded.validate_balance(200, 0, alice_balance, alice.spending_key)
        with pytest.raises(InvalidStateError):
            loaded.generate_proof(bob.encryption_key)
        assert loaded.state is BuilderState.FAILED

    def test_zero_amount(self, alice, alice_balance, loaded):
        with pytest.raises(ZeroAmountError):
            loaded.validate_balance(0, 1, alice_balance, alice.spending_key)
        assert loaded.state is BuilderState.FAILED

    @pytest.mark.parametrize("amount,fee", [(-1, 1), (10, -1), (True, 1), (10, 1.0), (2**32, 0)])
    def test_invalid_values(self, alice, alice_balance, loaded, amount, fee):
        with pytest.raises(InvalidAmountError):
            loaded.validate_balance(amount, fee, alice_balance, alice.spending_key)

    def test_balance_under_other_key(self, alice, bob, loaded, rng):
        bobs_balance = encrypt(100, random_scalar(rng), bob.encryption_key)
        with pytest.raises(DecodeError):
            loaded.validate_balance(10, 1, bobs_balance, alice.spending_key)
        assert loaded.state is BuilderState.FAILED


class TestNonReuse:
    """Each build draws a fresh alpha."""

    def test_independent_builds(self, alice, bob, alice_balance, proof_keys, rng):
        txs = [
            build_transfer(
                10, 1, alice_balance, alice.spending_key, bob.encryption_key,
                *proof_keys, rng=rng,
            )
            for _ in range(2)
        ]
        assert txs[0].rvk != txs[1].rvk
        assert txs[0].enc_amount_sender != txs[1].enc_amount_sender
        assert txs[0].enc_amount_recipient != txs[1].enc_amount_recipient
        assert txs[0].enc_fee != txs[1].enc_fee
        assert txs[0].proof != txs[1].proof

    def test_builder_is_single_use(self, alice, bob, alice_balance, builder, proof_keys):
        builder.build_transfer(
            10, 1, alice_balance, alice.spending_key, bob.encryption_key, *proof_keys
        )
        with pytest.raises(InvalidStateError):
            builder.load_params(*proof_keys)
        with pytest.raises(InvalidStateError):
            builder.build_transfer(
                10, 1, alice_balance, alice.spending_key, bob.encryption_key, *proof_keys
            )
        assert builder.state is BuilderState.READY


class TestStateMachine:
    """Tests for state transitions."""

    def test_initial_state(self, spy_prover):
        assert TransactionBuilder(prover=spy_prover).state is BuilderState.INITIALIZED

    def test_step_order(self, alice, bob, alice_balance, loaded):
        assert loaded.state is BuilderState.PARAMS_LOADED
        loaded.validate_balance(10, 1, alice_balance, alice.spending_key)
        assert loaded.state is BuilderState.BALANCE_VALIDATED
        proof = loaded.generate_proof(bob.encryption_key)
        assert len(proof) == 192
        assert loaded.state is BuilderState.PROOF_GENERATED
        loaded.assemble()
        assert loaded.state is BuilderState.READY

    def test_out_of_order_step(self, bob, spy_prover, ledger):
        b = TransactionBuilder(prover=spy_prover)
        with pytest.raises(InvalidStateError):
            b.generate_proof(bob.encryption_key)
        with pytest.raises(InvalidStateError):
            b.submit(ledger)
        assert b.state is BuilderState.INITIALIZED

    def test_bad_params(self, spy_prover):
        b = TransactionBuilder(prover=spy_prover)
        with pytest.raises(InvalidProofParametersError):
            b.load_params(b"pk", b"vk")
        assert b.state is BuilderState.FAILED

    def test_prover_rejection(self, alice, bob, alice_balance, proof_keys, rng):
        b = TransactionBuilder(prover=RejectingProver(), rng=rng)
        with pytest.raises(ProofGenerationError):
            b.build_transfer(
                10, 1, alice_balance, alice.spending_key, bob.encryption_key, *proof_keys
            )
        assert b.state is BuilderState.FAILED
        assert b.transaction is None

    def test_unverifiable_proof(self, alice, bob, alice_balance, proof_keys, rng):
        b = TransactionBuilder(prover=NonVerifyingProver(), rng=rng)
        with pytest.raises(ProofVerificationError):
            b.build_transfer(
                10, 1, alice_balance, alice.spending_key, bob.encryption_key, *proof_keys
            )
        assert b.state is BuilderState.FAILED

    def test_submission_failure(self, alice, bob, alice_balance, builder, proof_keys):
        builder.build_transfer(
            10, 1, alice_balance, alice.spending_key, bob.encryption_key,
            *proof_keys,
        )
        with pytest.raises(SubmissionRejectedError):
            builder.submit(RejectingLedger())
        assert builder.state is BuilderState.FAILED
        assert builder.transaction is None
        assert builder.remaining_balance is None

    def test_failure_clears_balance(self, alice, bob, alice_balance, proof_keys, rng):
        b = TransactionBuilder(prover=NonVerifyingProver(), rng=rng)
        b.load_params(*proof_keys)
        assert b.validate_balance(10, 1, alice_balance, alice.spending_key) == 89
        assert b.remaining_balance == 89

        with pytest.raises(ProofVerificationError):
            b.generate_proof(bob.encryption_key)
        assert b.state is BuilderState.FAILED
        assert b.remaining_balance is None
        assert b._old_balance is None
