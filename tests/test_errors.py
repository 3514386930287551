"""
Zerochain Error Tests
"""

from zerochain.errors import (
    CodecError,
    DecodeError,
    DecryptionFailureError,
    ErrorCode,
    InsufficientBalanceError,
    LedgerUnavailableError,
    ProofError,
    ProofVerificationError,
    TransportError,
    ValidationError,
    ZerochainError,
)


class TestErrors:
    """Tests for the error hierarchy."""

    def test_families(self):
        assert issubclass(InsufficientBalanceError, ValidationError)
        assert issubclass(DecodeError, CodecError)
        assert issubclass(DecryptionFailureError, CodecError)
        assert issubclass(ProofVerificationError, ProofError)
        assert issubclass(LedgerUnavailableError, TransportError)
        assert issubclass(TransportError, ZerochainError)

    def test_to_dict(self):
        error = InsufficientBalanceError(5, 11)
        assert error.to_dict() == {
            "code": ErrorCode.INSUFFICIENT_BALANCE.value,
            "name": "INSUFFICIENT_BALANCE",
            "message": "Insufficient balance: 5 < 11",
            "details": {"balance": 5, "required": 11},
        }

    def test_to_dict_without_details(self):
        assert "details" not in DecodeError("bad").to_dict()

    def test_str_carries_code(self):
        assert str(ProofVerificationError()).startswith(f"[{ErrorCode.PROOF_VERIFICATION_FAILED.value}]")
