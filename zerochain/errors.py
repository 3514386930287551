"""
Zerochain Error Handling

All error codes and exception classes.
"""

from enum import IntEnum
from typing import Optional, Any


class ErrorCode(IntEnum):
    """Client error codes."""

    # 1xxx - General errors
    INVALID_STATE = 1002

    # 2xxx - Validation errors
    INSUFFICIENT_BALANCE = 2001
    INVALID_AMOUNT = 2002
    ZERO_AMOUNT = 2003

    # 3xxx - Crypto errors
    KEY_DERIVATION_FAILED = 3001
    INVALID_POINT = 3002
    INVALID_SIGNATURE = 3003

    # 4xxx - Codec errors
    CIPHERTEXT_FORMAT = 4001
    DECODE_FAILED = 4002
    DECRYPTION_FAILED = 4003
    TRANSACTION_FORMAT = 4004

    # 5xxx - Proof errors
    PROOF_GENERATION_FAILED = 5001
    PROOF_VERIFICATION_FAILED = 5002
    INVALID_PROOF_PARAMETERS = 5003

    # 6xxx - Transport errors
    LEDGER_UNAVAILABLE = 6001
    MALFORMED_RESPONSE = 6002
    SUBMISSION_REJECTED = 6003


class ZerochainError(Exception):
    """Base exception for all Zerochain client errors."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: Optional[Any] = None
    ):
        self.code = code
        self.message = message
        self.details = details
        super().__init__(f"[{code.value}] {message}")

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict."""
        result = {
            "code": self.code.value,
            "name": self.code.name,
            "message": self.message,
        }
        if self.details is not None:
            result["details"] = self.details
        return result


class ValidationError(ZerochainError):
    """Request rejected before any cryptographic work."""


class CryptoError(ZerochainError):
    """Key material could not be derived or used."""


class CodecError(ZerochainError):
    """Bytes could not be decoded into a protocol object."""


class ProofError(ZerochainError):
    """Proof system rejected the witness or the proof."""


class TransportError(ZerochainError):
    """Ledger unreachable or answered with garbage."""


# ==============================================================================
# General Errors (1xxx)
# ==============================================================================

class InvalidStateError(ZerochainError):
    def __init__(self, state: str, expected: str):
        super().__init__(
            ErrorCode.INVALID_STATE,
            f"Builder is in state {state} (expected: {expected})",
            {"state": state, "expected": expected}
        )


# ==============================================================================
# Validation Errors (2xxx)
# ==============================================================================

class InsufficientBalanceError(ValidationError):
    def __init__(self, balance: int, required: int):
        super().__init__(
            ErrorCode.INSUFFICIENT_BALANCE,
            f"Insufficient balance: {balance} < {required}",
            {"balance": balance, "required": required}
        )


class InvalidAmountError(ValidationError):
    def __init__(self, name: str, value: Any, reason: str):
        super().__init__(
            ErrorCode.INVALID_AMOUNT,
            f"Invalid {name} {value!r}: {reason}",
            {"name": name, "reason": reason}
        )


class ZeroAmountError(ValidationError):
    def __init__(self):
        super().__init__(ErrorCode.ZERO_AMOUNT, "Transfer amount must be positive")


# ==============================================================================
# Crypto Errors (3xxx)
# ==============================================================================

class KeyDerivationError(CryptoError):
    def __init__(self, reason: str):
        super().__init__(
            ErrorCode.KEY_DERIVATION_FAILED,
            f"Key derivation failed: {reason}"
        )


class InvalidPointError(CryptoError):
    def __init__(self, reason: str):
        super().__init__(ErrorCode.INVALID_POINT, f"Invalid curve point: {reason}")


class InvalidSignatureError(CryptoError):
    def __init__(self, reason: str = ""):
        msg = "Invalid transaction signature"
        if reason:
            msg += f": {reason}"
        super().__init__(ErrorCode.INVALID_SIGNATURE, msg)


# ==============================================================================
# Codec Errors (4xxx)
# ==============================================================================

class CiphertextFormatError(CodecError):
    def __init__(self, reason: str):
        super().__init__(
            ErrorCode.CIPHERTEXT_FORMAT,
            f"Malformed ciphertext: {reason}"
        )


class DecodeError(CodecError):
    def __init__(self, reason: str):
        super().__init__(ErrorCode.DECODE_FAILED, f"Cannot decode value: {reason}")


class DecryptionFailureError(CodecError):
    def __init__(self, item: str, reason: str):
        super().__init__(
            ErrorCode.DECRYPTION_FAILED,
            f"Failed to decrypt {item}: {reason}",
            {"item": item}
        )


class TransactionFormatError(CodecError):
    def __init__(self, reason: str):
        super().__init__(
            ErrorCode.TRANSACTION_FORMAT,
            f"Malformed transaction: {reason}"
        )


# ==============================================================================
# Proof Errors (5xxx)
# ==============================================================================

class ProofGenerationError(ProofError):
    def __init__(self, reason: str):
        super().__init__(
            ErrorCode.PROOF_GENERATION_FAILED,
            f"Proof generation failed: {reason}"
        )


class ProofVerificationError(ProofError):
    def __init__(self, reason: str = ""):
        msg = "Proof verification failed"
        if reason:
            msg += f": {reason}"
        super().__init__(ErrorCode.PROOF_VERIFICATION_FAILED, msg)


class InvalidProofParametersError(ProofError):
    def __init__(self, reason: str):
        super().__init__(
            ErrorCode.INVALID_PROOF_PARAMETERS,
            f"Invalid proof parameters: {reason}"
        )


# ==============================================================================
# Transport Errors (6xxx)
# ==============================================================================

class LedgerUnavailableError(TransportError):
    def __init__(self, endpoint: str, error: str):
        super().__init__(
            ErrorCode.LEDGER_UNAVAILABLE,
            f"Ledger unavailable at {endpoint}: {error}",
            {"endpoint": endpoint}
        )


class MalformedResponseError(TransportError):
    def __init__(self, method: str, reason: str):
        super().__init__(
            ErrorCode.MALFORMED_RESPONSE,
            f"Malformed response to {method}: {reason}",
            {"method": method}
        )


class SubmissionRejectedError(TransportError):
    def __init__(self, reason: str):
        super().__init__(
            ErrorCode.SUBMISSION_REJECTED,
            f"Ledger rejected transaction: {reason}"
        )
