"""
Zerochain Core Data Structures

Key hierarchy, balance codec and the transaction record.
"""

from zerochain.core.keys import (
    SpendingKey,
    ProofGenerationKey,
    DecryptionKey,
    EncryptionKey,
    Keys,
    derive_proof_generation_key,
    derive_decryption_key,
    derive_encryption_key,
    derive_ciphertext_randomness,
    randomize_signing_key,
)
from zerochain.core.elgamal import Ciphertext, encrypt, decrypt
from zerochain.core.transaction import Transaction, sign_message, verify_signature

__all__ = [
    # Keys
    "SpendingKey",
    "ProofGenerationKey",
    "DecryptionKey",
    "EncryptionKey",
    "Keys",
    "derive_proof_generation_key",
    "derive_decryption_key",
    "derive_encryption_key",
    "derive_ciphertext_randomness",
    "randomize_signing_key",
    # Codec
    "Ciphertext",
    "encrypt",
    "decrypt",
    # Transaction
    "Transaction",
    "sign_message",
    "verify_signature",
]
