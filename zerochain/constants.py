"""
Zerochain Protocol Constants

All protocol constants defined here for single source of truth.
`PARAMS` bundles them into one immutable object built at import time.
"""

from dataclasses import dataclass
from typing import Final

# ==============================================================================
# ENCODING SIZES
# ==============================================================================

V_SIZE: Final[int] = 8                          # Masked value slot
R_SIZE: Final[int] = 32                         # Randomness commitment (point)
PLAINTEXT_SIZE: Final[int] = V_SIZE + R_SIZE
CIPHERTEXT_SIZE: Final[int] = V_SIZE + R_SIZE

POINT_SIZE: Final[int] = 32                     # Compressed Ed25519 point
SCALAR_SIZE: Final[int] = 32                    # Little-endian scalar mod L
SEED_SIZE: Final[int] = 32
PROOF_SIZE: Final[int] = 192                    # Groth16 proof (A, B, C) layout
SIGNATURE_SIZE: Final[int] = 64                 # R || s

# Values are u32 on the ledger
VALUE_BITS: Final[int] = 32
MAX_VALUE: Final[int] = (1 << VALUE_BITS) - 1

# Ed25519 prime-order subgroup order (L)
CURVE_ORDER: Final[int] = 2**252 + 27742317777372353535851937790883648493

# ==============================================================================
# BLAKE2 PERSONALIZATIONS
# ==============================================================================

KDF_PERSONALIZATION: Final[bytes] = b"zech_KDF"
KEY_DIVERSIFICATION_PERSONALIZATION: Final[bytes] = b"zech_div"
CRH_IVK_PERSONALIZATION: Final[bytes] = b"zech_ivk"
MIMC_PERSONALIZATION: Final[bytes] = b"zechMIMC"
SIGNATURE_PERSONALIZATION: Final[bytes] = b"zech_sig"

# ==============================================================================
# PROOF HASH PRIMITIVE (consumed by the proof backend only)
# ==============================================================================

DEFAULT_SEED: Final[bytes] = b"mimc"
DEFAULT_ROUND: Final[int] = 97
DEFAULT_EXPONENT: Final[int] = 7

# ==============================================================================
# LEDGER STORAGE
# ==============================================================================

CONF_TRANSFER_MODULE: Final[str] = "ConfTransfer"
ENCRYPTED_BALANCE_KEY: Final[str] = "EncryptedBalance"
PENDING_TRANSFER_KEY: Final[str] = "PendingTransfer"
TRANSACTION_BASE_FEE_KEY: Final[str] = "TransactionBaseFee"

DEFAULT_NODE_URL: Final[str] = "http://127.0.0.1:9933"
DEFAULT_RPC_TIMEOUT_SEC: Final[float] = 30.0

# Byte order
LITTLE_ENDIAN: Final[str] = "little"

# ==============================================================================
# DEVELOPMENT ACCOUNTS
# ==============================================================================

# "Alice" / "Bob" padded with spaces to 32 bytes
ALICE_SEED: Final[bytes] = b"Alice".ljust(SEED_SIZE, b" ")
BOB_SEED: Final[bytes] = b"Bob".ljust(SEED_SIZE, b" ")

DEFAULT_AMOUNT: Final[int] = 10
DEFAULT_BALANCE: Final[int] = 100
DEFAULT_FEE: Final[int] = 1


@dataclass(frozen=True)
class HashParams:
    """Configuration of the proof-internal hash primitive."""
    seed: bytes = DEFAULT_SEED
    rounds: int = DEFAULT_ROUND
    exponent: int = DEFAULT_EXPONENT


@dataclass(frozen=True)
class ProtocolParams:
    """
    Process-wide protocol configuration.

    Built once as `PARAMS` and passed down read-only. The
    personalizations must stay pairwise distinct.
    """
    v_size: int = V_SIZE
    r_size: int = R_SIZE
    value_bits: int = VALUE_BITS
    kdf_personalization: bytes = KDF_PERSONALIZATION
    key_diversification_personalization: bytes = KEY_DIVERSIFICATION_PERSONALIZATION
    crh_ivk_personalization: bytes = CRH_IVK_PERSONALIZATION
    mimc_personalization: bytes = MIMC_PERSONALIZATION
    signature_personalization: bytes = SIGNATURE_PERSONALIZATION
    hash: HashParams = HashParams()

    def __post_init__(self):
        tags = self.personalizations
        if len(set(tags)) != len(tags):
            raise ValueError("Personalizations must be distinct")
        for tag in tags:
            if len(tag) != 8:
                raise ValueError(f"Personalization must be 8 bytes, got {len(tag)}")
        if not 0 < self.value_bits <= 8 * self.v_size:
            raise ValueError(f"value_bits must fit in {self.v_size} bytes")

    @property
    def personalizations(self) -> tuple:
        return (
            self.kdf_personalization,
            self.key_diversification_personalization,
            self.crh_ivk_personalization,
            self.mimc_personalization,
            self.signature_personalization,
        )

    @property
    def ciphertext_size(self) -> int:
        return self.v_size + self.r_size

    @property
    def max_value(self) -> int:
        return (1 << self.value_bits) - 1


PARAMS: Final[ProtocolParams] = ProtocolParams()
