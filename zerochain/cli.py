"""
zeroc - Zerochain confidential transfer client

Usage:
    zeroc snark setup
    zeroc wallet wallet-test
    zeroc wallet inspect --seed <hex>
    zeroc tx send --recipient-address <hex> --amount 10
    zeroc tx balance [--decryption-key <hex>]
    zeroc debug print-tx
"""

from __future__ import annotations
import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from zerochain import __version__
from zerochain.config import ClientConfig, setup_logging
from zerochain.constants import (
    ALICE_SEED,
    BOB_SEED,
    DEFAULT_AMOUNT,
    DEFAULT_BALANCE,
    DEFAULT_FEE,
)
from zerochain.core.elgamal import Ciphertext, encrypt
from zerochain.core.keys import DecryptionKey, EncryptionKey, Keys, SpendingKey
from zerochain.crypto.random import SystemRandom, random_scalar
from zerochain.errors import InsufficientBalanceError, ZerochainError
from zerochain.ledger.client import HttpLedgerClient, fetch_transaction_base_fee
from zerochain.proofs.prover import ProvingKey, VerifyingKey
from zerochain.proofs.transcript import setup
from zerochain.protocol.balance import get_balance
from zerochain.protocol.builder import TransactionBuilder

logger = logging.getLogger(__name__)


def _hex_bytes(value: str) -> bytes:
    try:
        return bytes.fromhex(value.removeprefix("0x"))
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a hex string: {value}")


def _print_keys(label: str, keys: Keys) -> None:
    print(f"{label}")
    print(f"  Seed:           0x{keys.spending_key.data.hex()}")
    print(f"  Decryption Key: 0x{keys.decryption_key.data.hex()}")
    print(f"  Encryption Key: 0x{keys.encryption_key.hex()}")


def _key_paths(args, config: ClientConfig):
    pk_path = Path(args.proving_key_path) if args.proving_key_path else config.proving_key_path
    vk_path = Path(args.verifying_key_path) if args.verifying_key_path else config.verifying_key_path
    return pk_path, vk_path


def _ledger(args, config: ClientConfig) -> HttpLedgerClient:
    return HttpLedgerClient(args.url or config.node.url, timeout=config.node.timeout)


# ==============================================================================
# snark
# ==============================================================================

def cmd_snark_setup(args, config: ClientConfig) -> None:
    print("Performing setup...")
    pk_path, vk_path = _key_paths(args, config)
    for path in (pk_path, vk_path):
        path.parent.mkdir(parents=True, exist_ok=True)

    proving_key, verifying_key = setup()
    proving_key.to_file(pk_path)
    verifying_key.to_file(vk_path)
    print(f"Success! Output >> '{pk_path}' and '{vk_path}'")


# ==============================================================================
# wallet
# ==============================================================================

def cmd_wallet_test(args, config: ClientConfig) -> None:
    print("Initialize key components...")
    print("Accounts of alice and bob are fixed")
    print()

    charlie_seed = SystemRandom().random_bytes(32)
    _print_keys("Alice", Keys.from_seed(ALICE_SEED))
    _print_keys("Bob", Keys.from_seed(BOB_SEED))
    _print_keys("Charlie", Keys.from_seed(charlie_seed))


def cmd_wallet_inspect(args, config: ClientConfig) -> None:
    keys = Keys.from_spending_key(SpendingKey(args.seed))
    _print_keys("Account", keys)
    print(f"  ak:             0x{keys.proof_generation_key.ak.hex()}")


# ==============================================================================
# tx
# ==============================================================================

def cmd_tx_send(args, config: ClientConfig) -> None:
    print("Preparing parameters...")
    pk_path, vk_path = _key_paths(args, config)
    proving_key = ProvingKey.from_file(pk_path)
    verifying_key = VerifyingKey.from_file(vk_path)

    keys = Keys.from_spending_key(SpendingKey(args.sender_seed))
    recipient = EncryptionKey(args.recipient_address)

    with _ledger(args, config) as ledger:
        fee = fetch_transaction_base_fee(ledger)
        query = get_balance(keys.decryption_key, ledger)

        old_balance = query.balance_ciphertext
        if old_balance is None:
            raise InsufficientBalanceError(0, args.amount + fee)

        builder = TransactionBuilder()
        builder.build_transfer(
            args.amount,
            fee,
            old_balance,
            keys.spending_key,
            recipient,
            proving_key,
            verifying_key,
        )

        print("Start submitting a transaction to Zerochain...")
        tx_hash = builder.submit(ledger)

    print(f"Transaction hash: {tx_hash}")
    print(f"Remaining balance is {builder.remaining_balance}")


def cmd_tx_balance(args, config: ClientConfig) -> None:
    print("Getting encrypted balance from zerochain")
    if args.decryption_key is not None:
        decryption_key = DecryptionKey(args.decryption_key)
    else:
        decryption_key = Keys.from_seed(ALICE_SEED).decryption_key

    with _ledger(args, config) as ledger:
        query = get_balance(decryption_key, ledger)

    print(f"Decrypted balance: {query.decrypted_balance}")
    print(f"Decrypted pending transfer: {query.decrypted_pending_transfer}")
    print(f"Encrypted balance: {query.encrypted_balance_str}")
    print(f"Encrypted pending transfer: {query.pending_transfer_str}")


# ==============================================================================
# debug
# ==============================================================================

def cmd_debug_print_tx(args, config: ClientConfig) -> None:
    print("Generate transaction...")
    rng = SystemRandom()

    sender = Keys.from_spending_key(SpendingKey(args.sender_privatekey))
    recipient = Keys.from_spending_key(SpendingKey(args.recipient_privatekey))

    print(f"Private Key(Sender): 0x{sender.spending_key.data.hex()}")
    print(f"Address(Sender): 0x{sender.encryption_key.hex()}")
    print()
    print(f"Private Key(Recipient): 0x{recipient.spending_key.data.hex()}")
    print(f"Address(Recipient): 0x{recipient.encryption_key.hex()}")
    print()

    pk_path, vk_path = _key_paths(args, config)
    proving_key = ProvingKey.from_file(pk_path)
    verifying_key = VerifyingKey.from_file(vk_path)

    if args.encrypted_balance is not None:
        old_balance = Ciphertext.from_bytes(args.encrypted_balance)
    else:
        old_balance = encrypt(args.balance, random_scalar(rng), sender.encryption_key)

    builder = TransactionBuilder(rng=rng)
    tx = builder.build_transfer(
        args.amount,
        args.fee,
        old_balance,
        sender.spending_key,
        recipient.encryption_key,
        proving_key,
        verifying_key,
    )

    print("Transaction >>")
    for name, value in tx.to_dict().items():
        print(f"{name}: 0x{value}")
    print(f"rsk: 0x{tx.rsk.hex()}")
    print(f"Remaining balance: {builder.remaining_balance}")


# ==============================================================================
# Entry point
# ==============================================================================

def _add_key_path_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--proving-key-path", help="Path of the proving key file")
    parser.add_argument("--verifying-key-path", "--verification-key-path",
                        dest="verifying_key_path", help="Path of the verification key file")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="zeroc",
        description="Zerochain confidential transfer client",
    )
    parser.add_argument("--version", action="version", version=f"zeroc {__version__}")
    parser.add_argument("--config", help="Path of a JSON client configuration")
    parser.add_argument("--log-level", help="Override the configured log level")

    subparsers = parser.add_subparsers(dest="command", required=True)

    # snark
    snark = subparsers.add_parser("snark", help="Proof parameter operations")
    snark_sub = snark.add_subparsers(dest="subcommand", required=True)
    snark_setup = snark_sub.add_parser("setup", help="Generate proving and verification keys")
    _add_key_path_args(snark_setup)
    snark_setup.set_defaults(handler=cmd_snark_setup)

    # wallet
    wallet = subparsers.add_parser("wallet", help="Key operations")
    wallet_sub = wallet.add_subparsers(dest="subcommand", required=True)
    wallet_sub.add_parser(
        "wallet-test", help="Print keys of the fixed test accounts"
    ).set_defaults(handler=cmd_wallet_test)
    inspect = wallet_sub.add_parser("inspect", help="Derive the keys of a seed")
    inspect.add_argument("--seed", type=_hex_bytes, required=True, help="32-byte seed (hex)")
    inspect.set_defaults(handler=cmd_wallet_inspect)

    # tx
    tx = subparsers.add_parser("tx", help="Transaction operations")
    tx_sub = tx.add_subparsers(dest="subcommand", required=True)

    send = tx_sub.add_parser("send", help="Submit a confidential transfer")
    send.add_argument("--amount", type=int, default=DEFAULT_AMOUNT,
                      help=f"The coin amount for the confidential transfer. (default: {DEFAULT_AMOUNT})")
    send.add_argument("--recipient-address", type=_hex_bytes, required=True,
                      help="Recipient's encryption key (hex)")
    send.add_argument("--sender-seed", type=_hex_bytes, default=ALICE_SEED,
                      help="Sender's seed (hex, default: Alice)")
    send.add_argument("--url", help="Endpoint to connect zerochain nodes")
    _add_key_path_args(send)
    send.set_defaults(handler=cmd_tx_send)

    balance = tx_sub.add_parser("balance", help="Query and decrypt a balance")
    balance.add_argument("--decryption-key", type=_hex_bytes,
                         help="Your decryption key (hex, default: Alice)")
    balance.add_argument("--url", help="Endpoint to connect zerochain nodes")
    balance.set_defaults(handler=cmd_tx_balance)

    # debug
    debug = subparsers.add_parser("debug", help="Offline debugging helpers")
    debug_sub = debug.add_subparsers(dest="subcommand", required=True)
    print_tx = debug_sub.add_parser("print-tx", help="Build and print a transaction offline")
    _add_key_path_args(print_tx)
    print_tx.add_argument("--amount", type=int, default=DEFAULT_AMOUNT)
    print_tx.add_argument("--balance", type=int, default=DEFAULT_BALANCE)
    print_tx.add_argument("--fee", type=int, default=DEFAULT_FEE)
    print_tx.add_argument("--sender-privatekey", type=_hex_bytes, default=ALICE_SEED,
                          help="Sender's private key. (default: Alice)")
    print_tx.add_argument("--recipient-privatekey", type=_hex_bytes, default=BOB_SEED,
                          help="Recipient's private key. (default: Bob)")
    print_tx.add_argument("--encrypted-balance", type=_hex_bytes,
                          help="Sender's on-chain encrypted balance (hex); "
                               "encrypts --balance when omitted")
    print_tx.set_defaults(handler=cmd_debug_print_tx)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = ClientConfig.load(args.config) if args.config else ClientConfig()
    except (OSError, ValueError, TypeError) as e:
        print(f"Error: couldn't load config {args.config}: {e}", file=sys.stderr)
        return 1

    if args.log_level:
        config.log.level = args.log_level

    errors = config.validate()
    if errors:
        for error in errors:
            print(f"Config error: {error}", file=sys.stderr)
        return 1

    setup_logging(config.log)

    try:
        args.handler(args, config)
    except ZerochainError as e:
        logger.debug(f"Command failed: {e.to_dict()}")
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
