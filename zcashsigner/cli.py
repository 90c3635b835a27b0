# Copyright (C) 2024-2025 The zcash-signer developers
#
# This file is part of zcash-signer
#
# It is subject to the license terms in the LICENSE file found in the top-level
# directory of this distribution.
#
# No part of zcash-signer, including this file, may be copied, modified,
# propagated, or distributed except according to the terms contained in the
# LICENSE file.

"""
zcash-signer CLI - sign transparent Overwinter/Sapling transactions offline.

The private key is never taken from the command line (it would end up in the
shell history); it is read from the ZCASH_SIGNER_WIF environment variable.
"""

import argparse
import json
import logging
import os
import sys
from typing import List, Optional

from zcashsigner.constants import CONSENSUS_BRANCH_IDS
from zcashsigner.errors import SignerError
from zcashsigner.keys import wif_to_address
from zcashsigner.setup import setup
from zcashsigner.signing import InputDescriptor, calculate_txid, sign_transaction
from zcashsigner.transactions import Transaction

WIF_ENV_VAR = "ZCASH_SIGNER_WIF"

logger = logging.getLogger(__name__)


def _branch_id(value: str) -> int:
    if value.lower() in CONSENSUS_BRANCH_IDS:
        return CONSENSUS_BRANCH_IDS[value.lower()]
    try:
        return int(value, 0)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid branch id: {value}")


def _input_descriptor(value: str) -> InputDescriptor:
    script, sep, amount = value.rpartition(":")
    if not sep or not script:
        raise argparse.ArgumentTypeError(
            f"Expected <scriptPubKey hex>:<amount>, got {value}"
        )
    try:
        return InputDescriptor(script_pub_key=script, amount=int(amount))
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid amount: {amount}")


def _read_wif() -> str:
    wif = os.environ.get(WIF_ENV_VAR)
    if not wif:
        raise SignerError(f"Set {WIF_ENV_VAR} to the private key (WIF)")
    return wif


def txid_command(args) -> int:
    """Print the txid of a raw transaction"""
    print(calculate_txid(args.hex))
    return 0


def decode_command(args) -> int:
    """Decode a raw transaction into JSON"""
    tx = Transaction.from_raw(args.hex)

    result = {
        "txid": tx.get_txid(),
        "version": tx.version & 0x7FFFFFFF,
        "overwintered": tx.overwintered,
        "version_group_id": f"{tx.version_group_id:08x}" if tx.overwintered else None,
        "locktime": tx.locktime,
        "expiry_height": tx.expiry_height if tx.has_expiry_height else None,
        "value_balance": tx.value_balance if tx.is_sapling else None,
        "inputs": [],
        "outputs": [],
    }

    for tx_in in tx.inputs:
        result["inputs"].append(
            {
                "txid": tx_in.txid,
                "vout": tx_in.txout_index,
                "script_sig": tx_in.script_sig.to_hex(),
                "sequence": tx_in.sequence,
            }
        )

    for tx_out in tx.outputs:
        result["outputs"].append(
            {
                "value": tx_out.amount,
                "script_pubkey": tx_out.script_pubkey.to_hex(),
                "type": tx_out.script_pubkey.get_script_type(),
            }
        )

    print(json.dumps(result, indent=2))
    return 0


def sign_command(args) -> int:
    """Sign every input of a transaction"""
    signed = sign_transaction(
        _read_wif(), args.tx, args.inputs, consensus_branch_id=args.branch_id
    )
    print(json.dumps({"signed_tx": signed.signed_tx, "txid": signed.txid}, indent=2))
    return 0


def address_command(args) -> int:
    """Print the address of the configured private key"""
    print(wif_to_address(_read_wif()))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="zcash-signer",
        description="Offline signer for transparent Overwinter/Sapling transactions",
    )
    parser.add_argument(
        "--network", choices=["mainnet", "testnet"], default="mainnet",
        help="Network to use",
    )
    parser.add_argument(
        "--branch-id", type=_branch_id, default=None,
        help="Consensus branch id (number or one of: "
        + ", ".join(CONSENSUS_BRANCH_IDS) + "); default sapling",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    txid_parser = subparsers.add_parser("txid", help="Compute a transaction id")
    txid_parser.add_argument("hex", help="Raw transaction in hexadecimal format")

    decode_parser = subparsers.add_parser("decode", help="Decode a raw transaction")
    decode_parser.add_argument("hex", help="Raw transaction in hexadecimal format")

    sign_parser = subparsers.add_parser(
        "sign", help=f"Sign all inputs with the key in {WIF_ENV_VAR}"
    )
    sign_parser.add_argument("--tx", required=True, help="Unsigned transaction hex")
    sign_parser.add_argument(
        "--input", dest="inputs", type=_input_descriptor, action="append",
        required=True, metavar="SCRIPT:AMOUNT",
        help="scriptPubKey hex and amount of the output spent, once per input",
    )

    subparsers.add_parser(
        "address", help=f"Show the address of the key in {WIF_ENV_VAR}"
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI"""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    setup(args.network, consensus_branch_id=args.branch_id)

    commands = {
        "txid": txid_command,
        "decode": decode_command,
        "sign": sign_command,
        "address": address_command,
    }
    if args.command not in commands:
        parser.print_help()
        return 1

    try:
        return commands[args.command](args)
    except SignerError as e:
        logger.debug(f"{args.command} failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
