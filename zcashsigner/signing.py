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

"""Signing of transparent inputs from a WIF key.

Every step works on a freshly parsed transaction: the hex produced by signing
input k is parsed again before input k + 1 is signed.
"""

import logging
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Union

from zcashsigner.constants import (
    DEFAULT_TX_EXPIRY_HEIGHT,
    DEFAULT_TX_LOCKTIME,
    DEFAULT_TX_SEQUENCE,
    DEFAULT_TX_VERSION,
    SAPLING_VERSION_GROUP_ID,
    SIGHASH_ALL,
)
from zcashsigner.errors import (
    EncodingError,
    InsufficientFunds,
    MalformedTransaction,
    SignerError,
    SigningError,
)
from zcashsigner.keys import address_to_script_pub_key, decode_wif
from zcashsigner.script import Script, p2pkh_script_sig
from zcashsigner.signer import EcdsaSigner, Signer, encode_der
from zcashsigner.transactions import Transaction, TxInput, TxOutput
from zcashsigner.utils import b_to_h, double_sha256, h_to_b, wipe

logger = logging.getLogger(__name__)

__all__ = [
    "InputDescriptor",
    "Utxo",
    "Recipient",
    "SignedTransaction",
    "sign_input",
    "sign_transaction",
    "calculate_txid",
    "build_unsigned_transaction",
    "build_and_sign",
]


@dataclass(frozen=True)
class InputDescriptor:
    """What is being spent by one input: its locking script and value."""
    script_pub_key: str
    amount: int


@dataclass(frozen=True)
class Utxo:
    """An unspent output to be spent by a new transaction."""
    txid: str
    vout: int
    script_pub_key: str
    amount: int


@dataclass(frozen=True)
class Recipient:
    """A payment to a transparent address."""
    address: str
    amount: int


@dataclass(frozen=True)
class SignedTransaction:
    """A fully signed transaction and its id."""
    signed_tx: str
    txid: str
    fee: Optional[int] = None


def _field(item: Mapping[str, Any], *names: str) -> Any:
    for name in names:
        if name in item:
            return item[name]
    raise SigningError(f"Missing field {names[0]} in {dict(item)}")


def _to_input_descriptor(
    item: Union[InputDescriptor, Mapping[str, Any]]
) -> InputDescriptor:
    if isinstance(item, InputDescriptor):
        return item
    return InputDescriptor(
        script_pub_key=_field(item, "scriptPubKey", "script_pub_key"),
        amount=_field(item, "amount"),
    )


def _to_utxo(item: Union[Utxo, Mapping[str, Any]]) -> Utxo:
    if isinstance(item, Utxo):
        return item
    return Utxo(
        txid=_field(item, "txid"),
        vout=_field(item, "vout"),
        script_pub_key=_field(item, "scriptPubKey", "script_pub_key"),
        amount=_field(item, "amount"),
    )


def _to_recipient(item: Union[Recipient, Mapping[str, Any]]) -> Recipient:
    if isinstance(item, Recipient):
        return item
    return Recipient(address=_field(item, "address"), amount=_field(item, "amount"))


def _script_code(script_pub_key: str) -> bytes:
    try:
        return h_to_b(script_pub_key)
    except ValueError as e:
        raise EncodingError(f"Invalid scriptPubKey hex: {script_pub_key}") from e


def _sign_parsed_input(
    tx: Transaction,
    input_index: int,
    secret: bytearray,
    compressed: bool,
    descriptor: InputDescriptor,
    sighash: int,
    consensus_branch_id: Optional[int],
    signer: Signer,
) -> None:
    """Signs one input of tx in place, replacing its unlocking script"""

    digest = tx.get_transaction_digest(
        input_index,
        _script_code(descriptor.script_pub_key),
        descriptor.amount,
        sighash=sighash,
        consensus_branch_id=consensus_branch_id,
    )
    r, s = signer.sign(digest, secret)
    signature = encode_der(r, s) + bytes([sighash])
    public_key = signer.derive_public_key(secret, compressed)

    tx.inputs[input_index].script_sig = p2pkh_script_sig(
        b_to_h(signature), b_to_h(public_key)
    )


def sign_input(
    wif: str,
    tx_hex: str,
    input_index: int,
    prev_script_hex: str,
    amount: int,
    sighash: int = SIGHASH_ALL,
    consensus_branch_id: Optional[int] = None,
    signer: Optional[Signer] = None,
) -> str:
    """Signs a single input and returns the re-serialized transaction hex

    Attributes
    ----------
    wif : str
        the private key (WIF or WIFC; the flag selects the public key form)
    tx_hex : str
        the transaction to sign
    input_index : int
        the input to sign
    prev_script_hex : str
        the scriptPubKey of the output being spent
    amount : int
        the value of the output being spent
    """
    signer = signer or EcdsaSigner()
    tx = Transaction.from_raw(tx_hex)
    descriptor = InputDescriptor(prev_script_hex, amount)

    secret, compressed = decode_wif(wif)
    try:
        _sign_parsed_input(
            tx,
            input_index,
            secret,
            compressed,
            descriptor,
            sighash,
            consensus_branch_id,
            signer,
        )
    finally:
        wipe(secret)

    logger.debug(f"Signed input {input_index} of {len(tx.inputs)}")
    return tx.to_hex()


def sign_transaction(
    wif: str,
    unsigned_tx_hex: str,
    inputs: Iterable[Union[InputDescriptor, Mapping[str, Any]]],
    sighash: int = SIGHASH_ALL,
    consensus_branch_id: Optional[int] = None,
    signer: Optional[Signer] = None,
) -> SignedTransaction:
    """Signs every input, in order, with the same key

    inputs holds one descriptor per transaction input: an InputDescriptor or
    a mapping with ``scriptPubKey`` (hex) and ``amount``.

    Raises
    ------
    SignerError
        (any subclass) when an input cannot be signed; ``partial_tx`` holds
        the transaction with the inputs before it signed
    """
    signer = signer or EcdsaSigner()
    descriptors: List[InputDescriptor] = [_to_input_descriptor(i) for i in inputs]

    unsigned = Transaction.from_raw(unsigned_tx_hex)
    n_inputs = len(unsigned.inputs)
    current_hex = unsigned.to_hex()
    if len(descriptors) != n_inputs:
        raise SigningError(
            f"Got {len(descriptors)} input descriptors for a transaction "
            f"with {n_inputs} inputs"
        )

    secret, compressed = decode_wif(wif)
    try:
        for index, descriptor in enumerate(descriptors):
            try:
                tx = Transaction.from_raw(current_hex)
                _sign_parsed_input(
                    tx,
                    index,
                    secret,
                    compressed,
                    descriptor,
                    sighash,
                    consensus_branch_id,
                    signer,
                )
                current_hex = tx.to_hex()
            except SignerError as e:
                e.partial_tx = current_hex
                logger.error(f"Failed to sign input {index}: {e}")
                raise
            logger.debug(f"Signed input {index} of {n_inputs}")
    finally:
        wipe(secret)

    txid = calculate_txid(current_hex)
    logger.info(f"Signed transaction {txid} with {n_inputs} inputs")
    return SignedTransaction(signed_tx=current_hex, txid=txid)


def calculate_txid(tx_hex: str) -> str:
    """Returns the txid: double SHA-256 of the serialization, byte-reversed"""
    try:
        raw = h_to_b(tx_hex.strip())
    except ValueError as e:
        raise MalformedTransaction(f"Invalid transaction hex: {e}") from e
    return double_sha256(raw)[::-1].hex()


def build_unsigned_transaction(
    utxos: Iterable[Union[Utxo, Mapping[str, Any]]],
    recipients: Iterable[Union[Recipient, Mapping[str, Any]]],
) -> Transaction:
    """Builds an unsigned Sapling transaction spending utxos to recipients

    Locktime and expiry height are zero and every sequence is final.

    Raises
    ------
    UnsupportedAddressType
        if a recipient address is neither P2PKH nor P2SH
    """
    inputs = [
        TxInput(utxo.txid, utxo.vout, Script([]), DEFAULT_TX_SEQUENCE)
        for utxo in map(_to_utxo, utxos)
    ]
    outputs = [
        TxOutput(recipient.amount, address_to_script_pub_key(recipient.address))
        for recipient in map(_to_recipient, recipients)
    ]
    return Transaction(
        inputs,
        outputs,
        locktime=DEFAULT_TX_LOCKTIME,
        version=DEFAULT_TX_VERSION,
        version_group_id=SAPLING_VERSION_GROUP_ID,
        expiry_height=DEFAULT_TX_EXPIRY_HEIGHT,
    )


def build_and_sign(
    wif: str,
    utxos: Iterable[Union[Utxo, Mapping[str, Any]]],
    recipients: Iterable[Union[Recipient, Mapping[str, Any]]],
    fee: Optional[int] = None,
    consensus_branch_id: Optional[int] = None,
    signer: Optional[Signer] = None,
) -> SignedTransaction:
    """Builds a transaction from utxos and recipients and signs every input

    The fee is whatever the inputs leave over; when fee is given the inputs
    must cover outputs plus fee. No change output is added, so the reported
    fee is always inputs minus outputs and can exceed the requested fee.

    Raises
    ------
    InsufficientFunds
        if the outputs (plus fee) exceed the inputs
    """
    utxo_list = [_to_utxo(u) for u in utxos]
    recipient_list = [_to_recipient(r) for r in recipients]

    total_in = sum(u.amount for u in utxo_list)
    total_out = sum(r.amount for r in recipient_list)
    required = total_out + (fee or 0)
    if required > total_in:
        raise InsufficientFunds(required=required, available=total_in)

    tx = build_unsigned_transaction(utxo_list, recipient_list)
    signed = sign_transaction(
        wif,
        tx.to_hex(),
        [InputDescriptor(u.script_pub_key, u.amount) for u in utxo_list],
        consensus_branch_id=consensus_branch_id,
        signer=signer,
    )
    return SignedTransaction(
        signed_tx=signed.signed_tx, txid=signed.txid, fee=total_in - total_out
    )
