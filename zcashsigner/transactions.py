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

import struct
from typing import Optional, Union

from zcashsigner.constants import (
    DEFAULT_TX_EXPIRY_HEIGHT,
    DEFAULT_TX_LOCKTIME,
    DEFAULT_TX_SEQUENCE,
    DEFAULT_TX_VERSION,
    OUTPUTS_HASH_PERSONALIZATION,
    OVERWINTER_FLAG,
    OVERWINTER_TX_VERSION,
    PREVOUTS_HASH_PERSONALIZATION,
    SAPLING_VERSION_GROUP_ID,
    SEQUENCE_HASH_PERSONALIZATION,
    SIGHASH_ALL,
    SIGHASH_PERSONALIZATION_PREFIX,
)
from zcashsigner.errors import EncodingError, MalformedTransaction, SighashError
from zcashsigner.script import Script
from zcashsigner.setup import get_consensus_branch_id
from zcashsigner.utils import (
    b_to_h,
    double_sha256,
    encode_varint,
    h_to_b,
    pack_struct,
    personalized_hash,
    prepend_compact_size,
    read_bytes,
    read_struct,
    read_varint,
)


class TxInput:
    """Represents a transparent transaction input.

    A transaction input requires a transaction id of a UTXO and the index of
    that UTXO.

    Attributes
    ----------
    txid : str
        the transaction id as a hex string (byte-reversed, as displayed by
        tools)
    txout_index : int
        the index of the UTXO that we want to spend
    script_sig : Script
        the script that satisfies the locking conditions (aka unlocking script)
    sequence : int
        the input sequence

    Methods
    -------
    to_bytes()
        serializes TxInput to bytes
    outpoint_bytes()
        serializes the previous output reference (txid + index)
    copy()
        creates a copy of the object (classmethod)
    from_raw()
        instantiates object from raw bytes at a cursor (staticmethod)
    """

    def __init__(
        self,
        txid: str,
        txout_index: int,
        script_sig: Optional[Script] = None,
        sequence: int = DEFAULT_TX_SEQUENCE,
    ) -> None:
        """See TxInput description"""

        # expected in the format used for displaying hashes
        self.txid = txid
        self.txout_index = txout_index
        self.script_sig = script_sig if script_sig is not None else Script([])
        self.sequence = sequence

    def outpoint_bytes(self) -> bytes:
        """Returns the wire txid (reversed display bytes) and the output index"""

        # hashes are displayed byte-reversed, so the display string needs to
        # be reversed back for the wire
        try:
            txid_bytes = h_to_b(self.txid)[::-1]
        except ValueError as e:
            raise EncodingError(f"Invalid txid hex: {self.txid}") from e
        if len(txid_bytes) != 32:
            raise EncodingError(f"Txid must be 32 bytes, got {len(txid_bytes)}")
        return txid_bytes + pack_struct("<I", self.txout_index, "txout_index")

    def sequence_bytes(self) -> bytes:
        return pack_struct("<I", self.sequence, "sequence")

    def to_bytes(self) -> bytes:
        """Serializes to bytes"""

        return (
            self.outpoint_bytes()
            + prepend_compact_size(self.script_sig.to_bytes())
            + self.sequence_bytes()
        )

    def __str__(self) -> str:
        return str(
            {
                "txid": self.txid,
                "txout_index": self.txout_index,
                "script_sig": self.script_sig,
                "sequence": self.sequence,
            }
        )

    def __repr__(self) -> str:
        return self.__str__()

    @staticmethod
    def from_raw(txraw: bytes, cursor: int = 0):
        """
        Imports a TxInput from a Transaction's raw bytes

        Returns the TxInput and the cursor just past it.

        Attributes
        ----------
        txraw : bytes
            The raw bytes of the Transaction
        cursor : int
            The cursor of which the algorithm will start to read the data
        """
        txid, cursor = read_bytes(txraw, cursor, 32)
        vout, cursor = read_struct("<I", txraw, cursor)

        script_size, cursor = read_varint(txraw, cursor)
        unlocking_script, cursor = read_bytes(txraw, cursor, script_size)

        sequence, cursor = read_struct("<I", txraw, cursor)

        tx_input = TxInput(
            txid=txid[::-1].hex(),
            txout_index=vout,
            script_sig=Script.from_raw(unlocking_script),
            sequence=sequence,
        )
        return tx_input, cursor

    @classmethod
    def copy(cls, txin: "TxInput") -> "TxInput":
        """Deep copy of TxInput"""

        return cls(
            txin.txid, txin.txout_index, Script.copy(txin.script_sig), txin.sequence
        )


class TxOutput:
    """Represents a transparent transaction output

    Attributes
    ----------
    amount : int
        the value we want to send to this output in the smallest unit
    script_pubkey : Script
        the script that will lock this amount

    Methods
    -------
    to_bytes()
        serializes TxOutput to bytes
    copy()
        creates a copy of the object (classmethod)
    from_raw()
        instantiates object from raw bytes at a cursor (staticmethod)
    """

    def __init__(self, amount: int, script_pubkey: Script) -> None:
        """See TxOutput description"""

        if not isinstance(amount, int) or isinstance(amount, bool):
            raise TypeError("Amount needs to be in the smallest unit as an integer")

        self.amount = amount
        self.script_pubkey = script_pubkey

    def to_bytes(self) -> bytes:
        """Serializes to bytes"""

        amount_bytes = pack_struct("<q", self.amount, "amount")
        return amount_bytes + prepend_compact_size(self.script_pubkey.to_bytes())

    @staticmethod
    def from_raw(txraw: bytes, cursor: int = 0):
        """
        Imports a TxOutput from a Transaction's raw bytes

        Returns the TxOutput and the cursor just past it.
        """
        amount, cursor = read_struct("<q", txraw, cursor)

        script_size, cursor = read_varint(txraw, cursor)
        lock_script, cursor = read_bytes(txraw, cursor, script_size)

        return TxOutput(amount=amount, script_pubkey=Script.from_raw(lock_script)), cursor

    def __str__(self) -> str:
        return str({"amount": self.amount, "script_pubkey": self.script_pubkey})

    def __repr__(self) -> str:
        return self.__str__()

    @classmethod
    def copy(cls, txout: "TxOutput") -> "TxOutput":
        """Deep copy of TxOutput"""

        return cls(txout.amount, Script.copy(txout.script_pubkey))


class Transaction:
    """Represents a transparent Overwinter/Sapling (or legacy) transaction

    Which header and trailer fields exist on the wire is decided from version
    and version_group_id every time the transaction is serialized.

    Attributes
    ----------
    inputs : list (TxInput)
        A list of all the transaction inputs
    outputs : list (TxOutput)
        A list of all the transaction outputs
    locktime : int
        The transaction's locktime parameter
    version : int
        The transaction version as the signed 32-bit header; the high bit is
        the overwinter flag
    version_group_id : int
        Only serialized for overwintered transactions
    expiry_height : int
        Only serialized when version >= 3 or overwintered
    value_balance : int
        Only serialized for Sapling transactions, followed by empty shielded
        spend, shielded output and joinsplit counts

    Methods
    -------
    to_bytes()
        Serializes Transaction to bytes
    to_hex()
        converts result of to_bytes to hexadecimal string
    serialize()
        converts result of to_bytes to hexadecimal string
    from_raw()
        Instantiates a Transaction from serialized raw data (staticmethod)
    get_txid()
        Calculates txid and returns it
    copy()
        creates a copy of the object (classmethod)
    get_transaction_digest(txin_index, script, amount, sighash,
            consensus_branch_id)
        returns the transaction input's digest that is to be signed
    """

    def __init__(
        self,
        inputs: Optional[list[TxInput]] = None,
        outputs: Optional[list[TxOutput]] = None,
        locktime: int = DEFAULT_TX_LOCKTIME,
        version: int = DEFAULT_TX_VERSION,
        version_group_id: int = SAPLING_VERSION_GROUP_ID,
        expiry_height: int = DEFAULT_TX_EXPIRY_HEIGHT,
        value_balance: int = 0,
    ) -> None:
        """See Transaction description"""

        # make sure default argument for inputs and outputs is an empty list
        if inputs is None:
            inputs = []
        if outputs is None:
            outputs = []

        self.inputs = inputs
        self.outputs = outputs
        self.locktime = locktime

        # accept the header as an unsigned value too, e.g. 0x80000004
        if OVERWINTER_FLAG <= version <= 0xFFFFFFFF:
            version -= 1 << 32
        self.version = version
        self.version_group_id = version_group_id
        self.expiry_height = expiry_height
        self.value_balance = value_balance

    @property
    def overwintered(self) -> bool:
        return bool(self.version & OVERWINTER_FLAG)

    @property
    def is_sapling(self) -> bool:
        return self.overwintered and self.version_group_id == SAPLING_VERSION_GROUP_ID

    @property
    def has_expiry_height(self) -> bool:
        return self.version >= OVERWINTER_TX_VERSION or self.overwintered

    def _header_bytes(self) -> bytes:
        return pack_struct("<i", self.version, "version")

    def _version_group_id_bytes(self) -> bytes:
        return pack_struct("<I", self.version_group_id, "version_group_id")

    def to_bytes(self) -> bytes:
        """Serializes transaction to bytes"""

        data = self._header_bytes()
        if self.overwintered:
            data += self._version_group_id_bytes()

        data += encode_varint(len(self.inputs))
        for txin in self.inputs:
            data += txin.to_bytes()

        data += encode_varint(len(self.outputs))
        for txout in self.outputs:
            data += txout.to_bytes()

        data += pack_struct("<I", self.locktime, "locktime")

        if self.has_expiry_height:
            data += pack_struct("<I", self.expiry_height, "expiry_height")

        if self.is_sapling:
            data += pack_struct("<q", self.value_balance, "value_balance")
            # shielded spends, shielded outputs, joinsplits
            data += encode_varint(0) * 3

        return data

    def to_hex(self) -> str:
        """Serializes transaction to hex string"""

        return b_to_h(self.to_bytes())

    def serialize(self) -> str:
        """Alias for to_hex() - serializes transaction to hex string"""

        return self.to_hex()

    def get_txid(self) -> str:
        """Calculates the transaction id (txid) and returns it"""

        # double hashing and converting to display (reversed) order
        return double_sha256(self.to_bytes())[::-1].hex()

    @staticmethod
    def from_raw(rawtx: Union[str, bytes]) -> "Transaction":
        """
        Imports a Transaction from hexadecimal or raw bytes.

        Raises
        ------
        MalformedTransaction
            if the data is not hex, ends before the last field, carries
            shielded data or has bytes after the last field
        """
        if isinstance(rawtx, str):
            try:
                rawtx = h_to_b(rawtx.strip())
            except ValueError as e:
                raise MalformedTransaction(f"Invalid transaction hex: {e}") from e
        rawtx = bytes(rawtx)

        version, cursor = read_struct("<i", rawtx, 0)
        tx = Transaction(version=version, version_group_id=0)

        if tx.overwintered:
            tx.version_group_id, cursor = read_struct("<I", rawtx, cursor)

        n_inputs, cursor = read_varint(rawtx, cursor)
        for _ in range(n_inputs):
            txin, cursor = TxInput.from_raw(rawtx, cursor)
            tx.inputs.append(txin)

        n_outputs, cursor = read_varint(rawtx, cursor)
        for _ in range(n_outputs):
            txout, cursor = TxOutput.from_raw(rawtx, cursor)
            tx.outputs.append(txout)

        tx.locktime, cursor = read_struct("<I", rawtx, cursor)

        if tx.has_expiry_height:
            tx.expiry_height, cursor = read_struct("<I", rawtx, cursor)

        if tx.is_sapling:
            tx.value_balance, cursor = read_struct("<q", rawtx, cursor)
            for section in ("shielded spends", "shielded outputs", "joinsplits"):
                count, cursor = read_varint(rawtx, cursor)
                if count != 0:
                    raise MalformedTransaction(
                        f"Transaction has {count} {section}; only transparent "
                        "transactions are supported"
                    )

        if cursor != len(rawtx):
            raise MalformedTransaction(
                f"Extra junk at the end: {len(rawtx) - cursor} trailing bytes"
            )

        return tx

    def __str__(self) -> str:
        return str(
            {
                "version": self.version,
                "version_group_id": self.version_group_id,
                "inputs": self.inputs,
                "outputs": self.outputs,
                "locktime": self.locktime,
                "expiry_height": self.expiry_height,
                "value_balance": self.value_balance,
            }
        )

    def __repr__(self) -> str:
        return self.__str__()

    @classmethod
    def copy(cls, tx: "Transaction") -> "Transaction":
        """Deep copy of Transaction"""

        ins = [TxInput.copy(txin) for txin in tx.inputs]
        outs = [TxOutput.copy(txout) for txout in tx.outputs]
        return cls(
            ins,
            outs,
            tx.locktime,
            tx.version,
            tx.version_group_id,
            tx.expiry_height,
            tx.value_balance,
        )

    def _hash_prevouts(self) -> bytes:
        data = b"".join(txin.outpoint_bytes() for txin in self.inputs)
        return personalized_hash(data, PREVOUTS_HASH_PERSONALIZATION)

    def _hash_sequence(self) -> bytes:
        data = b"".join(txin.sequence_bytes() for txin in self.inputs)
        return personalized_hash(data, SEQUENCE_HASH_PERSONALIZATION)

    def _hash_outputs(self) -> bytes:
        data = b"".join(txout.to_bytes() for txout in self.outputs)
        return personalized_hash(data, OUTPUTS_HASH_PERSONALIZATION)

    def get_transaction_digest(
        self,
        txin_index: int,
        script: Union[Script, str, bytes],
        amount: int,
        sighash: int = SIGHASH_ALL,
        consensus_branch_id: Optional[int] = None,
    ) -> bytes:
        """Returns the transaction input's digest that is to be signed.

        The pre-image follows BIP143 in spirit, with every hash a
        personalized BLAKE2b-256 and the final hash personalized with the
        consensus branch id, so signatures do not replay across upgrades.

        |  Pre-image:
        |      header (4) + version group id (4)
        |      + hash_prevouts (32) + hash_sequence (32) + hash_outputs (32)
        |      + joinsplits, shielded spends, shielded outputs (3 x 32 zero bytes)
        |      + locktime (4) + expiry height (4) + value balance (8)
        |      + sighash type (4)
        |      + outpoint (36) + script code (varint prefixed)
        |      + amount (8) + sequence (4)

        Attributes
        ----------
        txin_index : int
            The index of the input that we wish to sign
        script : Script (or raw bytes / hex)
            The scriptPubKey of the UTXO that the input spends
        amount : int
            The value of the UTXO that the input spends
        sighash : int
            The type of the signature hash; only SIGHASH_ALL is supported
        consensus_branch_id : int, optional
            Overrides the branch id set with setup()

        Raises
        ------
        SighashError
            if txin_index is out of range, the sighash type is unsupported
            or BLAKE2b is unavailable
        """

        if not 0 <= txin_index < len(self.inputs):
            raise SighashError(
                f"Input index {txin_index} out of range for "
                f"{len(self.inputs)} inputs"
            )
        if sighash != SIGHASH_ALL:
            raise SighashError(f"Unsupported sighash type: 0x{sighash:02x}")

        if consensus_branch_id is None:
            consensus_branch_id = get_consensus_branch_id()

        if isinstance(script, str):
            script_code = h_to_b(script)
        elif isinstance(script, (bytes, bytearray)):
            script_code = bytes(script)
        else:
            script_code = script.to_bytes()

        txin = self.inputs[txin_index]

        tx_for_signing = self._header_bytes() + self._version_group_id_bytes()
        tx_for_signing += self._hash_prevouts()
        tx_for_signing += self._hash_sequence()
        tx_for_signing += self._hash_outputs()

        # no joinsplits, shielded spends or shielded outputs
        tx_for_signing += b"\x00" * 32 * 3

        tx_for_signing += pack_struct("<I", self.locktime, "locktime")
        tx_for_signing += pack_struct("<I", self.expiry_height, "expiry_height")
        tx_for_signing += pack_struct("<q", self.value_balance, "value_balance")
        tx_for_signing += struct.pack("<I", sighash)

        # the input being signed
        tx_for_signing += txin.outpoint_bytes()
        tx_for_signing += prepend_compact_size(script_code)
        tx_for_signing += pack_struct("<q", amount, "amount")
        tx_for_signing += txin.sequence_bytes()

        personalization = SIGHASH_PERSONALIZATION_PREFIX + struct.pack(
            "<I", consensus_branch_id
        )
        return personalized_hash(tx_for_signing, personalization)
