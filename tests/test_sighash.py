# Copyright (C) 2024-2025 The zcash-signer developers
#
# This file is part of zcash-signer
#
# It is subject to the license terms in the LICENSE file found in the top-level
# directory of this distribution.
#
# No part of zcash-signer, including this file, may be copied,
# modified, propagated, or distributed except according to the terms contained
# in the LICENSE file.

import hashlib
import types
import unittest
from unittest import mock

from tests import tx_vectors as v
from zcashsigner.constants import OVERWINTER_BRANCH_ID, SAPLING_BRANCH_ID
from zcashsigner.errors import SighashError
from zcashsigner.script import Script
from zcashsigner.setup import get_consensus_branch_id, setup
from zcashsigner.transactions import Transaction


def blake2b_256(data, person):
    return hashlib.blake2b(data, digest_size=32, person=person).digest()


class TestTransactionDigest(unittest.TestCase):
    def setUp(self):
        setup("mainnet")
        self.tx = Transaction.from_raw(v.SAPLING_TX)
        self.script = v.P2PKH_SCRIPT
        self.amount = 200000

    def tearDown(self):
        setup("mainnet")

    def expected_digest(self, branch_id):
        """Builds the pre-image of input 0 of SAPLING_TX by hand"""
        prevouts = bytes.fromhex(v.TXID_WIRE + "00000000")
        sequences = bytes.fromhex("ffffffff")
        outputs = bytes.fromhex(v.OUTPUT)

        preimage = bytes.fromhex(v.SAPLING_HEADER + v.SAPLING_VGID)
        preimage += blake2b_256(prevouts, b"ZcashPrevoutHash")
        preimage += blake2b_256(sequences, b"ZcashSequencHash")
        preimage += blake2b_256(outputs, b"ZcashOutputsHash")
        preimage += bytes(96)
        preimage += bytes.fromhex(v.LOCKTIME + v.EXPIRY)
        preimage += bytes(8)
        preimage += bytes.fromhex("01000000")
        preimage += prevouts
        preimage += bytes.fromhex("19" + self.script)
        preimage += (self.amount).to_bytes(8, "little")
        preimage += sequences

        return blake2b_256(preimage, b"ZcashSigHash" + branch_id.to_bytes(4, "little"))

    def test_matches_hand_built_preimage(self):
        digest = self.tx.get_transaction_digest(0, self.script, self.amount)
        self.assertEqual(len(digest), 32)
        self.assertEqual(digest, self.expected_digest(SAPLING_BRANCH_ID))

    def test_sapling_branch_id_bytes(self):
        self.assertEqual(SAPLING_BRANCH_ID.to_bytes(4, "little").hex(), "bb09b876")

    def test_script_forms_agree(self):
        from_hex = self.tx.get_transaction_digest(0, self.script, self.amount)
        from_bytes = self.tx.get_transaction_digest(
            0, bytes.fromhex(self.script), self.amount
        )
        from_script = self.tx.get_transaction_digest(
            0, Script.from_raw(self.script), self.amount
        )
        self.assertEqual(from_hex, from_bytes)
        self.assertEqual(from_hex, from_script)

    def test_deterministic(self):
        self.assertEqual(
            self.tx.get_transaction_digest(0, self.script, self.amount),
            Transaction.from_raw(v.SAPLING_TX).get_transaction_digest(
                0, self.script, self.amount
            ),
        )

    def test_script_sig_not_committed(self):
        signed = Transaction.from_raw(v.SAPLING_TX)
        signed.inputs[0].script_sig = Script(["aa" * 71, "02" + "bb" * 32])
        self.assertEqual(
            signed.get_transaction_digest(0, self.script, self.amount),
            self.tx.get_transaction_digest(0, self.script, self.amount),
        )

    def test_sensitive_to_committed_fields(self):
        digest = self.tx.get_transaction_digest(0, self.script, self.amount)

        self.assertNotEqual(
            digest, self.tx.get_transaction_digest(0, self.script, self.amount + 1)
        )
        self.assertNotEqual(
            digest, self.tx.get_transaction_digest(0, "a914" + "00" * 20 + "87", self.amount)
        )

        changed = Transaction.from_raw(v.SAPLING_TX)
        changed.inputs[0].sequence = 0xFFFFFFFE
        self.assertNotEqual(
            digest, changed.get_transaction_digest(0, self.script, self.amount)
        )

        changed = Transaction.from_raw(v.SAPLING_TX)
        changed.expiry_height = 11
        self.assertNotEqual(
            digest, changed.get_transaction_digest(0, self.script, self.amount)
        )

        changed = Transaction.from_raw(v.SAPLING_TX)
        changed.outputs[0].amount -= 1
        self.assertNotEqual(
            digest, changed.get_transaction_digest(0, self.script, self.amount)
        )

    def test_branch_id(self):
        sapling = self.tx.get_transaction_digest(0, self.script, self.amount)
        overwinter = self.tx.get_transaction_digest(
            0, self.script, self.amount, consensus_branch_id=OVERWINTER_BRANCH_ID
        )
        self.assertNotEqual(sapling, overwinter)
        self.assertEqual(overwinter, self.expected_digest(OVERWINTER_BRANCH_ID))

    def test_branch_id_from_setup(self):
        setup("mainnet", consensus_branch_id=OVERWINTER_BRANCH_ID)
        self.assertEqual(get_consensus_branch_id(), OVERWINTER_BRANCH_ID)
        self.assertEqual(
            self.tx.get_transaction_digest(0, self.script, self.amount),
            self.expected_digest(OVERWINTER_BRANCH_ID),
        )
        setup("mainnet")
        self.assertEqual(get_consensus_branch_id(), SAPLING_BRANCH_ID)

    def test_invalid_branch_id_setup(self):
        self.assertRaises(ValueError, setup, "mainnet", 1 << 32)
        self.assertRaises(ValueError, setup, "regtest")

    def test_each_input_has_its_own_digest(self):
        tx = Transaction.from_raw(v.SAPLING_TWO_INPUTS_TX)
        self.assertNotEqual(
            tx.get_transaction_digest(0, self.script, self.amount),
            tx.get_transaction_digest(1, self.script, self.amount),
        )

    def test_input_index_out_of_range(self):
        self.assertRaises(
            SighashError, self.tx.get_transaction_digest, 1, self.script, self.amount
        )
        self.assertRaises(
            SighashError, self.tx.get_transaction_digest, -1, self.script, self.amount
        )

    def test_unsupported_sighash(self):
        for sighash in (0x02, 0x03, 0x81):
            self.assertRaises(
                SighashError,
                self.tx.get_transaction_digest,
                0,
                self.script,
                self.amount,
                sighash,
            )

    def test_blake2b_unavailable(self):
        without_blake2b = types.SimpleNamespace(sha256=hashlib.sha256)
        with mock.patch("zcashsigner.utils.hashlib", without_blake2b):
            self.assertRaises(
                SighashError,
                self.tx.get_transaction_digest,
                0,
                self.script,
                self.amount,
            )


class TestZip243Vector(unittest.TestCase):
    """Transparent test vector 3 of ZIP 243, digest of input 0"""

    def setUp(self):
        setup("mainnet")
        # the vector's scriptSig is left out, it is not committed to
        self.raw = (
            "0400008085202f89"
            + "01"
            + "a8c685478265f4c14dada651969c45a65e1aeb8cd6791f2f5bb6a1d9952104d9"
            + "01000000"
            + "00"
            + "feffffff"
            + "02"
            + "005a620200000000"
            + "1976a9148132712c3ff19f3a151234616777420a6d7ef22688ac"
            + "8b95980000000000"
            + "1976a9145453e4698f02a38abdaa521cd1ff2dee6fac187188ac"
            + "29b00400"
            + "48b00400"
            + "0000000000000000"
            + "000000"
        )
        self.script_code = "76a914507173527b4c3318a2aecd793bf1cfed705950cf88ac"
        self.amount = 50000000

    def test_fields(self):
        tx = Transaction.from_raw(self.raw)
        self.assertTrue(tx.is_sapling)
        self.assertEqual(tx.locktime, 0x0004B029)
        self.assertEqual(tx.expiry_height, 0x0004B048)
        self.assertEqual(tx.to_hex(), self.raw)

    def test_known_digest(self):
        tx = Transaction.from_raw(self.raw)
        digest = tx.get_transaction_digest(
            0, self.script_code, self.amount, consensus_branch_id=SAPLING_BRANCH_ID
        )
        self.assertEqual(
            digest.hex(),
            "f3148f80dfab5e573d5edfe7a850f5fd39234f80b5429d3a57edcc11e34c585b",
        )


if __name__ == "__main__":
    unittest.main()
