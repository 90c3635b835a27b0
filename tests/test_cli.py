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

import io
import json
import os
import unittest
from contextlib import redirect_stderr, redirect_stdout
from unittest import mock

from tests import tx_vectors as v
from zcashsigner.cli import WIF_ENV_VAR, main
from zcashsigner.constants import OVERWINTER_BRANCH_ID
from zcashsigner.keys import PrivateKey, wif_to_address
from zcashsigner.setup import get_consensus_branch_id, setup
from zcashsigner.signing import calculate_txid, sign_transaction


def run(argv):
    """Runs the CLI and returns (exit code, stdout, stderr)"""
    stdout = io.StringIO()
    stderr = io.StringIO()
    with redirect_stdout(stdout), redirect_stderr(stderr):
        code = main(argv)
    return code, stdout.getvalue(), stderr.getvalue()


class TestCli(unittest.TestCase):
    def setUp(self):
        setup("mainnet")
        self.wif = PrivateKey(secret_exponent=1).to_wif()

    def tearDown(self):
        setup("mainnet")

    def test_txid(self):
        code, out, _ = run(["txid", v.SAPLING_TX])
        self.assertEqual(code, 0)
        self.assertEqual(out.strip(), calculate_txid(v.SAPLING_TX))

    def test_decode(self):
        code, out, _ = run(["decode", v.SAPLING_TX])
        self.assertEqual(code, 0)

        decoded = json.loads(out)
        self.assertEqual(decoded["txid"], calculate_txid(v.SAPLING_TX))
        self.assertEqual(decoded["version"], 4)
        self.assertTrue(decoded["overwintered"])
        self.assertEqual(decoded["version_group_id"], "892f2085")
        self.assertEqual(decoded["expiry_height"], 10)
        self.assertEqual(decoded["value_balance"], 0)
        self.assertEqual(decoded["inputs"][0]["txid"], v.TXID_DISPLAY)
        self.assertEqual(decoded["outputs"][0]["value"], v.OUTPUT_AMOUNT)
        self.assertEqual(decoded["outputs"][0]["type"], "p2pkh")

    def test_decode_legacy(self):
        code, out, _ = run(["decode", v.LEGACY_TX])
        self.assertEqual(code, 0)
        decoded = json.loads(out)
        self.assertFalse(decoded["overwintered"])
        self.assertIsNone(decoded["version_group_id"])
        self.assertIsNone(decoded["expiry_height"])

    def test_decode_malformed(self):
        code, out, err = run(["decode", v.SAPLING_TX + "00"])
        self.assertEqual(code, 1)
        self.assertEqual(out, "")
        self.assertIn("Error", err)

    def test_sign(self):
        with mock.patch.dict(os.environ, {WIF_ENV_VAR: self.wif}):
            code, out, _ = run(
                ["sign", "--tx", v.SAPLING_TX, "--input", f"{v.P2PKH_SCRIPT}:200000"]
            )
        self.assertEqual(code, 0)

        expected = sign_transaction(
            self.wif, v.SAPLING_TX, [{"scriptPubKey": v.P2PKH_SCRIPT, "amount": 200000}]
        )
        self.assertEqual(
            json.loads(out), {"signed_tx": expected.signed_tx, "txid": expected.txid}
        )

    def test_sign_branch_id(self):
        with mock.patch.dict(os.environ, {WIF_ENV_VAR: self.wif}):
            code, out, _ = run(
                [
                    "--branch-id",
                    "overwinter",
                    "sign",
                    "--tx",
                    v.SAPLING_TX,
                    "--input",
                    f"{v.P2PKH_SCRIPT}:200000",
                ]
            )
        self.assertEqual(code, 0)
        self.assertEqual(get_consensus_branch_id(), OVERWINTER_BRANCH_ID)

        expected = sign_transaction(
            self.wif,
            v.SAPLING_TX,
            [{"scriptPubKey": v.P2PKH_SCRIPT, "amount": 200000}],
            consensus_branch_id=OVERWINTER_BRANCH_ID,
        )
        self.assertEqual(json.loads(out)["signed_tx"], expected.signed_tx)

    def test_sign_without_key(self):
        with mock.patch.dict(os.environ, {}, clear=True):
            code, out, err = run(
                ["sign", "--tx", v.SAPLING_TX, "--input", f"{v.P2PKH_SCRIPT}:1"]
            )
        self.assertEqual(code, 1)
        self.assertIn(WIF_ENV_VAR, err)

    def test_sign_input_count_mismatch(self):
        with mock.patch.dict(os.environ, {WIF_ENV_VAR: self.wif}):
            code, _, err = run(
                ["sign", "--tx", v.SAPLING_TWO_INPUTS_TX, "--input", f"{v.P2PKH_SCRIPT}:1"]
            )
        self.assertEqual(code, 1)
        self.assertIn("input", err)

    def test_address(self):
        with mock.patch.dict(os.environ, {WIF_ENV_VAR: self.wif}):
            code, out, _ = run(["address"])
        self.assertEqual(code, 0)
        self.assertEqual(out.strip(), wif_to_address(self.wif))

    def test_no_command(self):
        code, _, _ = run([])
        self.assertEqual(code, 1)

    def test_bad_input_descriptor(self):
        with self.assertRaises(SystemExit):
            run(["sign", "--tx", v.SAPLING_TX, "--input", "nocolon"])


if __name__ == "__main__":
    unittest.main()
