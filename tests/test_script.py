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

import unittest

from zcashsigner.script import Script, p2pkh_script_sig


class TestScript(unittest.TestCase):
    def setUp(self):
        self.hash160 = "751e76e8199196d454941c45d1b3a323f1433bd6"
        self.p2pkh_hex = "76a914" + self.hash160 + "88ac"
        self.p2sh_hex = "a914" + self.hash160 + "87"

    def test_p2pkh_script(self):
        script = Script(
            ["OP_DUP", "OP_HASH160", self.hash160, "OP_EQUALVERIFY", "OP_CHECKSIG"]
        )
        self.assertEqual(script.to_hex(), self.p2pkh_hex)
        self.assertTrue(script.is_p2pkh())
        self.assertFalse(script.is_p2sh())
        self.assertEqual(script.get_script_type(), "p2pkh")

    def test_p2sh_script(self):
        script = Script(["OP_HASH160", self.hash160, "OP_EQUAL"])
        self.assertEqual(script.to_hex(), self.p2sh_hex)
        self.assertTrue(script.is_p2sh())
        self.assertEqual(script.get_script_type(), "p2sh")

    def test_from_raw_commands(self):
        script = Script.from_raw(self.p2pkh_hex)
        self.assertEqual(
            script.get_script(),
            ["OP_DUP", "OP_HASH160", self.hash160, "OP_EQUALVERIFY", "OP_CHECKSIG"],
        )
        self.assertTrue(script.is_p2pkh())

    def test_from_raw_keeps_bytes(self):
        # a push that runs past the end and an unknown op code
        odd = "05aabb" + "ff"
        self.assertEqual(Script.from_raw(odd).to_hex(), "05aabbff")
        self.assertEqual(Script.from_raw(bytes.fromhex(odd)).to_hex(), odd)
        self.assertEqual(Script.from_raw("ba").get_script(), ["OP_UNKNOWN_ba"])

    def test_pushdata1(self):
        data = "ab" * 76
        script = Script([data])
        self.assertEqual(script.to_hex(), "4c4c" + data)
        self.assertEqual(Script.from_raw(script.to_hex()).get_script(), [data])

    def test_small_integers(self):
        self.assertEqual(Script([0, 1, 16]).to_hex(), "005160")

    def test_empty(self):
        self.assertEqual(Script([]).to_hex(), "")
        self.assertEqual(Script.from_raw("").get_script_type(), "empty")

    def test_equality_and_copy(self):
        script = Script.from_raw(self.p2pkh_hex)
        self.assertEqual(script, Script.from_raw(self.p2pkh_hex))
        self.assertEqual(Script.copy(script).to_hex(), self.p2pkh_hex)
        self.assertNotEqual(script, Script.from_raw(self.p2sh_hex))

    def test_edited_tokens_reserialize(self):
        script = Script.from_raw(self.p2pkh_hex)
        script.script[2] = "00" * 20
        self.assertEqual(script.to_hex(), "76a914" + "00" * 20 + "88ac")
        self.assertEqual(Script.copy(script).to_hex(), "76a914" + "00" * 20 + "88ac")

        script = Script.from_raw(self.p2pkh_hex)
        script.script = ["OP_HASH160", self.hash160, "OP_EQUAL"]
        self.assertEqual(script.to_hex(), self.p2sh_hex)

    def test_unedited_truncated_push_kept(self):
        script = Script.from_raw("05aabb")
        self.assertEqual(Script.copy(script).to_hex(), "05aabb")


class TestP2pkhScriptSig(unittest.TestCase):
    def test_layout(self):
        signature = "30" + "11" * 69 + "01"
        pubkey = "02" + "22" * 32
        script = p2pkh_script_sig(signature, pubkey)
        self.assertEqual(script.to_hex(), "47" + signature + "21" + pubkey)


if __name__ == "__main__":
    unittest.main()
