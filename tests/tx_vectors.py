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

# Raw transactions assembled field by field so that each layout is readable.

# txid as displayed and as it appears on the wire (byte-reversed)
TXID_DISPLAY = "0102030405060708091011121314151617181920212223242526272829303132"
TXID_WIRE = "3231302928272625242322212019181716151413121110090807060504030201"

TXID2_DISPLAY = "aa" * 31 + "01"
TXID2_WIRE = "01" + "aa" * 31

# hash160 of the compressed public key of secret exponent 1
HASH160_G = "751e76e8199196d454941c45d1b3a323f1433bd6"
P2PKH_SCRIPT = "76a914" + HASH160_G + "88ac"

SAPLING_HEADER = "04000080"
SAPLING_VGID = "85202f89"
OVERWINTER_HEADER = "03000080"
OVERWINTER_VGID = "7082c403"

# one input: outpoint, empty script, final sequence
INPUT = TXID_WIRE + "00000000" + "00" + "ffffffff"
# second input spending output 3 with a custom sequence
INPUT2 = TXID2_WIRE + "03000000" + "00" + "feffffff"
# one output: 100000 to P2PKH_SCRIPT
OUTPUT_AMOUNT = 100000
OUTPUT = "a086010000000000" + "19" + P2PKH_SCRIPT

BODY = "01" + INPUT + "01" + OUTPUT

LOCKTIME = "00000000"
EXPIRY = "0a000000"
# value balance followed by empty shielded spends, outputs and joinsplits
SAPLING_TRAILER = "0000000000000000" + "000000"

SAPLING_TX = SAPLING_HEADER + SAPLING_VGID + BODY + LOCKTIME + EXPIRY + SAPLING_TRAILER
OVERWINTER_TX = OVERWINTER_HEADER + OVERWINTER_VGID + BODY + LOCKTIME + EXPIRY
LEGACY_TX = "01000000" + BODY + LOCKTIME
V3_NOT_OVERWINTERED_TX = "03000000" + BODY + LOCKTIME + EXPIRY

SAPLING_TWO_INPUTS_TX = (
    SAPLING_HEADER
    + SAPLING_VGID
    + "02"
    + INPUT
    + INPUT2
    + "01"
    + OUTPUT
    + LOCKTIME
    + EXPIRY
    + SAPLING_TRAILER
)


def sapling_tx(inputs, outputs, locktime=LOCKTIME, expiry=EXPIRY):
    """Assembles a Sapling transaction from raw input and output hex"""
    return (
        SAPLING_HEADER
        + SAPLING_VGID
        + "%02x" % len(inputs)
        + "".join(inputs)
        + "%02x" % len(outputs)
        + "".join(outputs)
        + locktime
        + expiry
        + SAPLING_TRAILER
    )
