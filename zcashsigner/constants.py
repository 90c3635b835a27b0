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

# Verus uses the same version bytes on both networks
NETWORK_WIF_PREFIXES = {
    "mainnet": b"\xbc",
    "testnet": b"\xbc",
}

# Bitcoin-style WIF prefix, also accepted when decoding
LEGACY_WIF_PREFIX = b"\x80"

NETWORK_P2PKH_PREFIXES = {
    "mainnet": b"\x3c",
    "testnet": b"\x3c",
}

NETWORK_P2SH_PREFIXES = {
    "mainnet": b"\x55",
    "testnet": b"\x55",
}


# Constants for address types
P2PKH_ADDRESS = "p2pkh"
P2SH_ADDRESS = "p2sh"


# Constants related to transaction signature types; only SIGHASH_ALL is
# supported by the transparent signer
SIGHASH_ALL = 0x01


# Transaction version handling
OVERWINTER_FLAG = 0x80000000

OVERWINTER_VERSION_GROUP_ID = 0x03C48270
SAPLING_VERSION_GROUP_ID = 0x892F2085

OVERWINTER_TX_VERSION = 3
SAPLING_TX_VERSION = 4

# version field as read from the wire (signed 32-bit), i.e. 0x80000004
DEFAULT_TX_VERSION = (SAPLING_TX_VERSION | OVERWINTER_FLAG) - (1 << 32)

DEFAULT_TX_LOCKTIME = 0
DEFAULT_TX_EXPIRY_HEIGHT = 0
DEFAULT_TX_SEQUENCE = 0xFFFFFFFF


# Consensus branch ids; they personalize the signature hash
OVERWINTER_BRANCH_ID = 0x5BA81B19
SAPLING_BRANCH_ID = 0x76B809BB

CONSENSUS_BRANCH_IDS = {
    "overwinter": OVERWINTER_BRANCH_ID,
    "sapling": SAPLING_BRANCH_ID,
}

DEFAULT_CONSENSUS_BRANCH_ID = SAPLING_BRANCH_ID


# BLAKE2b personalization tags (16 bytes each)
PREVOUTS_HASH_PERSONALIZATION = b"ZcashPrevoutHash"
SEQUENCE_HASH_PERSONALIZATION = b"ZcashSequencHash"
OUTPUTS_HASH_PERSONALIZATION = b"ZcashOutputsHash"
SIGHASH_PERSONALIZATION_PREFIX = b"ZcashSigHash"


# Wallet names
WALLET_NAME_PATTERN = r"^[a-zA-Z0-9_-]+$"
WALLET_NAME_MAX_LENGTH = 32
