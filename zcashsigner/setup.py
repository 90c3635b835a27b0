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

from typing import Optional

from zcashsigner.constants import DEFAULT_CONSENSUS_BRANCH_ID

NETWORK = "mainnet"
networks = {"mainnet", "testnet"}

CONSENSUS_BRANCH_ID = DEFAULT_CONSENSUS_BRANCH_ID


def setup(network: str = "mainnet", consensus_branch_id: Optional[int] = None) -> str:
    """Setup the signer library with the specified network and branch id.

    Args:
        network: The network to use (mainnet, testnet)
        consensus_branch_id: The branch id that personalizes the signature
                             hash (default: Sapling, 0x76B809BB)
    """
    global NETWORK, CONSENSUS_BRANCH_ID
    if network not in networks:
        raise ValueError(f"Unknown network: {network}")
    NETWORK = network
    if consensus_branch_id is None:
        CONSENSUS_BRANCH_ID = DEFAULT_CONSENSUS_BRANCH_ID
    else:
        if not 0 <= consensus_branch_id <= 0xFFFFFFFF:
            raise ValueError("Consensus branch id must fit in 32 bits")
        CONSENSUS_BRANCH_ID = consensus_branch_id
    return NETWORK


def get_network() -> str:
    global NETWORK
    return NETWORK


def get_consensus_branch_id() -> int:
    """Returns the branch id used when none is passed to the sighash"""
    global CONSENSUS_BRANCH_ID
    return CONSENSUS_BRANCH_ID
