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

__version__ = "0.1.0"

from zcashsigner.setup import setup, get_network, get_consensus_branch_id

from zcashsigner.errors import (
    SignerError,
    MalformedTransaction,
    EncodingError,
    SighashError,
    SigningError,
    InvalidWif,
    InvalidAddress,
    UnsupportedAddressType,
    KeyNotFound,
    WalletError,
    InsufficientFunds,
)

from zcashsigner.keys import (
    PrivateKey,
    PublicKey,
    Address,
    P2pkhAddress,
    P2shAddress,
    address_to_script_pub_key,
)

from zcashsigner.script import Script

from zcashsigner.signer import Signer, EcdsaSigner, encode_der

from zcashsigner.transactions import Transaction, TxInput, TxOutput

from zcashsigner.signing import (
    InputDescriptor,
    SignedTransaction,
    sign_input,
    sign_transaction,
    calculate_txid,
    build_and_sign,
)

from zcashsigner.storage import StorageProvider, MemoryStorage

from zcashsigner.wallet import WalletManager, WalletMetadataStore, StoredWallet

__all__ = [
    'setup',
    'get_network',
    'get_consensus_branch_id',
    'SignerError',
    'MalformedTransaction',
    'EncodingError',
    'SighashError',
    'SigningError',
    'InvalidWif',
    'InvalidAddress',
    'UnsupportedAddressType',
    'KeyNotFound',
    'WalletError',
    'InsufficientFunds',
    'PrivateKey',
    'PublicKey',
    'Address',
    'P2pkhAddress',
    'P2shAddress',
    'address_to_script_pub_key',
    'Script',
    'Signer',
    'EcdsaSigner',
    'encode_der',
    'Transaction',
    'TxInput',
    'TxOutput',
    'InputDescriptor',
    'SignedTransaction',
    'sign_input',
    'sign_transaction',
    'calculate_txid',
    'build_and_sign',
    'StorageProvider',
    'MemoryStorage',
    'WalletManager',
    'WalletMetadataStore',
    'StoredWallet',
]
