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

import json
import logging
import os
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from zcashsigner.constants import WALLET_NAME_MAX_LENGTH, WALLET_NAME_PATTERN
from zcashsigner.errors import KeyNotFound, WalletError
from zcashsigner.keys import generate_wif, validate_wif, wif_to_address
from zcashsigner.setup import get_network, networks
from zcashsigner.signing import InputDescriptor, SignedTransaction, sign_transaction
from zcashsigner.storage import StorageProvider


@dataclass(frozen=True)
class StoredWallet:
    """Non-sensitive wallet metadata."""
    name: str
    address: str
    network: str
    created_at: str


class WalletMetadataStore:
    """Wallet metadata kept as JSON, or only in memory when path is None.

    The file layout is ``{"wallets": {name: {"address", "network",
    "createdAt"}}}``. Directories are created 0700 and the file 0600.
    """

    def __init__(self, path: Optional[str] = None) -> None:
        self.path = path
        self._wallets: Optional[Dict[str, Dict[str, str]]] = None

    def _load(self) -> Dict[str, Dict[str, str]]:
        if self._wallets is not None:
            return self._wallets

        self._wallets = {}
        if self.path and os.path.exists(self.path):
            with open(self.path, "r", encoding="utf-8") as f:
                try:
                    data = json.load(f)
                except json.JSONDecodeError as e:
                    raise WalletError(f"Corrupt wallet metadata {self.path}: {e}") from e
            self._wallets = dict(data.get("wallets", {}))
        return self._wallets

    def _save(self) -> None:
        if not self.path:
            return
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, mode=0o700, exist_ok=True)
        fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump({"wallets": self._load()}, f, indent=2)

    def put(self, wallet: StoredWallet) -> None:
        self._load()[wallet.name] = {
            "address": wallet.address,
            "network": wallet.network,
            "createdAt": wallet.created_at,
        }
        self._save()

    def get(self, name: str) -> Optional[StoredWallet]:
        data = self._load().get(name)
        if data is None:
            return None
        return StoredWallet(
            name=name,
            address=data["address"],
            network=data["network"],
            created_at=data["createdAt"],
        )

    def remove(self, name: str) -> bool:
        existed = self._load().pop(name, None) is not None
        if existed:
            self._save()
        return existed

    def names(self) -> List[str]:
        return list(self._load())


class WalletManager:
    """
    Named wallets backed by an explicit key storage handle.

    Keys only ever live in the StorageProvider; the metadata store holds the
    name, address, network and creation time.
    """

    def __init__(
        self,
        storage: StorageProvider,
        metadata: Optional[WalletMetadataStore] = None,
    ) -> None:
        """
        Args:
            storage: Key storage backend
            metadata: Metadata store (defaults to an in-memory one)
        """
        self._storage = storage
        self._metadata = metadata if metadata is not None else WalletMetadataStore()
        self._logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @staticmethod
    def _validate_name(name: str) -> None:
        if not name or not re.match(WALLET_NAME_PATTERN, name):
            raise WalletError(
                "Wallet name must be alphanumeric with underscores/dashes only"
            )
        if len(name) > WALLET_NAME_MAX_LENGTH:
            raise WalletError(
                f"Wallet name must be {WALLET_NAME_MAX_LENGTH} characters or less"
            )

    def import_wallet(
        self, name: str, wif: str, network: Optional[str] = None
    ) -> StoredWallet:
        """
        Import a wallet from a WIF private key.

        Args:
            name: Wallet name (letters, digits, '_' and '-'; at most 32)
            wif: Private key in WIF
            network: Network recorded for the wallet (default: configured)

        Returns:
            The stored wallet metadata
        """
        self._validate_name(name)
        network = network or get_network()
        if network not in networks:
            raise WalletError(f"Unknown network: {network}")

        if self._metadata.get(name) is not None:
            raise WalletError(f'Wallet "{name}" already exists')

        valid, error = validate_wif(wif)
        if not valid:
            raise WalletError(f"Invalid private key: {error}")

        wallet = StoredWallet(
            name=name,
            address=wif_to_address(wif),
            network=network,
            created_at=datetime.now(timezone.utc).isoformat(),
        )

        self._storage.set_key(name, wif)
        self._metadata.put(wallet)

        self._logger.info(f"Imported wallet {name}: {wallet.address}")
        return wallet

    def create_wallet(self, name: str, network: Optional[str] = None) -> StoredWallet:
        """Create a wallet with a newly generated compressed key."""
        return self.import_wallet(name, generate_wif(compressed=True), network)

    def list_wallets(self) -> List[StoredWallet]:
        """Get all wallets' metadata."""
        wallets = [self._metadata.get(name) for name in self._metadata.names()]
        return [w for w in wallets if w is not None]

    def get_wallet(self, name: str) -> Optional[StoredWallet]:
        """Get a wallet's metadata, None when unknown."""
        return self._metadata.get(name)

    def delete_wallet(self, name: str) -> bool:
        """Remove a wallet's key and metadata."""
        if self._metadata.get(name) is None:
            raise WalletError(f'Wallet "{name}" not found')

        self._storage.delete_key(name)
        removed = self._metadata.remove(name)
        self._logger.info(f"Deleted wallet: {name}")
        return removed

    def export_address(self, name: str) -> str:
        """Get a wallet's address (safe to share)."""
        wallet = self._metadata.get(name)
        if wallet is None:
            raise WalletError(f'Wallet "{name}" not found')
        return wallet.address

    def sign_with_wallet(
        self,
        name: str,
        unsigned_tx_hex: str,
        inputs: Iterable[Union[InputDescriptor, Mapping[str, Any]]],
        consensus_branch_id: Optional[int] = None,
    ) -> SignedTransaction:
        """
        Sign every input of a transaction with a wallet's key.

        Raises:
            WalletError: unknown wallet
            KeyNotFound: the wallet's key is missing from storage
        """
        if self._metadata.get(name) is None:
            raise WalletError(f'Wallet "{name}" not found')

        wif = self._storage.get_key(name)
        if wif is None:
            raise KeyNotFound(f'Private key for wallet "{name}" not found')

        self._logger.debug(f"Signing with wallet {name}")
        return sign_transaction(
            wif, unsigned_tx_hex, inputs, consensus_branch_id=consensus_branch_id
        )
