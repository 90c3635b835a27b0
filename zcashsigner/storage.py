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

from abc import ABC, abstractmethod
from typing import Dict, List, Optional


class StorageProvider(ABC):
    """Secret store for wallet keys, keyed by wallet name.

    Implementations keep the WIF strings; non-sensitive wallet metadata is
    kept elsewhere (see WalletMetadataStore).

    Attributes
    ----------
    name : str
        human readable name of the backend

    Methods
    -------
    is_available()
        checks whether the backend can be used on this host
    set_key(wallet_name, wif)
        stores (or replaces) a key
    get_key(wallet_name)
        returns the key or None when missing
    delete_key(wallet_name)
        removes a key, returns whether it existed
    list_keys()
        returns the wallet names that have a key
    """

    name: str = ""

    @abstractmethod
    def is_available(self) -> bool:
        pass

    @abstractmethod
    def set_key(self, wallet_name: str, wif: str) -> None:
        pass

    @abstractmethod
    def get_key(self, wallet_name: str) -> Optional[str]:
        pass

    @abstractmethod
    def delete_key(self, wallet_name: str) -> bool:
        pass

    @abstractmethod
    def list_keys(self) -> List[str]:
        pass


class MemoryStorage(StorageProvider):
    """Process-local key store; keys are lost when the process exits."""

    name = "In-memory storage"

    def __init__(self) -> None:
        self._keys: Dict[str, str] = {}

    def is_available(self) -> bool:
        return True

    def set_key(self, wallet_name: str, wif: str) -> None:
        self._keys[wallet_name] = wif

    def get_key(self, wallet_name: str) -> Optional[str]:
        return self._keys.get(wallet_name)

    def delete_key(self, wallet_name: str) -> bool:
        return self._keys.pop(wallet_name, None) is not None

    def list_keys(self) -> List[str]:
        return list(self._keys)
