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

"""Signer exceptions hierarchy."""

from typing import Optional

__all__ = [
    "SignerError",
    "MalformedTransaction",
    "EncodingError",
    "SighashError",
    "SigningError",
    "InvalidWif",
    "InvalidAddress",
    "UnsupportedAddressType",
    "KeyNotFound",
    "WalletError",
    "InsufficientFunds",
]


class SignerError(Exception):
    """Base exception for all signer errors.

    ``partial_tx`` is set by the transaction signer when an input fails;
    it holds the last fully consistent serialization.
    """

    def __init__(self, message: str, partial_tx: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.partial_tx = partial_tx

    def __str__(self) -> str:
        return self.message


class MalformedTransaction(SignerError, ValueError):
    """Raised when raw transaction bytes cannot be parsed."""
    pass


class EncodingError(SignerError, ValueError):
    """Raised when a value does not fit its wire field."""
    pass


class SighashError(SignerError):
    """Raised when the signature hash cannot be computed."""
    pass


class SigningError(SignerError):
    """Raised when a signature cannot be produced."""
    pass


class InvalidWif(SigningError, ValueError):
    """Raised when a WIF private key cannot be decoded."""
    pass


class InvalidAddress(SignerError, ValueError):
    """Raised when an address string is not valid base58check."""
    pass


class UnsupportedAddressType(SignerError, ValueError):
    """Raised when an address version byte is neither P2PKH nor P2SH."""
    pass


class KeyNotFound(SignerError, LookupError):
    """Raised when a wallet's key is missing from storage."""
    pass


class WalletError(SignerError):
    """Raised when a wallet operation fails."""
    pass


class InsufficientFunds(SignerError):
    """Raised when outputs plus fee exceed the inputs."""

    def __init__(
        self, required: int, available: int, message: Optional[str] = None
    ) -> None:
        if message is None:
            message = (
                f"Insufficient funds: required {required}, available {available}"
            )
        super().__init__(message)
        self.required = required
        self.available = available
