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

from __future__ import annotations

import hashlib
import struct
from abc import ABC, abstractmethod
from typing import Tuple, Union

from ecdsa import (  # type: ignore
    BadSignatureError,
    MalformedPointError,
    SECP256k1,
    SigningKey,
    VerifyingKey,
)
from ecdsa.der import UnexpectedDER  # type: ignore
from ecdsa.util import sigdecode_der, sigencode_strings  # type: ignore

from zcashsigner.errors import SigningError
from zcashsigner.utils import Secp256k1Params, b_to_i, i_to_b32


class Signer(ABC):
    """Interface of the curve operations needed to sign transparent inputs.

    Methods
    -------
    sign(digest, secret)
        returns the (r, s) pair, 32 bytes each, of a low-S signature
    derive_public_key(secret, compressed=True)
        returns the SEC encoded public key of secret
    is_valid_scalar(secret)
        checks that secret is a usable private key
    verify(der_signature, digest, public_key)
        checks a DER signature (without hash type byte) against digest
    """

    @abstractmethod
    def sign(self, digest: bytes, secret: bytes) -> Tuple[bytes, bytes]:
        pass

    @abstractmethod
    def derive_public_key(self, secret: bytes, compressed: bool = True) -> bytes:
        pass

    @abstractmethod
    def is_valid_scalar(self, secret: bytes) -> bool:
        pass

    @abstractmethod
    def verify(self, der_signature: bytes, digest: bytes, public_key: bytes) -> bool:
        pass


class EcdsaSigner(Signer):
    """secp256k1 signer backed by the ecdsa package.

    Nonces are deterministic (RFC6979). Signatures are ground until R is low
    and S is normalized to the lower half of the curve order so that the DER
    encoding is always 71 bytes or less and not malleable.
    """

    def is_valid_scalar(self, secret: bytes) -> bool:
        if not isinstance(secret, (bytes, bytearray)) or len(secret) != 32:
            return False
        return 0 < b_to_i(bytes(secret)) < Secp256k1Params._order

    def _signing_key(self, secret: bytes) -> SigningKey:
        if not self.is_valid_scalar(secret):
            raise SigningError("Invalid private key scalar")
        return SigningKey.from_string(bytes(secret), curve=SECP256k1)

    def sign(self, digest: bytes, secret: bytes) -> Tuple[bytes, bytes]:
        if len(digest) != 32:
            raise SigningError(f"Digest must be 32 bytes, got {len(digest)}")

        key = self._signing_key(secret)

        # From Bitcoin core v0.17 a Low R value is expected. R is not mutable
        # the way S is, so a low R value can only be found by trying different
        # nonces, passing a counter as extra entropy to RFC6979.
        r, s = key.sign_digest_deterministic(
            digest, hashfunc=hashlib.sha256, sigencode=sigencode_strings
        )
        attempt = 1
        while r[0] >= 0x80:
            r, s = key.sign_digest_deterministic(
                digest,
                extra_entropy=i_to_b32(attempt),
                hashfunc=hashlib.sha256,
                sigencode=sigencode_strings,
            )
            attempt += 1

        # Low S standardness rule: (order - S) is an equally valid S, so only
        # the lower half of the order is accepted by relay policy
        s_as_bigint = b_to_i(s)
        if s_as_bigint > Secp256k1Params._order // 2:
            s = i_to_b32(Secp256k1Params._order - s_as_bigint)

        return r, s

    def derive_public_key(self, secret: bytes, compressed: bool = True) -> bytes:
        verifying_key = self._signing_key(secret).get_verifying_key()
        if compressed:
            return verifying_key.to_string("compressed")
        return verifying_key.to_string("uncompressed")

    def verify(self, der_signature: bytes, digest: bytes, public_key: bytes) -> bool:
        try:
            key = VerifyingKey.from_string(public_key, curve=SECP256k1)
        except (MalformedPointError, ValueError):
            return False
        try:
            return key.verify_digest(der_signature, digest, sigdecode=sigdecode_der)
        except (BadSignatureError, UnexpectedDER):
            return False


def _der_integer(value: Union[bytes, int]) -> bytes:
    """Minimal big-endian encoding of a positive DER INTEGER value"""
    if isinstance(value, int):
        value = i_to_b32(value)
    value = bytes(value)

    # strip redundant leading zeros, never the one that keeps it positive
    while len(value) > 1 and value[0] == 0x00 and value[1] < 0x80:
        value = value[1:]
    if value[0] >= 0x80:
        value = b"\x00" + value
    return value


def encode_der(r: Union[bytes, int], s: Union[bytes, int]) -> bytes:
    """Encodes (r, s) as a DER signature

    |  DER structure is:
    |      1-byte   -- 0x30 to specify a DER compound object (R,S)
    |      1-byte   -- length of the compound object
    |      1-byte   -- 0x02 to specify integer type for R
    |      1-byte   -- length of signature's R value
    |      variable -- R value
    |      1-byte   -- 0x02 to specify integer type for S
    |      1-byte   -- length of signature's S value
    |      variable -- S value
    """
    r_bytes = _der_integer(r)
    s_bytes = _der_integer(s)
    return (
        struct.pack("BBBB", 0x30, 4 + len(r_bytes) + len(s_bytes), 0x02, len(r_bytes))
        + r_bytes
        + struct.pack("BB", 0x02, len(s_bytes))
        + s_bytes
    )
