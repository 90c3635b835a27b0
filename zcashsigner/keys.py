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

import re
from abc import ABC, abstractmethod
from typing import Optional, Tuple, Union

from base58check import b58encode, b58decode  # type: ignore
from ecdsa import (  # type: ignore
    BadSignatureError,
    SigningKey,
    VerifyingKey,
    SECP256k1,
)
from ecdsa.der import UnexpectedDER  # type: ignore
from ecdsa.util import sigdecode_der  # type: ignore
from sympy.ntheory import sqrt_mod  # type: ignore

from zcashsigner.constants import (
    NETWORK_WIF_PREFIXES,
    NETWORK_P2PKH_PREFIXES,
    NETWORK_P2SH_PREFIXES,
    LEGACY_WIF_PREFIX,
    P2PKH_ADDRESS,
    P2SH_ADDRESS,
)
from zcashsigner.errors import InvalidAddress, InvalidWif, UnsupportedAddressType
from zcashsigner.script import Script
from zcashsigner.setup import get_network
from zcashsigner.utils import (
    Secp256k1Params,
    b_to_h,
    b_to_i,
    double_sha256,
    h_to_b,
    hash160,
    i_to_b32,
    wipe,
)


_BASE58_INVALID = r"[^123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz]"


def _b58check_encode(data: bytes) -> str:
    """Base58CheckEncode( data + first 4 bytes of SHA-256( SHA-256( data ) ) )"""
    checksum = double_sha256(data)[0:4]
    return b58encode(data + checksum).decode("utf-8")


def _b58check_decode(string: str) -> Optional[bytes]:
    """Returns the payload of a base58check string, None if it is not one"""
    if not string or re.search(_BASE58_INVALID, string):
        return None
    try:
        data_checksum = b58decode(string.encode("utf-8"))
    except ValueError:
        return None
    if len(data_checksum) < 5:
        return None
    data = data_checksum[:-4]
    checksum = data_checksum[-4:]
    if double_sha256(data)[0:4] != checksum:
        return None
    return data


def decode_wif(wif: str) -> Tuple[bytearray, bool]:
    """Decodes a WIF or WIFC private key

    Returns the 32-byte secret as a bytearray (so that callers can wipe it)
    and whether the key is flagged as compressed.

    |  Layout:
    |      network_prefix (1 byte) + key (32 bytes) [ + 0x01 if compressed ]
    |      + checksum (4 bytes)

    Raises
    ------
    InvalidWif
        if the checksum, length, network prefix or compression flag is wrong
    """
    data = _b58check_decode(wif.strip()) if isinstance(wif, str) else None
    if data is None:
        raise InvalidWif("Invalid WIF: checksum is wrong. Possible mistype?")

    # get network prefix and check with current setup
    network_prefix = data[:1]
    if network_prefix not in (NETWORK_WIF_PREFIXES[get_network()], LEGACY_WIF_PREFIX):
        raise InvalidWif("Invalid WIF: using the wrong network!")

    key_bytes = data[1:]
    if len(key_bytes) == 33:
        if key_bytes[32] != 0x01:
            raise InvalidWif("Invalid WIF: bad compression flag")
        compressed = True
    elif len(key_bytes) == 32:
        compressed = False
    else:
        raise InvalidWif(f"Invalid WIF: unexpected key length {len(key_bytes)}")

    secret = bytearray(key_bytes[:32])
    if not 0 < b_to_i(bytes(secret)) < Secp256k1Params._order:
        wipe(secret)
        raise InvalidWif("Invalid WIF: key is out of range")
    return secret, compressed


def is_compressed_wif(wif: str) -> bool:
    """Returns True if the WIF carries the compressed public key flag"""
    return decode_wif(wif)[1]


def validate_wif(wif: str) -> Tuple[bool, Optional[str]]:
    """Returns (True, None) for a usable WIF or (False, reason)"""
    try:
        decode_wif(wif)
    except InvalidWif as e:
        return False, e.message
    return True, None


def generate_wif(compressed: bool = True) -> str:
    """Returns a new random private key in WIF (compressed by default)"""
    return PrivateKey().to_wif(compressed=compressed)


def wif_to_address(wif: str) -> str:
    """Returns the P2PKH address of a WIF, honoring its compression flag"""
    priv = PrivateKey.from_wif(wif)
    return priv.get_public_key().get_address(compressed=priv.compressed).to_string()


def validate_address(address: str) -> bool:
    """Checks that address is a P2PKH or P2SH address of the current network"""
    try:
        address_to_script_pub_key(address)
    except ValueError:
        return False
    return True


def address_to_script_pub_key(address: str) -> Script:
    """Returns the locking script that pays to address

    Raises
    ------
    InvalidAddress
        if the address is not valid base58check of a 20-byte hash
    UnsupportedAddressType
        if the version byte is neither the P2PKH nor the P2SH prefix
    """
    data = _b58check_decode(address)
    if data is None or len(data) != 21:
        raise InvalidAddress(f"Invalid address: {address}")

    network_prefix = data[:1]
    if network_prefix == NETWORK_P2PKH_PREFIXES[get_network()]:
        return P2pkhAddress(hash160=b_to_h(data[1:])).to_script_pub_key()
    elif network_prefix == NETWORK_P2SH_PREFIXES[get_network()]:
        return P2shAddress(hash160=b_to_h(data[1:])).to_script_pub_key()
    raise UnsupportedAddressType(
        f"Unsupported address version byte 0x{network_prefix.hex()}"
    )


class PrivateKey:
    """A secp256k1 private key used for transparent inputs.

    Attributes
    ----------
    key : SigningKey
        the underlying ecdsa key
    compressed : bool
        True when the key came from a WIF carrying the 0x01 flag (or was
        created here), i.e. its addresses use the 33-byte public key

    Methods
    -------
    from_wif(wif)
        loads a key from WIF; the network prefix is checked
    from_bytes(b)
        loads a key from its 32-byte secret
    to_wif(compressed=True)
        encodes the key with the configured network's WIF prefix
    to_bytes()
        the 32-byte secret
    get_public_key()
        the matching PublicKey
    """

    def __init__(
        self,
        wif: Optional[str] = None,
        secret_exponent: Optional[int] = None,
        b: Optional[bytes] = None,
    ) -> None:
        """A random key is generated unless one of the sources is given

        Parameters
        ----------
        wif : str, optional
            WIF or WIFC encoded key
        secret_exponent : int, optional
            the secret as an integer, mostly for tests
        b : bytes, optional
            the 32-byte secret
        """
        self.compressed = True

        if not secret_exponent and not wif and not b:
            self.key = SigningKey.generate(curve=SECP256k1)
        else:
            if wif:
                self._from_wif(wif)
            elif b:
                self._from_bytes(b)
            elif secret_exponent:
                self.key = SigningKey.from_secret_exponent(
                    secret_exponent, curve=SECP256k1
                )

    def to_bytes(self) -> bytes:
        return self.key.to_string()

    @classmethod
    def from_wif(cls, wif: str) -> "PrivateKey":
        return cls(wif=wif)

    @classmethod
    def from_bytes(cls, b: bytes) -> "PrivateKey":
        return cls(b=b)

    def _from_bytes(self, b: bytes) -> None:
        if len(b) != 32:
            raise ValueError("Invalid key length: must be exactly 32 bytes.")
        self.key = SigningKey.from_string(bytes(b), curve=SECP256k1)

    def _from_wif(self, wif: str) -> None:
        secret, self.compressed = decode_wif(wif)
        try:
            self.key = SigningKey.from_string(bytes(secret), curve=SECP256k1)
        finally:
            wipe(secret)

    def to_wif(self, compressed: bool = True) -> str:
        """Returns the key as base58check( wif_prefix + secret [+ 0x01] )"""

        payload = NETWORK_WIF_PREFIXES[get_network()] + self.to_bytes()
        if compressed:
            payload += b"\x01"
        return _b58check_encode(payload)

    def get_public_key(self) -> "PublicKey":
        point = self.key.get_verifying_key().to_string("uncompressed")
        return PublicKey(b_to_h(point))


class PublicKey:
    """A secp256k1 public key in SEC encoding.

    Attributes
    ----------
    key : VerifyingKey
        the ecdsa point

    Methods
    -------
    from_hex(hex_str)
        parses a 33 or 65 byte SEC key (classmethod)
    verify(signature, digest)
        checks a DER signature over a 32-byte digest
    to_hex(compressed=True)
        the SEC encoding as hex
    to_bytes()
        the raw 64-byte x || y
    to_hash160(compressed=True)
        hash160 of the SEC encoding, as hex
    get_address(compressed=True)
        the P2pkhAddress paying to this key
    """

    def __init__(self, hex_str: str) -> None:
        """
        Parameters
        ----------
        hex_str : str
            SEC encoded key: 04 || x || y, or 02/03 || x

        Raises
        ------
        TypeError
            on an unknown prefix or length
        ValueError
            if x is not the coordinate of a curve point
        """
        sec = h_to_b(hex_str.strip())

        if len(sec) == 65 and sec[0] == 0x04:
            self.key = VerifyingKey.from_string(sec[1:], curve=SECP256k1)
        elif len(sec) == 33:
            if sec[0] not in (0x02, 0x03):
                raise TypeError("Invalid SEC compressed format")

            # the prefix gives the parity of y; both roots of
            # y^2 = x^3 + 7 (mod p) are computed and the matching one kept
            x_coord = b_to_i(sec[1:])
            roots = sqrt_mod(
                (x_coord**3 + 7) % Secp256k1Params._p, Secp256k1Params._p, True
            )
            if not roots:
                raise ValueError("Public key x coordinate is not on the curve")
            y_coord = next(y for y in roots if y % 2 == sec[0] - 2)

            self.key = VerifyingKey.from_string(
                i_to_b32(x_coord) + i_to_b32(y_coord), curve=SECP256k1
            )
        else:
            raise TypeError("Invalid SEC public key length")

    @classmethod
    def from_hex(cls, hex_str: str) -> "PublicKey":
        return cls(hex_str)

    def to_bytes(self) -> bytes:
        return self.key.to_string()

    def to_hex(self, compressed: bool = True) -> str:
        """SEC encoding, compressed unless asked otherwise"""
        if compressed:
            return b_to_h(self.key.to_string("compressed"))
        return b_to_h(self.key.to_string("uncompressed"))

    def verify(self, signature: Union[str, bytes], digest: bytes) -> bool:
        """Verifies a DER signature (hex or bytes, without the hash type
        byte) over a 32-byte digest"""

        if isinstance(signature, str):
            signature = h_to_b(signature)
        try:
            return self.key.verify_digest(signature, digest, sigdecode=sigdecode_der)
        except (BadSignatureError, UnexpectedDER):
            return False

    def to_hash160(self, compressed: bool = True) -> str:
        return b_to_h(hash160(h_to_b(self.to_hex(compressed))))

    def get_address(self, compressed: bool = True) -> "P2pkhAddress":
        return P2pkhAddress(hash160=self.to_hash160(compressed))


class Address(ABC):
    """Represents a transparent address

    Attributes
    ----------
    hash160 : str
        the hash160 string representation of the address; hash160 represents
        two consequtive hashes of the public key or the redeem script, first
        a SHA-256 and then an RIPEMD-160

    Methods
    -------
    from_address(address)
        instantiates an object from address string encoding
    from_hash160(hash160_str)
        instantiates an object from a hash160 hex string
    to_string()
        returns the address's string encoding
    to_hash160()
        returns the address's hash160 hex string representation
    to_script_pub_key()
        returns the locking script that pays to this address

    Raises
    ------
    TypeError
        No parameters passed
    InvalidAddress
        If an invalid address or hash160 is provided.
    """

    @abstractmethod
    def __init__(
        self,
        address: Optional[str] = None,
        hash160: Optional[str] = None,
        script: Optional[Script] = None,
    ) -> None:
        if hash160:
            if self._is_hash160_valid(hash160):
                self.hash160 = hash160
            else:
                raise InvalidAddress("Invalid value for parameter hash160.")
        elif address:
            if self._is_address_valid(address):
                self.hash160 = self._address_to_hash160(address)
            else:
                raise InvalidAddress("Invalid value for parameter address.")
        elif script:
            if isinstance(script, Script):
                self.hash160 = self._script_to_hash160(script)
            else:
                raise TypeError("A Script class is required.")
        else:
            raise TypeError("A valid address or hash160 is required.")

    @classmethod
    def from_address(cls, address: str) -> "Address":
        """Creates an address object from an address string"""

        return cls(address=address)

    @classmethod
    def from_hash160(cls, hash160: str) -> "Address":
        """Creates an address object from a hash160 string"""

        return cls(hash160=hash160)

    def _address_to_hash160(self, address: str) -> str:
        data = _b58check_decode(address)
        if data is None:
            raise InvalidAddress(f"Invalid address: {address}")
        return b_to_h(data[1:])

    def _script_to_hash160(self, script: Script) -> str:
        """Returns the hash160 of a redeem script in hex"""

        return b_to_h(hash160(script.to_bytes()))

    def _is_hash160_valid(self, hash160: str) -> bool:
        """Checks is a hash160 hex string is valid"""

        # 20 bytes, 40 characters in hexadecimal string
        if len(hash160) != 40:
            return False

        try:
            int(hash160, 16)
            return True
        except ValueError:
            return False

    def _is_address_valid(self, address: str) -> bool:
        """Checks the address' base58check encoding, length and version byte"""

        data = _b58check_decode(address)
        if data is None or len(data) != 21:
            return False
        return data[:1] == self._network_prefix()

    @abstractmethod
    def _network_prefix(self) -> bytes:
        pass

    def to_hash160(self) -> str:
        """Returns as hash160 hex string"""

        return self.hash160

    def get_type(self) -> str:
        """Returns the type of address"""
        return ""

    def to_string(self) -> str:
        """Returns as address string

        |  Pseudocode:
        |      network_prefix = (1 byte version number)
        |      data = network_prefix + hash160_bytes
        |      data_hash = SHA-256( SHA-256( data ) )
        |      checksum = (first 4 bytes of data_hash)
        |      address_bytes = Base58CheckEncode( data + checksum )
        """
        return _b58check_encode(self._network_prefix() + h_to_b(self.hash160))

    def to_script_pub_key(self) -> Script:
        """Overriden from subclasses"""
        return Script([])

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Address):
            return False
        return self.get_type() == other.get_type() and self.hash160 == other.hash160


class P2pkhAddress(Address):
    """Encapsulates a P2PKH address.

    Check Address class for details
    """

    def __init__(
        self, address: Optional[str] = None, hash160: Optional[str] = None
    ) -> None:
        super().__init__(address=address, hash160=hash160)

    def _network_prefix(self) -> bytes:
        return NETWORK_P2PKH_PREFIXES[get_network()]

    def to_script_pub_key(self) -> Script:
        """Returns the scriptPubKey (P2PKH) that corresponds to this address"""
        return Script(
            ["OP_DUP", "OP_HASH160", self.to_hash160(), "OP_EQUALVERIFY", "OP_CHECKSIG"]
        )

    def get_type(self) -> str:
        """Returns the type of address"""
        return P2PKH_ADDRESS


class P2shAddress(Address):
    """Encapsulates a P2SH address.

    Check Address class for details
    """

    def __init__(
        self,
        address: Optional[str] = None,
        hash160: Optional[str] = None,
        script: Optional[Script] = None,
    ) -> None:
        super().__init__(address=address, hash160=hash160, script=script)

    def _network_prefix(self) -> bytes:
        return NETWORK_P2SH_PREFIXES[get_network()]

    def to_script_pub_key(self) -> Script:
        """Returns the scriptPubKey (P2SH) that corresponds to this address"""
        return Script(["OP_HASH160", self.to_hash160(), "OP_EQUAL"])

    def get_type(self) -> str:
        """Returns the type of address"""
        return P2SH_ADDRESS