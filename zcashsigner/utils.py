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
from typing import Tuple

from ecdsa import ellipticcurve  # type: ignore

from zcashsigner.errors import EncodingError, MalformedTransaction, SighashError
from zcashsigner.ripemd160 import ripemd160


class Secp256k1Params:
    # ECDSA curve using secp256k1 is defined by: y**2 = x**3 + 7
    # This is done modulo p which (secp256k1) is:
    # p is the finite field prime number and is equal to:
    # 2^256 - 2^32 - 2^9 - 2^8 - 2^7 - 2^6 - 2^4 - 1
    _p = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEFFFFFC2F
    # Curve's a and b are (y**2 = x**3 + a*x + b)
    _a = 0x0000000000000000000000000000000000000000000000000000000000000000
    _b = 0x0000000000000000000000000000000000000000000000000000000000000007
    # Curve's generator point is:
    _Gx = 0x79BE667EF9DCBBAC55A06295CE870B07029BFCDB2DCE28D959F2815B16F81798
    _Gy = 0x483ADA7726A3C4655DA4FBFC0E1108A8FD17B448A68554199C47D08FFB10D4B8
    # prime number of points in the group (the order)
    _order = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141

    _curve = ellipticcurve.CurveFp(_p, _a, _b)
    _G = ellipticcurve.Point(_curve, _Gx, _Gy, _order)


def prepend_compact_size(data: bytes) -> bytes:
    """
    Counts bytes and returns them with their varint (or compact size) prepended.
    """
    varint_bytes = encode_varint(len(data))
    return varint_bytes + data


def encode_varint(i: int) -> bytes:
    """
    Encode an integer into minimal varint (compact size) bytes, little-endian.

    Raises
    ------
    EncodingError
        if the integer is negative or does not fit in 64 bits
    """
    if i < 0:
        raise EncodingError(f"Cannot encode negative integer as varint: {i}")
    if i < 0xFD:
        return bytes([i])
    elif i < 0x10000:
        return b"\xfd" + i.to_bytes(2, "little")
    elif i < 0x100000000:
        return b"\xfe" + i.to_bytes(4, "little")
    elif i < 0x10000000000000000:
        return b"\xff" + i.to_bytes(8, "little")
    else:
        raise EncodingError(f"Integer is too large: {i}")


def read_varint(data: bytes, offset: int = 0) -> Tuple[int, int]:
    """
    Reads a varint from data at offset. Returns (value, next_offset).

    A 0xff prefix is followed by a full 64-bit little-endian value.

    Raises
    ------
    MalformedTransaction
        if the varint runs past the end of data or is not minimally encoded
    """
    if offset >= len(data):
        raise MalformedTransaction(f"Unexpected end of data reading varint at {offset}")

    first_byte = data[offset]
    if first_byte < 0xFD:
        return first_byte, offset + 1
    elif first_byte == 0xFD:
        size, minimum = 2, 0xFD
    elif first_byte == 0xFE:
        size, minimum = 4, 0x10000
    else:
        size, minimum = 8, 0x100000000

    end = offset + 1 + size
    if end > len(data):
        raise MalformedTransaction(f"Unexpected end of data reading varint at {offset}")
    value = int.from_bytes(data[offset + 1 : end], "little")
    # smaller values must use a shorter prefix
    if value < minimum:
        raise MalformedTransaction(f"Non-minimal varint at {offset}")
    return value, end


def read_bytes(data: bytes, offset: int, length: int) -> Tuple[bytes, int]:
    """Returns (data[offset:offset+length], next_offset) or raises
    MalformedTransaction if fewer than length bytes remain."""
    end = offset + length
    if length < 0 or end > len(data):
        raise MalformedTransaction(
            f"Unexpected end of data: needed {length} bytes at {offset}, "
            f"{len(data) - offset} available"
        )
    return data[offset:end], end


def read_struct(fmt: str, data: bytes, offset: int) -> Tuple[int, int]:
    """Unpacks a single little-endian value described by fmt at offset"""
    raw, offset = read_bytes(data, offset, struct.calcsize(fmt))
    return struct.unpack(fmt, raw)[0], offset


def pack_struct(fmt: str, value: int, field: str) -> bytes:
    """Packs value with fmt, raising EncodingError when it does not fit"""
    try:
        return struct.pack(fmt, value)
    except struct.error as e:
        raise EncodingError(f"Value {value} does not fit field {field}: {e}") from e


def double_sha256(data: bytes) -> bytes:
    """SHA-256( SHA-256( data ) )"""
    return hashlib.sha256(hashlib.sha256(data).digest()).digest()


def hash160(data: bytes) -> bytes:
    """RIPEMD-160( SHA-256( data ) )"""
    return ripemd160(hashlib.sha256(data).digest())


def personalized_hash(data: bytes, person: bytes) -> bytes:
    """
    BLAKE2b with a 32-byte digest and a 16-byte personalization, as used by
    the Overwinter/Sapling signature hash.

    Raises
    ------
    SighashError
        if the running interpreter's hashlib lacks BLAKE2b; there is no
        substitute hash
    """
    blake2b = getattr(hashlib, "blake2b", None)
    if blake2b is None:
        raise SighashError("BLAKE2b is not available in hashlib")
    if len(person) > 16:
        raise SighashError(f"Personalization too long: {len(person)} bytes")
    return blake2b(data, digest_size=32, person=person).digest()


def b_to_h(b: bytes) -> str:
    """
    Converts bytes to hexadecimal string
    """
    return b.hex()


def h_to_b(h: str) -> bytes:
    """
    Converts hexadecimal string to bytes
    """
    return bytes.fromhex(h)


def b_to_i(b: bytes) -> int:
    """
    Converts a bytes to a number
    """
    return int.from_bytes(b, byteorder="big")


def i_to_b32(i: int) -> bytes:
    """
    Converts a integer to bytes
    """
    return i.to_bytes(32, byteorder="big")


def wipe(buffer: bytearray) -> None:
    """Overwrites a mutable buffer holding key material with zeros"""
    buffer[:] = bytes(len(buffer))
