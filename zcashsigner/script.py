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

import copy
import struct
from typing import Any, Optional, Union

from zcashsigner.utils import b_to_h, h_to_b


# Transparent script op codes (shared with Bitcoin)
OP_CODES = {
    # constants
    "OP_0": b"\x00",
    "OP_FALSE": b"\x00",
    "OP_PUSHDATA1": b"\x4c",
    "OP_PUSHDATA2": b"\x4d",
    "OP_PUSHDATA4": b"\x4e",
    "OP_1NEGATE": b"\x4f",
    "OP_1": b"\x51",
    "OP_TRUE": b"\x51",
    "OP_2": b"\x52",
    "OP_3": b"\x53",
    "OP_4": b"\x54",
    "OP_5": b"\x55",
    "OP_6": b"\x56",
    "OP_7": b"\x57",
    "OP_8": b"\x58",
    "OP_9": b"\x59",
    "OP_10": b"\x5a",
    "OP_11": b"\x5b",
    "OP_12": b"\x5c",
    "OP_13": b"\x5d",
    "OP_14": b"\x5e",
    "OP_15": b"\x5f",
    "OP_16": b"\x60",
    # flow control
    "OP_NOP": b"\x61",
    "OP_IF": b"\x63",
    "OP_NOTIF": b"\x64",
    "OP_ELSE": b"\x67",
    "OP_ENDIF": b"\x68",
    "OP_VERIFY": b"\x69",
    "OP_RETURN": b"\x6a",
    # stack
    "OP_DROP": b"\x75",
    "OP_DUP": b"\x76",
    "OP_SWAP": b"\x7c",
    "OP_2DROP": b"\x6d",
    "OP_2DUP": b"\x6e",
    "OP_SIZE": b"\x82",
    # bitwise logic
    "OP_EQUAL": b"\x87",
    "OP_EQUALVERIFY": b"\x88",
    # crypto
    "OP_RIPEMD160": b"\xa6",
    "OP_SHA1": b"\xa7",
    "OP_SHA256": b"\xa8",
    "OP_HASH160": b"\xa9",
    "OP_HASH256": b"\xaa",
    "OP_CODESEPARATOR": b"\xab",
    "OP_CHECKSIG": b"\xac",
    "OP_CHECKSIGVERIFY": b"\xad",
    "OP_CHECKMULTISIG": b"\xae",
    "OP_CHECKMULTISIGVERIFY": b"\xaf",
    # locktime
    "OP_CHECKLOCKTIMEVERIFY": b"\xb1",
    "OP_CHECKSEQUENCEVERIFY": b"\xb2",
}

# reverse mapping; the first name listed for a code wins over its aliases
CODE_OPS = {code: op for op, code in reversed(list(OP_CODES.items()))}


class Script:
    """Represents a transparent script

    A Script contains a list of OP_CODES and pushed data (hex strings) and
    knows how to serialize into bytes. A Script parsed from raw bytes keeps
    those bytes and serializes back to them unchanged.

    Attributes
    ----------
    script : list
        the list with all the script OP_CODES and data

    Methods
    -------
    to_bytes()
        returns a serialized byte version of the script
    to_hex()
        returns a serialized version of the script in hex
    get_script()
        returns the list of strings that makes up this script
    copy()
        creates a copy of the object (classmethod)
    from_raw()
        instantiates a Script from raw bytes or hex (staticmethod)
    is_p2pkh()
        checks if script is P2PKH (Pay-to-Public-Key-Hash)
    is_p2sh()
        checks if script is P2SH (Pay-to-Script-Hash)
    get_script_type()
        determines the type of script

    Raises
    ------
    ValueError
        If string data is too large or integer is negative
    """

    def __init__(self, script: list[Any], raw: Optional[bytes] = None):
        """See Script description"""
        self.script: list[Any] = script
        self._raw = raw
        # tokens the raw bytes were parsed into
        self._raw_tokens = list(script) if raw is not None else None

    def _raw_is_current(self) -> bool:
        return self._raw is not None and self.script == self._raw_tokens

    @classmethod
    def copy(cls, script: "Script") -> "Script":
        """Deep copy of Script"""
        raw = script._raw if script._raw_is_current() else None
        return cls(copy.deepcopy(script.script), raw)

    def _op_push_data(self, data: str) -> bytes:
        """Converts data to appropriate OP_PUSHDATA OP code including length"""
        data_bytes = h_to_b(data)

        if len(data_bytes) < 0x4C:
            return bytes([len(data_bytes)]) + data_bytes
        elif len(data_bytes) <= 0xFF:
            return b"\x4c" + bytes([len(data_bytes)]) + data_bytes
        elif len(data_bytes) <= 0xFFFF:
            return b"\x4d" + struct.pack("<H", len(data_bytes)) + data_bytes
        elif len(data_bytes) <= 0xFFFFFFFF:
            return b"\x4e" + struct.pack("<I", len(data_bytes)) + data_bytes
        else:
            raise ValueError("Data too large. Cannot push into script")

    def to_bytes(self) -> bytes:
        """Converts the script to bytes"""
        if self._raw_is_current():
            return self._raw

        script_bytes = b""
        for token in self.script:
            if token in OP_CODES:
                script_bytes += OP_CODES[token]
            elif isinstance(token, int) and 0 <= token <= 16:
                script_bytes += OP_CODES["OP_" + str(token)]
            elif isinstance(token, int):
                raise ValueError("Only small integers (0-16) can be pushed")
            else:
                script_bytes += self._op_push_data(token)
        return script_bytes

    def to_hex(self) -> str:
        """Converts the script to hexadecimal"""
        return b_to_h(self.to_bytes())

    @staticmethod
    def from_raw(scriptraw: Union[str, bytes]) -> "Script":
        """
        Imports a Script commands list from raw bytes or hexadecimal data.

        Scripts are opaque to consensus parsing, so a push that runs past the
        end is kept as a truncated data item instead of raising.
        """
        if isinstance(scriptraw, str):
            scriptraw = h_to_b(scriptraw)
        elif not isinstance(scriptraw, (bytes, bytearray)):
            raise TypeError("Input must be a hexadecimal string or bytes")
        scriptraw = bytes(scriptraw)

        commands: list[Any] = []
        index = 0
        while index < len(scriptraw):
            byte = scriptraw[index]
            index += 1
            if 0x01 <= byte <= 0x4B:
                commands.append(scriptraw[index : index + byte].hex())
                index += byte
            elif byte in (0x4C, 0x4D, 0x4E):
                width = {0x4C: 1, 0x4D: 2, 0x4E: 4}[byte]
                size = int.from_bytes(scriptraw[index : index + width], "little")
                index += width
                commands.append(scriptraw[index : index + size].hex())
                index += size
            elif bytes([byte]) in CODE_OPS:
                commands.append(CODE_OPS[bytes([byte])])
            else:
                commands.append(f"OP_UNKNOWN_{byte:02x}")

        return Script(commands, raw=scriptraw)

    def get_script(self) -> list[Any]:
        """Returns script as array of strings"""
        return self.script

    def is_p2sh(self) -> bool:
        """
        Check if script is P2SH (Pay-to-Script-Hash).

        P2SH format: OP_HASH160 <20-byte-script-hash> OP_EQUAL
        """
        b = self.to_bytes()
        return len(b) == 23 and b[0] == 0xA9 and b[1] == 0x14 and b[22] == 0x87

    def is_p2pkh(self) -> bool:
        """
        Check if script is P2PKH (Pay-to-Public-Key-Hash).

        P2PKH format: OP_DUP OP_HASH160 <20-byte-key-hash> OP_EQUALVERIFY OP_CHECKSIG
        """
        b = self.to_bytes()
        return (
            len(b) == 25
            and b[:3] == b"\x76\xa9\x14"
            and b[23:] == b"\x88\xac"
        )

    def get_script_type(self) -> str:
        """
        Determine the type of script.

        Returns:
            str: Script type ('p2pkh', 'p2sh', 'empty', 'unknown')
        """
        if self.is_p2pkh():
            return "p2pkh"
        elif self.is_p2sh():
            return "p2sh"
        elif not self.to_bytes():
            return "empty"
        else:
            return "unknown"

    def __str__(self) -> str:
        return str(self.script)

    def __repr__(self) -> str:
        return self.__str__()

    def __eq__(self, _other: object) -> bool:
        if not isinstance(_other, Script):
            return False
        return self.to_bytes() == _other.to_bytes()


def p2pkh_script_sig(signature: str, public_key: str) -> Script:
    """Returns the P2PKH unlocking script: <signature+hashtype> <pubkey>

    Both arguments are hex strings; each is pushed with a single length byte.
    """
    return Script([signature, public_key])
