from __future__ import annotations

import struct
from typing import Optional

_U16 = struct.Struct("<H")
_I16 = struct.Struct("<h")
_U32 = struct.Struct("<I")


def read_u8(data: bytes, offset: int) -> int:
    return data[offset]


def read_u16(data: bytes, offset: int) -> int:
    return _U16.unpack_from(data, offset)[0]


def read_i16(data: bytes, offset: int) -> int:
    return _I16.unpack_from(data, offset)[0]


def read_u32(data: bytes, offset: int) -> int:
    return _U32.unpack_from(data, offset)[0]


def decode_cstring(data: bytes) -> str:
    """
    Decode a fixed-width, NUL-terminated byte field.

    Bytes after the first NUL are ignored. Each remaining byte maps to the
    code point of the same value (Latin-1), so non-ASCII bytes pass through
    uninterpreted instead of raising.
    """
    return bytes(data).split(b"\x00", 1)[0].decode("latin-1")


def get_bit(value: int, bit_index: int) -> bool:
    if bit_index < 0 or bit_index > 31:
        raise ValueError("bit_index must be between 0 and 31")
    return bool(value & (1 << bit_index))


def count_set_bits(value: int) -> int:
    return bin(value & 0xFFFFFFFF).count("1")


def scaled_or_none(raw: int, scale: int) -> Optional[float]:
    """Convert a scaled integer where a stored 0 means "no value"."""
    return raw / scale if raw > 0 else None
