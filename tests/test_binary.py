import struct

import pytest

from gaggimate.core.binary import (
    count_set_bits,
    decode_cstring,
    get_bit,
    read_i16,
    read_u16,
    read_u32,
    scaled_or_none,
)


def test_little_endian_readers():
    data = struct.pack("<HhI", 0xBEEF, -5, 0x58444953)
    assert read_u16(data, 0) == 0xBEEF
    assert read_i16(data, 2) == -5
    assert read_u32(data, 4) == 0x58444953


def test_get_bit():
    assert get_bit(0b1010, 1) is True
    assert get_bit(0b1010, 0) is False
    assert get_bit(1 << 31, 31) is True


@pytest.mark.parametrize("bit_index", [-1, 32])
def test_get_bit_out_of_range(bit_index):
    with pytest.raises(ValueError):
        get_bit(0xFFFFFFFF, bit_index)


@pytest.mark.parametrize(
    "value, expected",
    [(0, 0), (0x1, 1), (0x1FFF, 13), (0xFFFFFFFF, 32), (0b1000_0000_0001, 2)],
)
def test_count_set_bits(value, expected):
    assert count_set_bits(value) == expected


def test_decode_cstring():
    assert decode_cstring(b"Blooming\x00\x00\x00") == "Blooming"
    assert decode_cstring(b"a\x00b") == "a"
    assert decode_cstring(b"\x00" * 8) == ""
    assert decode_cstring(b"no-terminator") == "no-terminator"


def test_scaled_or_none():
    assert scaled_or_none(365, 10) == 36.5
    assert scaled_or_none(0, 10) is None
