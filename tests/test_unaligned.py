import pytest

from bootchart import unaligned as u


def test_pinned_big_endian_value():
    assert u.read_be32(b"\x01\x02\x03\x04") == 0x01020304


def test_pinned_little_endian_value():
    assert u.read_le16(b"\x34\x12") == 0x1234


def test_big_endian_byte_order():
    buf = bytearray(2)
    u.write_be16(buf, 0, 0x0102)
    assert buf == bytearray(b"\x01\x02")


def test_little_endian_byte_order():
    buf = bytearray(4)
    u.write_le32(buf, 0, 0x01020304)
    assert buf == bytearray(b"\x04\x03\x02\x01")


@pytest.mark.parametrize("offset", [0, 1, 3])
def test_round_trip_16_at_offsets(offset):
    value = 0xFFFD
    buf = bytearray(offset + 4)
    u.write_be16(buf, offset, value)
    assert u.read_be16(buf, offset) == value
    u.write_le16(buf, offset, value)
    assert u.read_le16(buf, offset) == value


@pytest.mark.parametrize("offset", [0, 1, 3])
def test_round_trip_32_at_offsets(offset):
    value = 0xFFFFFFFD
    buf = bytearray(offset + 6)
    u.write_be32(buf, offset, value)
    assert u.read_be32(buf, offset) == value
    u.write_le32(buf, offset, value)
    assert u.read_le32(buf, offset) == value


@pytest.mark.parametrize("offset", [0, 1, 3])
def test_round_trip_64_at_offsets(offset):
    value = 0xFFFFFFFFFFFFFFFD
    buf = bytearray(offset + 10)
    u.write_be64(buf, offset, value)
    assert u.read_be64(buf, offset) == value
    u.write_le64(buf, offset, value)
    assert u.read_le64(buf, offset) == value


def test_big_and_little_are_mirrors():
    data2 = bytes(range(1, 3))
    data4 = bytes(range(1, 5))
    data8 = bytes(range(1, 9))
    assert u.read_be16(data2) == u.read_le16(data2[::-1])
    assert u.read_be32(data4) == u.read_le32(data4[::-1])
    assert u.read_be64(data8) == u.read_le64(data8[::-1])


def test_write_only_touches_field():
    buf16 = bytearray(b"\xaa" * 4)
    u.write_be16(buf16, 1, 0)
    assert buf16 == bytearray(b"\xaa\x00\x00\xaa")

    buf32 = bytearray(b"\xaa" * 6)
    u.write_be32(buf32, 1, 0)
    assert buf32 == bytearray(b"\xaa" + bytes(4) + b"\xaa")

    buf64 = bytearray(b"\xaa" * 10)
    u.write_be64(buf64, 1, 0)
    assert buf64 == bytearray(b"\xaa" + bytes(8) + b"\xaa")


def test_write_truncates_to_width():
    buf16 = bytearray(2)
    u.write_le16(buf16, 0, (1 << 16) + 5)
    assert u.read_le16(buf16) == 5
    u.write_be16(buf16, 0, -1)
    assert u.read_be16(buf16) == 0xFFFF

    buf32 = bytearray(4)
    u.write_le32(buf32, 0, (1 << 32) + 5)
    assert u.read_le32(buf32) == 5
    u.write_be32(buf32, 0, -1)
    assert u.read_be32(buf32) == 0xFFFFFFFF

    buf64 = bytearray(8)
    u.write_le64(buf64, 0, (1 << 64) + 5)
    assert u.read_le64(buf64) == 5
    u.write_be64(buf64, 0, -1)
    assert u.read_be64(buf64) == 0xFFFFFFFFFFFFFFFF


def test_short_buffer_rejected_16():
    with pytest.raises(ValueError):
        u.read_be16(bytes(1))
    with pytest.raises(ValueError):
        u.write_le16(bytearray(2), 1, 0)


def test_short_buffer_rejected_32():
    with pytest.raises(ValueError):
        u.read_be32(bytes(3))
    with pytest.raises(ValueError):
        u.write_le32(bytearray(4), 1, 0)


def test_short_buffer_rejected_64():
    with pytest.raises(ValueError):
        u.read_be64(bytes(7))
    with pytest.raises(ValueError):
        u.write_le64(bytearray(8), 1, 0)