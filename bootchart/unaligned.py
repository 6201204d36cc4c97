"""Big- and little-endian integer access at arbitrary byte offsets."""

from __future__ import annotations

from typing import Literal

_Order = Literal["big", "little"]


def _read(data: bytes | bytearray | memoryview, offset: int, size: int, order: _Order) -> int:
    if offset < 0 or offset + size > len(data):
        raise ValueError(f"need {size} bytes at offset {offset}, have {len(data)}")
    return int.from_bytes(bytes(data[offset:offset + size]), order)


def _write(buf: bytearray | memoryview, offset: int, value: int, size: int, order: _Order) -> None:
    if offset < 0 or offset + size > len(buf):
        raise ValueError(f"need {size} bytes at offset {offset}, have {len(buf)}")
    # Values are truncated to the field width.
    value &= (1 << (8 * size)) - 1
    buf[offset:offset + size] = value.to_bytes(size, order)


def read_be16(data, offset=0):
    """Read an unsigned 16-bit big-endian integer."""
    return _read(data, offset, 2, "big")


def read_be32(data, offset=0):
    """Read an unsigned 32-bit big-endian integer."""
    return _read(data, offset, 4, "big")


def read_be64(data, offset=0):
    """Read an unsigned 64-bit big-endian integer."""
    return _read(data, offset, 8, "big")


def read_le16(data, offset=0):
    """Read an unsigned 16-bit little-endian integer."""
    return _read(data, offset, 2, "little")


def read_le32(data, offset=0):
    """Read an unsigned 32-bit little-endian integer."""
    return _read(data, offset, 4, "little")


def read_le64(data, offset=0):
    """Read an unsigned 64-bit little-endian integer."""
    return _read(data, offset, 8, "little")


def write_be16(buf, offset, value):
    """Store the low 16 bits of ``value`` big-endian into ``buf``."""
    _write(buf, offset, value, 2, "big")


def write_be32(buf, offset, value):
    """Store the low 32 bits of ``value`` big-endian into ``buf``."""
    _write(buf, offset, value, 4, "big")


def write_be64(buf, offset, value):
    """Store the low 64 bits of ``value`` big-endian into ``buf``."""
    _write(buf, offset, value, 8, "big")


def write_le16(buf, offset, value):
    """Store the low 16 bits of ``value`` little-endian into ``buf``."""
    _write(buf, offset, value, 2, "little")


def write_le32(buf, offset, value):
    """Store the low 32 bits of ``value`` little-endian into ``buf``."""
    _write(buf, offset, value, 4, "little")


def write_le64(buf, offset, value):
    """Store the low 64 bits of ``value`` little-endian into ``buf``."""
    _write(buf, offset, value, 8, "little")