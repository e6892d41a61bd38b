"""Little-endian integer helpers and 4-byte padding arithmetic."""

from __future__ import annotations


def pad(n: int) -> int:
    """Number of zero bytes needed to bring ``n`` up to a multiple of 4."""
    return -n & 3


def padded(n: int) -> int:
    return n + pad(n)


def put16(buf: bytearray, offset: int, value: int) -> None:
    buf[offset] = value & 0xFF
    buf[offset + 1] = (value >> 8) & 0xFF


def put32(buf: bytearray, offset: int, value: int) -> None:
    buf[offset] = value & 0xFF
    buf[offset + 1] = (value >> 8) & 0xFF
    buf[offset + 2] = (value >> 16) & 0xFF
    buf[offset + 3] = (value >> 24) & 0xFF


def get8(buf: bytes, offset: int) -> int:
    return buf[offset]


def get16(buf: bytes, offset: int) -> int:
    return buf[offset] | (buf[offset + 1] << 8)


def get32(buf: bytes, offset: int) -> int:
    return buf[offset] | (buf[offset + 1] << 8) | (buf[offset + 2] << 16) | (buf[offset + 3] << 24)
