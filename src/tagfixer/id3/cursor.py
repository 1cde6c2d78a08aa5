"""Bounds-checked reads over an in-memory tag buffer.

All multi-byte integers in the tag go through :func:`read_uint32_be` or
:func:`read_synchsafe`; nothing else shifts bytes by hand.
"""

from __future__ import annotations

from typing import Optional

from .errors import TruncatedDataError
from .models import TagHeader

ID3_MAGIC = b"ID3"
HEADER_SIZE = 10


def _four(data: bytes, offset: int) -> bytes:
    if offset < 0 or offset + 4 > len(data):
        raise TruncatedDataError(
            f"need 4 bytes at offset {offset}, buffer has {len(data)}"
        )
    return data[offset : offset + 4]


def read_uint32_be(data: bytes, offset: int) -> int:
    """Plain 32-bit big-endian integer (ID3v2.3 frame sizes)."""
    b0, b1, b2, b3 = _four(data, offset)
    return (b0 << 24) | (b1 << 16) | (b2 << 8) | b3


def read_synchsafe(data: bytes, offset: int) -> int:
    """28-bit integer stored as four 7-bit groups (tag header size)."""
    b0, b1, b2, b3 = _four(data, offset)
    return ((b0 & 0x7F) << 21) | ((b1 & 0x7F) << 14) | ((b2 & 0x7F) << 7) | (b3 & 0x7F)


class ByteCursor:
    """Forward-only reader over a byte buffer; short reads raise TruncatedDataError."""

    def __init__(self, data: bytes, offset: int = 0):
        self._data = data
        self._pos = offset

    @property
    def position(self) -> int:
        return self._pos

    @property
    def remaining(self) -> int:
        return max(0, len(self._data) - self._pos)

    def peek(self, n: int) -> bytes:
        if n < 0 or n > self.remaining:
            raise TruncatedDataError(
                f"need {n} bytes at offset {self._pos}, {self.remaining} left"
            )
        return self._data[self._pos : self._pos + n]

    def read(self, n: int) -> bytes:
        out = self.peek(n)
        self._pos += n
        return out

    def skip(self, n: int) -> None:
        self.read(n)

    def read_u8(self) -> int:
        return self.read(1)[0]

    def read_uint32_be(self) -> int:
        value = read_uint32_be(self._data, self._pos)
        self._pos += 4
        return value

    def read_synchsafe(self) -> int:
        value = read_synchsafe(self._data, self._pos)
        self._pos += 4
        return value


def parse_tag_header(data: bytes) -> Optional[TagHeader]:
    """Decode the 10-byte ``ID3`` header, or None when there is no tag."""
    if len(data) < HEADER_SIZE or data[:3] != ID3_MAGIC:
        return None
    cur = ByteCursor(data, 3)
    version = cur.read_u8()
    revision = cur.read_u8()
    flags = cur.read_u8()
    size = cur.read_synchsafe()
    return TagHeader(version=version, revision=revision, flags=flags, size=size)
