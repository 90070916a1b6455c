"""
Byte-level primitives for the trailing GLD metadata.

The base game-state blob uses the .NET BinaryReader layout, so every value
here follows it: little-endian integers and strings prefixed with a 7-bit
encoded length.
"""

import struct
from typing import Tuple

from .errors import TruncatedError

# Trailer markers
GLD_MARKER = "##GLD:"         # untagged: int32 or string follows
GLD_TAGGED_MARKER = "##GLD+:"  # tagged: one discriminator byte follows

# Reserved range for externally supplied rulesets in the legacy format
MOD_GLD_VERSION_MIN = 1000

# A 7-bit encoded int32 never needs more than 5 bytes
MAX_7BIT_PREFIX_BYTES = 5


# Data type encoding functions

def encode_7bit_length(value: int) -> bytes:
    """Encode a non-negative length as a 7-bit variable-length integer."""
    if value < 0:
        raise ValueError(f"Length must be non-negative, got {value}")
    out = bytearray()
    while value >= 0x80:
        out.append((value & 0x7F) | 0x80)
        value >>= 7
    out.append(value)
    return bytes(out)


def encode_string(value: str) -> bytes:
    """Encode a STRING as a 7-bit length prefix followed by UTF-8 bytes."""
    raw = value.encode('utf-8')
    return encode_7bit_length(len(raw)) + raw


def encode_int32(value: int) -> bytes:
    """Encode an INT32 as 4 bytes in little-endian format."""
    return struct.pack('<i', value)


def encode_uint8(value: int) -> bytes:
    """Encode a UINT8 as 1 byte."""
    return struct.pack('B', value)


# Data type decoding functions

def decode_7bit_length(data: bytes, offset: int) -> Tuple[int, int]:
    """
    Decode a 7-bit encoded length prefix.

    Returns:
        Tuple of (length, new_offset)

    Raises:
        TruncatedError: If the prefix runs past the end of data or is longer
            than five bytes
    """
    value = 0
    shift = 0
    for i in range(MAX_7BIT_PREFIX_BYTES):
        if offset + i >= len(data):
            raise TruncatedError(f"Length prefix truncated at offset {offset + i}")
        byte = data[offset + i]
        value |= (byte & 0x7F) << shift
        if not byte & 0x80:
            return value, offset + i + 1
        shift += 7
    raise TruncatedError(f"Length prefix at offset {offset} exceeds {MAX_7BIT_PREFIX_BYTES} bytes")


class ByteCursor:
    """
    Read position over a finite byte sequence.

    Every read either returns a value and advances the position or raises
    TruncatedError and leaves the position where it was.
    """

    def __init__(self, data: bytes, position: int = 0):
        if position < 0 or position > len(data):
            raise ValueError(f"Position {position} outside buffer of {len(data)} bytes")
        self._data = bytes(data)
        self._position = position

    @property
    def position(self) -> int:
        return self._position

    def remaining(self) -> int:
        """Number of unread bytes."""
        return len(self._data) - self._position

    def rest(self) -> bytes:
        """Unread bytes, without advancing."""
        return self._data[self._position:]

    def read_bytes(self, count: int) -> bytes:
        if count < 0:
            raise ValueError(f"Cannot read {count} bytes")
        if count > self.remaining():
            raise TruncatedError(
                f"Need {count} bytes at offset {self._position}, "
                f"have {self.remaining()}"
            )
        chunk = self._data[self._position:self._position + count]
        self._position += count
        return chunk

    def read_uint8(self) -> int:
        return self.read_bytes(1)[0]

    def read_int32(self) -> int:
        """Read a little-endian signed 32-bit integer."""
        return struct.unpack('<i', self.read_bytes(4))[0]

    def read_length_prefixed_string(self) -> str:
        """
        Read a 7-bit length-prefixed UTF-8 string.

        Raises:
            TruncatedError: If the prefix cannot be read, the declared length
                exceeds the remaining bytes, or the bytes are not UTF-8
        """
        length, start = decode_7bit_length(self._data, self._position)
        end = start + length
        if end > len(self._data):
            raise TruncatedError(
                f"String at offset {self._position} declares {length} bytes, "
                f"only {len(self._data) - start} remain"
            )
        try:
            value = self._data[start:end].decode('utf-8')
        except UnicodeDecodeError as e:
            raise TruncatedError(f"String at offset {self._position} is not valid UTF-8: {e}") from e
        self._position = end
        return value

    def __repr__(self) -> str:
        return f"ByteCursor(position={self._position}, remaining={self.remaining()})"
