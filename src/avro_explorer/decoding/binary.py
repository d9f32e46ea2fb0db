"""Low-level cursor over Avro binary data."""

import struct

from avro_explorer.errors import FormatError, TruncatedDataError

_FLOAT = struct.Struct("<f")
_DOUBLE = struct.Struct("<d")

# A 64-bit long never needs more than ten 7-bit groups
MAX_VARINT_BYTES = 10


class BinaryCursor:
    """Reads Avro primitives from an in-memory buffer.

    The cursor never reads past the end of its buffer: any read that would do
    so raises ``TruncatedDataError`` with the offset where the read started.
    ``base_offset`` is added to reported offsets so errors point into the
    original file rather than into a block payload.
    """

    def __init__(self, data: bytes, base_offset: int = 0):
        self._data = memoryview(data)
        self._pos = 0
        self.base_offset = base_offset

    @property
    def position(self) -> int:
        return self._pos

    @property
    def offset(self) -> int:
        """Absolute offset of the cursor."""
        return self.base_offset + self._pos

    @property
    def remaining(self) -> int:
        return len(self._data) - self._pos

    def at_end(self) -> bool:
        return self._pos >= len(self._data)

    def read(self, size: int) -> bytes:
        if size < 0:
            raise TruncatedDataError(
                f"Negative length {size}", offset=self.offset
            )
        end = self._pos + size
        if end > len(self._data):
            raise TruncatedDataError(
                f"Needed {size} bytes, only {self.remaining} left",
                offset=self.offset,
            )
        chunk = self._data[self._pos:end].tobytes()
        self._pos = end
        return chunk

    def read_long(self) -> int:
        """Read a zig-zag encoded variable-length integer."""
        start = self._pos
        result = 0
        shift = 0
        while True:
            if self._pos >= len(self._data):
                raise TruncatedDataError(
                    "Input ended inside a variable-length integer",
                    offset=self.base_offset + start,
                )
            b = self._data[self._pos]
            self._pos += 1
            result |= (b & 0x7F) << shift
            if not (b & 0x80):
                break
            shift += 7
            if shift >= 7 * MAX_VARINT_BYTES:
                raise FormatError(
                    "Variable-length integer runs past 10 bytes",
                    offset=self.base_offset + start,
                )
        if result >> 64:
            raise FormatError(
                "Variable-length integer exceeds 64 bits",
                offset=self.base_offset + start,
            )
        return (result >> 1) ^ -(result & 1)

    def read_boolean(self) -> bool:
        return self.read(1) != b"\x00"

    def read_float(self) -> float:
        return _FLOAT.unpack(self.read(4))[0]

    def read_double(self) -> float:
        return _DOUBLE.unpack(self.read(8))[0]

    def read_bytes(self) -> bytes:
        """Read a long length prefix followed by that many raw bytes."""
        return self.read(self.read_long())


def encode_long(n: int) -> bytes:
    """Zig-zag encode ``n`` as an Avro long."""
    n = (n << 1) ^ (n >> 63)
    result = []
    while n >= 0x80:
        result.append((n & 0x7F) | 0x80)
        n >>= 7
    result.append(n)
    return bytes(result)
