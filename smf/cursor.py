from __future__ import annotations

from .errors import UnexpectedEndOfData, ValueOutOfRange
from .vlq import encode_vlq, read_vlq


class ByteReader:
    """Forward-only, bounds-checked reader over an immutable buffer.

    ``base`` is the absolute offset of ``data[0]`` in the outermost buffer so
    errors raised from a bounded sub-reader still point at the right byte.
    """

    def __init__(self, data: bytes, base: int = 0) -> None:
        self._data = bytes(data)
        self._pos = 0
        self.base = base

    def __len__(self) -> int:
        return len(self._data)

    @property
    def position(self) -> int:
        return self._pos

    @property
    def offset(self) -> int:
        return self.base + self._pos

    @property
    def remaining(self) -> int:
        return len(self._data) - self._pos

    def done(self) -> bool:
        return self._pos == len(self._data)

    def _require(self, n: int) -> None:
        if n > self.remaining:
            raise UnexpectedEndOfData(n, self.remaining, offset=self.offset)

    def peek(self) -> int:
        self._require(1)
        return self._data[self._pos]

    def read(self, n: int) -> bytes:
        if n < 0:
            raise ValueError(f"cannot read a negative byte count ({n})")
        self._require(n)
        chunk = self._data[self._pos : self._pos + n]
        self._pos += n
        return chunk

    def read_rest(self) -> bytes:
        return self.read(self.remaining)

    def read_u8(self) -> int:
        self._require(1)
        value = self._data[self._pos]
        self._pos += 1
        return value

    def read_u16(self) -> int:
        return int.from_bytes(self.read(2), "big")

    def read_u32(self) -> int:
        return int.from_bytes(self.read(4), "big")

    def read_vlq(self) -> int:
        return read_vlq(self)

    def sub_reader(self, n: int) -> "ByteReader":
        """Consume ``n`` bytes and return a reader bounded to exactly them."""

        base = self.offset
        return ByteReader(self.read(n), base=base)


class ByteWriter:
    """Append-only output buffer with big-endian helpers."""

    def __init__(self) -> None:
        self._buf = bytearray()

    def __len__(self) -> int:
        return len(self._buf)

    def write(self, data: bytes) -> None:
        self._buf.extend(data)

    def _write_uint(self, value: int, size: int) -> None:
        limit = (1 << (8 * size)) - 1
        if not isinstance(value, int) or isinstance(value, bool) or not (0 <= value <= limit):
            raise ValueOutOfRange(f"{value!r} does not fit in {size * 8} unsigned bits")
        self._buf.extend(value.to_bytes(size, "big"))

    def write_u8(self, value: int) -> None:
        self._write_uint(value, 1)

    def write_u16(self, value: int) -> None:
        self._write_uint(value, 2)

    def write_u32(self, value: int) -> None:
        self._write_uint(value, 4)

    def write_vlq(self, value: int) -> None:
        self._buf.extend(encode_vlq(value))

    def getvalue(self) -> bytes:
        return bytes(self._buf)
