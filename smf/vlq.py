"""Variable-length quantities: big-endian 7-bit groups, top bit = "more follows".

The SMF format caps a quantity at 4 bytes, i.e. 28 bits of payload:

  0x00000000  00
  0x00000040  40
  0x0000007F  7F
  0x00000080  81 00
  0x00002000  C0 00
  0x00003FFF  FF 7F
  0x00004000  81 80 00
  0x0FFFFFFF  FF FF FF 7F
"""

from __future__ import annotations

from .errors import MalformedVLQ, ValueOutOfRange

MAX_VLQ_BYTES = 4
MAX_VLQ_VALUE = 0x0FFFFFFF


def read_vlq(reader) -> int:
    """Consume one quantity from ``reader`` (anything with ``read_u8``/``offset``).

    Redundant leading ``0x80`` groups are accepted; the width is not kept.
    """

    start = reader.offset
    value = 0
    for _ in range(MAX_VLQ_BYTES):
        byte = reader.read_u8()
        value = (value << 7) | (byte & 0x7F)
        if byte & 0x80 == 0:
            return value
    raise MalformedVLQ(
        f"variable-length quantity longer than {MAX_VLQ_BYTES} bytes", offset=start
    )


def encode_vlq(value: int) -> bytes:
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValueOutOfRange(f"variable-length quantity must be an int, got {value!r}")
    if not (0 <= value <= MAX_VLQ_VALUE):
        raise ValueOutOfRange(
            f"variable-length quantity {value} outside [0, 0x{MAX_VLQ_VALUE:X}]"
        )

    groups = [value & 0x7F]
    value >>= 7
    while value:
        groups.append((value & 0x7F) | 0x80)
        value >>= 7
    return bytes(reversed(groups))


def vlq_size(value: int) -> int:
    """Number of bytes ``encode_vlq(value)`` produces."""

    return len(encode_vlq(value))
