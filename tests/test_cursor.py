from pathlib import Path
import sys

import pytest

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from smf.cursor import ByteReader, ByteWriter  # noqa: E402
from smf.errors import UnexpectedEndOfData, ValueOutOfRange  # noqa: E402


def test_big_endian_reads() -> None:
    reader = ByteReader(bytes.fromhex("01 0203 04050607"))
    assert reader.read_u8() == 0x01
    assert reader.read_u16() == 0x0203
    assert reader.read_u32() == 0x04050607
    assert reader.done()


def test_peek_does_not_advance() -> None:
    reader = ByteReader(b"\x90\x3c")
    assert reader.peek() == 0x90
    assert reader.position == 0


def test_read_past_end_reports_sizes() -> None:
    reader = ByteReader(b"\x00\x01\x02", base=10)
    reader.read(2)
    with pytest.raises(UnexpectedEndOfData) as excinfo:
        reader.read_u16()
    err = excinfo.value
    assert err.requested == 2
    assert err.remaining == 1
    assert err.offset == 12
    # A failed read leaves the position untouched.
    assert reader.position == 2


def test_peek_on_empty_reader() -> None:
    with pytest.raises(UnexpectedEndOfData):
        ByteReader(b"").peek()


def test_sub_reader_is_bounded_and_keeps_absolute_offsets() -> None:
    reader = ByteReader(b"ABCDEFGH")
    reader.read(2)
    sub = reader.sub_reader(3)
    assert reader.position == 5
    assert sub.base == 2
    assert sub.read(3) == b"CDE"
    with pytest.raises(UnexpectedEndOfData) as excinfo:
        sub.read_u8()
    assert excinfo.value.offset == 5


def test_writer_helpers() -> None:
    writer = ByteWriter()
    writer.write(b"MTrk")
    writer.write_u32(4)
    writer.write_u16(0x0102)
    writer.write_u8(0xFF)
    writer.write_vlq(0x80)
    assert writer.getvalue() == b"MTrk\x00\x00\x00\x04\x01\x02\xff\x81\x00"
    assert len(writer) == 13


@pytest.mark.parametrize(
    "method,value",
    [("write_u8", 0x100), ("write_u16", -1), ("write_u32", 1 << 32)],
)
def test_writer_rejects_values_that_do_not_fit(method: str, value: int) -> None:
    with pytest.raises(ValueOutOfRange):
        getattr(ByteWriter(), method)(value)
