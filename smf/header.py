from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Union

from .errors import InvalidHeaderLength, UnsupportedDivisionEncoding, ValueOutOfRange


HEADER_TAG = b"MThd"
HEADER_SIZE = 6
SMPTE_FLAG = 0x8000


class Format(IntEnum):
    SINGLE_TRACK = 0  # one multi-channel track
    MULTI_TRACK = 1  # simultaneous tracks of one sequence
    MULTI_SONG = 2  # sequentially independent single-track patterns


class FramesPerSecond(IntEnum):
    FPS_24 = 24
    FPS_25 = 25
    FPS_30_DROP = 29
    FPS_30 = 30


@dataclass(frozen=True)
class TicksPerQuarterNote:
    """Metrical time: delta-times count subdivisions of a quarter note."""

    ticks: int

    def to_word(self) -> int:
        if not (0 <= self.ticks <= 0x7FFF):
            raise ValueOutOfRange(f"ticks per quarter note {self.ticks} outside [0, 0x7FFF]")
        return self.ticks


@dataclass(frozen=True)
class SmpteTimecode:
    """Time-code based time.

    ``frames_per_second`` is stored positive; on disk the upper byte holds its
    two's-complement negation (0xE8 = -24, 0xE7 = -25, 0xE3 = -29, 0xE2 = -30).
    """

    frames_per_second: int
    ticks_per_frame: int

    @property
    def frame_rate(self) -> FramesPerSecond:
        try:
            return FramesPerSecond(self.frames_per_second)
        except ValueError:
            raise UnsupportedDivisionEncoding(
                f"SMPTE frame rate {self.frames_per_second} is not one of 24, 25, 29, 30"
            ) from None

    def to_word(self) -> int:
        if not (1 <= self.frames_per_second <= 128):
            raise ValueOutOfRange(f"SMPTE frames per second {self.frames_per_second} outside [1, 128]")
        if not (0 <= self.ticks_per_frame <= 0xFF):
            raise ValueOutOfRange(f"SMPTE ticks per frame {self.ticks_per_frame} outside [0, 255]")
        upper = (0x100 - self.frames_per_second) & 0xFF
        return (upper << 8) | self.ticks_per_frame


Division = Union[TicksPerQuarterNote, SmpteTimecode]


def division_from_word(word: int) -> Division:
    if word & SMPTE_FLAG:
        upper = word >> 8
        return SmpteTimecode(frames_per_second=0x100 - upper, ticks_per_frame=word & 0xFF)
    return TicksPerQuarterNote(word)


@dataclass
class HeaderChunk:
    """The ``MThd`` chunk: file organization, track count and time division.

    ``format`` is kept as the raw word so files with an unknown format still
    round-trip; compare it against ``Format`` members.
    """

    format: int
    track_count: int
    division: Division

    tag = HEADER_TAG

    @classmethod
    def from_bytes(cls, payload: bytes) -> "HeaderChunk":
        if len(payload) != HEADER_SIZE:
            raise InvalidHeaderLength(len(payload))
        fmt = int.from_bytes(payload[0:2], "big")
        track_count = int.from_bytes(payload[2:4], "big")
        division = division_from_word(int.from_bytes(payload[4:6], "big"))
        return cls(format=fmt, track_count=track_count, division=division)

    def to_bytes(self) -> bytes:
        for name, value in (("format", self.format), ("track_count", self.track_count)):
            if not isinstance(value, int) or not (0 <= value <= 0xFFFF):
                raise ValueOutOfRange(f"header {name} {value!r} outside [0, 0xFFFF]")
        return (
            int(self.format).to_bytes(2, "big")
            + self.track_count.to_bytes(2, "big")
            + self.division.to_word().to_bytes(2, "big")
        )
