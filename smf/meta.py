"""Typed views over meta events.

``Meta`` keeps a meta event as ``(type, data)`` so unknown types round-trip.
``interpret`` turns the well-known types into small value objects and
``to_meta`` goes the other way:

  FF 00 02 ssss        sequence number
  FF 01..0F len text   text-like events (0x01 text, 0x02 copyright,
                       0x03 sequence/track name, 0x04 instrument name,
                       0x05 lyric, 0x06 marker, 0x07 cue point)
  FF 20 01 cc          MIDI channel prefix
  FF 21 01 pp          MIDI port
  FF 2F 00             end of track
  FF 51 03 tttttt      set tempo, microseconds per quarter note
  FF 54 05 hr mn se fr ff  SMPTE offset
  FF 58 04 nn dd cc bb time signature (dd is a power of two)
  FF 59 02 sf mi       key signature (sf < 0: flats, mi = 1: minor)
  FF 7F len data       sequencer specific

Text payloads are decoded as latin-1 so arbitrary bytes survive a round trip.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional, Union

from .errors import InvalidMetaEvent, ValueOutOfRange
from .events import END_OF_TRACK, Meta


class MetaType(IntEnum):
    SEQUENCE_NUMBER = 0x00
    TEXT = 0x01
    COPYRIGHT = 0x02
    TRACK_NAME = 0x03
    INSTRUMENT_NAME = 0x04
    LYRIC = 0x05
    MARKER = 0x06
    CUE_POINT = 0x07
    CHANNEL_PREFIX = 0x20
    MIDI_PORT = 0x21
    END_OF_TRACK = END_OF_TRACK
    SET_TEMPO = 0x51
    SMPTE_OFFSET = 0x54
    TIME_SIGNATURE = 0x58
    KEY_SIGNATURE = 0x59
    SEQUENCER_SPECIFIC = 0x7F


TEXT_TYPES = range(0x01, 0x10)
TEXT_ENCODING = "latin-1"


@dataclass(frozen=True)
class SequenceNumber:
    number: int


@dataclass(frozen=True)
class Text:
    type: int  # 0x01-0x0F
    text: str


@dataclass(frozen=True)
class ChannelPrefix:
    channel: int


@dataclass(frozen=True)
class MidiPort:
    port: int


@dataclass(frozen=True)
class EndOfTrack:
    pass


@dataclass(frozen=True)
class SetTempo:
    microseconds_per_quarter: int

    @property
    def bpm(self) -> float:
        return 60_000_000 / self.microseconds_per_quarter

    @classmethod
    def from_bpm(cls, bpm: float) -> "SetTempo":
        return cls(int(round(60_000_000 / bpm)))


@dataclass(frozen=True)
class SmpteOffset:
    hours: int
    minutes: int
    seconds: int
    frames: int
    fractional_frames: int  # 1/100ths of a frame


@dataclass(frozen=True)
class TimeSignature:
    numerator: int
    denominator_power: int
    clocks_per_click: int = 24
    thirty_seconds_per_quarter: int = 8

    @property
    def denominator(self) -> int:
        return 1 << self.denominator_power


@dataclass(frozen=True)
class KeySignature:
    sharps_flats: int  # -7..7
    minor: bool


@dataclass(frozen=True)
class SequencerSpecific:
    data: bytes


TypedMeta = Union[
    SequenceNumber,
    Text,
    ChannelPrefix,
    MidiPort,
    EndOfTrack,
    SetTempo,
    SmpteOffset,
    TimeSignature,
    KeySignature,
    SequencerSpecific,
]

# Fixed payload sizes for the types that have one.
_FIXED_SIZES = {
    MetaType.SEQUENCE_NUMBER: 2,
    MetaType.CHANNEL_PREFIX: 1,
    MetaType.MIDI_PORT: 1,
    MetaType.END_OF_TRACK: 0,
    MetaType.SET_TEMPO: 3,
    MetaType.SMPTE_OFFSET: 5,
    MetaType.TIME_SIGNATURE: 4,
    MetaType.KEY_SIGNATURE: 2,
}


def interpret(meta: Meta) -> Optional[TypedMeta]:
    """Return a typed view of ``meta``, or None for types without one."""

    data = bytes(meta.data)
    kind = meta.type

    if kind in TEXT_TYPES:
        return Text(kind, data.decode(TEXT_ENCODING))
    if kind == MetaType.SEQUENCER_SPECIFIC:
        return SequencerSpecific(data)
    if kind not in _FIXED_SIZES:
        return None

    expected = _FIXED_SIZES[MetaType(kind)]
    if len(data) != expected:
        raise InvalidMetaEvent(
            f"meta 0x{kind:02X} ({MetaType(kind).name}) needs {expected} data bytes, got {len(data)}"
        )

    if kind == MetaType.SEQUENCE_NUMBER:
        return SequenceNumber(int.from_bytes(data, "big"))
    if kind == MetaType.CHANNEL_PREFIX:
        return ChannelPrefix(data[0])
    if kind == MetaType.MIDI_PORT:
        return MidiPort(data[0])
    if kind == MetaType.END_OF_TRACK:
        return EndOfTrack()
    if kind == MetaType.SET_TEMPO:
        return SetTempo(int.from_bytes(data, "big"))
    if kind == MetaType.SMPTE_OFFSET:
        return SmpteOffset(*data)
    if kind == MetaType.TIME_SIGNATURE:
        return TimeSignature(*data)
    # key signature
    return KeySignature(sharps_flats=int.from_bytes(data[:1], "big", signed=True), minor=bool(data[1]))


def _byte(value: int, *, where: str, low: int = 0, high: int = 0xFF) -> int:
    if not isinstance(value, int) or isinstance(value, bool) or not (low <= value <= high):
        raise ValueOutOfRange(f"{where} {value!r} outside [{low}, {high}]")
    return value


def to_meta(typed: TypedMeta) -> Meta:
    if isinstance(typed, Text):
        _byte(typed.type, where="text meta type", low=0x01, high=0x0F)
        return Meta(typed.type, typed.text.encode(TEXT_ENCODING))
    if isinstance(typed, SequencerSpecific):
        return Meta(MetaType.SEQUENCER_SPECIFIC, bytes(typed.data))
    if isinstance(typed, SequenceNumber):
        _byte(typed.number, where="sequence number", high=0xFFFF)
        return Meta(MetaType.SEQUENCE_NUMBER, typed.number.to_bytes(2, "big"))
    if isinstance(typed, ChannelPrefix):
        return Meta(MetaType.CHANNEL_PREFIX, bytes([_byte(typed.channel, where="channel prefix", high=15)]))
    if isinstance(typed, MidiPort):
        return Meta(MetaType.MIDI_PORT, bytes([_byte(typed.port, where="MIDI port", high=0x7F)]))
    if isinstance(typed, EndOfTrack):
        return Meta.end_of_track()
    if isinstance(typed, SetTempo):
        _byte(typed.microseconds_per_quarter, where="tempo", high=0xFFFFFF)
        return Meta(MetaType.SET_TEMPO, typed.microseconds_per_quarter.to_bytes(3, "big"))
    if isinstance(typed, SmpteOffset):
        fields = (typed.hours, typed.minutes, typed.seconds, typed.frames, typed.fractional_frames)
        return Meta(MetaType.SMPTE_OFFSET, bytes(_byte(v, where="SMPTE offset field") for v in fields))
    if isinstance(typed, TimeSignature):
        fields = (
            typed.numerator,
            typed.denominator_power,
            typed.clocks_per_click,
            typed.thirty_seconds_per_quarter,
        )
        return Meta(MetaType.TIME_SIGNATURE, bytes(_byte(v, where="time signature field") for v in fields))
    if isinstance(typed, KeySignature):
        _byte(typed.sharps_flats, where="key signature sharps/flats", low=-7, high=7)
        return Meta(
            MetaType.KEY_SIGNATURE,
            typed.sharps_flats.to_bytes(1, "big", signed=True) + bytes([1 if typed.minor else 0]),
        )
    raise TypeError(f"unsupported meta value {type(typed).__name__}")
