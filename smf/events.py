"""Track event bodies.

Every event in an ``MTrk`` chunk is a delta-time followed by one of four
bodies, distinguished by the first byte after the delta-time:

  0x80-0xEF  channel voice/mode message (may be omitted: running status)
  0xF0       System Exclusive packet, or the first packet of a split message
  0xF7       continuation packet of an open SysEx, otherwise an escape
  0xFF       meta event: type byte, VLQ length, data
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Union


META_STATUS = 0xFF
SYSEX_STATUS = 0xF0
ESCAPE_STATUS = 0xF7
SYSEX_END = 0xF7

END_OF_TRACK = 0x2F


class ChannelKind(IntEnum):
    NOTE_OFF = 0x8
    NOTE_ON = 0x9
    POLY_PRESSURE = 0xA
    CONTROL_CHANGE = 0xB
    PROGRAM_CHANGE = 0xC
    CHANNEL_PRESSURE = 0xD
    PITCH_BEND = 0xE

    @property
    def data_length(self) -> int:
        if self in (ChannelKind.PROGRAM_CHANGE, ChannelKind.CHANNEL_PRESSURE):
            return 1
        return 2


def channel_data_length(status: int) -> int:
    """Data bytes that follow a channel status byte (0x80-0xEF)."""

    return ChannelKind(status >> 4).data_length


@dataclass
class ChannelVoice:
    kind: ChannelKind
    channel: int
    data: bytes
    # True when the source omitted the status byte; the encoder's "preserve"
    # policy omits it again.
    running_status: bool = field(default=False, compare=False)

    @property
    def status(self) -> int:
        return (int(self.kind) << 4) | self.channel

    @classmethod
    def from_status(cls, status: int, data: bytes, *, running_status: bool = False) -> "ChannelVoice":
        return cls(
            kind=ChannelKind(status >> 4),
            channel=status & 0x0F,
            data=bytes(data),
            running_status=running_status,
        )

    @classmethod
    def note_on(cls, channel: int, note: int, velocity: int) -> "ChannelVoice":
        return cls(ChannelKind.NOTE_ON, channel, bytes([note, velocity]))

    @classmethod
    def note_off(cls, channel: int, note: int, velocity: int = 0) -> "ChannelVoice":
        return cls(ChannelKind.NOTE_OFF, channel, bytes([note, velocity]))

    @classmethod
    def control_change(cls, channel: int, control: int, value: int) -> "ChannelVoice":
        return cls(ChannelKind.CONTROL_CHANGE, channel, bytes([control, value]))

    @classmethod
    def program_change(cls, channel: int, program: int) -> "ChannelVoice":
        return cls(ChannelKind.PROGRAM_CHANGE, channel, bytes([program]))

    @classmethod
    def pitch_bend(cls, channel: int, value: int) -> "ChannelVoice":
        """``value`` is the signed bend in [-8192, 8191]; 0 is centre."""

        raw = value + 0x2000
        return cls(ChannelKind.PITCH_BEND, channel, bytes([raw & 0x7F, (raw >> 7) & 0x7F]))


@dataclass
class SystemExclusive:
    """One SysEx packet.

    ``data`` is everything after the length field, including the closing 0xF7
    when the packet ends the message.  ``continuation`` packets were
    introduced with 0xF7 and carry the rest of a message split across events.
    """

    data: bytes
    continuation: bool = False

    @property
    def complete(self) -> bool:
        return self.data.endswith(bytes([SYSEX_END]))


@dataclass
class Meta:
    type: int
    data: bytes = b""

    @property
    def is_end_of_track(self) -> bool:
        return self.type == END_OF_TRACK and not self.data

    @classmethod
    def end_of_track(cls) -> "Meta":
        return cls(END_OF_TRACK, b"")


@dataclass
class Escape:
    """Raw bytes injected with a standalone 0xF7 event."""

    data: bytes


EventBody = Union[ChannelVoice, SystemExclusive, Meta, Escape]


@dataclass
class TrackEvent:
    delta_time: int
    body: EventBody
