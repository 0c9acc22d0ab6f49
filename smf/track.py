"""Decode and encode ``MTrk`` payloads.

A track payload is a flat run of ``<delta-time VLQ> <event>`` pairs.  Two
pieces of state are local to one track and never survive it:

* running status: the last explicit channel status byte (0x80-0xEF).  A
  channel event whose first byte is < 0x80 reuses it.  Meta and SysEx events
  leave it untouched.
* an open SysEx: set by a SysEx packet that does not end in 0xF7.  Only the
  event immediately after it may continue it with an 0xF7 packet; any other
  event closes the window and a later 0xF7 is an escape.

Decoding stops at the first end-of-track meta event (FF 2F 00).  Anything
left in the payload is kept in ``TrackChunk.trailing`` so re-encoding emits
the same bytes.

Delta-times and lengths are re-encoded in their shortest form, so a padded
quantity such as ``80 00`` comes back as ``00``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple

from .cursor import ByteReader, ByteWriter
from .errors import (
    Anomaly,
    InvalidDataByte,
    InvalidStatusByte,
    MissingStatusByte,
    TrailingDataAfterEndOfTrack,
    ValueOutOfRange,
)
from .events import (
    ESCAPE_STATUS,
    META_STATUS,
    SYSEX_STATUS,
    ChannelKind,
    ChannelVoice,
    Escape,
    Meta,
    SystemExclusive,
    TrackEvent,
    channel_data_length,
)


TRACK_TAG = b"MTrk"

RUNNING_STATUS_NEVER = "never"
RUNNING_STATUS_PRESERVE = "preserve"
RUNNING_STATUS_COMPACT = "compact"
RUNNING_STATUS_POLICIES = {
    RUNNING_STATUS_NEVER,
    RUNNING_STATUS_PRESERVE,
    RUNNING_STATUS_COMPACT,
}


@dataclass
class TrackChunk:
    """An ``MTrk`` chunk: events in real-time order."""

    events: List[TrackEvent] = field(default_factory=list)
    trailing: bytes = b""  # bytes found after end-of-track, re-emitted verbatim

    tag = TRACK_TAG

    @classmethod
    def from_bytes(cls, payload: bytes) -> "TrackChunk":
        track, _ = decode_track(payload)
        return track

    def to_bytes(self, *, running_status: str = RUNNING_STATUS_PRESERVE) -> bytes:
        return encode_track(self, running_status=running_status)

    def absolute_times(self) -> Iterator[Tuple[int, TrackEvent]]:
        now = 0
        for event in self.events:
            now += event.delta_time
            yield now, event

    @property
    def has_end_of_track(self) -> bool:
        if not self.events:
            return False
        last = self.events[-1].body
        return isinstance(last, Meta) and last.is_end_of_track


def decode_track(
    payload: bytes,
    *,
    base: int = 0,
    track_index: Optional[int] = None,
) -> Tuple[TrackChunk, List[Anomaly]]:
    """Parse a track payload.

    ``base`` is the absolute offset of ``payload[0]`` in the file, used for
    error context.  Returns the track and any tolerated anomalies.
    """

    reader = ByteReader(payload, base=base)
    events: List[TrackEvent] = []
    anomalies: List[Anomaly] = []
    running_status: Optional[int] = None
    sysex_open = False
    trailing = b""

    while not reader.done():
        delta_time = reader.read_vlq()
        event_offset = reader.offset
        first = reader.peek()

        if first == META_STATUS:
            reader.read_u8()
            meta_type = reader.read_u8()
            length = reader.read_vlq()
            body = Meta(meta_type, reader.read(length))
            sysex_open = False

        elif first == SYSEX_STATUS or first == ESCAPE_STATUS:
            reader.read_u8()
            length = reader.read_vlq()
            data = reader.read(length)
            if first == SYSEX_STATUS or sysex_open:
                body = SystemExclusive(data, continuation=first == ESCAPE_STATUS)
                sysex_open = not body.complete
            else:
                body = Escape(data)

        elif first >= 0xF0:
            # System common / real-time bytes have no meaning inside a file.
            raise InvalidStatusByte(first, offset=event_offset)

        elif first >= 0x80:
            status = reader.read_u8()
            running_status = status
            body = ChannelVoice.from_status(status, _read_channel_data(reader, status))
            sysex_open = False

        else:
            if running_status is None:
                raise MissingStatusByte(
                    f"data byte 0x{first:02X} with no running status in effect",
                    offset=event_offset,
                )
            body = ChannelVoice.from_status(
                running_status,
                _read_channel_data(reader, running_status),
                running_status=True,
            )
            sysex_open = False

        events.append(TrackEvent(delta_time, body))

        if isinstance(body, Meta) and body.is_end_of_track:
            if not reader.done():
                trailing_offset = reader.offset
                trailing = reader.read_rest()
                anomalies.append(
                    TrailingDataAfterEndOfTrack(
                        track_index=track_index,
                        offset=trailing_offset,
                        length=len(trailing),
                    )
                )
            break

    return TrackChunk(events=events, trailing=trailing), anomalies


def _read_channel_data(reader: ByteReader, status: int) -> bytes:
    start = reader.offset
    data = reader.read(channel_data_length(status))
    for index, value in enumerate(data):
        if value > 0x7F:
            raise InvalidDataByte(value, offset=start + index)
    return data


def _channel_bytes(body: ChannelVoice) -> Tuple[int, bytes]:
    try:
        kind = ChannelKind(body.kind)
    except ValueError:
        raise ValueOutOfRange(f"unknown channel message kind {body.kind!r}") from None
    if not isinstance(body.channel, int) or not (0 <= body.channel <= 15):
        raise ValueOutOfRange(f"channel {body.channel!r} outside [0, 15]")
    data = bytes(body.data)
    if len(data) != kind.data_length:
        raise ValueOutOfRange(
            f"{kind.name} takes {kind.data_length} data bytes, got {len(data)}"
        )
    for value in data:
        if value > 0x7F:
            raise ValueOutOfRange(f"{kind.name} data byte 0x{value:02X} exceeds 0x7F")
    return (int(kind) << 4) | body.channel, data


def encode_track(track: TrackChunk, *, running_status: str = RUNNING_STATUS_PRESERVE) -> bytes:
    """Serialize a track payload (without the chunk envelope).

    ``running_status`` picks when a channel status byte may be omitted:
    ``never`` always writes it, ``preserve`` omits it where the decoded source
    did, ``compact`` omits it whenever the previous event had the same status.
    """

    if running_status not in RUNNING_STATUS_POLICIES:
        raise ValueError(
            f"running_status must be one of {sorted(RUNNING_STATUS_POLICIES)}, got {running_status!r}"
        )

    writer = ByteWriter()
    last_status: Optional[int] = None
    previous_was_channel = False

    for index, event in enumerate(track.events):
        try:
            writer.write_vlq(event.delta_time)
        except ValueOutOfRange as exc:
            raise ValueOutOfRange(f"event {index}: delta_time {exc.message}") from exc

        body = event.body
        if isinstance(body, ChannelVoice):
            status, data = _channel_bytes(body)
            if running_status == RUNNING_STATUS_COMPACT:
                omit = previous_was_channel and status == last_status
            elif running_status == RUNNING_STATUS_PRESERVE:
                omit = body.running_status and status == last_status
            else:
                omit = False
            if not omit:
                writer.write_u8(status)
            writer.write(data)
            last_status = status
            previous_was_channel = True
            continue

        previous_was_channel = False
        if isinstance(body, Meta):
            if not isinstance(body.type, int) or not (0 <= body.type <= 0xFF):
                raise ValueOutOfRange(f"event {index}: meta type {body.type!r} outside [0, 0xFF]")
            writer.write_u8(META_STATUS)
            writer.write_u8(body.type)
            writer.write_vlq(len(body.data))
            writer.write(body.data)
        elif isinstance(body, SystemExclusive):
            writer.write_u8(ESCAPE_STATUS if body.continuation else SYSEX_STATUS)
            writer.write_vlq(len(body.data))
            writer.write(body.data)
        elif isinstance(body, Escape):
            writer.write_u8(ESCAPE_STATUS)
            writer.write_vlq(len(body.data))
            writer.write(body.data)
        else:
            raise TypeError(f"event {index}: unsupported event body {type(body).__name__}")

    writer.write(track.trailing)
    return writer.getvalue()
