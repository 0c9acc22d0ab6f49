"""Tests for the MTrk event codec: running status, SysEx packets, end-of-track."""

from pathlib import Path
import sys

import pytest

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from smf.errors import (  # noqa: E402
    InvalidDataByte,
    InvalidStatusByte,
    MalformedVLQ,
    MissingStatusByte,
    TrailingDataAfterEndOfTrack,
    UnexpectedEndOfData,
    ValueOutOfRange,
)
from smf.events import (  # noqa: E402
    ChannelKind,
    ChannelVoice,
    Escape,
    Meta,
    SystemExclusive,
    TrackEvent,
)
from smf.track import TrackChunk, decode_track, encode_track  # noqa: E402


def _hex(text: str) -> bytes:
    return bytes.fromhex(text)


EOT = "00 ff 2f 00"


# ── running status ─────────────────────────────────────────────────


class TestRunningStatus:
    def test_data_byte_reuses_previous_status(self):
        payload = _hex("00 90 3c 40 00 3e 40")
        track, anomalies = decode_track(payload)
        assert anomalies == []
        first, second = (e.body for e in track.events)
        assert isinstance(first, ChannelVoice) and isinstance(second, ChannelVoice)
        assert first.kind is ChannelKind.NOTE_ON and second.kind is ChannelKind.NOTE_ON
        assert first.channel == second.channel == 0
        assert first.data == b"\x3c\x40"
        assert second.data == b"\x3e\x40"
        assert first.running_status is False
        assert second.running_status is True

    def test_preserve_reproduces_omitted_status(self):
        payload = _hex("00 90 3c 40 00 3e 40 00 80 3c 00 00 3e 00")
        track, _ = decode_track(payload)
        assert encode_track(track) == payload

    def test_never_policy_writes_every_status(self):
        track, _ = decode_track(_hex("00 90 3c 40 00 3e 40"))
        assert encode_track(track, running_status="never") == _hex("00 90 3c 40 00 90 3e 40")

    def test_one_data_byte_messages(self):
        payload = _hex("00 c5 07 10 08 00 d5 40 00 41")
        track, _ = decode_track(payload)
        bodies = [e.body for e in track.events]
        assert [b.kind for b in bodies] == [
            ChannelKind.PROGRAM_CHANGE,
            ChannelKind.PROGRAM_CHANGE,
            ChannelKind.CHANNEL_PRESSURE,
            ChannelKind.CHANNEL_PRESSURE,
        ]
        assert [b.data for b in bodies] == [b"\x07", b"\x08", b"\x40", b"\x41"]
        assert all(b.channel == 5 for b in bodies)
        assert encode_track(track) == payload

    def test_meta_and_sysex_do_not_touch_running_status(self):
        payload = _hex("00 b0 07 64 00 ff 01 01 41 00 f0 01 f7 00 0a 7f")
        track, _ = decode_track(payload)
        last = track.events[-1].body
        assert isinstance(last, ChannelVoice)
        assert last.status == 0xB0
        assert last.data == b"\x0a\x7f"
        assert last.running_status is True
        assert encode_track(track) == payload

    def test_compact_policy_restates_status_after_meta(self):
        track, _ = decode_track(_hex("00 90 3c 40 00 ff 01 01 41 00 3e 40"))
        assert encode_track(track, running_status="compact") == _hex(
            "00 90 3c 40 00 ff 01 01 41 00 90 3e 40"
        )

    def test_compact_policy_omits_repeated_status(self):
        track = TrackChunk(
            events=[
                TrackEvent(0, ChannelVoice.note_on(0, 60, 64)),
                TrackEvent(0, ChannelVoice.note_on(0, 62, 64)),
                TrackEvent(0, ChannelVoice.note_on(1, 64, 64)),
                TrackEvent(0, ChannelVoice.note_on(1, 65, 64)),
            ]
        )
        assert encode_track(track, running_status="compact") == _hex(
            "00 90 3c 40 00 3e 40 00 91 40 40 00 41 40"
        )

    def test_built_events_encode_with_explicit_status(self):
        track = TrackChunk(
            events=[
                TrackEvent(0, ChannelVoice.note_on(0, 60, 64)),
                TrackEvent(0, ChannelVoice.note_on(0, 62, 64)),
            ]
        )
        assert encode_track(track) == _hex("00 90 3c 40 00 90 3e 40")

    def test_flag_without_matching_status_falls_back_to_explicit(self):
        track = TrackChunk(
            events=[
                TrackEvent(0, ChannelVoice(ChannelKind.NOTE_ON, 0, b"\x3c\x40", running_status=True)),
                TrackEvent(0, ChannelVoice(ChannelKind.NOTE_OFF, 0, b"\x3c\x00", running_status=True)),
            ]
        )
        assert encode_track(track) == _hex("00 90 3c 40 00 80 3c 00")

    def test_missing_status_at_track_start(self):
        with pytest.raises(MissingStatusByte) as excinfo:
            decode_track(_hex("00 3c 40"), base=0x20, track_index=3)
        assert excinfo.value.offset == 0x21

    def test_running_status_does_not_cross_decode_calls(self):
        decode_track(_hex("00 90 3c 40"))
        with pytest.raises(MissingStatusByte):
            decode_track(_hex("00 3c 40"))

    def test_running_status_is_not_part_of_equality(self):
        track, _ = decode_track(_hex("00 90 3c 40 00 3c 40"))
        assert track.events[1].body == ChannelVoice.note_on(0, 60, 64)


# ── SysEx / escape ────────────────────────────────────────────────


class TestSystemExclusive:
    def test_single_complete_packet(self):
        track, _ = decode_track(_hex("00 f0 05 7e 7f 09 01 f7"))
        body = track.events[0].body
        assert body == SystemExclusive(_hex("7e 7f 09 01 f7"))
        assert body.complete
        assert not body.continuation

    def test_split_message_and_following_escape(self):
        payload = _hex("00 f0 03 43 12 00  10 f7 02 43 f7  00 f7 02 f3 01  " + EOT)
        track, _ = decode_track(payload)
        start, cont, escape, eot = (e.body for e in track.events)

        assert start == SystemExclusive(_hex("43 12 00"))
        assert not start.complete

        assert track.events[1].delta_time == 0x10
        assert cont == SystemExclusive(_hex("43 f7"), continuation=True)
        assert cont.complete

        assert escape == Escape(_hex("f3 01"))
        assert eot.is_end_of_track
        assert encode_track(track) == payload

    def test_open_sysex_closed_by_other_event(self):
        payload = _hex("00 f0 02 43 12  00 ff 01 00  00 f7 01 fa")
        track, _ = decode_track(payload)
        assert isinstance(track.events[2].body, Escape)
        assert encode_track(track) == payload

    def test_bare_escape(self):
        track, _ = decode_track(_hex("00 f7 03 f8 fa fc"))
        assert track.events[0].body == Escape(_hex("f8 fa fc"))

    @pytest.mark.parametrize("status", [0xF1, 0xF2, 0xF3, 0xF6, 0xF8, 0xFE])
    def test_system_common_and_realtime_bytes_are_rejected(self, status):
        with pytest.raises(InvalidStatusByte) as excinfo:
            decode_track(bytes([0x00, status, 0x00]))
        assert excinfo.value.status == status


# ── meta / end of track ───────────────────────────────────────────


def test_meta_event_with_long_length() -> None:
    text = b"x" * 200
    payload = b"\x00\xff\x01\x81\x48" + text + _hex(EOT)
    track, _ = decode_track(payload)
    assert track.events[0].body == Meta(0x01, text)
    assert encode_track(track) == payload


def test_decoding_stops_at_end_of_track() -> None:
    payload = _hex("00 90 3c 40 " + EOT + " 00 00 00")
    track, anomalies = decode_track(payload, base=100, track_index=2)
    assert len(track.events) == 2
    assert track.has_end_of_track
    assert track.trailing == b"\x00\x00\x00"
    assert anomalies == [TrailingDataAfterEndOfTrack(track_index=2, offset=108, length=3)]
    assert encode_track(track) == payload


def test_end_of_track_with_data_is_an_ordinary_meta() -> None:
    payload = _hex("00 ff 2f 01 00 00 90 3c 40")
    track, anomalies = decode_track(payload)
    assert len(track.events) == 2
    assert not track.events[0].body.is_end_of_track
    assert anomalies == []


def test_absolute_times() -> None:
    track, _ = decode_track(_hex("00 90 3c 40 60 80 3c 00 81 00 " + EOT[3:]))
    assert [tick for tick, _ in track.absolute_times()] == [0, 96, 224]


def test_empty_payload() -> None:
    track, anomalies = decode_track(b"")
    assert track.events == []
    assert anomalies == []
    assert encode_track(track) == b""


@pytest.mark.parametrize(
    "payload,error",
    [
        ("00 90 3c", UnexpectedEndOfData),
        ("00 ff 51 03 07 a1", UnexpectedEndOfData),
        ("00 f0 05 7e 7f", UnexpectedEndOfData),
        ("80 80 80 80 00 90 3c 40", MalformedVLQ),
        ("00 ff 01 ff ff ff ff 00", MalformedVLQ),
    ],
)
def test_malformed_payloads(payload: str, error: type) -> None:
    with pytest.raises(error):
        decode_track(_hex(payload))


@pytest.mark.parametrize(
    "payload,value,offset",
    [
        ("00 90 3c 90 00 ff 2f 00", 0x90, 0x13),
        ("00 90 3c 40 00 3e ff", 0xFF, 0x16),
        ("00 c0 f7", 0xF7, 0x12),
    ],
)
def test_status_byte_inside_channel_data_is_rejected(payload: str, value: int, offset: int) -> None:
    with pytest.raises(InvalidDataByte) as excinfo:
        decode_track(_hex(payload), base=0x10)
    assert excinfo.value.value == value
    assert excinfo.value.offset == offset


def test_padded_quantities_are_reencoded_minimally() -> None:
    payload = _hex("80 00 90 3c 40  00 ff 01 80 80 00  00 ff 2f 00")
    track, anomalies = decode_track(payload)
    assert anomalies == []
    assert track.events[0].delta_time == 0
    assert track.events[1].body == Meta(0x01, b"")
    assert encode_track(track) == _hex("00 90 3c 40  00 ff 01 00  00 ff 2f 00")


# ── encode validation ─────────────────────────────────────────────


@pytest.mark.parametrize(
    "event",
    [
        TrackEvent(0, ChannelVoice(ChannelKind.NOTE_ON, 16, b"\x3c\x40")),
        TrackEvent(0, ChannelVoice(ChannelKind.NOTE_ON, -1, b"\x3c\x40")),
        TrackEvent(0, ChannelVoice(ChannelKind.NOTE_ON, 0, b"\x80\x40")),
        TrackEvent(0, ChannelVoice(ChannelKind.NOTE_ON, 0, b"\x3c")),
        TrackEvent(0, ChannelVoice(ChannelKind.PROGRAM_CHANGE, 0, b"\x01\x02")),
        TrackEvent(0, ChannelVoice(0x3, 0, b"\x01\x02")),
        TrackEvent(-1, Meta.end_of_track()),
        TrackEvent(0x10000000, Meta.end_of_track()),
        TrackEvent(0, Meta(0x100, b"")),
    ],
)
def test_encode_rejects_out_of_range_values(event: TrackEvent) -> None:
    with pytest.raises(ValueOutOfRange):
        encode_track(TrackChunk(events=[event]))


def test_encode_rejects_unknown_policy() -> None:
    with pytest.raises(ValueError, match="running_status"):
        encode_track(TrackChunk(), running_status="sometimes")


def test_pitch_bend_builder() -> None:
    assert ChannelVoice.pitch_bend(2, 0).data == b"\x00\x40"
    assert ChannelVoice.pitch_bend(2, -8192).data == b"\x00\x00"
    assert ChannelVoice.pitch_bend(2, 8191).data == b"\x7f\x7f"
