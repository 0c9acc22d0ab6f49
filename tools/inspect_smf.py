#!/usr/bin/env python3
"""Human-readable Standard MIDI File inspector.

Prints the header, every chunk, and one line per track event with its
absolute tick.  Known meta events are shown through their typed view; unknown
ones, SysEx packets and escapes are shown as hex.
"""

from __future__ import annotations

import argparse
from pathlib import Path
import sys
from typing import List, Sequence

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from smf import (  # noqa: E402
    ChannelKind,
    ChannelVoice,
    Escape,
    Format,
    HeaderChunk,
    Meta,
    SmpteTimecode,
    SystemExclusive,
    TrackChunk,
    UnknownChunk,
    decode,
)
from smf.errors import InvalidMetaEvent  # noqa: E402
from smf.meta import interpret  # noqa: E402


def format_midi_note(note: int) -> str:
    names = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]
    octave = note // 12 - 1
    name = names[note % 12]
    return f"{name}{octave}"


def describe_header(header: HeaderChunk) -> str:
    try:
        fmt = Format(header.format).name
    except ValueError:
        fmt = f"unknown ({header.format})"
    division = header.division
    if isinstance(division, SmpteTimecode):
        div = f"SMPTE {division.frames_per_second} fps, {division.ticks_per_frame} ticks/frame"
    else:
        div = f"{division.ticks} ticks/quarter"
    return f"format={fmt}  tracks={header.track_count}  division={div}"


def describe_event(body) -> str:
    if isinstance(body, ChannelVoice):
        rs = " (running)" if body.running_status else ""
        if body.kind in (ChannelKind.NOTE_ON, ChannelKind.NOTE_OFF):
            note, velocity = body.data
            return (
                f"ch{body.channel + 1:<2} {body.kind.name:<16} "
                f"note={format_midi_note(note)} (0x{note:02X}) vel={velocity}{rs}"
            )
        return f"ch{body.channel + 1:<2} {body.kind.name:<16} data={body.data.hex(' ')}{rs}"
    if isinstance(body, Meta):
        try:
            typed = interpret(body)
        except InvalidMetaEvent as exc:
            return f"META 0x{body.type:02X} malformed: {exc}"
        if typed is None:
            return f"META 0x{body.type:02X} data={body.data.hex(' ')}"
        return f"META {typed}"
    if isinstance(body, SystemExclusive):
        state = "complete" if body.complete else "open"
        kind = "SYSEX+" if body.continuation else "SYSEX"
        return f"{kind} ({state}) {len(body.data)} B: {body.data.hex(' ')}"
    if isinstance(body, Escape):
        return f"ESCAPE {len(body.data)} B: {body.data.hex(' ')}"
    return repr(body)


def generate_report(path: Path, data: bytes) -> str:
    result = decode(data)
    lines: List[str] = []
    lines.append(f"File: {path.name}   Size: {len(data):,} B   Chunks: {len(result.midi.chunks)}")
    lines.append("")

    track_index = 0
    for chunk_index, chunk in enumerate(result.midi.chunks):
        if isinstance(chunk, HeaderChunk):
            lines.append(f"[{chunk_index}] MThd  {describe_header(chunk)}")
        elif isinstance(chunk, TrackChunk):
            lines.append(f"[{chunk_index}] MTrk  track {track_index}  events={len(chunk.events)}")
            for tick, event in chunk.absolute_times():
                lines.append(f"    {tick:>8}  +{event.delta_time:<6} {describe_event(event.body)}")
            if chunk.trailing:
                lines.append(f"    trailing after end-of-track: {chunk.trailing.hex(' ')}")
            track_index += 1
        elif isinstance(chunk, UnknownChunk):
            lines.append(f"[{chunk_index}] {chunk.tag!r}  unknown, {len(chunk.data)} B")
        lines.append("")

    if result.anomalies:
        lines.append("[Anomalies]")
        for anomaly in result.anomalies:
            lines.append(f"  - {anomaly.message}")
    return "\n".join(lines).rstrip() + "\n"


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Inspect a single Standard MIDI File."
    )
    parser.add_argument("path", type=Path, help="Path to the .mid file to inspect.")
    args = parser.parse_args(argv)

    report = generate_report(args.path, args.path.read_bytes())
    print(report, end="")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
