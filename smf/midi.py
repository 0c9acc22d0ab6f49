from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from .chunks import Chunk, read_chunk, write_chunk
from .cursor import ByteReader, ByteWriter
from .errors import (
    Anomaly,
    MissingHeaderChunk,
    SMFError,
    TrackCountMismatch,
)
from .header import Division, HeaderChunk
from .track import RUNNING_STATUS_PRESERVE, TrackChunk

logger = logging.getLogger(__name__)


@dataclass
class MIDI:
    """A Standard MIDI File as an ordered list of chunks.

    Round-trip guarantee: ``MIDI.from_bytes(data).to_bytes() == data`` for
    every file that decodes.  Chunks are never reordered or injected on
    encode, so a document built by hand is written exactly as listed.
    """

    chunks: List[Chunk] = field(default_factory=list)

    @classmethod
    def from_bytes(cls, data: bytes) -> "MIDI":
        result = decode(data)
        for anomaly in result.anomalies:
            logger.warning("%s", anomaly.message)
        return result.midi

    def to_bytes(self, *, running_status: str = RUNNING_STATUS_PRESERVE) -> bytes:
        return encode(self, running_status=running_status)

    @classmethod
    def build(
        cls,
        *,
        format: int,
        division: Division,
        tracks: Iterable[TrackChunk],
    ) -> "MIDI":
        tracks = list(tracks)
        header = HeaderChunk(format=format, track_count=len(tracks), division=division)
        return cls(chunks=[header, *tracks])

    @property
    def header(self) -> Optional[HeaderChunk]:
        if self.chunks and isinstance(self.chunks[0], HeaderChunk):
            return self.chunks[0]
        return None

    @property
    def tracks(self) -> List[TrackChunk]:
        return [chunk for chunk in self.chunks if isinstance(chunk, TrackChunk)]

    @property
    def declared_track_count(self) -> Optional[int]:
        header = self.header
        return header.track_count if header is not None else None

    @property
    def track_count_mismatch(self) -> bool:
        declared = self.declared_track_count
        return declared is not None and declared != len(self.tracks)


@dataclass
class DecodeResult:
    midi: MIDI
    anomalies: List[Anomaly] = field(default_factory=list)


def decode(data: bytes) -> DecodeResult:
    """Split ``data`` into chunks and decode the ones we understand.

    Hard errors propagate as ``SMFError`` subclasses carrying the byte offset
    and chunk/track index.  Tolerated deviations come back in ``anomalies``.
    """

    reader = ByteReader(data)
    chunks: List[Chunk] = []
    anomalies: List[Anomaly] = []
    track_index = 0

    while not reader.done():
        chunk_offset = reader.offset
        chunk_index = len(chunks)
        try:
            chunk, found = read_chunk(reader, chunk_index=chunk_index, track_index=track_index)
        except SMFError as exc:
            raise exc.with_context(offset=chunk_offset, chunk_index=chunk_index)
        if isinstance(chunk, TrackChunk):
            track_index += 1
        chunks.append(chunk)
        anomalies.extend(found)

    midi = MIDI(chunks=chunks)
    if midi.header is None:
        anomalies.append(MissingHeaderChunk(first_tag=chunks[0].tag if chunks else None))
    elif midi.track_count_mismatch:
        anomalies.append(TrackCountMismatch(declared=midi.header.track_count, found=len(midi.tracks)))

    return DecodeResult(midi=midi, anomalies=anomalies)


def encode(midi: MIDI, *, running_status: str = RUNNING_STATUS_PRESERVE) -> bytes:
    writer = ByteWriter()
    for index, chunk in enumerate(midi.chunks):
        try:
            write_chunk(writer, chunk, running_status=running_status)
        except SMFError as exc:
            raise exc.with_context(chunk_index=index)
    return writer.getvalue()
