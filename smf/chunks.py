"""Generic chunk envelope: 4-byte tag, u32 big-endian length, payload.

A chunk occupies ``8 + length`` bytes on disk.  Payload codecs only ever see
their own ``length`` bytes, so a bad payload cannot shift the boundary of the
chunk after it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Tuple, Union

from .cursor import ByteReader, ByteWriter
from .errors import (
    Anomaly,
    ChunkLengthMismatch,
    NonAsciiChunkTag,
    SMFError,
    UnexpectedEndOfData,
    ValueOutOfRange,
)
from .header import HEADER_TAG, HeaderChunk
from .track import RUNNING_STATUS_PRESERVE, TRACK_TAG, TrackChunk, decode_track

logger = logging.getLogger(__name__)

TAG_SIZE = 4
PREFIX_SIZE = 8


@dataclass
class UnknownChunk:
    """A chunk type this codec does not interpret, kept byte-for-byte."""

    tag: bytes
    data: bytes

    def to_bytes(self) -> bytes:
        return self.data


Chunk = Union[HeaderChunk, TrackChunk, UnknownChunk]


def _is_ascii(tag: bytes) -> bool:
    return all(b < 0x80 for b in tag)


def _check_tag(tag: bytes) -> bytes:
    # Non-ASCII tags are written back as decoded; only the width is fixed.
    tag = bytes(tag)
    if len(tag) != TAG_SIZE:
        raise ValueOutOfRange(f"chunk tag must be 4 bytes, got {tag!r}")
    return tag


def read_chunk(
    reader: ByteReader,
    *,
    chunk_index: int,
    track_index: int,
) -> Tuple[Chunk, List[Anomaly]]:
    """Read one chunk; ``track_index`` is the index this chunk gets if it is ``MTrk``."""

    tag = reader.read(TAG_SIZE)
    length = reader.read_u32()
    payload = reader.sub_reader(length)

    if tag == HEADER_TAG:
        return HeaderChunk.from_bytes(payload.read_rest()), []

    if tag == TRACK_TAG:
        try:
            return decode_track(payload.read_rest(), base=payload.base, track_index=track_index)
        except UnexpectedEndOfData as exc:
            consumed = (exc.offset - payload.base) + exc.requested
            raise ChunkLengthMismatch(
                tag, length, consumed, offset=exc.offset, track_index=track_index
            ) from exc
        except SMFError as exc:
            raise exc.with_context(track_index=track_index)

    logger.debug("keeping unknown chunk %r (%d bytes) at 0x%X", tag, length, payload.base - PREFIX_SIZE)
    anomalies: List[Anomaly] = []
    if not _is_ascii(tag):
        anomalies.append(NonAsciiChunkTag(tag=tag, offset=payload.base - PREFIX_SIZE))
    return UnknownChunk(tag=tag, data=payload.read_rest()), anomalies


def chunk_payload(chunk: Chunk, *, running_status: str = RUNNING_STATUS_PRESERVE) -> bytes:
    if isinstance(chunk, TrackChunk):
        return chunk.to_bytes(running_status=running_status)
    if isinstance(chunk, (HeaderChunk, UnknownChunk)):
        return chunk.to_bytes()
    raise TypeError(f"unsupported chunk type {type(chunk).__name__}")


def write_chunk(
    writer: ByteWriter,
    chunk: Chunk,
    *,
    running_status: str = RUNNING_STATUS_PRESERVE,
) -> None:
    tag = _check_tag(chunk.tag)
    payload = chunk_payload(chunk, running_status=running_status)
    writer.write(tag)
    writer.write_u32(len(payload))
    writer.write(payload)
