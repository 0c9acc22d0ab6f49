"""Exceptions and non-fatal anomalies raised while decoding or encoding SMF data.

Hard errors derive from ``SMFError`` (itself a ``ValueError``) and abort the
current decode.  Anomalies are plain records collected next to a decoded
document: real-world files often carry small deviations that readers are
expected to tolerate.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


class SMFError(ValueError):
    """Base class for every codec failure.

    ``offset`` is an absolute byte offset into the decoded buffer.
    ``chunk_index`` counts every chunk (header included); ``track_index``
    counts ``MTrk`` chunks only.
    """

    def __init__(
        self,
        message: str,
        *,
        offset: Optional[int] = None,
        chunk_index: Optional[int] = None,
        track_index: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.offset = offset
        self.chunk_index = chunk_index
        self.track_index = track_index

    def with_context(
        self,
        *,
        offset: Optional[int] = None,
        chunk_index: Optional[int] = None,
        track_index: Optional[int] = None,
    ) -> "SMFError":
        """Fill in context the raising site did not know; existing values win."""

        if self.offset is None:
            self.offset = offset
        if self.chunk_index is None:
            self.chunk_index = chunk_index
        if self.track_index is None:
            self.track_index = track_index
        return self

    def __str__(self) -> str:
        where = []
        if self.offset is not None:
            where.append(f"offset 0x{self.offset:X}")
        if self.chunk_index is not None:
            where.append(f"chunk {self.chunk_index}")
        if self.track_index is not None:
            where.append(f"track {self.track_index}")
        if not where:
            return self.message
        return f"{self.message} ({', '.join(where)})"


class UnexpectedEndOfData(SMFError):
    def __init__(self, requested: int, remaining: int, **context) -> None:
        super().__init__(
            f"unexpected end of data: need {requested} bytes, {remaining} remaining",
            **context,
        )
        self.requested = requested
        self.remaining = remaining


class MalformedVLQ(SMFError):
    pass


class ChunkLengthMismatch(SMFError):
    def __init__(self, tag: bytes, declared: int, consumed: int, **context) -> None:
        super().__init__(
            f"chunk {tag!r} declares {declared} bytes but its payload codec consumed {consumed}",
            **context,
        )
        self.tag = tag
        self.declared = declared
        self.consumed = consumed


class InvalidHeaderLength(SMFError):
    def __init__(self, length: int, **context) -> None:
        super().__init__(f"MThd payload must be 6 bytes, got {length}", **context)
        self.length = length


class MissingStatusByte(SMFError):
    pass


class InvalidStatusByte(SMFError):
    def __init__(self, status: int, **context) -> None:
        super().__init__(f"status byte 0x{status:02X} cannot start a track event", **context)
        self.status = status


class InvalidDataByte(SMFError):
    def __init__(self, value: int, **context) -> None:
        super().__init__(f"data byte 0x{value:02X} has its top bit set", **context)
        self.value = value


class InvalidMetaEvent(SMFError):
    pass


class UnsupportedDivisionEncoding(SMFError):
    pass


class ValueOutOfRange(SMFError):
    pass


@dataclass(frozen=True)
class Anomaly:
    """A tolerated deviation found while decoding."""

    @property
    def message(self) -> str:
        raise NotImplementedError


@dataclass(frozen=True)
class TrailingDataAfterEndOfTrack(Anomaly):
    track_index: Optional[int]
    offset: int
    length: int

    @property
    def message(self) -> str:
        return (
            f"track {self.track_index}: {self.length} bytes after end-of-track "
            f"at offset 0x{self.offset:X}"
        )


@dataclass(frozen=True)
class MissingHeaderChunk(Anomaly):
    first_tag: Optional[bytes]

    @property
    def message(self) -> str:
        if self.first_tag is None:
            return "document has no chunks"
        return f"first chunk is {self.first_tag!r}, expected b'MThd'"


@dataclass(frozen=True)
class TrackCountMismatch(Anomaly):
    declared: int
    found: int

    @property
    def message(self) -> str:
        return f"header declares {self.declared} tracks, found {self.found} MTrk chunks"


@dataclass(frozen=True)
class NonAsciiChunkTag(Anomaly):
    tag: bytes
    offset: int

    @property
    def message(self) -> str:
        return f"chunk tag {self.tag!r} at offset 0x{self.offset:X} is not ASCII"
