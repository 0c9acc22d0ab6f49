"""Standard MIDI File codec: bytes to a chunk/track/event document and back."""

from .chunks import Chunk, UnknownChunk, read_chunk, write_chunk  # noqa: F401
from .cursor import ByteReader, ByteWriter  # noqa: F401
from .errors import (  # noqa: F401
    Anomaly,
    ChunkLengthMismatch,
    InvalidDataByte,
    InvalidHeaderLength,
    InvalidMetaEvent,
    InvalidStatusByte,
    MalformedVLQ,
    MissingHeaderChunk,
    MissingStatusByte,
    NonAsciiChunkTag,
    SMFError,
    TrackCountMismatch,
    TrailingDataAfterEndOfTrack,
    UnexpectedEndOfData,
    UnsupportedDivisionEncoding,
    ValueOutOfRange,
)
from .events import (  # noqa: F401
    ChannelKind,
    ChannelVoice,
    Escape,
    EventBody,
    Meta,
    SystemExclusive,
    TrackEvent,
)
from .header import (  # noqa: F401
    Division,
    Format,
    FramesPerSecond,
    HeaderChunk,
    SmpteTimecode,
    TicksPerQuarterNote,
)
from .midi import MIDI, DecodeResult, decode, encode  # noqa: F401
from .track import (  # noqa: F401
    RUNNING_STATUS_COMPACT,
    RUNNING_STATUS_NEVER,
    RUNNING_STATUS_POLICIES,
    RUNNING_STATUS_PRESERVE,
    TrackChunk,
    decode_track,
    encode_track,
)
from .vlq import encode_vlq, read_vlq, vlq_size  # noqa: F401
