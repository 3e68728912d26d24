"""Input side: logical file streams and chunk readers."""

from .reader import decode_line, read_chunk
from .stream import LogicalFileStream, ResolvedInput, Segment, resolve_segments

__all__ = [
    "decode_line",
    "read_chunk",
    "LogicalFileStream",
    "ResolvedInput",
    "Segment",
    "resolve_segments",
]
