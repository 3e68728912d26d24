# byline/io/reader.py
from __future__ import annotations

from typing import BinaryIO, Iterator, Optional, Tuple

from byline.parallel.types import ChunkSpec

__all__ = ["read_chunk", "decode_line"]


def decode_line(raw: bytes, encoding: str = "utf-8", errors: str = "strict") -> str:
    """Decode one raw line and drop its trailing terminator characters."""
    return raw.decode(encoding, errors).rstrip("\r\n")


def read_chunk(
    stream: BinaryIO,
    chunk: ChunkSpec,
    *,
    encoding: str = "utf-8",
    errors: str = "strict",
    with_paths: bool = False,
) -> Iterator[Tuple[str, Optional[str]]]:
    """
    Yield the lines belonging to ``chunk`` as (line, path) pairs.

    A line belongs to the chunk in which it ends:

    - a non-first chunk discards everything up to and including the first
      newline at or after its start (that partial line is the tail of the
      previous chunk's last line)
    - after the discard and after each yielded line, a bounded chunk stops
      once the read position has moved past its end offset, even if that
      line ran over the boundary

    ``path`` is the constituent file the line starts in when ``with_paths``
    is set and the stream can tell (``LogicalFileStream.path_at``), else None.
    """
    rng = chunk.range
    stream.seek(rng.start)

    if chunk.part_index > 0:
        skipped = stream.readline()
        if not skipped:
            return
        # a long line swallowed the whole range; the next line is not ours
        if not rng.unbounded and stream.tell() > rng.end:
            return

    path_at = getattr(stream, "path_at", None) if with_paths else None

    while True:
        path = path_at(stream.tell()) if path_at is not None else None
        raw = stream.readline()
        if not raw:
            return

        yield decode_line(raw, encoding, errors), path

        if not rng.unbounded and stream.tell() > rng.end:
            return
