# byline/io/stream.py
"""Logical concatenation of several files into one seekable byte source."""
from __future__ import annotations

import bisect
import io
import logging
import os
from dataclasses import dataclass, field
from typing import BinaryIO, List, Optional, Sequence, Tuple

from byline.config import HeaderMode

__all__ = [
    "Segment",
    "ResolvedInput",
    "resolve_segments",
    "LogicalFileStream",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Segment:
    """A byte window of one constituent file within the logical stream."""

    path: str
    offset: int = 0  # where the window starts inside the file
    length: int = 0  # bytes taken from the file
    pad: bool = False  # a synthesized b"\n" follows the window

    @property
    def size(self) -> int:
        """Bytes this segment occupies in the logical stream."""
        return self.length + (1 if self.pad else 0)


@dataclass(frozen=True)
class ResolvedInput:
    """Result of resolving a file list: data segments plus diverted headers."""

    segments: Tuple[Segment, ...]
    headers: Tuple[Tuple[str, bytes], ...] = field(default_factory=tuple)

    @property
    def total_size(self) -> int:
        return sum(s.size for s in self.segments)


def _probe(path: str, *, want_header: bool = False) -> Tuple[int, bool, bytes]:
    """
    Return (size, ends_with_newline, header) for a readable file.

    The header (first line, terminator included) is read through the same
    handle the size came from, never past that size; it is empty unless
    ``want_header`` is set.
    """
    with open(path, "rb") as fh:
        size = os.fstat(fh.fileno()).st_size
        if size == 0:
            return 0, True, b""
        fh.seek(size - 1)
        ends_nl = fh.read(1) == b"\n"
        header = b""
        if want_header:
            fh.seek(0)
            header = fh.readline(size)
        return size, ends_nl, header


def _strip_header(seg: Segment, ends_with_newline: bool, header: bytes) -> Segment:
    remaining = seg.length - len(header)
    if remaining <= 0:
        return Segment(seg.path, seg.offset + seg.length, 0, False)
    return Segment(seg.path, seg.offset + len(header), remaining, not ends_with_newline)


def resolve_segments(
    files: Sequence[str],
    *,
    skip_unreadable: bool = False,
    header_mode: HeaderMode = HeaderMode.NONE,
) -> ResolvedInput:
    """
    Resolve a file list into logical-stream segments.

    Runs in the controlling process. Every file is opened once to learn its
    size and whether it ends with a newline; unreadable files raise, or
    become empty segments when ``skip_unreadable`` is set.

    Header lines are read eagerly and removed from the data segments:
    FIRST takes the first line of the first non-empty file, ALL_FILES the
    first line of every file. Headers come back as (path, raw_bytes) pairs
    in file order.
    """
    header_mode = HeaderMode(header_mode)
    segments: List[Segment] = []
    headers: List[Tuple[str, bytes]] = []
    need_first = header_mode is HeaderMode.FIRST

    for path in files:
        want_header = header_mode is HeaderMode.ALL_FILES or need_first
        try:
            size, ends_nl, header = _probe(path, want_header=want_header)
        except OSError as exc:
            if not skip_unreadable:
                raise
            logger.warning("Skipping unreadable file %s: %s", path, exc)
            segments.append(Segment(path, 0, 0, False))
            continue

        seg = Segment(path, 0, size, size > 0 and not ends_nl)

        if size > 0 and want_header:
            seg = _strip_header(seg, ends_nl, header)
            headers.append((path, header))
            need_first = False

        segments.append(seg)

    resolved = ResolvedInput(tuple(segments), tuple(headers))
    logger.debug(
        "Resolved %d file(s): %d data bytes, %d header(s)",
        len(segments),
        resolved.total_size,
        len(headers),
    )
    return resolved


class LogicalFileStream(io.RawIOBase):
    """
    Read-only, seekable view of several file windows as one byte stream.

    Empty segments are dropped. At most one OS handle is open at a time;
    each worker builds its own instance from the (picklable) segment list.
    """

    def __init__(self, segments: Sequence[Segment]) -> None:
        super().__init__()
        self._segments: List[Segment] = [s for s in segments if s.size > 0]
        self._starts: List[int] = []
        pos = 0
        for seg in self._segments:
            self._starts.append(pos)
            pos += seg.size
        self._size = pos

        self._pos = 0
        self._index = 0
        self._fh: Optional[BinaryIO] = None
        self._fh_index = -1
        self._fh_synced = False

    # -- io.RawIOBase protocol ---------------------------------------------

    def readable(self) -> bool:
        return True

    def seekable(self) -> bool:
        return True

    @property
    def size(self) -> int:
        return self._size

    def tell(self) -> int:
        self._checkClosed()
        return self._pos

    def seek(self, pos: int, whence: int = io.SEEK_SET) -> int:
        self._checkClosed()
        if whence == io.SEEK_CUR:
            pos += self._pos
        elif whence == io.SEEK_END:
            pos += self._size
        elif whence != io.SEEK_SET:
            raise ValueError(f"invalid whence ({whence})")
        if pos < 0:
            raise ValueError(f"negative seek position {pos}")

        self._pos = pos
        self._index = self._segment_index(pos)
        self._fh_synced = False
        return pos

    def close(self) -> None:
        if self._fh is not None:
            self._fh.close()
            self._fh = None
            self._fh_index = -1
        super().close()

    def readinto(self, buffer) -> int:
        data = self.read(len(buffer))
        n = len(data)
        buffer[:n] = data
        return n

    def read(self, size: int = -1) -> bytes:
        self._checkClosed()
        parts: List[bytes] = []
        remaining = self._size - self._pos if size is None or size < 0 else size

        while remaining > 0 and self._index < len(self._segments):
            piece = self._read_piece(remaining, line=False)
            if not piece:
                continue
            parts.append(piece)
            remaining -= len(piece)
        return b"".join(parts)

    def readline(self, size: int = -1) -> bytes:
        self._checkClosed()
        parts: List[bytes] = []
        remaining = size if size is not None and size >= 0 else None

        while self._index < len(self._segments):
            if remaining is not None and remaining <= 0:
                break
            piece = self._read_piece(remaining, line=True)
            if not piece:
                continue
            parts.append(piece)
            if remaining is not None:
                remaining -= len(piece)
            if piece.endswith(b"\n"):
                break
        return b"".join(parts)

    # -- position helpers --------------------------------------------------

    def path_at(self, pos: int) -> Optional[str]:
        """Constituent file path covering logical offset ``pos``."""
        i = self._segment_index(pos)
        if i >= len(self._segments):
            return None
        return self._segments[i].path

    def _segment_index(self, pos: int) -> int:
        if pos >= self._size:
            return len(self._segments)
        return bisect.bisect_right(self._starts, pos) - 1

    # -- internals ---------------------------------------------------------

    def _handle(self) -> BinaryIO:
        if self._fh_index != self._index:
            if self._fh is not None:
                self._fh.close()
            self._fh = open(self._segments[self._index].path, "rb")
            self._fh_index = self._index
            self._fh_synced = False
        return self._fh

    def _read_piece(self, limit: Optional[int], *, line: bool) -> bytes:
        """Read from the current segment; advance to the next when exhausted."""
        seg = self._segments[self._index]
        rel = self._pos - self._starts[self._index]

        if rel < seg.length:
            fh = self._handle()
            if not self._fh_synced:
                fh.seek(seg.offset + rel)
                self._fh_synced = True
            want = seg.length - rel
            if limit is not None:
                want = min(want, limit)
            data = fh.readline(want) if line else fh.read(want)
            if not data:
                raise OSError(
                    f"{seg.path}: file shrank while reading "
                    f"(expected {seg.length} bytes from offset {seg.offset})"
                )
            self._pos += len(data)
            return data

        if seg.pad and rel == seg.length:
            self._pos += 1
            self._advance()
            return b"\n"

        self._advance()
        return b""

    def _advance(self) -> None:
        self._index += 1
        self._fh_synced = False
