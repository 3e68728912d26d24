"""Byte-range chunk planning."""

from __future__ import annotations

from typing import List

from byline.errors import InvalidArgumentError
from .types import ByteRange, ChunkPlan, ChunkSpec

__all__ = ["plan_chunks", "effective_parts"]


def effective_parts(total_size: int, requested_parts: int) -> int:
    """
    Number of chunks actually planned for a given size and request.

    A request larger than the byte count is clamped to one chunk per byte
    (and never below one chunk, so an empty input still gets a plan).
    """
    if requested_parts == 1:
        return 1
    return min(requested_parts, max(total_size, 1))


def plan_chunks(total_size: int, requested_parts: int) -> ChunkPlan:
    """
    Divide ``total_size`` bytes into roughly equal chunk ranges.

    Boundaries are approximate cut points, not line starts. The reader
    restores line exactness: a non-first chunk skips its partial first line,
    and every chunk keeps reading until it has passed its ``end`` offset.

    - Part i starts at floor(i * total_size / parts)
    - Part i ends where part i+1 starts
    - The last part is unbounded (end = -1), so bytes left over from
      integer division are never dropped

    Args:
        total_size: Size of the data region in bytes (>= 0)
        requested_parts: Desired number of chunks (>= 1)

    Returns:
        Tuple of ChunkSpec ordered by part_index

    Example:
        >>> [c.range.start for c in plan_chunks(10, 3)]
        [0, 3, 6]
        >>> plan_chunks(10, 3)[-1].range.end
        -1
        >>> len(plan_chunks(2, 8))
        2
    """
    if isinstance(requested_parts, bool) or not isinstance(requested_parts, int):
        raise InvalidArgumentError(
            f"requested_parts must be an integer, got {requested_parts!r}"
        )
    if requested_parts < 1:
        raise InvalidArgumentError(
            f"requested_parts must be >= 1, got {requested_parts}"
        )
    if total_size < 0:
        raise InvalidArgumentError(f"total_size must be >= 0, got {total_size}")

    parts = effective_parts(total_size, requested_parts)
    if parts == 1:
        return (ChunkSpec(part_index=0, range=ByteRange(0, -1)),)

    starts = [(i * total_size) // parts for i in range(parts)]

    chunks: List[ChunkSpec] = []
    for i, start in enumerate(starts):
        end = starts[i + 1] if i < parts - 1 else -1
        chunks.append(ChunkSpec(part_index=i, range=ByteRange(start, end)))

    return tuple(chunks)
