from __future__ import annotations

from typing import Any, Iterable, List, Union

from byline.errors import InvalidArgumentError
from byline.parallel.types import ChunkResult, Mode

__all__ = ["merge_results"]


def merge_results(
    results: Iterable[ChunkResult], mode: Mode
) -> Union[List[Any], int]:
    """
    Reassemble per-chunk results in part_index order.

    Completion order of the workers never matters. ITERATE returns the total
    line count; FILTER and TRANSFORM return the concatenated values. Part
    indexes must form 0..N-1 with no duplicates.
    """
    ordered = sorted(results, key=lambda r: r.part_index)
    indexes = [r.part_index for r in ordered]
    if indexes != list(range(len(ordered))):
        raise InvalidArgumentError(
            f"chunk results must cover parts 0..{len(ordered) - 1} exactly once, "
            f"got {indexes}"
        )

    if Mode(mode) is Mode.ITERATE:
        return sum(r.line_count for r in ordered)

    merged: List[Any] = []
    for r in ordered:
        merged.extend(r.values)
    return merged
