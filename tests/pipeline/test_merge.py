# tests/pipeline/test_merge.py
from __future__ import annotations

import pytest

from byline.errors import InvalidArgumentError
from byline.parallel.types import ChunkResult, Mode
from byline.pipeline.merge import merge_results


def _results():
    # deliberately in completion order, not part order
    return [
        ChunkResult(2, ["e"], 1),
        ChunkResult(0, ["a", "b"], 2),
        ChunkResult(1, [], 3),
        ChunkResult(3, ["f", "g"], 2),
    ]


def test_values_concatenated_in_part_order():
    assert merge_results(_results(), Mode.TRANSFORM) == ["a", "b", "e", "f", "g"]
    assert merge_results(_results(), Mode.FILTER) == ["a", "b", "e", "f", "g"]


def test_iterate_sums_line_counts():
    assert merge_results(_results(), Mode.ITERATE) == 8
    assert merge_results(_results(), "iterate") == 8


def test_empty_results():
    assert merge_results([], Mode.TRANSFORM) == []
    assert merge_results([], Mode.ITERATE) == 0


@pytest.mark.parametrize(
    "parts",
    [[0, 0], [1, 2], [0, 2]],
    ids=["duplicate", "missing-first", "gap"],
)
def test_rejects_malformed_part_sets(parts):
    results = [ChunkResult(p) for p in parts]
    with pytest.raises(InvalidArgumentError):
        merge_results(results, Mode.TRANSFORM)
