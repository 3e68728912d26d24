# tests/pipeline/test_worker.py
from __future__ import annotations

import pickle
import queue

import pytest

from byline.config import ProcessingContext
from byline.errors import BylineError, CallbackError, ChunkReadError
from byline.io.stream import Segment, resolve_segments
from byline.parallel.types import ByteRange, ChunkSpec, LineContext, Mode
from byline.pipeline.worker import (
    ChunkTask,
    failure_from_exception,
    failure_to_exception,
    process_chunk,
    run_chunk_in_process,
)

WHOLE = ChunkSpec(0, ByteRange(0, -1))


def _task(paths, mode, callback, **cfg):
    context = ProcessingContext(files=paths, **cfg)
    resolved = resolve_segments(context.files)
    return ChunkTask(resolved.segments, mode, callback, context)


def test_iterate_counts_and_calls(write_file):
    path = write_file("a\nb\nc\n")
    seen = []
    result = process_chunk(_task([path], Mode.ITERATE, seen.append), WHOLE)
    assert result.line_count == 3
    assert result.values == []
    assert seen == ["a", "b", "c"]


def test_filter_keeps_original_lines(write_file):
    path = write_file("apple\nbanana\navocado\n")
    result = process_chunk(
        _task([path], Mode.FILTER, lambda line: line.startswith("a")), WHOLE
    )
    assert result.values == ["apple", "avocado"]
    assert result.line_count == 3


def test_transform_flattens_lists_and_skips_empty(write_file):
    path = write_file("1\n2\n3\n")

    def explode(line):
        n = int(line)
        if n == 2:
            return []
        if n == 3:
            return (n, n * 10)
        return str(n)

    result = process_chunk(_task([path], Mode.TRANSFORM, explode), WHOLE)
    assert result.values == ["1", 3, 30]


def test_transform_keeps_none_values(write_file):
    path = write_file("x\ny\n")
    result = process_chunk(_task([path], Mode.TRANSFORM, lambda line: None), WHOLE)
    assert result.values == [None, None]


def test_extended_info_passes_line_context(write_file):
    a = write_file("a\n")
    b = write_file("b\n")
    seen = []
    task = _task(
        [a, b],
        Mode.ITERATE,
        lambda line, ctx: seen.append((line, ctx)),
        extended_info=True,
    )
    process_chunk(task, WHOLE)
    assert [line for line, _ in seen] == ["a", "b"]
    ctx_a, ctx_b = seen[0][1], seen[1][1]
    assert isinstance(ctx_a, LineContext)
    assert ctx_a.filename == a and ctx_b.filename == b
    assert ctx_a.part_index == 0
    assert ctx_a.context is task.context


def test_callback_error_wraps_and_chains(write_file):
    path = write_file("ok\nboom\n")

    def cb(line):
        if line == "boom":
            raise ValueError("bad line")

    with pytest.raises(CallbackError) as ei:
        process_chunk(_task([path], Mode.ITERATE, cb), ChunkSpec(0, ByteRange(0, -1)))
    err = ei.value
    assert err.part_index == 0
    assert err.cause_type == "ValueError"
    assert isinstance(err.__cause__, ValueError)
    assert "bad line" in str(err)


def test_callback_error_names_file_with_extended_info(write_file):
    path = write_file("boom\n")

    def cb(line, ctx):
        raise KeyError(line)

    with pytest.raises(CallbackError) as ei:
        process_chunk(_task([path], Mode.ITERATE, cb, extended_info=True), WHOLE)
    assert ei.value.filename == path
    assert path in str(ei.value)


def test_io_error_propagates_unwrapped(tmp_path):
    missing = str(tmp_path / "gone.txt")
    task = ChunkTask((Segment(missing, 0, 5, False),), Mode.ITERATE, len, ProcessingContext())
    with pytest.raises(FileNotFoundError):
        process_chunk(task, WHOLE)


# --- failure round trip -----------------------------------------------------


def test_failure_round_trip_for_callback_error():
    try:
        try:
            raise ZeroDivisionError("division by zero")
        except ZeroDivisionError as exc:
            raise CallbackError(3, str(exc), filename="f.txt",
                                cause_type="ZeroDivisionError") from exc
    except CallbackError as err:
        failure = failure_from_exception(err, 3)

    failure = pickle.loads(pickle.dumps(failure))
    assert failure.kind == "callback"
    assert "ZeroDivisionError" in failure.traceback

    rebuilt = failure_to_exception(failure)
    assert isinstance(rebuilt, CallbackError)
    assert rebuilt.part_index == 3
    assert rebuilt.filename == "f.txt"
    assert rebuilt.cause_type == "ZeroDivisionError"
    assert rebuilt.remote_traceback


def test_failure_round_trip_for_io_error():
    failure = failure_from_exception(FileNotFoundError(2, "No such file"), 1)
    assert failure.kind == "io"
    rebuilt = failure_to_exception(failure)
    assert isinstance(rebuilt, ChunkReadError)
    assert isinstance(rebuilt, OSError)
    assert rebuilt.part_index == 1


def test_failure_round_trip_for_other_errors():
    rebuilt = failure_to_exception(failure_from_exception(RuntimeError("x"), 4))
    assert type(rebuilt) is BylineError
    assert "part 4" in str(rebuilt)


# --- process entry point (run in-process with a plain queue) ----------------


@pytest.fixture
def quiet_proctitle(monkeypatch):
    import byline.pipeline.worker as worker_mod

    titles = []
    monkeypatch.setattr(worker_mod, "setproctitle", titles.append, raising=True)
    return titles


def test_run_chunk_in_process_reports_pickled_result(write_file, quiet_proctitle):
    path = write_file("a\nb\n")
    q = queue.Queue()
    run_chunk_in_process(_task([path], Mode.FILTER, bool), WHOLE, q)

    part, payload, failure = q.get_nowait()
    assert part == 0 and failure is None
    assert pickle.loads(payload).values == ["a", "b"]
    assert quiet_proctitle == ["byline: part 0"]


def test_run_chunk_in_process_reports_failure(write_file, quiet_proctitle):
    path = write_file("a\n")
    q = queue.Queue()

    def cb(line):
        raise ValueError("nope")

    run_chunk_in_process(_task([path], Mode.ITERATE, cb), WHOLE, q)
    part, payload, failure = q.get_nowait()
    assert payload is None
    assert failure.kind == "callback"
    assert failure.exc_type == "ValueError"


def test_unpicklable_values_become_failures(write_file, quiet_proctitle):
    path = write_file("a\n")
    q = queue.Queue()
    run_chunk_in_process(
        _task([path], Mode.TRANSFORM, lambda line: (lambda: line)), WHOLE, q
    )
    _, payload, failure = q.get_nowait()
    assert payload is None
    assert failure.kind == "internal"
