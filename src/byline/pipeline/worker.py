# byline/pipeline/worker.py
from __future__ import annotations

import logging
import os
import pickle
import traceback
from dataclasses import dataclass
from typing import Any, Callable, Optional, Tuple

from setproctitle import setproctitle

from byline.config import ProcessingContext
from byline.errors import BylineError, CallbackError, ChunkReadError
from byline.io.reader import read_chunk
from byline.io.stream import LogicalFileStream, Segment
from byline.parallel.types import (
    ChunkResult,
    ChunkSpec,
    LineContext,
    Mode,
    WorkerFailure,
)

__all__ = [
    "ChunkTask",
    "process_chunk",
    "run_chunk_in_process",
    "failure_from_exception",
    "failure_to_exception",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChunkTask:
    """Everything a worker needs besides its ChunkSpec. Shared by all chunks."""

    segments: Tuple[Segment, ...]
    mode: Mode
    callback: Callable[..., Any]
    context: ProcessingContext


def _collect(mode: Mode, result: ChunkResult, line: str, out: Any) -> None:
    if mode is Mode.FILTER:
        if out:
            result.values.append(line)
    elif mode is Mode.TRANSFORM:
        # list/tuple contributes each element; [] contributes nothing
        if isinstance(out, (list, tuple)):
            result.values.extend(out)
        else:
            result.values.append(out)


def process_chunk(task: ChunkTask, chunk: ChunkSpec) -> ChunkResult:
    """
    Read one chunk and apply the callback to each of its lines.

    Runs inline, in a thread, or inside a worker process. Exceptions raised
    by the callback are wrapped in CallbackError (original chained);
    I/O errors propagate unchanged.
    """
    cfg = task.context
    extended = cfg.extended_info
    callback = task.callback
    mode = Mode(task.mode)
    result = ChunkResult(part_index=chunk.part_index)

    with LogicalFileStream(task.segments) as stream:
        lines = read_chunk(
            stream,
            chunk,
            encoding=cfg.encoding,
            errors=cfg.errors,
            with_paths=extended,
        )
        for line, path in lines:
            result.line_count += 1
            try:
                if extended:
                    out = callback(line, LineContext(path, chunk.part_index, cfg))
                else:
                    out = callback(line)
            except Exception as exc:
                raise CallbackError(
                    chunk.part_index,
                    str(exc),
                    filename=path,
                    cause_type=type(exc).__name__,
                ) from exc
            _collect(mode, result, line, out)

    logger.debug(
        "Part %d: %d lines, %d values",
        chunk.part_index,
        result.line_count,
        len(result.values),
    )
    return result


def failure_from_exception(exc: BaseException, part_index: int) -> WorkerFailure:
    """Describe ``exc`` in a form that survives the trip back to the parent."""
    tb = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    if isinstance(exc, CallbackError):
        cause = exc.__cause__
        return WorkerFailure(
            kind="callback",
            part_index=part_index,
            exc_type=exc.cause_type or type(exc).__name__,
            message=exc.message,
            filename=exc.filename,
            traceback=tb if cause is None else "".join(
                traceback.format_exception(type(cause), cause, cause.__traceback__)
            ),
        )
    kind = "io" if isinstance(exc, OSError) else "internal"
    return WorkerFailure(
        kind=kind,
        part_index=part_index,
        exc_type=type(exc).__name__,
        message=str(exc),
        traceback=tb,
    )


def failure_to_exception(failure: WorkerFailure) -> BylineError:
    """Rebuild the exception to raise in the controlling process."""
    if failure.kind == "callback":
        return CallbackError(
            failure.part_index,
            failure.message,
            filename=failure.filename,
            cause_type=failure.exc_type,
            remote_traceback=failure.traceback,
        )
    if failure.kind == "io":
        return ChunkReadError(
            failure.part_index, f"{failure.exc_type}: {failure.message}"
        )
    return BylineError(
        f"worker for part {failure.part_index} failed: "
        f"{failure.exc_type}: {failure.message}"
    )


def run_chunk_in_process(task: ChunkTask, chunk: ChunkSpec, result_queue) -> None:
    """
    Worker-process entry point.

    Always reports exactly one message on ``result_queue``:
    (part_index, pickled ChunkResult, None) or (part_index, None, WorkerFailure).
    The result is pickled here so an unpicklable callback value becomes a
    reported failure instead of a silently dropped queue item.
    """
    setproctitle(f"{task.context.proc_title}: part {chunk.part_index}")
    pid = os.getpid()
    logger.debug("Worker %s (PID %s): starting", chunk.part_index, pid)

    payload: Optional[bytes] = None
    failure: Optional[WorkerFailure] = None
    try:
        result = process_chunk(task, chunk)
        payload = pickle.dumps(result, protocol=pickle.HIGHEST_PROTOCOL)
    except Exception as exc:
        failure = failure_from_exception(exc, chunk.part_index)
        logger.error(
            "Worker %s (PID %s): %s: %s",
            chunk.part_index,
            pid,
            failure.exc_type,
            failure.message,
        )

    result_queue.put((chunk.part_index, payload, failure))
