from __future__ import annotations

import logging
import multiprocessing as mp
import pickle
import queue
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Dict, List, Optional

from tqdm import tqdm

from byline.errors import WorkerCrashedError
from byline.parallel.types import ChunkPlan, ChunkResult, WorkerFailure
from byline.pipeline.worker import (
    ChunkTask,
    failure_to_exception,
    process_chunk,
    run_chunk_in_process,
)

__all__ = ["dispatch", "get_mp_context"]

logger = logging.getLogger(__name__)

POLL_INTERVAL_S = 0.2
LATE_RESULT_GRACE_S = 1.0


def get_mp_context():
    """
    Multiprocessing context for chunk workers.

    ``fork`` hands the callback to the child without pickling, so closures
    and lambdas work. Where fork is unavailable the platform default is
    used and callbacks must be picklable.
    """
    if "fork" in mp.get_all_start_methods():
        return mp.get_context("fork")
    return mp.get_context()


def dispatch(plan: ChunkPlan, task: ChunkTask) -> List[ChunkResult]:
    """
    Run every chunk of ``plan`` and return their results (in any order).

    A single-chunk plan runs inline in the calling process. Larger plans
    get one isolated worker per chunk: processes by default, threads when
    ``task.context.use_threads`` is set. All workers are drained before the
    first detected failure is raised; no partial result is returned.
    """
    if not plan:
        return []

    if len(plan) == 1:
        logger.debug("Single chunk: running inline")
        return [process_chunk(task, plan[0])]

    if task.context.use_threads:
        return _dispatch_threads(plan, task)
    return _dispatch_processes(plan, task)


def _progress(total: int, enabled: bool) -> tqdm:
    return tqdm(
        total=total,
        desc="Chunks",
        unit="chunks",
        colour="blue",
        disable=not enabled,
    )


def _dispatch_threads(plan: ChunkPlan, task: ChunkTask) -> List[ChunkResult]:
    results: List[ChunkResult] = []
    first_error: Optional[BaseException] = None

    with _progress(len(plan), task.context.progress) as pbar:
        with ThreadPoolExecutor(
            max_workers=len(plan), thread_name_prefix=task.context.proc_title
        ) as executor:
            futures = {
                executor.submit(process_chunk, task, chunk): chunk.part_index
                for chunk in plan
            }
            for fut in as_completed(futures):
                part = futures[fut]
                try:
                    results.append(fut.result())
                except Exception as exc:
                    logger.error("Part %d failed: %s", part, exc)
                    if first_error is None:
                        first_error = exc
                finally:
                    pbar.update(1)

    if first_error is not None:
        raise first_error
    return results


def _dispatch_processes(plan: ChunkPlan, task: ChunkTask) -> List[ChunkResult]:
    ctx = get_mp_context()
    result_queue = ctx.Queue()

    procs: Dict[int, mp.process.BaseProcess] = {}
    for chunk in plan:
        p = ctx.Process(
            target=run_chunk_in_process,
            args=(task, chunk, result_queue),
            name=f"{task.context.proc_title}-part-{chunk.part_index}",
        )
        p.start()
        procs[chunk.part_index] = p
    logger.info("Started %d worker processes (%s)", len(procs), ctx.get_start_method())

    results: Dict[int, ChunkResult] = {}
    failures: List[WorkerFailure] = []
    crashed: Dict[int, Optional[int]] = {}

    def record(part: int, payload: Optional[bytes], failure: Optional[WorkerFailure]) -> None:
        if failure is not None:
            logger.error(
                "Part %d failed: %s: %s", part, failure.exc_type, failure.message
            )
            failures.append(failure)
            return
        results[part] = pickle.loads(payload)
        logger.debug("Part %d reported %d lines", part, results[part].line_count)

    def outstanding() -> List[int]:
        done = set(results) | set(crashed) | {f.part_index for f in failures}
        return [part for part in procs if part not in done]

    try:
        # tqdm starts a monitor thread; create it only after forking
        with _progress(len(plan), task.context.progress) as pbar:
            while outstanding():
                try:
                    item = result_queue.get(timeout=POLL_INTERVAL_S)
                except queue.Empty:
                    dead = [p for p in outstanding() if not procs[p].is_alive()]
                    if not dead:
                        continue
                    # A result may still be in flight from a worker that just exited
                    try:
                        item = result_queue.get(timeout=LATE_RESULT_GRACE_S)
                    except queue.Empty:
                        for part in dead:
                            logger.error(
                                "Worker for part %d exited (code %s) without a result",
                                part,
                                procs[part].exitcode,
                            )
                            crashed[part] = procs[part].exitcode
                            pbar.update(1)
                        continue

                part, payload, failure = item
                if part in outstanding():
                    record(part, payload, failure)
                    pbar.update(1)
    finally:
        for p in procs.values():
            p.join(timeout=30)
            if p.is_alive():
                p.terminate()
                p.join()
        result_queue.close()
        result_queue.join_thread()

    if failures:
        raise failure_to_exception(failures[0])
    if crashed:
        part = min(crashed)
        raise WorkerCrashedError(part, crashed[part])
    return list(results.values())
