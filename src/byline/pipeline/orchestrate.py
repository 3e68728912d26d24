# byline/pipeline/orchestrate.py
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, List, Optional, Sequence, Tuple, Union

from byline.config import HeaderMode, ProcessingContext
from byline.errors import CallbackError, InvalidArgumentError
from byline.io.reader import decode_line
from byline.io.stream import resolve_segments
from byline.parallel.partitioning import plan_chunks
from byline.parallel.types import LineContext, Mode
from byline.pipeline.merge import merge_results
from byline.pipeline.report import log_run_summary
from byline.pipeline.runner import dispatch
from byline.pipeline.worker import ChunkTask

__all__ = ["run"]

logger = logging.getLogger(__name__)


def _coerce_mode(mode: Union[Mode, str]) -> Mode:
    try:
        return Mode(mode)
    except ValueError:
        choices = ", ".join(m.value for m in Mode)
        raise InvalidArgumentError(
            f"mode must be one of {choices}, got {mode!r}"
        ) from None


def _deliver_headers(
    headers: Sequence[Tuple[str, bytes]], cfg: ProcessingContext
) -> None:
    """Hand header lines to the header handler, in the controlling process."""
    handler = cfg.header_handler
    if handler is None:
        if headers:
            logger.debug("Discarding %d header line(s); no handler set", len(headers))
        return

    for path, raw in headers:
        line = decode_line(raw, cfg.encoding, cfg.errors)
        try:
            if cfg.extended_info:
                handler(line, LineContext(path, 0, cfg))
            else:
                handler(line)
        except Exception as exc:
            raise CallbackError(
                0,
                str(exc),
                filename=path,
                cause_type=type(exc).__name__,
            ) from exc


def run(
    mode: Union[Mode, str],
    callback: Callable[..., Any],
    config: Optional[ProcessingContext] = None,
    **overrides: Any,
) -> Union[List[Any], int]:
    """
    Run ``callback`` over every line of the configured files.

    Process
    -------
    1. Validate mode, callback and configuration (no I/O yet)
    2. Resolve the file list into logical-stream segments; divert headers
    3. Run the header handler here, before any chunk is planned
    4. Plan chunks over the data bytes and dispatch them to workers
    5. Merge chunk results in part order

    Returns the ordered list of kept lines (FILTER), of callback values
    (TRANSFORM), or the number of lines processed (ITERATE).

    ``config`` defaults to a fresh ProcessingContext; keyword ``overrides``
    are applied on top of it with ``replace``.
    """
    cfg = config if config is not None else ProcessingContext()
    if overrides:
        cfg = cfg.replace(**overrides)

    mode = _coerce_mode(mode)
    if not callable(callback):
        raise InvalidArgumentError("callback must be callable")
    files = cfg.require_files()

    start_time = datetime.now()

    resolved = resolve_segments(
        files,
        skip_unreadable=cfg.skip_unreadable,
        header_mode=cfg.header_mode,
    )
    if cfg.header_mode is not HeaderMode.NONE:
        _deliver_headers(resolved.headers, cfg)

    plan = plan_chunks(resolved.total_size, cfg.processes)

    log_run_summary(
        files=files,
        mode=mode.value,
        total_size=resolved.total_size,
        plan=plan,
        requested_workers=cfg.processes,
        use_threads=cfg.use_threads,
        header_mode=cfg.header_mode.value,
        headers_found=len(resolved.headers),
        skip_unreadable=cfg.skip_unreadable,
        extended_info=cfg.extended_info,
    )

    task = ChunkTask(
        segments=resolved.segments,
        mode=mode,
        callback=callback,
        context=cfg,
    )
    results = dispatch(plan, task)
    merged = merge_results(results, mode)

    lines = sum(r.line_count for r in results)
    logger.info(
        "Completed %s over %d line(s) in %d chunk(s); runtime %s",
        mode.value,
        lines,
        len(plan),
        datetime.now() - start_time,
    )
    return merged
