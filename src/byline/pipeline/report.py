# byline/pipeline/report.py
from __future__ import annotations

import logging
from typing import Sequence

from byline.parallel.types import ChunkPlan

logger = logging.getLogger(__name__)


def _abbrev(s: str, width: int = 96) -> str:
    """Return s truncated with an ellipsis if it exceeds width."""
    return s if len(s) <= width else (s[: max(0, width - 1)] + "…")


def _executor_name(parts: int, use_threads: bool) -> str:
    if parts <= 1:
        return "inline"
    return "threads" if use_threads else "processes"


def format_run_summary(
    *,
    files: Sequence[str],
    mode: str,
    total_size: int,
    plan: ChunkPlan,
    requested_workers: int,
    use_threads: bool = False,
    header_mode: str = "none",
    headers_found: int = 0,
    skip_unreadable: bool = False,
    extended_info: bool = False,
    color: bool = True,
) -> str:
    """
    Build a formatted, human-readable summary of the planned run.
    """
    heading = "Line Processing Configuration"
    if color:
        heading = f"\033[4m{heading}\033[0m"

    first_file = files[0] if files else "None"
    last_file = files[-1] if files else "None"

    lines = [
        heading,
        f"Mode:                       {mode}",
        f"Files:                      {len(files)}",
        f"First file:                 {_abbrev(first_file)}",
        f"Last file:                  {_abbrev(last_file)}",
        f"Data bytes:                 {total_size:,}",
        f"Header mode:                {header_mode}",
    ]

    if headers_found:
        lines.append(f"Header lines diverted:      {headers_found}")
    if skip_unreadable:
        lines.append("Unreadable files:           skipped")
    if extended_info:
        lines.append("Extended info:              on")

    lines.append(
        f"Chunks:                     {len(plan)} "
        f"(requested {requested_workers}, "
        f"{_executor_name(len(plan), use_threads)})"
    )
    return "\n".join(lines) + "\n"


def log_run_summary(*, color: bool = False, **kwargs) -> None:
    """Log the run summary at INFO level."""
    summary = format_run_summary(color=color, **kwargs)
    for line in summary.rstrip("\n").splitlines():
        logger.info(line)
