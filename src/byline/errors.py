"""Exception types raised by the line-processing engine."""

from __future__ import annotations

from typing import Optional

__all__ = [
    "BylineError",
    "InvalidArgumentError",
    "CallbackError",
    "ChunkReadError",
    "WorkerCrashedError",
]


class BylineError(Exception):
    """Base class for all errors raised by byline."""


class InvalidArgumentError(BylineError, ValueError):
    """Bad worker count, missing file list or malformed plan input."""


class CallbackError(BylineError):
    """
    A user callback (or header handler) raised while processing a chunk.

    When raised in the controlling process the original exception is
    chained as ``__cause__``. Failures coming back from a worker process
    carry the remote traceback text instead.
    """

    def __init__(
        self,
        part_index: int,
        message: str,
        *,
        filename: Optional[str] = None,
        cause_type: Optional[str] = None,
        remote_traceback: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.part_index = part_index
        self.message = message
        self.filename = filename
        self.cause_type = cause_type
        self.remote_traceback = remote_traceback

    def __str__(self) -> str:
        where = f"part {self.part_index}"
        if self.filename:
            where += f", file {self.filename}"
        kind = f"{self.cause_type}: " if self.cause_type else ""
        return f"callback failed in {where}: {kind}{self.message}"


class ChunkReadError(BylineError, OSError):
    """An I/O failure inside a worker process while reading its chunk."""

    def __init__(self, part_index: int, message: str) -> None:
        OSError.__init__(self, message)
        self.part_index = part_index
        self.message = message

    def __str__(self) -> str:
        return f"read failed in part {self.part_index}: {self.message}"


class WorkerCrashedError(BylineError, RuntimeError):
    """A worker process exited without reporting a result."""

    def __init__(self, part_index: int, exitcode: Optional[int]) -> None:
        super().__init__(part_index, exitcode)
        self.part_index = part_index
        self.exitcode = exitcode

    def __str__(self) -> str:
        return (
            f"worker for part {self.part_index} exited without a result "
            f"(exit code {self.exitcode})"
        )
