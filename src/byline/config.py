# byline/config.py
"""Configuration for line-processing runs."""
from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import PurePath
from typing import Any, Callable, Optional, Tuple, Union

from byline.errors import InvalidArgumentError

__all__ = ["HeaderMode", "ProcessingContext", "normalize_files"]

PathArg = Union[str, "os.PathLike[str]"]


class HeaderMode(str, Enum):
    """Which header lines are diverted to the header handler.

    - NONE: no header; every line is data
    - FIRST: the first line of the logical stream
    - ALL_FILES: the first line of every constituent file
    """

    NONE = "none"
    FIRST = "first"
    ALL_FILES = "all"


def normalize_files(files: Any) -> Tuple[str, ...]:
    """Accept one path or a sequence of paths; return a tuple of strings."""
    if files is None:
        return ()
    if isinstance(files, (str, bytes, PurePath)) or hasattr(files, "__fspath__"):
        files = [files]
    try:
        items = list(files)
    except TypeError:
        raise InvalidArgumentError(
            f"files must be a path or a sequence of paths, got {type(files).__name__}"
        ) from None

    out = []
    for item in items:
        if isinstance(item, bytes):
            item = os.fsdecode(item)
        try:
            path = os.fspath(item)
        except TypeError:
            raise InvalidArgumentError(
                f"invalid file entry {item!r}: expected str or path-like"
            ) from None
        if not path:
            raise InvalidArgumentError("empty filename in file list")
        out.append(path)
    return tuple(out)


@dataclass(frozen=True)
class ProcessingContext:
    """Snapshot of everything a run needs.

    Instances are immutable; use ``replace(**changes)`` to derive a new one.
    Workers receive this object as the read-only ``context`` of a
    ``LineContext`` when extended info is enabled.
    """

    # Input
    files: Tuple[str, ...] = ()
    skip_unreadable: bool = False
    encoding: str = "utf-8"
    errors: str = "strict"

    # Headers
    header_mode: HeaderMode = HeaderMode.NONE
    header_handler: Optional[Callable[..., Any]] = field(default=None, compare=False)

    # Parallelism
    processes: int = 1
    use_threads: bool = False  # threads instead of worker processes

    # Callback shape: callback(line) or callback(line, LineContext)
    extended_info: bool = False

    # Reporting
    progress: bool = False
    proc_title: str = "byline"

    def __post_init__(self) -> None:
        object.__setattr__(self, "files", normalize_files(self.files))

        if isinstance(self.processes, bool) or not isinstance(self.processes, int):
            raise InvalidArgumentError(
                f"processes must be an integer >= 1, got {self.processes!r}"
            )
        if self.processes < 1:
            raise InvalidArgumentError(
                f"processes must be >= 1, got {self.processes}"
            )

        try:
            mode = HeaderMode(self.header_mode)
        except ValueError:
            choices = ", ".join(m.value for m in HeaderMode)
            raise InvalidArgumentError(
                f"header_mode must be one of {choices}, got {self.header_mode!r}"
            ) from None
        object.__setattr__(self, "header_mode", mode)

        if self.header_handler is not None and not callable(self.header_handler):
            raise InvalidArgumentError("header_handler must be callable")

    def replace(self, **changes: Any) -> "ProcessingContext":
        """Return a copy with ``changes`` applied (validation re-runs)."""
        return replace(self, **changes)

    def require_files(self) -> Tuple[str, ...]:
        """Return the file list, raising when none was configured."""
        if not self.files:
            raise InvalidArgumentError("No file specified")
        return self.files
