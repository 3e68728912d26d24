# byline/api.py
"""
Line-by-line file loops.

    dolines(lambda line: print(line), "file.txt")
    forlines("file.txt", lambda line: print(line))
    matches = greplines(lambda line: "foo" in line, "file.txt")
    lowered = maplines(str.lower, "file.txt")
    lines = readlines("file.txt")

The ``parallel_*`` variants split the file into byte-range chunks and run
each chunk in its own worker process. Callbacks then run in separate
processes: changes they make to outside state are not visible to the
caller, and no order of execution across chunks should be assumed. Results
of ``parallel_greplines`` and ``parallel_maplines`` still come back in file
order.

Every call builds a fresh ProcessingContext; use ``ByLine`` to reuse one.
"""
from __future__ import annotations

from typing import Any, Callable, List, Optional

from byline.config import ProcessingContext
from byline.errors import InvalidArgumentError
from byline.parallel.types import Mode
from byline.pipeline.orchestrate import run

__all__ = [
    "ByLine",
    "dolines",
    "forlines",
    "greplines",
    "maplines",
    "readlines",
    "parallel_dolines",
    "parallel_forlines",
    "parallel_greplines",
    "parallel_maplines",
]


def _identity(line: str) -> str:
    return line


class ByLine:
    """
    Object interface bound to one ProcessingContext.

    Options are the ProcessingContext fields (``processes``,
    ``header_mode``, ``header_handler``, ``skip_unreadable``,
    ``extended_info``, ...). The context is immutable; ``replace`` returns a
    new ByLine.
    """

    def __init__(self, config: Optional[ProcessingContext] = None, **options: Any) -> None:
        cfg = config if config is not None else ProcessingContext()
        self.config = cfg.replace(**options) if options else cfg

    def __repr__(self) -> str:
        return f"ByLine({self.config!r})"

    def replace(self, **options: Any) -> "ByLine":
        return ByLine(self.config.replace(**options))

    def _config_for(self, files: Any) -> ProcessingContext:
        if files is None:
            return self.config
        return self.config.replace(files=files)

    def do(self, callback: Callable[..., Any], files: Any = None) -> int:
        """Call ``callback`` for each line; return the number of lines."""
        return run(Mode.ITERATE, callback, self._config_for(files))

    def grep(self, callback: Callable[..., Any], files: Any = None) -> List[str]:
        """Return the lines for which ``callback`` is true."""
        return run(Mode.FILTER, callback, self._config_for(files))

    def map(self, callback: Callable[..., Any], files: Any = None) -> List[Any]:
        """
        Return the callback's values for each line.

        A list or tuple return contributes each of its elements; return
        ``[]`` to contribute nothing for a line.
        """
        return run(Mode.TRANSFORM, callback, self._config_for(files))

    def lines(self, files: Any = None) -> List[str]:
        """Return all lines, terminators removed."""
        cfg = self._config_for(files).replace(extended_info=False)
        return run(Mode.TRANSFORM, _identity, cfg)


def _checked_processes(processes: Any) -> int:
    if processes is None:
        raise InvalidArgumentError("Must include number of child processes")
    if isinstance(processes, bool) or not isinstance(processes, int) or processes < 1:
        raise InvalidArgumentError("Number of processes must be >= 1")
    return processes


def dolines(callback: Callable[[str], Any], file: Any) -> int:
    return ByLine(files=file).do(callback)


def forlines(file: Any, callback: Callable[[str], Any]) -> int:
    return ByLine(files=file).do(callback)


def greplines(callback: Callable[[str], Any], file: Any) -> List[str]:
    return ByLine(files=file).grep(callback)


def maplines(callback: Callable[[str], Any], file: Any) -> List[Any]:
    return ByLine(files=file).map(callback)


def readlines(file: Any) -> List[str]:
    return ByLine(files=file).lines()


def parallel_dolines(callback: Callable[[str], Any], file: Any, processes: int) -> int:
    return ByLine(files=file, processes=_checked_processes(processes)).do(callback)


def parallel_forlines(file: Any, processes: int, callback: Callable[[str], Any]) -> int:
    return ByLine(files=file, processes=_checked_processes(processes)).do(callback)


def parallel_greplines(
    callback: Callable[[str], Any], file: Any, processes: int
) -> List[str]:
    return ByLine(files=file, processes=_checked_processes(processes)).grep(callback)


def parallel_maplines(
    callback: Callable[[str], Any], file: Any, processes: int
) -> List[Any]:
    return ByLine(files=file, processes=_checked_processes(processes)).map(callback)
