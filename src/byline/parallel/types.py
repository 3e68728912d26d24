"""Shared types for chunked parallel processing."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Tuple

__all__ = [
    "Mode",
    "ByteRange",
    "ChunkSpec",
    "ChunkPlan",
    "ChunkResult",
    "LineContext",
    "WorkerFailure",
]


class Mode(str, Enum):
    """Processing mode of a run."""

    ITERATE = "iterate"
    FILTER = "filter"
    TRANSFORM = "transform"


@dataclass(frozen=True)
class ByteRange:
    """Approximate cut points of one chunk within the data region."""

    start: int
    """Starting byte offset (inclusive)"""

    end: int = -1
    """Last offset a line may start at; -1 reads to end of stream"""

    @property
    def unbounded(self) -> bool:
        return self.end < 0


@dataclass(frozen=True)
class ChunkSpec:
    """One planned chunk: its index within the plan and its byte range."""

    part_index: int
    range: ByteRange


ChunkPlan = Tuple[ChunkSpec, ...]


@dataclass
class ChunkResult:
    """Output of one worker, consumed once by the merger."""

    part_index: int
    values: List[Any] = field(default_factory=list)
    line_count: int = 0


@dataclass(frozen=True)
class LineContext:
    """Per-line metadata handed to callbacks when extended info is enabled."""

    filename: Optional[str]
    """Constituent file the line starts in"""

    part_index: int
    """Chunk the line belongs to"""

    context: Any
    """Read-only ProcessingContext snapshot of the run"""


@dataclass(frozen=True)
class WorkerFailure:
    """Picklable description of an exception raised in a worker process."""

    kind: str  # "callback" | "io" | "internal"
    part_index: int
    exc_type: str
    message: str
    filename: Optional[str] = None
    traceback: str = ""
