"""Line-by-line file loops with optional chunked parallel execution."""

from byline.api import (
    ByLine,
    dolines,
    forlines,
    greplines,
    maplines,
    parallel_dolines,
    parallel_forlines,
    parallel_greplines,
    parallel_maplines,
    readlines,
)
from byline.config import HeaderMode, ProcessingContext
from byline.errors import (
    BylineError,
    CallbackError,
    ChunkReadError,
    InvalidArgumentError,
    WorkerCrashedError,
)
from byline.parallel.partitioning import plan_chunks
from byline.parallel.types import LineContext, Mode
from byline.pipeline.orchestrate import run

__version__ = "0.3.0"

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
    "HeaderMode",
    "ProcessingContext",
    "LineContext",
    "Mode",
    "plan_chunks",
    "run",
    "BylineError",
    "CallbackError",
    "ChunkReadError",
    "InvalidArgumentError",
    "WorkerCrashedError",
]
