"""Chunk planning and shared types."""

from .partitioning import effective_parts, plan_chunks
from .types import (
    ByteRange,
    ChunkPlan,
    ChunkResult,
    ChunkSpec,
    LineContext,
    Mode,
    WorkerFailure,
)

__all__ = [
    "plan_chunks",
    "effective_parts",
    "ByteRange",
    "ChunkPlan",
    "ChunkResult",
    "ChunkSpec",
    "LineContext",
    "Mode",
    "WorkerFailure",
]
