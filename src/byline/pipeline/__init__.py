"""Dispatch, merge and orchestration of chunked runs."""

from .merge import merge_results
from .orchestrate import run
from .runner import dispatch
from .worker import ChunkTask, process_chunk

__all__ = ["run", "dispatch", "merge_results", "ChunkTask", "process_chunk"]
