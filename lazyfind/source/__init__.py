"""File-external source package exports.

Streams an external directory-search command's output as classified batches.
Also exposes the one-shot find source and the building blocks for tests.
"""

from __future__ import annotations

from .cancel import CancellationToken, SearchAborted
from .channel import BatchChannel, ChannelClosed
from .classify import classify_path, resolve_line
from .emitter import BatchEmitter, BatchingMode, BatchSizer, EmitterState
from .file_external import FileExternalSource, GatherSession, SourceParams
from .find import FindSource, collect_find_batches
from .lines import iter_lines
from .process import ExitStatus, ProcessHandle, SpawnFailure, spawn_process
from .types import (
    DEFAULT_UPDATE_ITEMS,
    ENQUEUE_SIZE_FIRST,
    Batch,
    EntryKind,
    ResolvedEntry,
    SearchRequest,
)

__all__ = [
    "Batch",
    "BatchChannel",
    "BatchEmitter",
    "BatchSizer",
    "BatchingMode",
    "CancellationToken",
    "ChannelClosed",
    "DEFAULT_UPDATE_ITEMS",
    "ENQUEUE_SIZE_FIRST",
    "EmitterState",
    "EntryKind",
    "ExitStatus",
    "FileExternalSource",
    "FindSource",
    "GatherSession",
    "ProcessHandle",
    "ResolvedEntry",
    "SearchAborted",
    "SearchRequest",
    "SourceParams",
    "SpawnFailure",
    "classify_path",
    "collect_find_batches",
    "iter_lines",
    "resolve_line",
    "spawn_process",
]
