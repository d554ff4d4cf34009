"""File-external source: streams an external command's paths as batches.

``gather`` starts one pipeline per request on a daemon worker thread and
hands back the channel immediately. ``GatherSession`` keeps only the newest
gather alive when the consumer restarts a search.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from pathlib import Path

from .channel import BatchChannel
from .emitter import BatchEmitter, ClassifyFn, SpawnFn
from .classify import classify_path
from .process import spawn_process
from .types import DEFAULT_UPDATE_ITEMS, SearchRequest


@dataclass(frozen=True)
class SourceParams:
    cmd: tuple[str, ...] = ()
    update_items: int = DEFAULT_UPDATE_ITEMS


class FileExternalSource:
    kind = "file"

    def __init__(self, *, spawn: SpawnFn = spawn_process, classify: ClassifyFn = classify_path) -> None:
        self._spawn = spawn
        self._classify = classify

    def params(self) -> SourceParams:
        return SourceParams()

    def request_for(self, path: str | Path | None, params: SourceParams) -> SearchRequest:
        return SearchRequest.build(path, params.cmd, params.update_items)

    def gather(self, request: SearchRequest) -> BatchChannel:
        """Start streaming ``request`` and return its channel."""
        channel = BatchChannel()
        emitter = BatchEmitter(request, channel, spawn=self._spawn, classify=self._classify)
        worker = threading.Thread(
            target=emitter.run,
            name="lazyfind-file-external",
            daemon=True,
        )
        worker.start()
        return channel


class GatherSession:
    """Latest-request-wins wrapper around ``FileExternalSource.gather``."""

    def __init__(self, source: FileExternalSource | None = None) -> None:
        self._source = source if source is not None else FileExternalSource()
        self._lock = threading.Lock()
        self._current: BatchChannel | None = None

    @property
    def current(self) -> BatchChannel | None:
        return self._current

    def restart(self, request: SearchRequest) -> BatchChannel:
        """Cancel the running gather, if any, and start ``request``."""
        with self._lock:
            previous = self._current
            if previous is not None and not previous.closed:
                previous.cancel("restarted")
            channel = self._source.gather(request)
            self._current = channel
        return channel

    def cancel(self) -> None:
        with self._lock:
            current = self._current
            self._current = None
        if current is not None and not current.closed:
            current.cancel("cancelled")


__all__ = ["FileExternalSource", "GatherSession", "SourceParams"]
