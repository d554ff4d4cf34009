"""Batch emitter: drives one external-command scan into a batch channel.

Lines read from the command's stdout are resolved against the working
directory, classified, and flushed to the channel in batches. The first
batch is small so the consumer can render quickly; later batches use the
larger steady size. Whatever happens, the channel is closed exactly once.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable

from .cancel import SearchAborted, bind_process
from .channel import BatchChannel
from .classify import classify_path, resolve_line
from .lines import iter_lines
from .process import ProcessHandle, SpawnFailure, spawn_process
from .types import ResolvedEntry, SearchRequest

logger = logging.getLogger(__name__)

SpawnFn = Callable[[tuple[str, ...], str], "ProcessHandle | SpawnFailure"]
ClassifyFn = Callable[[str, str], "ResolvedEntry | None"]


class EmitterState(enum.Enum):
    IDLE = "idle"
    SPAWNING = "spawning"
    STREAMING = "streaming"
    CANCELLING = "cancelling"
    DRAINING = "draining"
    FINALIZING = "finalizing"
    CLOSED = "closed"


class BatchingMode(enum.Enum):
    FIRST = "first"
    STEADY = "steady"


class BatchSizer:
    """Flush threshold that switches from first to steady size exactly once."""

    def __init__(self, first_size: int, steady_size: int) -> None:
        self.first_size = first_size
        self.steady_size = steady_size
        self.mode = BatchingMode.FIRST
        self.flushes = 0

    @property
    def threshold(self) -> int:
        return self.first_size if self.mode is BatchingMode.FIRST else self.steady_size

    def should_flush(self, pending: int) -> bool:
        return pending >= self.threshold

    def record_flush(self) -> None:
        self.flushes += 1
        if self.mode is BatchingMode.FIRST:
            self.mode = BatchingMode.STEADY


class BatchEmitter:
    """Run one ``SearchRequest`` and feed its results into ``channel``."""

    def __init__(
        self,
        request: SearchRequest,
        channel: BatchChannel,
        *,
        spawn: SpawnFn = spawn_process,
        classify: ClassifyFn = classify_path,
    ) -> None:
        self.request = request
        self.channel = channel
        self.token = channel.token
        self._spawn = spawn
        self._classify = classify
        self.state = EmitterState.IDLE
        self.history: list[EmitterState] = [EmitterState.IDLE]
        self.sizer = BatchSizer(request.first_batch_size, request.steady_batch_size)
        self.entries_emitted = 0

    def _enter(self, state: EmitterState) -> None:
        self.state = state
        self.history.append(state)

    def run(self) -> None:
        if self.state is not EmitterState.IDLE:
            raise RuntimeError("emitter already ran")
        try:
            self._run_pipeline()
        except Exception:
            logger.exception("file-external pipeline failed")
        finally:
            self._enter(EmitterState.FINALIZING)
            self.channel.close()
            self._enter(EmitterState.CLOSED)

    def _run_pipeline(self) -> None:
        request = self.request
        if not request.command or self.token.fired:
            return

        self._enter(EmitterState.SPAWNING)
        handle = self._spawn(request.command, request.working_directory)
        if isinstance(handle, SpawnFailure):
            logger.error("%s", handle.describe())
            return

        with handle:
            if handle.stdout is None:
                logger.error("no stdout available from %s", request.command[0])
                return
            bind_process(self.token, handle)

            self._enter(EmitterState.STREAMING)
            try:
                self._stream(handle)
            except SearchAborted:
                self._enter(EmitterState.CANCELLING)
                handle.terminate()
            except Exception:
                self._enter(EmitterState.CANCELLING)
                handle.terminate()
                logger.exception("reading output of %s failed", request.command[0])

            status = handle.wait()
            logger.debug(
                "%s exited with status %s after %d entries in %d batches",
                request.command[0],
                status.returncode,
                self.entries_emitted,
                self.sizer.flushes,
            )
            if status.success or handle.terminated or self.token.fired:
                return

            self._enter(EmitterState.DRAINING)
            logger.error("%s exited with status %d", request.command[0], status.returncode)
            if status.stderr_dropped:
                logger.error("(%d earlier stderr lines dropped)", status.stderr_dropped)
            for line in status.stderr_lines:
                if self.token.fired:
                    break
                logger.error("%s", line)

    def _stream(self, handle: ProcessHandle) -> None:
        root = self.request.working_directory
        pending: list[ResolvedEntry] = []
        for line in iter_lines(handle.stdout, self.token):
            path = line.strip()
            if not path:
                continue
            entry = self._classify(resolve_line(root, path), root)
            if entry is None:
                continue
            pending.append(entry)
            if self.sizer.should_flush(len(pending)):
                self._flush(pending)
                pending = []

        self.token.raise_if_fired()
        if pending:
            self._flush(pending)

    def _flush(self, entries: list[ResolvedEntry]) -> None:
        if self.channel.put(tuple(entries)):
            self.entries_emitted += len(entries)
        self.sizer.record_flush()


__all__ = [
    "BatchEmitter",
    "BatchSizer",
    "BatchingMode",
    "EmitterState",
]
