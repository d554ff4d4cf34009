"""External command lifecycle for the file-external source.

``spawn_process`` launches the command with piped stdout/stderr and returns a
``ProcessHandle`` or a ``SpawnFailure`` value. The handle owns termination,
exit-status collection and pipe cleanup; each happens at most once.
"""

from __future__ import annotations

import logging
import os
import signal
import subprocess
import threading
from collections import deque
from dataclasses import dataclass
from typing import BinaryIO

from .lines import iter_lines

logger = logging.getLogger(__name__)

STDERR_TAIL_MAX_LINES = 1_000
STDERR_JOIN_TIMEOUT = 1.0


@dataclass(frozen=True)
class SpawnFailure:
    """The command could not be started."""

    command: tuple[str, ...]
    error: BaseException

    def describe(self) -> str:
        executable = self.command[0] if self.command else "<empty>"
        return f"failed to run {executable}: {self.error}"


@dataclass(frozen=True)
class ExitStatus:
    returncode: int
    stderr_lines: tuple[str, ...] = ()
    stderr_dropped: int = 0

    @property
    def success(self) -> bool:
        return self.returncode == 0


class ProcessHandle:
    """Owned handle around one spawned process.

    stderr is drained into a bounded tail on a helper thread so a failing
    command that writes a lot of diagnostics cannot stall on a full pipe
    while stdout is being consumed. When the process leads its own process
    group, termination signals the whole group so shell wrappers do not
    leave children holding the pipes open.
    """

    def __init__(self, proc: subprocess.Popen[bytes], *, process_group: bool = False) -> None:
        self._proc = proc
        self._process_group = process_group
        self._lock = threading.Lock()
        self._terminated = False
        self._closed = False
        self._status: ExitStatus | None = None
        self._stderr_tail: deque[str] = deque(maxlen=STDERR_TAIL_MAX_LINES)
        self._stderr_seen = 0
        self._stderr_thread: threading.Thread | None = None
        if proc.stderr is not None:
            self._stderr_thread = threading.Thread(
                target=self._drain_stderr,
                name="lazyfind-stderr",
                daemon=True,
            )
            self._stderr_thread.start()

    @property
    def pid(self) -> int:
        return self._proc.pid

    @property
    def stdout(self) -> BinaryIO | None:
        return self._proc.stdout

    @property
    def stderr(self) -> BinaryIO | None:
        return self._proc.stderr

    @property
    def terminated(self) -> bool:
        return self._terminated

    def _drain_stderr(self) -> None:
        stream = self._proc.stderr
        if stream is None:
            return
        try:
            for line in iter_lines(stream):
                self._stderr_seen += 1
                self._stderr_tail.append(line)
        except (OSError, ValueError):
            # pipe closed underneath the reader
            return

    def running(self) -> bool:
        return self._proc.poll() is None

    def terminate(self) -> None:
        """Request forceful termination (SIGTERM). Safe to call repeatedly."""
        with self._lock:
            if self._terminated:
                return
            if self._process_group:
                self._terminated = True
                try:
                    os.killpg(self._proc.pid, signal.SIGTERM)
                except (ProcessLookupError, PermissionError):
                    return
            else:
                if self._proc.poll() is not None:
                    return
                self._terminated = True
                try:
                    self._proc.terminate()
                except ProcessLookupError:
                    return
        logger.debug("terminated pid %s", self._proc.pid)

    def wait(self) -> ExitStatus:
        """Wait for exit and return the status; later calls return the same value.

        The stderr reader gets ``STDERR_JOIN_TIMEOUT`` seconds to finish after
        the process exited; lines arriving later are not reported.
        """
        with self._lock:
            if self._status is not None:
                return self._status
        returncode = self._proc.wait()
        if self._stderr_thread is not None:
            self._stderr_thread.join(STDERR_JOIN_TIMEOUT)
        lines = tuple(self._stderr_tail)
        status = ExitStatus(
            returncode=returncode,
            stderr_lines=lines,
            stderr_dropped=max(0, self._stderr_seen - len(lines)),
        )
        with self._lock:
            if self._status is None:
                self._status = status
            return self._status

    def close(self) -> None:
        """Release pipe handles exactly once.

        A stderr pipe whose reader is still blocked is left to that reader.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
        streams = [self._proc.stdout]
        if self._stderr_thread is None or not self._stderr_thread.is_alive():
            streams.append(self._proc.stderr)
        for stream in streams:
            if stream is None:
                continue
            try:
                stream.close()
            except OSError:
                pass

    def __enter__(self) -> ProcessHandle:
        return self

    def __exit__(self, *_exc_info: object) -> None:
        if self._status is None:
            self.terminate()
            self.wait()
        self.close()


def spawn_process(command: tuple[str, ...] | list[str], working_directory: str) -> ProcessHandle | SpawnFailure:
    """Start ``command`` in ``working_directory`` with piped output.

    On POSIX the command leads a new session so ``terminate`` can signal
    every process it started.
    """
    argv = tuple(command)
    if not argv:
        return SpawnFailure(command=argv, error=ValueError("empty command"))
    process_group = os.name == "posix"
    try:
        proc = subprocess.Popen(
            list(argv),
            cwd=working_directory,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            start_new_session=process_group,
        )
    except (OSError, ValueError, subprocess.SubprocessError) as exc:
        return SpawnFailure(command=argv, error=exc)
    logger.debug("spawned %s (pid %s) in %s", argv[0], proc.pid, working_directory)
    return ProcessHandle(proc, process_group=process_group)


__all__ = [
    "ExitStatus",
    "ProcessHandle",
    "STDERR_JOIN_TIMEOUT",
    "STDERR_TAIL_MAX_LINES",
    "SpawnFailure",
    "spawn_process",
]
