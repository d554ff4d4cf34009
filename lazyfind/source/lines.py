"""Line decoding over a raw byte stream.

Turns process output into non-empty text lines, one pass per stream.
With a cancellation token the blocking reads run on a pump thread, so a
fired token stops the pull with ``SearchAborted`` even while the pipe is
still held open by some other process.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from queue import Queue
from typing import BinaryIO

from .cancel import CancellationToken

ENCODING = "utf-8"

_EOF = object()
_ABORTED = object()


def decode_line(raw: bytes) -> str:
    """Decode one raw line and strip its ``\\n`` / ``\\r\\n`` terminator."""
    text = raw.decode(ENCODING, errors="replace")
    if text.endswith("\n"):
        text = text[:-1]
    if text.endswith("\r"):
        text = text[:-1]
    return text


class _LinePump:
    """Daemon reader that moves raw lines from ``stream`` into a queue."""

    def __init__(self, stream: BinaryIO) -> None:
        self._stream = stream
        self.queue: Queue[object] = Queue()
        self._thread = threading.Thread(
            target=self._worker,
            name="lazyfind-line-pump",
            daemon=True,
        )

    def start(self) -> None:
        self._thread.start()

    def abort(self) -> None:
        self.queue.put(_ABORTED)

    def _worker(self) -> None:
        try:
            while True:
                raw = self._stream.readline()
                if not raw:
                    break
                self.queue.put(raw)
        except Exception as exc:
            self.queue.put(exc)
            return
        self.queue.put(_EOF)


def _iter_raw_direct(stream: BinaryIO) -> Iterator[bytes]:
    while True:
        raw = stream.readline()
        if not raw:
            return
        yield raw


def _iter_raw_abortable(stream: BinaryIO, token: CancellationToken) -> Iterator[bytes]:
    pump = _LinePump(stream)
    pump.start()
    token.add_callback(pump.abort)
    while True:
        token.raise_if_fired()
        item = pump.queue.get()
        token.raise_if_fired()
        if item is _EOF:
            return
        if isinstance(item, Exception):
            raise item
        yield item  # type: ignore[misc]


def iter_lines(stream: BinaryIO, token: CancellationToken | None = None) -> Iterator[str]:
    """Yield decoded, non-empty lines from ``stream`` until EOF.

    When ``token`` fires, the current or next pull raises ``SearchAborted``
    instead of returning data; lines already read but not yet yielded are
    dropped. A trailing line without terminator is still yielded at EOF.
    """
    if token is None:
        raw_lines = _iter_raw_direct(stream)
    else:
        token.raise_if_fired()
        raw_lines = _iter_raw_abortable(stream, token)
    for raw in raw_lines:
        line = decode_line(raw)
        if line:
            yield line


__all__ = ["ENCODING", "decode_line", "iter_lines"]
