"""Consumer-facing batch channel.

The producer side puts batches and closes exactly once; the consumer side
iterates, polls with ``drain``, or withdraws interest with ``cancel``.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from queue import Empty, Queue

from .cancel import CancellationToken
from .types import Batch

_CLOSED = object()


class ChannelClosed(RuntimeError):
    """Raised when a producer touches a channel after closing it."""


class BatchChannel:
    """Thread-safe FIFO of batches ending in one close signal."""

    def __init__(self, token: CancellationToken | None = None) -> None:
        self.token = token if token is not None else CancellationToken()
        self._queue: Queue[object] = Queue()
        self._lock = threading.Lock()
        self._closed = threading.Event()
        self._cancelled = False
        self._drained = False
        self._batches_put = 0

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def batches_put(self) -> int:
        return self._batches_put

    # producer side

    def put(self, batch: Batch) -> bool:
        """Enqueue ``batch``; returns ``False`` when dropped after cancellation."""
        with self._lock:
            if self._closed.is_set():
                raise ChannelClosed("put on closed channel")
            if self._cancelled or not batch:
                return False
            self._batches_put += 1
            self._queue.put(tuple(batch))
        return True

    def close(self) -> None:
        with self._lock:
            if self._closed.is_set():
                raise ChannelClosed("channel already closed")
            self._closed.set()
            self._queue.put(_CLOSED)

    # consumer side

    def cancel(self, reason: object = None) -> None:
        """Withdraw interest: no further batches are delivered."""
        with self._lock:
            self._cancelled = True
        self.token.fire(reason)

    def get(self, timeout: float | None = None) -> Batch | None:
        """Return the next batch, or ``None`` once the channel closed.

        Raises ``queue.Empty`` when ``timeout`` expires first.
        """
        if self._drained:
            return None
        item = self._queue.get(timeout=timeout)
        if item is _CLOSED:
            self._drained = True
            return None
        return item  # type: ignore[return-value]

    def drain(self) -> list[Batch]:
        """Return every batch available right now without blocking."""
        out: list[Batch] = []
        while not self._drained:
            try:
                item = self._queue.get_nowait()
            except Empty:
                break
            if item is _CLOSED:
                self._drained = True
                break
            out.append(item)  # type: ignore[arg-type]
        return out

    def wait_closed(self, timeout: float | None = None) -> bool:
        return self._closed.wait(timeout)

    def __iter__(self) -> Iterator[Batch]:
        while True:
            batch = self.get()
            if batch is None:
                return
            yield batch


__all__ = ["BatchChannel", "ChannelClosed"]
