"""One-shot cancellation token shared by the line decoder and the process."""

from __future__ import annotations

import threading
from collections.abc import Callable


class SearchAborted(Exception):
    """Raised from a token-aware pull once the consumer cancelled."""

    def __init__(self, reason: object = None) -> None:
        super().__init__("search aborted" if reason is None else f"search aborted: {reason}")
        self.reason = reason


class CancellationToken:
    """Armed until ``fire`` is called; fires exactly once.

    Callbacks registered with ``add_callback`` run once, on the firing thread.
    A callback added after the token fired runs immediately.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._event = threading.Event()
        self._callbacks: list[Callable[[], None]] = []
        self._reason: object = None

    @property
    def fired(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> object:
        return self._reason

    def fire(self, reason: object = None) -> bool:
        """Fire the token. Returns ``False`` when it had already fired."""
        with self._lock:
            if self._event.is_set():
                return False
            self._reason = reason
            self._event.set()
            callbacks = self._callbacks
            self._callbacks = []
        for callback in callbacks:
            callback()
        return True

    def add_callback(self, callback: Callable[[], None]) -> None:
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)
                return
        callback()

    def raise_if_fired(self) -> None:
        if self._event.is_set():
            raise SearchAborted(self._reason)

    def wait(self, timeout: float | None = None) -> bool:
        return self._event.wait(timeout)


def bind_process(token: CancellationToken, handle: object) -> None:
    """Make firing ``token`` also terminate ``handle``'s process."""
    token.add_callback(handle.terminate)


__all__ = ["CancellationToken", "SearchAborted", "bind_process"]
