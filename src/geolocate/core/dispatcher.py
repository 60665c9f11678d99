from __future__ import annotations

import queue
import threading
from typing import Callable, Protocol

from loguru import logger

class Dispatcher(Protocol):
    """Runs callables on the single thread that owns item field writes."""

    def post(self, fn: Callable[[], None]) -> None: ...


class ImmediateDispatcher:
    """Runs posted callables inline on the posting thread."""

    def post(self, fn: Callable[[], None]) -> None:
        fn()


class SerialDispatcher:
    """A dedicated thread that runs posted callables in FIFO order.

    Used when no GUI event loop is available (headless runs and tests).
    """

    _STOP = object()

    def __init__(self, name: str = "dispatcher") -> None:
        self._queue: queue.Queue = queue.Queue()
        self._thread = threading.Thread(target=self._loop, name=name, daemon=True)
        self._thread.start()

    def post(self, fn: Callable[[], None]) -> None:
        self._queue.put(fn)

    def drain(self, timeout: float | None = 5.0) -> bool:
        """Block until everything posted so far has run. Returns False on timeout."""
        done = threading.Event()
        self._queue.put(done.set)
        return done.wait(timeout)

    def is_dispatch_thread(self) -> bool:
        return threading.current_thread() is self._thread

    def shutdown(self) -> None:
        self._queue.put(self._STOP)

    def _loop(self) -> None:
        while True:
            fn = self._queue.get()
            if fn is self._STOP:
                return
            try:
                fn()
            except Exception:
                logger.exception("Dispatched callable failed")
