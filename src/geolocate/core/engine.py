from __future__ import annotations

import heapq
import itertools
import queue
import threading
import time
from typing import Callable

from loguru import logger

Job = Callable[[], None]
EngineErrorHandler = Callable[[Job, BaseException], None]

_STOP = object()


class TaskEngine:
    """Fixed pool of daemon worker threads over an unbounded job queue.

    Jobs are plain callables. An exception that escapes a job is logged and
    handed to `on_error`; the worker then takes the next job.
    """

    def __init__(self, workers: int = 2, on_error: EngineErrorHandler | None = None, name: str = "background-tasks") -> None:
        if workers < 1:
            raise ValueError("workers must be >= 1")
        self.on_error = on_error
        self._queue: queue.Queue = queue.Queue()
        self._shutdown = False
        self._threads = [
            threading.Thread(target=self._worker, name=f"{name}-{i}", daemon=True)
            for i in range(workers)
        ]
        for t in self._threads:
            t.start()

    def submit(self, job: Job) -> None:
        if self._shutdown:
            logger.debug("Engine is shut down; dropping {}", job)
            return
        self._queue.put(job)

    def shutdown(self) -> None:
        """Discard queued jobs and stop the workers once their current job returns."""
        self._shutdown = True
        dropped = 0
        while True:
            try:
                self._queue.get_nowait()
                self._queue.task_done()
                dropped += 1
            except queue.Empty:
                break
        for _ in self._threads:
            self._queue.put(_STOP)
        if dropped:
            logger.info("Discarded {} queued job(s) at shutdown", dropped)

    def join(self, timeout: float | None = None) -> bool:
        deadline = None if timeout is None else time.monotonic() + timeout
        for t in self._threads:
            remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
            t.join(remaining)
        return not any(t.is_alive() for t in self._threads)

    def wait_idle(self, timeout: float | None = None) -> bool:
        """Block until every submitted job has finished. Returns False on timeout."""
        done = threading.Event()

        def _waiter() -> None:
            self._queue.join()
            done.set()

        threading.Thread(target=_waiter, daemon=True).start()
        return done.wait(timeout)

    def _worker(self) -> None:
        while True:
            job = self._queue.get()
            try:
                if job is _STOP:
                    return
                if self._shutdown:
                    continue
                job()
            except Exception as exc:
                logger.exception("Job {} failed", job)
                if self.on_error is not None:
                    self.on_error(job, exc)
            finally:
                self._queue.task_done()


class Scheduler:
    """Single daemon thread that runs callables after a delay."""

    def __init__(self, name: str = "scheduled-tasks") -> None:
        self._cond = threading.Condition()
        self._entries: list[tuple[float, int, Callable[[], None]]] = []
        self._counter = itertools.count()
        self._shutdown = False
        self._thread = threading.Thread(target=self._loop, name=name, daemon=True)
        self._thread.start()

    def schedule(self, delay: float, fn: Callable[[], None]) -> None:
        with self._cond:
            if self._shutdown:
                return
            heapq.heappush(self._entries, (time.monotonic() + delay, next(self._counter), fn))
            self._cond.notify()

    def shutdown(self) -> None:
        with self._cond:
            self._shutdown = True
            self._entries.clear()
            self._cond.notify()

    def _loop(self) -> None:
        while True:
            with self._cond:
                while not self._shutdown:
                    if not self._entries:
                        self._cond.wait()
                        continue
                    due = self._entries[0][0] - time.monotonic()
                    if due <= 0:
                        break
                    self._cond.wait(due)
                if self._shutdown:
                    return
                _, _, fn = heapq.heappop(self._entries)
            try:
                fn()
            except Exception:
                logger.exception("Scheduled callable failed")
