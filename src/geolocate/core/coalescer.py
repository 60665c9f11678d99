from __future__ import annotations

import threading
from typing import Callable, Protocol

from geolocate.core.dispatcher import Dispatcher

DEFAULT_DELAY_SECONDS = 1.0


class SupportsSchedule(Protocol):
    def schedule(self, delay: float, fn: Callable[[], None]) -> None: ...


class Debouncer:
    """Collapse a burst of triggers into one deferred computation.

    The first trigger arms a timer; later triggers are no-ops until it fires.
    The pending flag is cleared before `compute` is posted, so a change that
    arrives while the computation runs arms the timer again.
    """

    def __init__(
        self,
        scheduler: SupportsSchedule,
        dispatcher: Dispatcher,
        compute: Callable[[], None],
        delay: float = DEFAULT_DELAY_SECONDS,
    ) -> None:
        self._scheduler = scheduler
        self._dispatcher = dispatcher
        self._compute = compute
        self._delay = delay
        self._lock = threading.Lock()
        self._pending = False

    @property
    def pending(self) -> bool:
        return self._pending

    def trigger(self, *_args) -> None:
        with self._lock:
            if self._pending:
                return
            self._pending = True
        self._scheduler.schedule(self._delay, self._fire)

    def _fire(self) -> None:
        with self._lock:
            self._pending = False
        self._dispatcher.post(self._compute)
