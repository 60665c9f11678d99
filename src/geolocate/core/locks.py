from __future__ import annotations

from contextlib import contextmanager
import threading
from typing import Iterable, Iterator

from geolocate.core.models import MediaItem
from geolocate.util.errors import JobInterrupted

class ItemLockTable:
    """Per-item mutual exclusion keyed by the item's path.

    Holding an item's lock is what `MediaItem.in_progress` reports; the flag
    is written under the table's condition so it never lags behind the set
    of held keys. Batch callers must go through `acquire_many`, which takes
    locks in path order; two batches that overlap can then never wait on
    each other in a cycle.

    In-progress listeners run with the table's condition held and must not
    block on another item lock.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition()
        self._held: set[str] = set()
        self._closed = False

    def acquire(self, item: MediaItem) -> None:
        with self._cond:
            while item.key in self._held and not self._closed:
                self._cond.wait()
            if self._closed:
                raise JobInterrupted(f"Lock table closed while waiting for {item.path}")
            self._held.add(item.key)
            item.mark_in_progress(True)

    def acquire_many(self, items: Iterable[MediaItem]) -> list[MediaItem]:
        ordered = sort_by_path(items)
        acquired: list[MediaItem] = []
        try:
            for item in ordered:
                self.acquire(item)
                acquired.append(item)
        except BaseException:
            for item in acquired:
                self.release(item)
            raise
        return ordered

    def release(self, item: MediaItem) -> None:
        with self._cond:
            if item.key not in self._held:
                raise RuntimeError(f"Lock for {item.path} is not held")
            self._held.discard(item.key)
            item.mark_in_progress(False)
            self._cond.notify_all()

    def is_held(self, item: MediaItem) -> bool:
        with self._cond:
            return item.key in self._held

    @contextmanager
    def holding(self, items: Iterable[MediaItem]) -> Iterator["HeldItems"]:
        """Acquire all items in path order; release this batch's remaining holds on exit.

        Early releases must go through the yielded `HeldItems.release`, so a
        lock another job took in the meantime is left alone.
        """
        held = HeldItems(self, self.acquire_many(items))
        try:
            yield held
        finally:
            held.release_all()

    def close(self) -> None:
        """Wake every waiter; blocked and later acquires raise JobInterrupted."""
        with self._cond:
            self._closed = True
            self._cond.notify_all()

    @property
    def closed(self) -> bool:
        return self._closed


class HeldItems:
    """The locks one batch owns, in acquisition order."""

    def __init__(self, table: ItemLockTable, items: list[MediaItem]) -> None:
        self._table = table
        self.items = items
        self._still_held = {im.key for im in items}

    def __iter__(self) -> Iterator[MediaItem]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def owns(self, item: MediaItem) -> bool:
        return item.key in self._still_held

    def release(self, item: MediaItem) -> None:
        """Give up one item early; a second call for the same item is a no-op."""
        if item.key not in self._still_held:
            return
        self._still_held.discard(item.key)
        self._table.release(item)

    def release_all(self) -> None:
        for item in self.items:
            self.release(item)


def sort_by_path(items: Iterable[MediaItem]) -> list[MediaItem]:
    seen: dict[str, MediaItem] = {}
    for item in items:
        seen.setdefault(item.key, item)
    return sorted(seen.values(), key=lambda im: str(im.path))
