from __future__ import annotations

from pathlib import Path
import threading
from typing import Callable, Iterable, Iterator

from loguru import logger

from geolocate.core.models import ChangeListener, MediaItem
from geolocate.util.paths import file_creation_time, is_image, is_video, path_key

ItemsListener = Callable[[list[MediaItem]], None]


class MediaRegistry:
    """Ordered, observable collection of media items, unique by path.

    Mutations (add, sort) are expected on the UI thread. Worker threads only
    read, through `snapshot()` or iteration, which copy under the lock.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._items: list[MediaItem] = []
        self._by_key: dict[str, MediaItem] = {}
        self._item_listeners: list[tuple[str, ChangeListener]] = []
        self._added_listeners: list[ItemsListener] = []
        self._sorted_listeners: list[ItemsListener] = []

    def add(self, paths: Iterable[Path | str]) -> list[MediaItem]:
        """Add new media files; returns the items that were created.

        Paths already present, repeated paths and unsupported extensions are
        skipped. Images come first, then videos, each in input order.
        """
        images: list[Path] = []
        videos: list[Path] = []
        seen: set[str] = set()
        with self._lock:
            for raw in paths:
                p = Path(raw).expanduser().absolute()
                key = path_key(p)
                if key in self._by_key or key in seen:
                    continue
                seen.add(key)
                if is_image(p):
                    images.append(p)
                elif is_video(p):
                    videos.append(p)
                else:
                    logger.debug("Ignoring unsupported file {}", p)

            created = [self._create_item(p) for p in images + videos]
            for item in created:
                self._items.append(item)
                self._by_key[item.key] = item

        if created:
            logger.info("Added {} media item(s)", len(created))
            self._notify(self._added_listeners, created)
        return created

    def _create_item(self, path: Path) -> MediaItem:
        item = MediaItem(path, creation_timestamp=file_creation_time(path))
        for field, listener in self._item_listeners:
            item.subscribe(field, listener)
        return item

    def subscribe_items(self, field: str, listener: ChangeListener) -> None:
        """Attach a field listener to every current and future item."""
        with self._lock:
            self._item_listeners.append((field, listener))
            items = list(self._items)
        for item in items:
            item.subscribe(field, listener)

    def on_added(self, listener: ItemsListener) -> None:
        self._added_listeners.append(listener)

    def on_sorted(self, listener: ItemsListener) -> None:
        self._sorted_listeners.append(listener)

    def get(self, path: Path | str) -> MediaItem | None:
        with self._lock:
            return self._by_key.get(path_key(path))

    def find(self, paths: Iterable[Path | str]) -> list[MediaItem]:
        """Items for the given paths, in registry order."""
        keys = {path_key(p) for p in paths}
        with self._lock:
            return [im for im in self._items if im.key in keys]

    def snapshot(self) -> list[MediaItem]:
        with self._lock:
            return list(self._items)

    def sort(self) -> None:
        """Sort in place by (creation timestamp, path)."""
        with self._lock:
            self._items.sort(key=MediaItem.sort_key)
            items = list(self._items)
        self._notify(self._sorted_listeners, items)

    def count_in_progress(self) -> int:
        return sum(1 for im in self.snapshot() if im.in_progress)

    def index_of(self, item: MediaItem) -> int:
        with self._lock:
            try:
                return self._items.index(item)
            except ValueError:
                return -1

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def __iter__(self) -> Iterator[MediaItem]:
        return iter(self.snapshot())

    def __contains__(self, path: object) -> bool:
        if isinstance(path, MediaItem):
            path = path.path
        if not isinstance(path, (str, Path)):
            return False
        with self._lock:
            return path_key(path) in self._by_key

    def __getitem__(self, index: int) -> MediaItem:
        with self._lock:
            return self._items[index]

    @staticmethod
    def _notify(listeners: list[ItemsListener], items: list[MediaItem]) -> None:
        for listener in list(listeners):
            listener(items)
