from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
import threading
from typing import Any, Callable

from geolocate.util.paths import is_video, path_key

@dataclass(frozen=True)
class LatLong:
    latitude: float
    longitude: float

    def is_valid(self) -> bool:
        return -90.0 <= self.latitude <= 90.0 and -180.0 <= self.longitude <= 180.0

    @property
    def latitude_ref(self) -> str:
        return "N" if self.latitude >= 0 else "S"

    @property
    def longitude_ref(self) -> str:
        return "E" if self.longitude >= 0 else "W"


class MediaKind(str, Enum):
    IMAGE = "image"
    VIDEO = "video"

    @classmethod
    def for_path(cls, path: Path) -> "MediaKind":
        return cls.VIDEO if is_video(path) else cls.IMAGE


@dataclass
class MetadataRecord:
    """Values produced by a job for one file, committed to an item in one step.

    None means "not found"; applying a record never clears a value.
    """
    geolocation: LatLong | None = None
    creation_timestamp: datetime | None = None
    duration_seconds: float | None = None
    frame_rate: float | None = None
    thumbnail_path: Path | None = None

    def merged(self, other: "MetadataRecord") -> "MetadataRecord":
        return MetadataRecord(
            geolocation=other.geolocation or self.geolocation,
            creation_timestamp=other.creation_timestamp or self.creation_timestamp,
            duration_seconds=other.duration_seconds if other.duration_seconds is not None else self.duration_seconds,
            frame_rate=other.frame_rate if other.frame_rate is not None else self.frame_rate,
            thumbnail_path=other.thumbnail_path or self.thumbnail_path,
        )


ChangeListener = Callable[["MediaItem", str, Any, Any], None]

OBSERVABLE_FIELDS = (
    "thumbnail_path",
    "geolocation",
    "creation_timestamp",
    "duration_seconds",
    "frame_rate",
    "in_progress",
)


def _observable(name: str, doc: str) -> property:
    def getter(self: "MediaItem") -> Any:
        return self._values[name]

    def setter(self: "MediaItem", value: Any) -> None:
        self._set(name, value)

    return property(getter, setter, doc=doc)


class MediaItem:
    """One selected media file plus the metadata read from it.

    Field writes notify subscribers synchronously on the writing thread.
    Jobs commit through the dispatcher, so every field except `in_progress`
    is written on the UI thread; `in_progress` belongs to the lock table.
    """

    thumbnail_path = _observable("thumbnail_path", "Generated thumbnail file, if any.")
    geolocation = _observable("geolocation", "LatLong written to or read from the file.")
    creation_timestamp = _observable("creation_timestamp", "EXIF date, else file-system creation time.")
    duration_seconds = _observable("duration_seconds", "Video duration in seconds.")
    frame_rate = _observable("frame_rate", "Video frame rate.")

    def __init__(self, path: Path, creation_timestamp: datetime | None = None) -> None:
        self._path = Path(path).absolute()
        self._kind = MediaKind.for_path(self._path)
        self._key = path_key(self._path)
        self._values: dict[str, Any] = {name: None for name in OBSERVABLE_FIELDS}
        self._values["in_progress"] = False
        self._values["creation_timestamp"] = creation_timestamp
        self._listeners: dict[str, list[ChangeListener]] = {name: [] for name in OBSERVABLE_FIELDS}
        self._listeners_lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    @property
    def key(self) -> str:
        return self._key

    @property
    def kind(self) -> MediaKind:
        return self._kind

    @property
    def in_progress(self) -> bool:
        return self._values["in_progress"]

    def mark_in_progress(self, value: bool) -> None:
        """Only the item lock table calls this."""
        self._set("in_progress", bool(value))

    def subscribe(self, field: str, listener: ChangeListener) -> None:
        if field not in self._listeners:
            raise ValueError(f"Unknown field: {field}")
        with self._listeners_lock:
            self._listeners[field].append(listener)

    def unsubscribe(self, field: str, listener: ChangeListener) -> None:
        with self._listeners_lock:
            if listener in self._listeners.get(field, []):
                self._listeners[field].remove(listener)

    def apply(self, record: MetadataRecord) -> None:
        if record.geolocation is not None:
            self.geolocation = record.geolocation
        if record.creation_timestamp is not None:
            self.creation_timestamp = record.creation_timestamp
        if record.duration_seconds is not None:
            self.duration_seconds = record.duration_seconds
        if record.frame_rate is not None:
            self.frame_rate = record.frame_rate
        if record.thumbnail_path is not None:
            self.thumbnail_path = record.thumbnail_path

    def sort_key(self) -> tuple[bool, datetime, str]:
        ts = self.creation_timestamp
        return (ts is not None, ts or datetime.min, str(self._path))

    def _set(self, name: str, value: Any) -> None:
        old = self._values[name]
        if old == value:
            return
        self._values[name] = value
        with self._listeners_lock:
            listeners = list(self._listeners[name])
        for listener in listeners:
            listener(self, name, old, value)

    def __repr__(self) -> str:
        return f"MediaItem({str(self._path)!r}, kind={self._kind.value})"
