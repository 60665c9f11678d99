"""Parser for the short tag output of `exiftool -S`.

Output for several files looks like::

    ======== /photos/a.jpg
    GPSLatitude: 48 deg 51' 30.12" N
    GPSLongitude: 2 deg 17' 40.20" E
    DateTimeOriginal: 2021:06:15 14:30:00
    ======== /photos/b.mp4
    CreateDate: 2021:06:16 09:00:00
    Duration: 0:00:12
    VideoFrameRate: 24

A single-file invocation prints no boundary line.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
import os
import re
from typing import Callable

from geolocate.core.models import LatLong, MetadataRecord

FILE_BOUNDARY = re.compile(r"^========\s+(.+)$")
LATITUDE = re.compile(r"^GPSLatitude:\s+(.+)$")
LONGITUDE = re.compile(r"^GPSLongitude:\s+(.+)$")
DATE_TIME_ORIGINAL = re.compile(r"^DateTimeOriginal:\s+(.+)$")
CREATE_DATE = re.compile(r"^CreateDate:\s+(.+)$")
DURATION_SECONDS = re.compile(r"^Duration:\s+(.+) s$")
DURATION_TIME = re.compile(r"^Duration:\s+(.+)$")
VIDEO_FRAME_RATE = re.compile(r"^VideoFrameRate:\s+(.+)$")

DEGREES = re.compile(r"^(\d+)\s+deg\s+(\d+)'\s+(\d+\.\d+)\"\s+(.)$")
TIME = re.compile(r"^(\d+):(\d+):(\d+(\.\d+)?)")
EXIF_DATETIME = re.compile(r"^(\d{4}):(\d{2}):(\d{2}) (\d{2}):(\d{2}):(\d{2})")

RecordCallback = Callable[[str, MetadataRecord], None]


def parse_degrees(value: str, positive: str, negative: str) -> float | None:
    """`48 deg 51' 30.12" N` -> 48.858367; None when malformed."""
    m = DEGREES.match(value.strip())
    if not m:
        return None
    suffix = m.group(4).upper()
    if suffix == positive.upper():
        sign = 1
    elif suffix == negative.upper():
        sign = -1
    else:
        return None
    try:
        deg = int(m.group(1))
        minutes = int(m.group(2))
        seconds = float(m.group(3))
    except ValueError:
        return None
    return sign * (deg + minutes / 60 + seconds / 3600)


def parse_time(value: str) -> float | None:
    """`1:02:03.5` -> 3723.5 seconds."""
    m = TIME.match(value.strip())
    if not m:
        return None
    try:
        return int(m.group(1)) * 3600 + int(m.group(2)) * 60 + float(m.group(3))
    except ValueError:
        return None


def parse_exif_datetime(value: str) -> datetime | None:
    """`yyyy:MM:dd HH:mm:ss`; trailing sub-seconds or zone offsets are ignored."""
    m = EXIF_DATETIME.match(value.strip())
    if not m:
        return None
    try:
        return datetime(*(int(g) for g in m.groups()))
    except ValueError:
        return None


def parse_float(value: str) -> float | None:
    try:
        return float(value.strip())
    except ValueError:
        return None


_FIELD_PATTERNS = (
    (LATITUDE, "latitude", lambda v: parse_degrees(v, "N", "S")),
    (LONGITUDE, "longitude", lambda v: parse_degrees(v, "E", "W")),
    (DATE_TIME_ORIGINAL, "date_time_original", parse_exif_datetime),
    (CREATE_DATE, "create_date", parse_exif_datetime),
    (DURATION_SECONDS, "duration", parse_float),
    (DURATION_TIME, "duration", parse_time),
    (VIDEO_FRAME_RATE, "frame_rate", parse_float),
)


@dataclass
class _Pending:
    latitude: float | None = None
    longitude: float | None = None
    date_time_original: datetime | None = None
    create_date: datetime | None = None
    duration: float | None = None
    frame_rate: float | None = None

    def to_record(self) -> MetadataRecord:
        geolocation = None
        if self.latitude is not None and self.longitude is not None:
            candidate = LatLong(self.latitude, self.longitude)
            if candidate.is_valid():
                geolocation = candidate
        return MetadataRecord(
            geolocation=geolocation,
            creation_timestamp=self.date_time_original or self.create_date,
            duration_seconds=self.duration,
            frame_rate=self.frame_rate,
        )


class ExifOutputParser:
    """Accumulate fields per file and flush a MetadataRecord at each boundary.

    `current_key` is preset for single-file invocations, which print no
    boundary line; `close()` flushes the last file.
    """

    def __init__(self, on_record: RecordCallback, current_key: str | None = None) -> None:
        self._on_record = on_record
        self.current_key = current_key
        self._pending = _Pending()

    def feed(self, line: str) -> None:
        m = FILE_BOUNDARY.match(line)
        if m:
            self._flush()
            self.current_key = normalize_boundary_path(m.group(1))
            return
        # First match wins; the seconds form of Duration is tried before the time form.
        for pattern, attr, convert in _FIELD_PATTERNS:
            m = pattern.match(line)
            if m:
                setattr(self._pending, attr, convert(m.group(1)))
                return

    def close(self) -> None:
        self._flush()

    def _flush(self) -> None:
        pending, self._pending = self._pending, _Pending()
        if self.current_key is None:
            return
        self._on_record(self.current_key, pending.to_record())


def normalize_boundary_path(value: str) -> str:
    return os.path.normpath(value.strip().replace("/", os.sep))


def parse_output(lines, current_key: str | None = None) -> dict[str, MetadataRecord]:
    """Parse a complete output into {path key: record}."""
    records: dict[str, MetadataRecord] = {}
    parser = ExifOutputParser(lambda k, r: records.__setitem__(k, r), current_key=current_key)
    for line in lines:
        parser.feed(line)
    parser.close()
    return records
