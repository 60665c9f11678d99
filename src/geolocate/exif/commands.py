"""Command lines for ExifTool and ImageMagick `convert`."""

from __future__ import annotations

from pathlib import Path
import shutil
from typing import Iterable

from geolocate.core.models import LatLong

DEFAULT_EXIFTOOL = "exiftool"
DEFAULT_CONVERT = "convert"

THUMBNAIL_WIDTH = 192
THUMBNAIL_GEOMETRY = f"{THUMBNAIL_WIDTH}x{THUMBNAIL_WIDTH * 2}>"
THUMBNAIL_QUALITY = "60%"

READ_TAGS = ("-gpslatitude", "-gpslongitude", "-alldates", "-duration", "-videoframerate")


def resolve_binary(configured: str | None, default: str) -> str:
    """Use the configured path when set, otherwise the default binary name."""
    configured = (configured or "").strip()
    return configured or default


def is_tool_available(configured: str | None, default: str) -> bool:
    binary = resolve_binary(configured, default)
    if Path(binary).is_file():
        return True
    return shutil.which(binary) is not None


def read_metadata_argv(exiftool: str, paths: Iterable[Path]) -> list[str]:
    return [exiftool, "-S", *READ_TAGS, *(str(p) for p in paths)]


def write_geolocation_argv(exiftool: str, geolocation: LatLong, list_file: Path) -> list[str]:
    return [
        exiftool,
        "-P",
        "-overwrite_original",
        "-q",
        f"-gpslatitude={abs(geolocation.latitude)}",
        f"-gpslatituderef={geolocation.latitude_ref}",
        f"-gpslongitude={abs(geolocation.longitude)}",
        f"-gpslongituderef={geolocation.longitude_ref}",
        "-@",
        str(list_file),
    ]


def frame_index(duration: float | None, frame_rate: float | None) -> int | None:
    """Index of the frame in the middle of a video, or None for stills."""
    if not duration or not frame_rate or duration <= 0 or frame_rate <= 0:
        return None
    return int(duration * frame_rate) // 2


def thumbnail_source(source: Path, duration: float | None = None, frame_rate: float | None = None) -> str:
    idx = frame_index(duration, frame_rate)
    token = str(source)
    if idx is not None:
        token += f"[{idx}]"
    return token


def thumbnail_argv(convert: str, source_token: str, target: Path) -> list[str]:
    return [
        convert,
        source_token,
        "-background", "white",
        "-flatten",
        "-thumbnail", THUMBNAIL_GEOMETRY,
        "-quality", THUMBNAIL_QUALITY,
        f"jpg:{target}",
    ]
