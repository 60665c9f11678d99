from __future__ import annotations

from datetime import datetime
from pathlib import Path
import os

IMAGE_EXTENSIONS = (
    "jpg", "jpeg", "png", "tif", "tiff", "dng", "raw", "cr2", "cr3",
    "nef", "nrw", "arw", "srf", "sr2", "srw", "psd",
)
VIDEO_EXTENSIONS = ("mp4", "mov", "m2ts", "avi")

THUMBNAIL_SUFFIX = ".thumb"

def _extension(p: Path) -> str:
    return p.suffix.lower().lstrip(".")

def is_image(p: Path) -> bool:
    return _extension(p) in IMAGE_EXTENSIONS

def is_video(p: Path) -> bool:
    return _extension(p) in VIDEO_EXTENSIONS

def path_key(p: Path | str) -> str:
    """Normalized string form used to look items up by path."""
    return os.path.normpath(os.path.abspath(str(p)))

def thumbnail_path(source: Path) -> Path:
    """Return `<parent>/.<stem>.thumb` for a source file (no doubled dot)."""
    stem = source.stem
    if not stem.startswith("."):
        stem = "." + stem
    return source.parent / f"{stem}{THUMBNAIL_SUFFIX}"

def file_creation_time(p: Path) -> datetime | None:
    """Best-effort file-system creation time as a naive local datetime.

    Falls back to the modification time where the platform does not record
    a birth time.
    """
    try:
        st = p.stat()
    except OSError:
        return None
    ts = getattr(st, "st_birthtime", None)
    if ts is None:
        ts = st.st_ctime if os.name == "nt" else st.st_mtime
    return datetime.fromtimestamp(ts)
