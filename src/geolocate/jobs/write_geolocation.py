from __future__ import annotations

from pathlib import Path
import os
import tempfile
from typing import Sequence

from loguru import logger

from geolocate.core.models import LatLong, MediaItem
from geolocate.exif.commands import write_geolocation_argv
from geolocate.exif.process import ProcessRunner
from geolocate.jobs.base import Job, JobContext

LIST_FILE_PREFIX = "geolocate_exiftool_"


def write_list_file(paths: Sequence[Path]) -> Path:
    """Write one absolute path per line to a new temp file (ExifTool `-@`)."""
    fd, name = tempfile.mkstemp(prefix=LIST_FILE_PREFIX, suffix=".txt")
    with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
        for p in paths:
            f.write(f"{Path(p).absolute()}{os.linesep}")
    return Path(name)


def write_geolocation(
    runner: ProcessRunner,
    exiftool: str,
    paths: Sequence[Path],
    geolocation: LatLong,
) -> bool:
    """Write GPS latitude/longitude and their refs into every file.

    True only when ExifTool exits with 0; the list file is always removed.
    """
    if not geolocation.is_valid():
        raise ValueError(f"Invalid geolocation: {geolocation}")
    if not paths:
        return True
    list_file = write_list_file(paths)
    try:
        exit_code = runner.run(write_geolocation_argv(exiftool, geolocation, list_file))
    finally:
        try:
            list_file.unlink()
        except FileNotFoundError:
            pass
    return exit_code == 0


class WriteGeolocationJob(Job):
    def __init__(self, ctx: JobContext, items: Sequence[MediaItem], geolocation: LatLong) -> None:
        super().__init__(ctx)
        self.items = list(items)
        self.geolocation = geolocation

    def run(self) -> None:
        geolocation = self.geolocation
        with self.ctx.locks.holding(self.items) as held:
            ordered = held.items
            ok = write_geolocation(self.ctx.runner, self.ctx.exiftool, [im.path for im in ordered], geolocation)
            if not ok:
                logger.warning("Geolocation not applied to {} item(s)", len(ordered))
                return
            logger.info("Wrote {} to {} item(s)", geolocation, len(ordered))

            def commit() -> None:
                for im in ordered:
                    im.geolocation = geolocation

            self.ctx.dispatcher.post(commit)

    def __repr__(self) -> str:
        return f"WriteGeolocationJob({len(self.items)} item(s))"
