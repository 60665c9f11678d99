from __future__ import annotations

from pathlib import Path

from loguru import logger

from geolocate.core.models import MediaItem, MetadataRecord
from geolocate.exif.commands import thumbnail_argv, thumbnail_source
from geolocate.exif.process import ProcessRunner
from geolocate.jobs.base import Job, JobContext
from geolocate.util.paths import thumbnail_path


def is_thumbnail_fresh(source: Path, target: Path) -> bool:
    """A thumbnail is reusable when it is a file at least as new as its source."""
    try:
        return target.is_file() and target.stat().st_mtime >= source.stat().st_mtime
    except OSError:
        return False


def render_thumbnail(
    runner: ProcessRunner,
    convert: str,
    source: Path,
    duration: float | None = None,
    frame_rate: float | None = None,
) -> Path | None:
    """Return an up-to-date thumbnail for `source`, rebuilding it when stale.

    Videos (positive duration and frame rate) use the frame in the middle.
    Returns None when convert fails.
    """
    target = thumbnail_path(source)
    if is_thumbnail_fresh(source, target):
        return target
    if target.exists():
        target.unlink()

    argv = thumbnail_argv(convert, thumbnail_source(source, duration, frame_rate), target)
    if runner.run(argv) != 0:
        return None
    return target


class ThumbnailJob(Job):
    def __init__(self, ctx: JobContext, item: MediaItem) -> None:
        super().__init__(ctx)
        self.item = item

    def run(self) -> None:
        item = self.item
        with self.ctx.locks.holding([item]):
            thumb = render_thumbnail(
                self.ctx.runner,
                self.ctx.convert,
                item.path,
                item.duration_seconds,
                item.frame_rate,
            )
            if thumb is None:
                return
            logger.debug("Thumbnail ready for {}: {}", item.path, thumb)
            record = MetadataRecord(thumbnail_path=thumb)
            self.ctx.dispatcher.post(lambda: item.apply(record))

    def __repr__(self) -> str:
        return f"ThumbnailJob({self.item.path.name})"
