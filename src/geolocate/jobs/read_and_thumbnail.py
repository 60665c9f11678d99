from __future__ import annotations

from dataclasses import replace

from geolocate.core.models import MediaItem
from geolocate.jobs.base import Job, JobContext
from geolocate.jobs.read_metadata import read_single
from geolocate.jobs.thumbnail import render_thumbnail


class ReadMetadataAndThumbnailJob(Job):
    """Video pipeline: the thumbnail frame depends on duration and frame rate,
    so metadata is read first and everything is committed together."""

    def __init__(self, ctx: JobContext, item: MediaItem) -> None:
        super().__init__(ctx)
        self.item = item

    def run(self) -> None:
        item = self.item
        with self.ctx.locks.holding([item]):
            record = read_single(self.ctx.runner, self.ctx.exiftool, item.path)
            thumb = render_thumbnail(
                self.ctx.runner,
                self.ctx.convert,
                item.path,
                record.duration_seconds,
                record.frame_rate,
            )
            record = replace(record, thumbnail_path=thumb)
            self.ctx.dispatcher.post(lambda: item.apply(record))

    def __repr__(self) -> str:
        return f"ReadMetadataAndThumbnailJob({self.item.path.name})"
