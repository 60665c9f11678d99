from __future__ import annotations

from pathlib import Path
from typing import Sequence

from geolocate.core.models import MediaItem, MetadataRecord
from geolocate.exif.commands import read_metadata_argv
from geolocate.exif.output_parser import ExifOutputParser, RecordCallback
from geolocate.exif.process import ProcessRunner
from geolocate.jobs.base import Job, JobContext
from geolocate.util.paths import path_key


def read_metadata(
    runner: ProcessRunner,
    exiftool: str,
    paths: Sequence[Path],
    on_record: RecordCallback,
) -> int:
    """Run ExifTool over `paths` and stream one record per file to `on_record`.

    Records are keyed by `path_key`. Returns the exit code.
    """
    if not paths:
        return 0
    current = path_key(paths[0]) if len(paths) == 1 else None
    parser = ExifOutputParser(on_record, current_key=current)
    exit_code = runner.run(read_metadata_argv(exiftool, paths), on_line=parser.feed)
    parser.close()
    return exit_code


def read_single(runner: ProcessRunner, exiftool: str, path: Path) -> MetadataRecord:
    found: list[MetadataRecord] = []
    read_metadata(runner, exiftool, [path], lambda _key, record: found.append(record))
    return found[-1] if found else MetadataRecord()


class ReadMetadataJob(Job):
    """Read GPS position, dates, duration and frame rate for a batch of items.

    Each item is committed and released as soon as its record is flushed, so
    the UI fills in while ExifTool is still working on the rest.
    """

    def __init__(self, ctx: JobContext, items: Sequence[MediaItem]) -> None:
        super().__init__(ctx)
        self.items = list(items)

    def run(self) -> None:
        with self.ctx.locks.holding(self.items) as held:
            by_key = {im.key: im for im in held}

            def on_record(key: str, record: MetadataRecord) -> None:
                item = by_key.pop(key, None)
                if item is None:
                    return
                self.ctx.dispatcher.post(lambda: item.apply(record))
                held.release(item)

            read_metadata(self.ctx.runner, self.ctx.exiftool, [im.path for im in held], on_record)

    def __repr__(self) -> str:
        return f"ReadMetadataJob({len(self.items)} item(s))"
