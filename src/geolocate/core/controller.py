from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable

from loguru import logger

from geolocate.core.coalescer import DEFAULT_DELAY_SECONDS, Debouncer
from geolocate.core.config import Configuration
from geolocate.core.dispatcher import Dispatcher
from geolocate.core.engine import Scheduler, TaskEngine
from geolocate.core.locks import ItemLockTable
from geolocate.core.models import LatLong, MediaItem, MediaKind
from geolocate.core.registry import MediaRegistry
from geolocate.exif.process import ProcessRunner
from geolocate.jobs import (
    JobContext,
    ReadMetadataAndThumbnailJob,
    ReadMetadataJob,
    ThumbnailJob,
    WriteGeolocationJob,
)

DEFAULT_WORKERS = 2


@dataclass(frozen=True)
class TaskError:
    """A failure of an external tool, ready to be shown to the user."""
    process_name: str
    exit_code: int
    error_output: str | None = None
    exception: BaseException | None = None
    summary: str | None = None

    @property
    def headline(self) -> str:
        if self.summary:
            return self.summary
        if self.exception is not None:
            return f"{self.process_name} could not be started"
        return f"{self.process_name} exited with error code {self.exit_code}"

    @property
    def detail(self) -> str:
        if self.exception is not None:
            return str(self.exception)
        return self.error_output or ""


class MediaController:
    """Glue between UI events, the media registry and the task engine.

    Must be driven from the dispatcher's thread (the UI thread).
    """

    def __init__(
        self,
        config: Configuration,
        dispatcher: Dispatcher,
        on_error: Callable[[TaskError], None] | None = None,
        on_count: Callable[[int], None] | None = None,
        workers: int = DEFAULT_WORKERS,
        runner: ProcessRunner | None = None,
        scheduler: Scheduler | None = None,
        debounce_delay: float = DEFAULT_DELAY_SECONDS,
    ) -> None:
        self.config = config
        self.dispatcher = dispatcher
        self.on_error = on_error
        self.on_count = on_count
        self.registry = MediaRegistry()
        self.locks = ItemLockTable()
        self.runner = runner or ProcessRunner()
        self.runner.error_handler = self.handle_process_error
        self.engine = TaskEngine(workers=workers, on_error=self._on_job_crashed)
        self.scheduler = scheduler or Scheduler()

        self.sort_debouncer = Debouncer(self.scheduler, dispatcher, self.registry.sort, debounce_delay)
        self.count_debouncer = Debouncer(self.scheduler, dispatcher, self._count_in_progress, debounce_delay)
        self.registry.subscribe_items("creation_timestamp", self.sort_debouncer.trigger)
        self.registry.subscribe_items("in_progress", self.count_debouncer.trigger)
        self.in_progress_count = 0

    def job_context(self) -> JobContext:
        return JobContext(
            runner=self.runner,
            locks=self.locks,
            dispatcher=self.dispatcher,
            exiftool_path=self.config.exiftool_path,
            convert_path=self.config.convert_path,
        )

    def select_files(self, paths: list[Path]) -> list[MediaItem]:
        """Files chosen in the picker; remembers their directory for next time."""
        added = self.add_files(paths)
        if paths:
            self.config.last_image_path = str(Path(paths[0]).absolute().parent)
        return added

    def add_files(self, paths: Iterable[Path | str], geolocation: LatLong | None = None) -> list[MediaItem]:
        """Register new files and queue their background work.

        Images get one thumbnail job each plus one batched metadata read;
        videos get the combined read+thumbnail job. With a geolocation (files
        dropped on a map position) a write for all new items follows.
        """
        if geolocation is not None and not geolocation.is_valid():
            raise ValueError(f"Invalid geolocation: {geolocation}")
        added = self.registry.add(paths)
        if not added:
            return added

        ctx = self.job_context()
        images = [im for im in added if im.kind == MediaKind.IMAGE]
        videos = [im for im in added if im.kind == MediaKind.VIDEO]
        if images:
            for im in images:
                self.engine.submit(ThumbnailJob(ctx, im))
            self.engine.submit(ReadMetadataJob(ctx, images))
        for im in videos:
            self.engine.submit(ReadMetadataAndThumbnailJob(ctx, im))
        if geolocation is not None:
            self.engine.submit(WriteGeolocationJob(ctx, added, geolocation))
        return added

    def set_geolocation(self, paths: Iterable[Path | str], geolocation: LatLong) -> list[MediaItem]:
        """Write a geolocation to already registered files."""
        if not geolocation.is_valid():
            raise ValueError(f"Invalid geolocation: {geolocation}")
        items = self.registry.find(paths)
        if not items:
            return items
        self.engine.submit(WriteGeolocationJob(self.job_context(), items, geolocation))
        self.config.remember_position(geolocation)
        return items

    def handle_process_error(
        self,
        process_name: str,
        exit_code: int,
        error_output: str | None,
        exc: BaseException | None,
    ) -> None:
        error = TaskError(process_name, exit_code, error_output, exc)
        logger.warning("{}: {}", error.headline, error.detail)
        if self.on_error is not None:
            self.dispatcher.post(lambda: self.on_error(error))

    def shutdown(self) -> None:
        """Stop everything now: queued jobs are dropped, running tools killed."""
        logger.info("Shutting down background tasks")
        self.engine.shutdown()
        self.scheduler.shutdown()
        self.locks.close()
        self.runner.terminate_all()

    def _count_in_progress(self) -> None:
        self.in_progress_count = self.registry.count_in_progress()
        if self.on_count is not None:
            self.on_count(self.in_progress_count)

    def _on_job_crashed(self, job, exc: BaseException) -> None:
        error = TaskError(repr(job), -1, None, exc, summary=f"{job!r} failed")
        if self.on_error is not None:
            self.dispatcher.post(lambda: self.on_error(error))
