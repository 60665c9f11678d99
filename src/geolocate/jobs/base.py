from __future__ import annotations

from dataclasses import dataclass

from loguru import logger

from geolocate.core.dispatcher import Dispatcher
from geolocate.core.locks import ItemLockTable
from geolocate.exif.commands import DEFAULT_CONVERT, DEFAULT_EXIFTOOL, resolve_binary
from geolocate.exif.process import ProcessRunner
from geolocate.util.errors import JobInterrupted, ProcessStartError


@dataclass
class JobContext:
    """Everything a job needs besides its items."""
    runner: ProcessRunner
    locks: ItemLockTable
    dispatcher: Dispatcher
    exiftool_path: str = ""
    convert_path: str = ""

    @property
    def exiftool(self) -> str:
        return resolve_binary(self.exiftool_path, DEFAULT_EXIFTOOL)

    @property
    def convert(self) -> str:
        return resolve_binary(self.convert_path, DEFAULT_CONVERT)


class Job:
    """A unit of work for the task engine.

    Subclasses implement `run()`, which must release every lock it takes.
    Calling the job runs it and keeps expected failures inside the job:
    process start failures were already reported by the runner, interruption
    means shutdown, and filesystem errors abort only this job.
    """

    def __init__(self, ctx: JobContext) -> None:
        self.ctx = ctx

    def run(self) -> None:
        raise NotImplementedError

    def __call__(self) -> None:
        logger.debug("{} started", self)
        try:
            self.run()
        except ProcessStartError as e:
            logger.warning("{} aborted: {}", self, e)
        except JobInterrupted:
            logger.debug("{} interrupted", self)
        except OSError as e:
            logger.warning("{} aborted by filesystem error: {}", self, e)
        else:
            logger.debug("{} finished", self)
