from .base import Job, JobContext
from .thumbnail import ThumbnailJob, render_thumbnail
from .read_metadata import ReadMetadataJob, read_metadata
from .read_and_thumbnail import ReadMetadataAndThumbnailJob
from .write_geolocation import WriteGeolocationJob, write_geolocation

__all__ = [
    "Job",
    "JobContext",
    "ThumbnailJob",
    "render_thumbnail",
    "ReadMetadataJob",
    "read_metadata",
    "ReadMetadataAndThumbnailJob",
    "WriteGeolocationJob",
    "write_geolocation",
]
