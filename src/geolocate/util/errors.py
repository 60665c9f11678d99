from __future__ import annotations

class GeolocateError(Exception):
    """Base exception for the application."""

class ProcessStartError(GeolocateError):
    """Raised when an external tool could not be started."""

    def __init__(self, process_name: str, cause: BaseException | None = None) -> None:
        super().__init__(f"{process_name} could not be started: {cause}")
        self.process_name = process_name
        self.cause = cause

class JobInterrupted(GeolocateError):
    """Raised inside a job when the application shuts down while it waits."""

class ConfigurationError(GeolocateError):
    """Raised when the configuration file cannot be read or written."""
